"""Overlay text classification into typed error records."""

from __future__ import annotations

from .classifier import classify, describes_unresolved_import, normalize_package

__all__ = ["classify", "describes_unresolved_import", "normalize_package"]
