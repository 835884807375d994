"""Batch deduplication for remediation."""

from __future__ import annotations

from .guard import DedupGuard

__all__ = ["DedupGuard"]
