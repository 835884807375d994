"""Remediation of classified errors inside the sandbox."""

from __future__ import annotations

from .dispatcher import COMMON_FIXES, RemediationDispatcher, select_fix

__all__ = ["COMMON_FIXES", "RemediationDispatcher", "select_fix"]
