"""Screenshot capture with a cheaper retry."""

from __future__ import annotations

from .retry import CAPTURE_ATTEMPTS, capture_with_retry

__all__ = ["CAPTURE_ATTEMPTS", "capture_with_retry"]
