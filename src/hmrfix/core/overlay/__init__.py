"""Preview overlay polling and error detection."""

from __future__ import annotations

from .detector import OverlaySource, PreviewErrorDetector, extract_errors

__all__ = ["OverlaySource", "PreviewErrorDetector", "extract_errors"]
