"""Two-attempt capture of a live page.

The first attempt waits for the page to settle; if it fails, the second runs
immediately with a shorter wait, a shorter timeout and no post-load actions.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from ..errors import CaptureError, CaptureTimeoutError
from ..model import CaptureAttempt, CaptureResult, WaitAction

logger = logging.getLogger(__name__)

CAPTURE_ATTEMPTS: tuple[CaptureAttempt, ...] = (
    CaptureAttempt(wait_for_ms=2000, timeout_ms=45000, actions=(WaitAction(1000),)),
    CaptureAttempt(wait_for_ms=1000, timeout_ms=25000),
)

NO_SCREENSHOT = "Failed to capture screenshot"

TIMEOUT_MESSAGE = (
    "Screenshot capture timed out. Please try again with a simpler website "
    "or check if the URL is accessible."
)

CaptureFn = Callable[[str, CaptureAttempt], Awaitable[CaptureResult]]


def _is_timeout(text: str) -> bool:
    lowered = text.lower()
    return "timeout" in lowered or "timed out" in lowered


async def capture_with_retry(
    url: str,
    capture: CaptureFn,
    attempts: tuple[CaptureAttempt, ...] = CAPTURE_ATTEMPTS,
) -> CaptureResult:
    last_error = NO_SCREENSHOT
    for n, attempt in enumerate(attempts, start=1):
        logger.info("Capture attempt %d for URL: %s", n, url)
        try:
            result = await capture(url, attempt)
        except Exception as e:
            last_error = str(e) or type(e).__name__
            logger.warning("Capture attempt %d failed: %s", n, last_error)
            continue
        if result.screenshot:
            return result
        last_error = NO_SCREENSHOT
        logger.warning("Capture attempt %d returned no screenshot", n)

    if _is_timeout(last_error):
        raise CaptureTimeoutError(TIMEOUT_MESSAGE)
    if last_error == NO_SCREENSHOT:
        raise CaptureError(NO_SCREENSHOT)
    raise CaptureError(f"Screenshot capture failed: {last_error}")
