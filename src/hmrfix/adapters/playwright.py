from __future__ import annotations

import base64

from playwright.async_api import Page

from ..core.model import CaptureAttempt, CaptureResult
from .browser_pool import BrowserPool


async def _run_actions(page: Page, attempt: CaptureAttempt) -> None:
    await page.wait_for_timeout(attempt.wait_for_ms)
    for action in attempt.actions:
        await page.wait_for_timeout(action.milliseconds)


async def capture_screenshot(url: str, attempt: CaptureAttempt) -> CaptureResult:
    """Viewport screenshot of ``url`` as base64 PNG, using one pooled browser."""
    pool = await BrowserPool.get_instance()
    async with pool.acquire() as browser:
        context = await browser.new_context(viewport={"width": 1280, "height": 800})
        try:
            page = await context.new_page()
            page.set_default_timeout(attempt.timeout_ms)
            response = await page.goto(url, wait_until="load", timeout=attempt.timeout_ms)
            await _run_actions(page, attempt)
            png = await page.screenshot(full_page=False, timeout=attempt.timeout_ms)
            return CaptureResult(
                screenshot=base64.b64encode(png).decode("ascii"),
                metadata={
                    "url": page.url,
                    "title": await page.title(),
                    "statusCode": response.status if response else None,
                },
            )
        finally:
            await context.close()
