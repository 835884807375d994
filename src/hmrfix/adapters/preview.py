"""Reads the dev-server error overlay out of a live preview page.

Vite renders build errors into a ``<vite-error-overlay>`` custom element whose
content lives in a shadow root. The page keeps reloading while the dev server
rebuilds, so any Playwright failure while reading simply means "nothing to
report this tick".
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

OVERLAY_TAG = "vite-error-overlay"
MESSAGE_SELECTORS: tuple[str, ...] = (".message-body", ".message", "pre")

_READ_OVERLAY_JS = """
([tag, selectors]) => {
  const overlay = document.querySelector(tag);
  if (!overlay || !overlay.shadowRoot) return null;
  for (const sel of selectors) {
    const el = overlay.shadowRoot.querySelector(sel);
    if (el) return el.textContent || '';
  }
  return null;
}
"""


class PlaywrightPreviewSource:
    def __init__(self, page: Page, selectors: tuple[str, ...] = MESSAGE_SELECTORS) -> None:
        self.page = page
        self.selectors = selectors

    async def read_overlay_text(self) -> str | None:
        if self.page.is_closed():
            return None
        for frame in self.page.frames:
            try:
                text = await frame.evaluate(_READ_OVERLAY_JS, [OVERLAY_TAG, list(self.selectors)])
            except PlaywrightError as e:
                logger.debug("Preview frame not readable: %s", e)
                continue
            if text and text.strip():
                return text
        return None

    async def reload(self) -> None:
        await self.page.reload(wait_until="domcontentloaded")


@asynccontextmanager
async def open_preview(url: str, headless: bool = True) -> AsyncIterator[PlaywrightPreviewSource]:
    """Open ``url`` in a dedicated browser for the lifetime of a watch session."""
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            page = await browser.new_page()
            try:
                await page.goto(url, wait_until="domcontentloaded")
            except PlaywrightError as e:
                # The dev server may still be booting; polling will pick it up later
                logger.warning("Initial preview load failed: %s", e)
            yield PlaywrightPreviewSource(page)
        finally:
            await browser.close()
