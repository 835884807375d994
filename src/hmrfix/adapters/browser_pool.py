"""Shared async Playwright browsers for screenshot capture.

Launching Chromium costs seconds; a capture only needs a fresh context, so a
small pool of long-lived browsers is kept and recycled once they age out or
disconnect.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from playwright.async_api import Browser, Playwright, async_playwright

from ..config.settings import settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)


@dataclass
class PooledBrowser:
    browser: Browser
    playwright: Playwright
    created_at: float = field(default_factory=time.time)
    uses: int = 0


@dataclass
class BrowserPoolConfig:
    size: int = int(os.getenv("BROWSER_POOL_SIZE", "1"))
    max_uses: int = int(os.getenv("BROWSER_MAX_REQUESTS", "100"))
    max_age_seconds: int = int(os.getenv("BROWSER_MAX_AGE", "3600"))
    headless: bool = settings.headless


class BrowserPool:
    """Usage:

        pool = await BrowserPool.get_instance()
        async with pool.acquire() as browser:
            context = await browser.new_context()
            ...
    """

    _instance: BrowserPool | None = None
    _lock: asyncio.Lock | None = None

    def __init__(self, config: BrowserPoolConfig | None = None) -> None:
        self.config = config or BrowserPoolConfig()
        self._idle: asyncio.Queue[PooledBrowser] = asyncio.Queue()
        self._started = False
        # Slots whose replacement browser failed to launch
        self._missing = 0

    @classmethod
    async def get_instance(cls) -> BrowserPool:
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        async with cls._lock:
            if cls._instance is None:
                cls._instance = BrowserPool()
                await cls._instance.start()
        return cls._instance

    async def start(self) -> None:
        if self._started:
            return
        for _ in range(max(1, self.config.size)):
            await self._idle.put(await self._launch())
        self._started = True
        logger.info("Browser pool started with %d browsers", self._idle.qsize())

    async def _launch(self) -> PooledBrowser:
        playwright = await async_playwright().start()
        browser = await playwright.chromium.launch(
            headless=self.config.headless,
            args=["--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"],
        )
        return PooledBrowser(browser=browser, playwright=playwright)

    def _healthy(self, pooled: PooledBrowser) -> bool:
        if time.time() - pooled.created_at > self.config.max_age_seconds:
            return False
        if pooled.uses >= self.config.max_uses:
            return False
        return pooled.browser.is_connected()

    async def _discard(self, pooled: PooledBrowser) -> None:
        with suppress(Exception):
            await pooled.browser.close()
        with suppress(Exception):
            await pooled.playwright.stop()

    async def _replace(self) -> PooledBrowser:
        try:
            return await self._launch()
        except Exception:
            self._missing += 1
            raise

    @asynccontextmanager
    async def acquire(self, timeout: float = 30.0) -> AsyncGenerator[Browser, None]:
        if not self._started:
            await self.start()
        if self._idle.empty() and self._missing:
            self._missing -= 1
            pooled = await self._replace()
        else:
            try:
                pooled = await asyncio.wait_for(self._idle.get(), timeout=timeout)
            except asyncio.TimeoutError:
                raise TimeoutError(f"No browser available within {timeout}s") from None

        if not self._healthy(pooled):
            logger.info("Replacing recycled browser")
            await self._discard(pooled)
            pooled = await self._replace()
        pooled.uses += 1
        try:
            yield pooled.browser
        finally:
            if self._healthy(pooled):
                await self._idle.put(pooled)
            else:
                await self._discard(pooled)
                try:
                    await self._idle.put(await self._replace())
                except Exception as e:
                    logger.warning("Failed to launch replacement browser: %s", e)

    async def shutdown(self) -> None:
        while not self._idle.empty():
            await self._discard(self._idle.get_nowait())
        self._started = False
        self._missing = 0
        logger.info("Browser pool shut down")

    @classmethod
    async def shutdown_instance(cls) -> None:
        if cls._instance is not None:
            await cls._instance.shutdown()
            cls._instance = None
