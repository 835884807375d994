"""Polling detector for the preview error overlay.

One ``PreviewErrorDetector`` is bound to one preview session. Every tick it
reads the overlay text (if any), classifies it, notifies the host and, unless
the batch is already being handled, schedules remediation in the background.
Ticks never wait for remediation; the dedup guard keeps batches from
overlapping.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from ...api.dto import AutoFixResponse, ErrorRecord, error_signature
from ..classify.classifier import classify
from ..dedup.guard import DedupGuard

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_COOLDOWN = 10.0

ErrorsCallback = Callable[[list[ErrorRecord]], Any]
Remediate = Callable[[str, list[ErrorRecord]], Awaitable[AutoFixResponse]]


class OverlaySource(Protocol):
    async def read_overlay_text(self) -> str | None: ...


def extract_errors(text: str | None) -> list[ErrorRecord]:
    return classify(text)


class PreviewErrorDetector:
    def __init__(
        self,
        source: OverlaySource,
        on_errors: ErrorsCallback,
        remediate: Remediate | None = None,
        sandbox_id: str | None = None,
        auto_fix: bool = True,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        cooldown: float = DEFAULT_COOLDOWN,
        on_remediated: Callable[[AutoFixResponse], Any] | None = None,
    ) -> None:
        self.source = source
        self.on_errors = on_errors
        self.remediate = remediate
        self.sandbox_id = sandbox_id
        self.auto_fix = auto_fix
        self.poll_interval = poll_interval
        self.on_remediated = on_remediated
        self.guard = DedupGuard(cooldown=cooldown)
        self._task: asyncio.Task | None = None
        self._fixes: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        if self.guard.closed:
            # Pending signatures belong to the previous session
            self.guard = DedupGuard(cooldown=self.guard.cooldown)
        self._task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.guard.close()

    async def __aenter__(self) -> PreviewErrorDetector:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def _poll_loop(self) -> None:
        while True:
            await self.tick()
            await asyncio.sleep(self.poll_interval)

    async def tick(self) -> list[ErrorRecord]:
        """Run one detection pass; returns the records it found."""
        try:
            text = await self.source.read_overlay_text()
        except PermissionError as e:
            # Access denial is the normal state for a cross-origin preview
            logger.debug("Overlay not readable: %s", e)
            return []
        except Exception:
            logger.warning("Overlay source failed", exc_info=True)
            return []

        errors = extract_errors(text)
        if not errors:
            return []

        try:
            await _maybe_await(self.on_errors(errors))
        except Exception:
            logger.exception("Error callback failed")
        self._schedule_fix(errors)
        return errors

    def _schedule_fix(self, errors: list[ErrorRecord]) -> None:
        if not self.auto_fix or not self.sandbox_id or self.remediate is None:
            return
        signature = error_signature(errors)
        if not self.guard.try_acquire(signature):
            logger.debug("Remediation suppressed for %s", signature)
            return
        task = asyncio.create_task(self._fix(self.guard, self.sandbox_id, errors, signature))
        self._fixes.add(task)
        task.add_done_callback(self._fixes.discard)

    async def _fix(
        self, guard: DedupGuard, sandbox_id: str, errors: list[ErrorRecord], signature: str
    ) -> None:
        logger.info("Auto-fixing %d errors: %s", len(errors), signature)
        try:
            response = await self.remediate(sandbox_id, errors)
        except Exception as e:
            logger.error("Auto-fix request failed: %s", e)
            return
        finally:
            guard.release(signature)

        if not response.success:
            logger.error("Auto-fix failed: %s", response.message)
            return
        logger.info("Auto-fix finished: %s", response.message)
        if self.on_remediated is not None:
            try:
                await _maybe_await(self.on_remediated(response))
            except Exception:
                logger.exception("Remediated callback failed")

    async def wait_for_fixes(self) -> None:
        """Block until every scheduled remediation has finished."""
        if self._fixes:
            await asyncio.gather(*list(self._fixes), return_exceptions=True)


async def _maybe_await(value: Any) -> None:
    if inspect.isawaitable(value):
        await value
