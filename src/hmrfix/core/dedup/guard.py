from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class DedupGuard:
    """Suppresses repeated remediation of the same error batch.

    A signature stays pending from ``try_acquire`` until ``cooldown`` seconds
    after ``release``. Independently, only one batch may be in flight.
    """

    def __init__(self, cooldown: float = 10.0) -> None:
        self.cooldown = cooldown
        self._pending: set[str] = set()
        self._in_flight = False
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def is_pending(self, signature: str) -> bool:
        return signature in self._pending

    def try_acquire(self, signature: str) -> bool:
        if self._closed or self._in_flight or signature in self._pending:
            return False
        self._in_flight = True
        self._pending.add(signature)
        return True

    def release(self, signature: str) -> None:
        """End the in-flight batch and expire its signature after the cool-down."""
        self._in_flight = False
        if self._closed:
            return
        previous = self._timers.pop(signature, None)
        if previous is not None:
            previous.cancel()
        loop = asyncio.get_running_loop()
        self._timers[signature] = loop.call_later(self.cooldown, self._expire, signature)

    def _expire(self, signature: str) -> None:
        self._timers.pop(signature, None)
        self._pending.discard(signature)
        logger.debug("Signature cool-down expired: %s", signature)

    def close(self) -> None:
        self._closed = True
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._pending.clear()
        self._in_flight = False
