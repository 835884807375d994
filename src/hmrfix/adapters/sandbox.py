"""Sandbox execution adapter.

The remediation dispatcher only needs three things from a sandbox: connect by
id, run a shell command with a timeout, and close the connection. E2B is the
production backend.
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from e2b import AsyncSandbox, CommandExitException

from ..config.settings import settings
from ..core.errors import SandboxConnectionError
from ..core.model import CommandOutput

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@runtime_checkable
class SandboxHandle(Protocol):
    async def run(self, command: str, timeout_ms: int) -> CommandOutput: ...

    async def close(self) -> None: ...


class SandboxConnector(Protocol):
    def connect(self, sandbox_id: str) -> AbstractAsyncContextManager[SandboxHandle]:
        """Async context manager yielding a handle that is closed on exit."""
        ...


class E2BSandboxHandle:
    def __init__(self, sandbox: AsyncSandbox, cwd: str | None = None) -> None:
        self._sandbox: AsyncSandbox | None = sandbox
        self._cwd = cwd

    async def run(self, command: str, timeout_ms: int) -> CommandOutput:
        if self._sandbox is None:
            raise RuntimeError("Sandbox handle is closed")
        try:
            result = await self._sandbox.commands.run(
                command, cwd=self._cwd, timeout=timeout_ms / 1000
            )
        except CommandExitException as e:
            # E2B raises on non-zero exit; callers want the status, not an exception
            return CommandOutput(exit_code=e.exit_code, stdout=e.stdout, stderr=e.stderr)
        return CommandOutput(
            exit_code=result.exit_code, stdout=result.stdout, stderr=result.stderr
        )

    async def close(self) -> None:
        # Connecting only attaches to a running sandbox; closing must not kill it.
        self._sandbox = None


class E2BConnector:
    def __init__(self, api_key: str | None = None, cwd: str | None = None) -> None:
        self.api_key = api_key if api_key is not None else settings.e2b_api_key
        self.cwd = cwd if cwd is not None else settings.sandbox_workdir

    @asynccontextmanager
    async def connect(self, sandbox_id: str) -> AsyncIterator[SandboxHandle]:
        try:
            sandbox = await AsyncSandbox.connect(sandbox_id, api_key=self.api_key)
        except Exception as e:
            raise SandboxConnectionError(sandbox_id, str(e)) from e
        handle = E2BSandboxHandle(sandbox, cwd=self.cwd)
        logger.debug("Connected to sandbox %s", sandbox_id)
        try:
            yield handle
        finally:
            await handle.close()
            logger.debug("Released sandbox %s", sandbox_id)
