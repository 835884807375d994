import sys
from contextlib import asynccontextmanager
from pathlib import Path

import pytest


def pytest_sessionstart(session):  # noqa: ARG001
    # Ensure src/ is importable when running pytest without installation
    root = Path(__file__).resolve().parents[1]
    src = root / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


class FakeHandle:
    """Records commands; ``outputs`` maps command -> CommandOutput or exception."""

    def __init__(self, outputs=None, default=None):
        from hmrfix.core.model import CommandOutput

        self.outputs = outputs or {}
        self.default = default or CommandOutput(exit_code=0, stdout="added 1 package", stderr="")
        self.commands = []
        self.closed = False

    async def run(self, command, timeout_ms):
        self.commands.append((command, timeout_ms))
        out = self.outputs.get(command, self.default)
        if isinstance(out, Exception):
            raise out
        return out

    async def close(self):
        self.closed = True


class FakeConnector:
    def __init__(self, handle=None, fail_with=None):
        self.handle = handle or FakeHandle()
        self.fail_with = fail_with
        self.connected = []

    @asynccontextmanager
    async def connect(self, sandbox_id):
        self.connected.append(sandbox_id)
        if self.fail_with is not None:
            raise self.fail_with
        try:
            yield self.handle
        finally:
            await self.handle.close()


@pytest.fixture
def fake_connector():
    return FakeConnector()
