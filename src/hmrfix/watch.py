"""Watch a sandbox preview and remediate its build errors.

    hmrfix-watch SANDBOX_ID [--port 5173] [--api-url http://localhost:3001]

Opens the sandbox's dev-server preview in a headless browser, polls it for the
HMR error overlay and posts each new error batch to the remediation endpoint.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging

from .adapters.preview import open_preview
from .adapters.remediation_client import RemediationClient
from .api.dto import ErrorRecord
from .config.settings import preview_url, settings
from .core.overlay.detector import PreviewErrorDetector

logger = logging.getLogger(__name__)


def _log_errors(errors: list[ErrorRecord]) -> None:
    for e in errors:
        logger.warning("Detected %s: %s", e.type_name, e.message)


async def watch(sandbox_id: str, port: int, api_url: str | None, auto_fix: bool) -> None:
    url = preview_url(sandbox_id, port)
    client = RemediationClient(base_url=api_url)
    logger.info("Watching %s", url)
    async with open_preview(url, headless=settings.headless) as source:

        async def _reload(_response) -> None:
            await asyncio.sleep(2)
            await source.reload()

        detector = PreviewErrorDetector(
            source,
            on_errors=_log_errors,
            remediate=client.auto_fix,
            sandbox_id=sandbox_id,
            auto_fix=auto_fix,
            poll_interval=settings.poll_interval_ms / 1000,
            cooldown=settings.fix_cooldown_ms / 1000,
            on_remediated=_reload,
        )
        async with detector:
            await asyncio.Event().wait()


def main() -> None:
    parser = argparse.ArgumentParser(prog="hmrfix-watch", description=__doc__.splitlines()[0])
    parser.add_argument("sandbox_id")
    parser.add_argument("--port", type=int, default=5173)
    parser.add_argument("--api-url", default=None, help="hmrfix API base URL")
    parser.add_argument("--no-fix", action="store_true", help="detect only, never remediate")
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s"
    )
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(watch(args.sandbox_id, args.port, args.api_url, not args.no_fix))


if __name__ == "__main__":
    main()
