"""Remediation dispatcher.

Maps each classified error to at most one shell command, runs the commands
serially inside the sandbox and reports a per-error result plus a summary.
Per-error failures are recorded in-band; only a missing sandbox id or a
failed connection abort the batch.
"""

from __future__ import annotations

import logging
import shlex

from ...api.dto import ErrorRecord, ErrorType, FixAttemptResult, RemediationSummary
from ...adapters.sandbox import SandboxConnector, SandboxHandle
from ..classify.classifier import describes_unresolved_import
from ..errors import MissingSandboxError
from ..model import FixAction, RemediationOutcome

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT_MS = 30000

# Installed by the "fix common issues" action regardless of what the overlay shows
COMMON_FIXES: tuple[ErrorRecord, ...] = (
    ErrorRecord(type=ErrorType.NPM_MISSING, message="Common React packages", package="react react-dom"),
    ErrorRecord(type=ErrorType.NPM_MISSING, message="Common UI packages", package="lucide-react"),
    ErrorRecord(
        type=ErrorType.NPM_MISSING,
        message="Common utility packages",
        package="clsx tailwind-merge",
    ),
)


def install_command(package: str) -> str:
    return "npm install " + " ".join(shlex.quote(p) for p in package.split())


def select_fix(error: ErrorRecord) -> FixAction:
    if error.type == ErrorType.NPM_MISSING:
        if error.package:
            return FixAction(
                install_command(error.package), f"Installing missing package: {error.package}"
            )
        return FixAction(None, "Missing package name, nothing to install")
    if error.type == ErrorType.IMPORT_ERROR:
        if error.package and describes_unresolved_import(error.message):
            return FixAction(
                install_command(error.package), f"Installing missing package: {error.package}"
            )
        return FixAction(None, "Import error does not name an installable package")
    if error.type == ErrorType.SYNTAX_ERROR:
        return FixAction(None, "Syntax error detected - manual review needed")
    return FixAction(None, f"Unknown error type: {error.type_name}")


class RemediationDispatcher:
    def __init__(
        self,
        connector: SandboxConnector,
        command_timeout_ms: int = DEFAULT_COMMAND_TIMEOUT_MS,
    ) -> None:
        self.connector = connector
        self.command_timeout_ms = command_timeout_ms

    async def remediate(
        self, sandbox_id: str | None, errors: list[ErrorRecord]
    ) -> RemediationOutcome:
        if not sandbox_id:
            raise MissingSandboxError()

        logger.info("Auto-fixing %d errors for sandbox %s", len(errors), sandbox_id)
        results: list[FixAttemptResult] = []
        async with self.connector.connect(sandbox_id) as handle:
            for error in errors:
                results.append(await self._fix_one(handle, error))

        outcome = RemediationOutcome(
            results=results, summary=RemediationSummary.from_results(results)
        )
        logger.info("%s for sandbox %s", outcome.message, sandbox_id)
        return outcome

    async def _fix_one(self, handle: SandboxHandle, error: ErrorRecord) -> FixAttemptResult:
        try:
            action = select_fix(error)
            if action.command is None:
                return FixAttemptResult(
                    error=error,
                    command=None,
                    description=action.description,
                    success=False,
                    error_output="No automatic fix available",
                )
            logger.info("Running: %s", action.command)
            out = await handle.run(action.command, self.command_timeout_ms)
            return FixAttemptResult(
                error=error,
                command=action.command,
                description=action.description,
                success=out.exit_code == 0,
                output=out.stdout,
                error_output=out.stderr,
            )
        except Exception as e:
            logger.error("Failed to fix %s error: %s", error.type_name, e)
            return FixAttemptResult(
                error=error,
                command=None,
                description="Fix attempt failed",
                success=False,
                error_output=str(e) or "Unknown error",
            )
