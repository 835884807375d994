"""Internal value types shared by the core components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..api.dto import FixAttemptResult, RemediationSummary


@dataclass(frozen=True)
class FixAction:
    command: str | None
    description: str


@dataclass(frozen=True)
class CommandOutput:
    exit_code: int
    stdout: str = ""
    stderr: str = ""


@dataclass(frozen=True)
class RemediationOutcome:
    results: list[FixAttemptResult]
    summary: RemediationSummary

    @property
    def message(self) -> str:
        return f"Auto-fixed {self.summary.fixed}/{self.summary.total} errors"


@dataclass(frozen=True)
class WaitAction:
    milliseconds: int


@dataclass(frozen=True)
class CaptureAttempt:
    """Per-attempt capture settings; later attempts are cheaper."""

    wait_for_ms: int
    timeout_ms: int
    actions: tuple[WaitAction, ...] = ()


@dataclass
class CaptureResult:
    screenshot: str | None
    metadata: dict[str, Any] = field(default_factory=dict)
