from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    NPM_MISSING = "npm-missing"
    IMPORT_ERROR = "import-error"
    SYNTAX_ERROR = "syntax-error"
    UNKNOWN = "unknown"


class ErrorRecord(BaseModel):
    """One classified error from the preview overlay."""

    model_config = ConfigDict(frozen=True)

    # Unrecognized type strings are kept verbatim so they can be reported back
    type: Union[ErrorType, str] = Field(..., union_mode="left_to_right")
    message: str = ""
    package: str | None = None

    @property
    def type_name(self) -> str:
        return self.type.value if isinstance(self.type, ErrorType) else str(self.type)


def error_signature(errors: list[ErrorRecord]) -> str:
    """Deduplication key for a detection batch (order sensitive)."""
    return "|".join(f"{e.type_name}:{e.message}" for e in errors)


class FixAttemptResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    error: ErrorRecord
    command: str | None = None
    description: str
    success: bool
    output: str | None = None
    error_output: str | None = Field(None, alias="errorOutput")


class RemediationSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    fixed: int
    failed: int

    @classmethod
    def from_results(cls, results: list[FixAttemptResult]) -> RemediationSummary:
        total = len(results)
        fixed = sum(1 for r in results if r.success)
        return cls(total=total, fixed=fixed, failed=total - fixed)


class AutoFixRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sandbox_id: str | None = Field(None, alias="sandboxId")
    errors: list[ErrorRecord] | None = None


class CommonFixRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sandbox_id: str | None = Field(None, alias="sandboxId")


class AutoFixResponse(BaseModel):
    success: bool = True
    message: str
    results: list[FixAttemptResult]
    summary: RemediationSummary


class CaptureRequest(BaseModel):
    url: str | None = Field(None, description="Page to screenshot")


class CaptureResponse(BaseModel):
    success: bool = True
    screenshot: str = Field(..., description="Base64-encoded PNG of the viewport")
    metadata: dict[str, Any] = Field(default_factory=dict)
