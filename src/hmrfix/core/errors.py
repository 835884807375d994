"""Exceptions raised by the detection, remediation and capture layers."""

from __future__ import annotations


class HmrFixError(Exception):
    pass


class MissingSandboxError(HmrFixError):
    def __init__(self) -> None:
        super().__init__("Sandbox ID is required")


class SandboxConnectionError(HmrFixError):
    def __init__(self, sandbox_id: str, reason: str) -> None:
        super().__init__(f"Failed to connect to sandbox {sandbox_id}: {reason}")
        self.sandbox_id = sandbox_id


class CaptureError(HmrFixError):
    pass


class CaptureTimeoutError(CaptureError):
    pass


class RemediationRequestError(HmrFixError):
    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"Remediation request failed ({status_code}): {detail}")
        self.status_code = status_code
        self.detail = detail
