from __future__ import annotations

import logging

import httpx

from ..api.dto import AutoFixResponse, ErrorRecord
from ..config.settings import settings
from ..core.errors import RemediationRequestError

logger = logging.getLogger(__name__)


class RemediationClient:
    """Calls the ``/auto-fix-errors`` endpoint of a running hmrfix API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def auto_fix(self, sandbox_id: str, errors: list[ErrorRecord]) -> AutoFixResponse:
        payload = {
            "sandboxId": sandbox_id,
            "errors": [e.model_dump(mode="json") for e in errors],
        }
        logger.debug("POST %s/auto-fix-errors", self.base_url)
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self._transport
        ) as client:
            r = await client.post("/auto-fix-errors", json=payload)
        if r.is_error:
            try:
                detail = r.json().get("detail") or r.text
            except ValueError:
                detail = r.text
            raise RemediationRequestError(r.status_code, str(detail))
        return AutoFixResponse.model_validate(r.json())
