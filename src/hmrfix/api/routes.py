from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..adapters.playwright import capture_screenshot
from ..adapters.sandbox import E2BConnector
from ..config.settings import settings
from ..core.capture.retry import capture_with_retry
from ..core.errors import MissingSandboxError
from ..core.remediate.dispatcher import COMMON_FIXES, RemediationDispatcher
from .dto import (
    AutoFixRequest,
    AutoFixResponse,
    CaptureRequest,
    CaptureResponse,
    CommonFixRequest,
    ErrorRecord,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_dispatcher() -> RemediationDispatcher:
    return RemediationDispatcher(
        E2BConnector(), command_timeout_ms=settings.fix_command_timeout_ms
    )


async def _run_fixes(
    dispatcher: RemediationDispatcher, sandbox_id: str, errors: list[ErrorRecord]
) -> AutoFixResponse:
    try:
        outcome = await dispatcher.remediate(sandbox_id, errors)
    except MissingSandboxError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("Auto-fix failed for sandbox %s: %s", sandbox_id, e)
        raise HTTPException(status_code=500, detail=str(e) or "Failed to auto-fix errors")
    return AutoFixResponse(
        success=True,
        message=outcome.message,
        results=outcome.results,
        summary=outcome.summary,
    )


@router.post("/auto-fix-errors", response_model=AutoFixResponse)
async def auto_fix_errors(
    req: AutoFixRequest, dispatcher: RemediationDispatcher = Depends(get_dispatcher)
) -> AutoFixResponse:
    if not req.sandbox_id:
        raise HTTPException(status_code=400, detail="Sandbox ID is required")
    if req.errors is None:
        raise HTTPException(status_code=400, detail="Errors array is required")
    return await _run_fixes(dispatcher, req.sandbox_id, req.errors)


@router.post("/auto-fix-errors/common", response_model=AutoFixResponse)
async def auto_fix_common(
    req: CommonFixRequest, dispatcher: RemediationDispatcher = Depends(get_dispatcher)
) -> AutoFixResponse:
    if not req.sandbox_id:
        raise HTTPException(status_code=400, detail="Sandbox ID is required")
    return await _run_fixes(dispatcher, req.sandbox_id, list(COMMON_FIXES))


@router.post("/scrape-screenshot", response_model=CaptureResponse)
async def scrape_screenshot(req: CaptureRequest) -> CaptureResponse:
    if not req.url:
        raise HTTPException(status_code=400, detail="URL is required")
    try:
        result = await capture_with_retry(req.url, capture_screenshot)
    except Exception as e:
        logger.error("Screenshot capture error: %s", e)
        raise HTTPException(status_code=500, detail=str(e) or "Failed to capture screenshot")
    return CaptureResponse(success=True, screenshot=result.screenshot, metadata=result.metadata)
