"""
exception_handlers.py
- Purpose: Convert AppError (and generic exceptions) into consistent API responses.

Errors are logged with request/run context, and the request id is echoed in
the body so a failed run can be found in the logs from the UI message.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core import AppError, ErrorCode, ErrorReason
from app.core.request_context import get_context

logger = logging.getLogger("app.exceptions")


def _with_request_id(payload: dict) -> dict:
    rid = get_context().get("request_id")
    if rid:
        payload["error"]["request_id"] = rid
    return payload


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "app_error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "code": exc.code,
            "reason": exc.reason,
            "error_message": exc.message,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=_with_request_id(exc.to_dict()))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", extra={"path": request.url.path, "method": request.method})
    payload = {"error": {"code": ErrorCode.INTERNAL_ERROR, "reason": ErrorReason.INTERNAL_ERROR.value}}
    return JSONResponse(status_code=500, content=_with_request_id(payload))
