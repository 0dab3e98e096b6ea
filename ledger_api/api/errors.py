"""
Exception handlers.

Every failure leaves the API as HTTP 400 with the same body:
{"success": false, "message": ..., "errorCode": ...}.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ledger_api.errors import ErrorCode, LedgerError

logger = logging.getLogger(__name__)


def error_body(code: ErrorCode, message: str) -> dict:
    return {"success": False, "message": message, "errorCode": int(code)}


def describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(
            str(part) for part in error.get("loc", ()) if part != "body"
        )
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return "; ".join(parts) or "Invalid request"


async def ledger_error_handler(request: Request, exc: LedgerError):
    logger.info(
        "%s %s failed with %s: %s",
        request.method, request.url.path, exc.code.name, exc.message,
    )
    return JSONResponse(status_code=400, content=exc.as_response())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = describe_validation_errors(exc)
    logger.info("%s %s rejected: %s", request.method, request.url.path, message)
    return JSONResponse(
        status_code=400,
        content=error_body(ErrorCode.VALIDATION_ERROR, message),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=400,
        content=error_body(ErrorCode.UNKNOWN_ERROR, str(exc) or type(exc).__name__),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
