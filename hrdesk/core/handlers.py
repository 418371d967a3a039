"""
Exception handlers.

Every error leaves the API in the same envelope as a success:
{"success": false, "error": {"code", "message", "details"}}.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hrdesk.core.exceptions import AppException
from hrdesk.core.schemas import ApiResponse

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, code: str, details=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.fail(message, code=code, details=details).to_dict(),
        headers=headers,
    )


def _field_errors(exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        # ("body", "from_date") -> "from_date"; ("query", "page") -> "page"
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({
            "field": ".".join(loc) or "unknown",
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        })
    return errors


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = _field_errors(exc)
    logger.warning(f"Request validation failed on {request.method} {request.url.path}: {errors}")
    return error_response(422, "Request validation failed", "REQUEST_VALIDATION", details=errors)


async def app_exception_handler(request: Request, exc: AppException):
    logger.warning(
        f"{exc.error_code}: {exc.message}",
        extra={"code": exc.error_code, "path": request.url.path, "status_code": exc.status_code}
    )
    return error_response(exc.status_code, exc.message, exc.error_code, details=exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(
        exc.status_code, message, f"HTTP_{exc.status_code}", headers=getattr(exc, "headers", None)
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled server error", extra={"path": request.url.path})
    return error_response(500, "An unexpected server error occurred.", "INTERNAL_ERROR")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppException, app_exception_handler)
    # fastapi.HTTPException subclasses the starlette one
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
