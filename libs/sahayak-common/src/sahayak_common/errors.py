"""Standard error response schema for sahayak services."""

from __future__ import annotations

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str
    retry_after: int | None = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


def error_response(code: str, message: str, status_code: int = 500, retry_after: int | None = None) -> JSONResponse:
    """Create a standardized error JSON response."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=ErrorDetail(code=code, message=message, retry_after=retry_after)
        ).model_dump(),
    )


_STATUS_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    413: "payload_too_large",
    503: "service_unavailable",
}


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTPException with the standard error format."""
    code = _STATUS_CODES.get(exc.status_code, "internal_error" if exc.status_code >= 500 else "error")
    return error_response(
        code=code,
        message=str(exc.detail),
        status_code=exc.status_code,
        retry_after=5 if exc.status_code == 503 else None,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed request bodies with the standard error format."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", "invalid value")
    else:
        message = "Invalid request"
    return error_response(code="validation_error", message=message, status_code=400)
