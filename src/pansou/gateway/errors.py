from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from pansou.shared.logging import get_logger

from .models import ApiResponse

logger = get_logger("gateway.errors")


class GatewayError(Exception):
    """Base class for failures that end a request with a structured response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ClientInputError(GatewayError):
    status_code = status.HTTP_400_BAD_REQUEST


class ForbiddenTargetError(GatewayError):
    """Raised when a relay target falls outside the domain allowlist."""

    status_code = status.HTTP_403_FORBIDDEN


class AuthError(GatewayError):
    status_code = status.HTTP_401_UNAUTHORIZED


class UpstreamError(GatewayError):
    status_code = status.HTTP_502_BAD_GATEWAY


class EngineError(GatewayError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.failure(status_code, message).to_content(),
    )


async def _handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "request_failed",
        path=request.url.path,
        status_code=exc.status_code,
        error_type=type(exc).__name__,
        error=exc.message,
    )
    return error_response(exc.status_code, exc.message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, _handle_gateway_error)  # type: ignore[arg-type]


__all__ = [
    "AuthError",
    "ClientInputError",
    "EngineError",
    "ForbiddenTargetError",
    "GatewayError",
    "UpstreamError",
    "error_response",
    "register_exception_handlers",
]
