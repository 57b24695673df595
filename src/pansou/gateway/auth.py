from __future__ import annotations

import secrets

from fastapi import Depends, HTTPException, Request
from pydantic import ValidationError
from starlette.formparsers import MultiPartException

from pansou.shared.logging import get_logger

from .config import GatewaySettings
from .deps import get_gateway_settings
from .errors import AuthError
from .models import TokenVerifyRequest

logger = get_logger("gateway.auth")

BEARER_PREFIX = "bearer "
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def strip_bearer(value: str | None) -> str:
    """Trim a credential and drop a leading ``Bearer`` scheme, in any case."""

    token = (value or "").strip()
    if token.lower().startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):].strip()
    return token


def check_token(candidate: str, expected: str, *, missing_message: str = "missing token") -> None:
    # an unset secret denies everything
    if not expected:
        raise AuthError("server token not configured")
    if not candidate:
        raise AuthError(missing_message)
    if not secrets.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8")):
        raise AuthError("invalid token")


def require_token(
    request: Request,
    settings: GatewaySettings = Depends(get_gateway_settings),
) -> None:
    """Route dependency guarding the protected API group."""

    check_token(strip_bearer(request.headers.get("Authorization")), settings.api_token)


def _media_type(request: Request) -> str:
    return request.headers.get("content-type", "").split(";", 1)[0].strip().lower()


async def submitted_token(request: Request) -> str:
    """Pick the token a client submitted for verification.

    Looks at the JSON body, then form fields, then the query string; the first
    non-empty value wins. Bodies that cannot be decoded are ignored.
    """

    token = ""
    media_type = _media_type(request)
    if media_type == "application/json":
        try:
            payload = TokenVerifyRequest.model_validate_json(await request.body())
            token = payload.token or ""
        except ValidationError:
            logger.debug("token_body_unreadable", media_type=media_type)
    elif media_type in FORM_CONTENT_TYPES:
        try:
            form = await request.form()
            value = form.get("token")
            token = value if isinstance(value, str) else ""
        except (MultiPartException, HTTPException):
            logger.debug("token_form_unreadable", media_type=media_type)

    if not token.strip():
        token = request.query_params.get("token", "")
    return strip_bearer(token)


__all__ = ["check_token", "require_token", "strip_bearer", "submitted_token"]
