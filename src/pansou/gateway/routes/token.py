from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..auth import check_token, submitted_token
from ..config import GatewaySettings
from ..deps import get_gateway_settings

router = APIRouter(prefix="/api/token", tags=["auth"])


@router.post("/verify")
async def verify_token(
    request: Request,
    settings: GatewaySettings = Depends(get_gateway_settings),
) -> JSONResponse:
    """Let the browser check a token before storing it. Sets no cookies."""

    check_token(await submitted_token(request), settings.api_token, missing_message="invalid token")
    return JSONResponse(content={"code": 0, "message": "ok"})


__all__ = ["router"]
