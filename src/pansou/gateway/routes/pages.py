from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from ..config import GatewaySettings
from ..deps import get_gateway_settings

router = APIRouter(tags=["pages"], include_in_schema=False)


def _page(settings: GatewaySettings, name: str) -> FileResponse:
    path = settings.templates_dir / name
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"page {name} not found")
    return FileResponse(path, media_type="text/html")


@router.get("/")
async def douban_page(settings: GatewaySettings = Depends(get_gateway_settings)) -> FileResponse:
    return _page(settings, "douban.html")


@router.get("/search")
async def search_page(settings: GatewaySettings = Depends(get_gateway_settings)) -> FileResponse:
    return _page(settings, "pansou.html")


@router.get("/token")
async def token_page(settings: GatewaySettings = Depends(get_gateway_settings)) -> FileResponse:
    return _page(settings, "token.html")


__all__ = ["router"]
