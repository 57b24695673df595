from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ..auth import require_token
from ..config import GatewaySettings
from ..deps import get_engine, get_gateway_settings
from ..models import HealthStatus
from ..services.engine import SearchEngine

router = APIRouter(prefix="/api", tags=["system"], dependencies=[Depends(require_token)])


@router.get("/health")
async def health(
    settings: GatewaySettings = Depends(get_gateway_settings),
    engine: SearchEngine = Depends(get_engine),
) -> Dict[str, Any]:
    channels = list(settings.default_channels)
    report = HealthStatus(
        plugins_enabled=settings.async_plugin_enabled,
        channels=channels,
        channels_count=len(channels),
    )
    # plugin inventory stays hidden while the plugin subsystem is switched off
    if settings.async_plugin_enabled:
        names = await engine.plugins()
        report.plugin_count = len(names)
        report.plugins = names
    return report.model_dump(exclude_none=True)


__all__ = ["router"]
