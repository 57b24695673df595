from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.requests import ClientDisconnect

from pansou.shared.logging import get_logger

from ..auth import require_token
from ..config import GatewaySettings
from ..deps import get_engine, get_gateway_settings
from ..errors import ClientInputError, EngineError
from ..models import ApiResponse, SearchRequest
from ..pipeline.normalizer import Transport, normalize_request
from ..services.engine import SearchEngine

logger = get_logger("gateway.search")

router = APIRouter(prefix="/api", tags=["search"], dependencies=[Depends(require_token)])


async def _read_body(request: Request) -> bytes:
    try:
        return await request.body()
    except ClientDisconnect as exc:
        raise ClientInputError(f"failed to read request body: {exc or 'client disconnected'}") from exc


async def _dispatch(engine: SearchEngine, search_request: SearchRequest) -> JSONResponse:
    logger.info(
        "search_dispatched",
        keyword=search_request.keyword,
        source_type=search_request.source_type,
        result_type=search_request.result_type,
        channels=len(search_request.channels or []),
        plugins=search_request.plugins,
        force_refresh=search_request.force_refresh,
    )
    try:
        result = await engine.search(search_request)
    except EngineError as exc:
        raise EngineError(f"search failed: {exc.message}") from exc
    return JSONResponse(content=ApiResponse.success(result).to_content())


@router.get("/search")
async def search_by_query(
    request: Request,
    settings: GatewaySettings = Depends(get_gateway_settings),
    engine: SearchEngine = Depends(get_engine),
) -> JSONResponse:
    search_request = normalize_request(Transport.QUERY, request.query_params, settings.default_channels)
    return await _dispatch(engine, search_request)


@router.post("/search")
async def search_by_body(
    request: Request,
    settings: GatewaySettings = Depends(get_gateway_settings),
    engine: SearchEngine = Depends(get_engine),
) -> JSONResponse:
    raw = await _read_body(request)
    search_request = normalize_request(Transport.BODY, raw, settings.default_channels)
    return await _dispatch(engine, search_request)


__all__ = ["router"]
