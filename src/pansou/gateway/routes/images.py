from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from pansou.shared.logging import get_logger

from ..deps import get_image_relay
from ..errors import GatewayError
from ..services.image_relay import ImageRelay

logger = get_logger("gateway.images")

router = APIRouter(tags=["images"])


@router.get("/img")
async def relay_image(
    u: str = Query(""),
    url: str = Query(""),
    relay: ImageRelay = Depends(get_image_relay),
) -> Response:
    # failures are answered with a bare status so <img> tags just break
    try:
        image = await relay.fetch(u or url)
    except GatewayError as exc:
        logger.info("image_relay_rejected", status_code=exc.status_code, error=exc.message)
        return Response(status_code=exc.status_code)
    return StreamingResponse(
        image.iter_bytes(),
        media_type=image.content_type,
        headers=image.headers,
        background=BackgroundTask(image.aclose),
    )


__all__ = ["router"]
