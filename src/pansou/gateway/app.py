from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from pansou import __version__
from pansou.shared.logging import get_logger, setup_logging

from .config import GatewaySettings, get_settings
from .errors import register_exception_handlers
from .middleware import log_requests
from .routes import douban, health, images, pages, search, token
from .sdk.client import SearchEngineClient
from .services.douban import DoubanProxy
from .services.engine import SearchEngine
from .services.image_relay import ImageRelay

logger = get_logger("gateway.app")


def create_app(
    settings: GatewaySettings | None = None,
    engine: SearchEngine | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the gateway application.

    ``engine`` and ``http_client`` default to a remote engine client and a
    pooled ``httpx.AsyncClient`` built from ``settings``. A client passed in
    by the caller is left open on shutdown.
    """

    settings = settings or get_settings()
    owns_client = http_client is None
    # redirects are not followed so relayed images cannot leave the allowlist
    client = http_client or httpx.AsyncClient(
        timeout=settings.upstream_timeout,
        follow_redirects=False,
    )
    if engine is None:
        engine = SearchEngineClient(
            base_url=settings.search_url,
            client=client,
            auth_token=settings.search_token,
            timeout=settings.search_timeout,
        )
    douban_proxy = DoubanProxy(client, settings.douban_base_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(settings.log_level, service=settings.service_name)
        logger.info(
            "gateway_ready",
            search_url=settings.search_url,
            channels=len(settings.default_channels),
            plugins_enabled=settings.async_plugin_enabled,
            auth_configured=bool(settings.api_token),
        )
        if not settings.api_token:
            logger.warning("gateway_token_missing", detail="TOKEN is not set; protected routes will reject every request")
        try:
            yield
        finally:
            if owns_client:
                await client.aclose()

    app = FastAPI(title="Pansou Gateway", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.http_client = client
    app.state.douban = douban_proxy
    app.state.image_relay = ImageRelay(client, settings.image_allowed_domains, referer=douban_proxy.referer)

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)
    register_exception_handlers(app)

    app.include_router(pages.router)
    app.include_router(token.router)
    app.include_router(douban.router)
    app.include_router(images.router)
    app.include_router(search.router)
    app.include_router(health.router)

    return app


__all__ = ["create_app"]
