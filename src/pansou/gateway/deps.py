from __future__ import annotations

from fastapi import Request

from .config import GatewaySettings
from .services.douban import DoubanProxy
from .services.engine import SearchEngine
from .services.image_relay import ImageRelay


def get_gateway_settings(request: Request) -> GatewaySettings:
    return request.app.state.settings


def get_engine(request: Request) -> SearchEngine:
    return request.app.state.engine


def get_douban_proxy(request: Request) -> DoubanProxy:
    return request.app.state.douban


def get_image_relay(request: Request) -> ImageRelay:
    return request.app.state.image_relay


__all__ = ["get_douban_proxy", "get_engine", "get_gateway_settings", "get_image_relay"]
