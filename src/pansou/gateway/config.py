from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class GatewaySettings(BaseModel):
    """Runtime configuration for the gateway, read once from the environment."""

    service_name: str = Field(default_factory=lambda: os.getenv("SERVICE_NAME", "pansou-gateway"))
    api_token: str = Field(default_factory=lambda: os.getenv("TOKEN", "").strip())
    default_channels: List[str] = Field(default_factory=lambda: _env_list("CHANNELS", "tgsearchers3"))
    async_plugin_enabled: bool = Field(default_factory=lambda: _env_bool("ASYNC_PLUGIN_ENABLED", True))
    search_url: str = Field(default_factory=lambda: os.getenv("SEARCH_URL", "http://localhost:8889"))
    search_token: str | None = Field(default_factory=lambda: os.getenv("SEARCH_TOKEN"))
    search_timeout: float = Field(default_factory=lambda: float(os.getenv("SEARCH_TIMEOUT", "60.0")))
    upstream_timeout: float = Field(default_factory=lambda: float(os.getenv("UPSTREAM_TIMEOUT", "15.0")))
    douban_base_url: str = Field(
        default_factory=lambda: os.getenv("DOUBAN_BASE_URL", "https://movie.douban.com")
    )
    image_allowed_domains: List[str] = Field(
        default_factory=lambda: [d.lower() for d in _env_list("IMAGE_ALLOWED_DOMAINS", "douban.com,doubanio.com")]
    )
    cors_origins: List[str] = Field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    templates_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("TEMPLATES_DIR") or DEFAULT_TEMPLATES_DIR)
    )


@lru_cache(maxsize=1)
def get_settings() -> GatewaySettings:
    return GatewaySettings()


__all__ = ["GatewaySettings", "get_settings"]
