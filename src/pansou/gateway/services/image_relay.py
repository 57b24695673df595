from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Iterable, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

import httpx
from fastapi import status

from pansou.shared.logging import get_logger

from ..errors import ClientInputError, ForbiddenTargetError, GatewayError, UpstreamError
from .douban import BROWSER_USER_AGENT

logger = get_logger("gateway.image_relay")

IMAGE_ACCEPT = "image/avif,image/webp,image/apng,image/*,*/*;q=0.8"
FALLBACK_CONTENT_TYPE = "image/jpeg"
CACHE_CONTROL = "public, max-age=86400"
ALLOWED_SCHEMES = ("http", "https")
_FORBIDDEN_NETLOC_CHARS = ("@", "\\", " ", "\t", "\n", "\r")


def host_allowed(host: str, allowed_domains: Iterable[str]) -> bool:
    """True when ``host`` is one of ``allowed_domains`` or a subdomain of one."""

    host = host.lower().rstrip(".")
    if not host:
        return False
    for domain in allowed_domains:
        domain = domain.lower().strip(".")
        if domain and (host == domain or host.endswith("." + domain)):
            return True
    return False


@dataclass(frozen=True)
class RelayTarget:
    scheme: str
    host: str
    port: Optional[int]
    path: str
    query: str

    @property
    def url(self) -> str:
        netloc = self.host if self.port is None else f"{self.host}:{self.port}"
        return urlunsplit((self.scheme, netloc, self.path or "/", self.query, ""))


def parse_target(raw: str) -> RelayTarget:
    """Validate a relay target URL.

    Only absolute http(s) URLs without embedded credentials are accepted. The
    host is lower-cased and stripped of any trailing dot.
    """

    if not raw:
        raise ClientInputError("missing image url")
    try:
        parts = urlsplit(raw.strip())
        host = (parts.hostname or "").rstrip(".")
        port = parts.port
    except ValueError as exc:
        raise ClientInputError(f"invalid image url: {exc}") from exc

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES or not parts.netloc or not host:
        raise ClientInputError("image url must be an absolute http(s) url")
    if any(char in parts.netloc for char in _FORBIDDEN_NETLOC_CHARS):
        raise ClientInputError("image url must not carry credentials")
    return RelayTarget(scheme=scheme, host=host, port=port, path=parts.path, query=parts.query)


def guess_content_type(path: str) -> str:
    guessed, _ = mimetypes.guess_type(path)
    return guessed or FALLBACK_CONTENT_TYPE


@dataclass
class RelayedImage:
    content_type: str
    response: httpx.Response

    @property
    def headers(self) -> Dict[str, str]:
        return {"Cache-Control": CACHE_CONTROL}

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self.response.aiter_bytes():
                yield chunk
        finally:
            await self.response.aclose()

    async def aclose(self) -> None:
        # safe to call twice; also covers bodies that were never iterated
        await self.response.aclose()


class ImageRelay:
    """Fetches images from allowlisted hosts on behalf of the browser."""

    def __init__(self, client: httpx.AsyncClient, allowed_domains: Iterable[str], referer: str) -> None:
        self._client = client
        self._allowed_domains = tuple(d.lower() for d in allowed_domains)
        self._referer = referer

    @property
    def allowed_domains(self) -> Tuple[str, ...]:
        return self._allowed_domains

    def _headers(self) -> Dict[str, str]:
        return {
            "User-Agent": BROWSER_USER_AGENT,
            "Accept": IMAGE_ACCEPT,
            "Referer": self._referer,
        }

    async def fetch(self, raw_url: str) -> RelayedImage:
        target = parse_target(raw_url)
        if not host_allowed(target.host, self._allowed_domains):
            raise ForbiddenTargetError(f"image host not allowed: {target.host}")

        # the outbound URL is rebuilt from the validated parts, never the raw input
        try:
            request = self._client.build_request("GET", target.url, headers=self._headers())
        except httpx.InvalidURL as exc:
            raise GatewayError(
                f"failed to build image request: {exc}",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            ) from exc

        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"image request failed: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            await response.aclose()
            raise UpstreamError(f"unexpected image status: {response.status_code}")

        content_type = response.headers.get("Content-Type") or guess_content_type(target.path)
        logger.debug("image_relayed", host=target.host, content_type=content_type)
        return RelayedImage(content_type=content_type, response=response)


__all__ = [
    "CACHE_CONTROL",
    "ImageRelay",
    "RelayTarget",
    "RelayedImage",
    "guess_content_type",
    "host_allowed",
    "parse_target",
]
