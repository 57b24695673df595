from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import httpx
from fastapi import status

from pansou.shared.logging import get_logger

from ..errors import GatewayError, UpstreamError
from ..models import Category

logger = get_logger("gateway.douban")

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/117.0 Safari/537.36"
)
JSON_ACCEPT = "application/json, text/plain, */*"
JSON_MEDIA_TYPE = "application/json; charset=utf-8"

SUGGEST_PATH = "/j/subject_suggest"
SEARCH_SUBJECTS_PATH = "/j/search_subjects"

CATEGORY_SUBJECTS: Dict[Category, Tuple[str, str]] = {
    Category.HOT: ("movie", "热门"),
    Category.MOVIE: ("movie", "热门"),
    Category.TV: ("tv", "热门"),
    Category.VARIETY: ("tv", "综艺"),
}


@dataclass(frozen=True)
class SubjectQuery:
    """Parameters for the catalog's subject listing endpoint."""

    type: str = ""
    tag: str = ""
    search_text: str = ""
    page_limit: str = "20"
    page_start: str = "0"
    cat: str = ""

    def to_params(self) -> Dict[str, str]:
        subject_type, tag = self.type, self.tag
        # the category shortcut only fills in when neither type nor tag was given
        if not subject_type and not tag:
            category = Category.parse(self.cat)
            if category is not None:
                subject_type, tag = CATEGORY_SUBJECTS[category]

        params: Dict[str, str] = {}
        if subject_type:
            params["type"] = subject_type
        if tag:
            params["tag"] = tag
        if self.search_text:
            params["search_text"] = self.search_text
        params["page_limit"] = self.page_limit or "20"
        params["page_start"] = self.page_start or "0"
        return params


class DoubanProxy:
    """Forwards catalog lookups to Douban with browser-like headers.

    Bodies are returned exactly as received so clients see Douban's own JSON.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    @property
    def referer(self) -> str:
        return f"{self._base_url}/"

    def _headers(self) -> Dict[str, str]:
        return {
            "User-Agent": BROWSER_USER_AGENT,
            "Accept": JSON_ACCEPT,
            "Referer": self.referer,
        }

    async def suggest(self, q: str) -> bytes:
        params = {"q": q} if q else {}
        return await self._forward(SUGGEST_PATH, params)

    async def search_subjects(self, query: SubjectQuery) -> bytes:
        return await self._forward(SEARCH_SUBJECTS_PATH, query.to_params())

    async def _forward(self, path: str, params: Dict[str, str]) -> bytes:
        try:
            request = self._client.build_request(
                "GET",
                f"{self._base_url}{path}",
                params=params,
                headers=self._headers(),
            )
        except httpx.InvalidURL as exc:
            raise GatewayError(
                f"failed to build douban request: {exc}",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            ) from exc

        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"douban request failed: {exc}") from exc

        try:
            body = await response.aread()
        except httpx.HTTPError as exc:
            raise UpstreamError(f"failed to read douban response: {exc}") from exc
        finally:
            await response.aclose()

        if response.status_code != status.HTTP_200_OK:
            raise UpstreamError(
                f"unexpected douban status: {response.status_code} {response.reason_phrase}".rstrip()
            )

        logger.debug("douban_forwarded", path=path, size=len(body))
        return body


__all__ = [
    "BROWSER_USER_AGENT",
    "CATEGORY_SUBJECTS",
    "DoubanProxy",
    "JSON_MEDIA_TYPE",
    "SubjectQuery",
]
