from __future__ import annotations

from typing import Any, Dict, List

import httpx
import orjson

from pansou.shared.logging import get_logger

from ..errors import EngineError
from ..models import SearchRequest

logger = get_logger("gateway.engine_client")


def _truncate(text: str, limit: int = 200) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


class SearchEngineClient:
    """Talks to a remote search engine that answers with the ``{code, message, data}`` envelope."""

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient,
        auth_token: str | None = None,
        timeout: float = 60.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._auth_token = auth_token
        self._timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._auth_token:
            headers["Authorization"] = f"Bearer {self._auth_token}"
        return headers

    async def search(self, request: SearchRequest) -> Any:
        payload = request.model_dump(mode="json", by_alias=True)
        try:
            response = await self._client.post(
                f"{self._base_url}/api/search",
                content=orjson.dumps(payload),
                headers=self._headers(),
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise EngineError(f"search engine unreachable: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code >= 400:
            detail = body.get("message") if isinstance(body, dict) else _truncate(response.text)
            raise EngineError(f"search engine returned {response.status_code}: {detail}")
        if not isinstance(body, dict):
            raise EngineError("search engine returned a malformed response")
        if body.get("code", 0) != 0:
            raise EngineError(str(body.get("message") or "unknown search engine error"))
        return body.get("data")

    async def plugins(self) -> List[str]:
        try:
            response = await self._client.get(
                f"{self._base_url}/api/plugins",
                headers=self._headers(),
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("plugin_listing_failed", base_url=self._base_url, error=str(exc))
            return []

        items = body.get("data") if isinstance(body, dict) else body
        names: List[str] = []
        for item in items or []:
            if isinstance(item, str):
                names.append(item)
            elif isinstance(item, dict) and item.get("name"):
                names.append(str(item["name"]))
        return names


__all__ = ["SearchEngineClient"]
