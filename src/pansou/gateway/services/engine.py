from __future__ import annotations

from typing import Any, List, Protocol, runtime_checkable

from ..models import SearchRequest


@runtime_checkable
class SearchEngine(Protocol):
    """Contract the gateway expects from the search backend.

    ``search`` receives an already canonical request and raises
    :class:`~pansou.gateway.errors.EngineError` on failure. ``plugins`` lists
    the names of the registered search plugins.
    """

    async def search(self, request: SearchRequest) -> Any:
        ...

    async def plugins(self) -> List[str]:
        ...


__all__ = ["SearchEngine"]
