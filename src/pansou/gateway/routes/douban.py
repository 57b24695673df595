from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from ..deps import get_douban_proxy
from ..services.douban import JSON_MEDIA_TYPE, DoubanProxy, SubjectQuery

router = APIRouter(prefix="/api", tags=["douban"])


@router.get("/douban")
async def douban_proxy(
    suggest: str = Query(""),
    endpoint: str = Query(""),
    q: str = Query(""),
    subject_type: str = Query("", alias="type"),
    tag: str = Query(""),
    cat: str = Query(""),
    search_text: str = Query(""),
    page_limit: str = Query("20"),
    page_start: str = Query("0"),
    proxy: DoubanProxy = Depends(get_douban_proxy),
) -> Response:
    """Proxy Douban's subject search and suggest endpoints for the browser.

    ``suggest=1`` or ``endpoint=suggest`` selects the suggest endpoint; every
    other request is a subject search. ``cat`` (hot, movie, tv, variety) picks
    a preset type and tag when neither is given explicitly.
    """

    if suggest == "1" or endpoint == "suggest":
        body = await proxy.suggest(q)
    else:
        body = await proxy.search_subjects(
            SubjectQuery(
                type=subject_type,
                tag=tag,
                search_text=search_text,
                page_limit=page_limit,
                page_start=page_start,
                cat=cat,
            )
        )
    return Response(content=body, media_type=JSON_MEDIA_TYPE)


__all__ = ["router"]
