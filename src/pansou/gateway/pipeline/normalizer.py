from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import orjson
from pydantic import ValidationError

from ..errors import ClientInputError
from ..models import RESULT_TYPE_ALIASES, ResultType, SearchRequest, SourceType

_INT_RE = re.compile(r"^[+-]?\d+$")


class Transport(str, Enum):
    QUERY = "query"
    BODY = "body"


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _csv_param(params: Mapping[str, str], key: str) -> Optional[List[str]]:
    """Parse a comma separated parameter, keeping absence distinct from blankness.

    Returns ``None`` when the key is missing, ``[]`` when it is present but
    blank, and the trimmed tokens otherwise.
    """

    if key not in params:
        return None
    value = params.get(key) or ""
    if not value.strip():
        return []
    return _split_csv(value)


def _parse_int(value: str) -> int:
    value = value.strip()
    if not _INT_RE.match(value):
        return 0
    return int(value)


def parse_ext(raw: str) -> Dict[str, Any]:
    raw = raw.strip()
    if not raw or raw == "{}":
        return {}
    try:
        decoded = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ClientInputError(f"invalid ext parameter: {exc}") from exc
    if decoded is None:
        return {}
    if not isinstance(decoded, dict):
        raise ClientInputError(
            f"invalid ext parameter: expected a JSON object, got {type(decoded).__name__}"
        )
    return decoded


def parse_query(params: Mapping[str, str]) -> SearchRequest:
    """Build a raw request from query-string parameters."""

    channels = _split_csv(params.get("channels") or "")
    result_type = (params.get("res") or "").strip() or "merge"
    source_type = (params.get("src") or "").strip() or SourceType.ALL.value

    return SearchRequest(
        keyword=params.get("kw") or "",
        channels=channels or None,
        concurrency=_parse_int(params.get("conc") or ""),
        force_refresh=(params.get("refresh") or "") == "true",
        result_type=result_type,
        source_type=source_type,
        plugins=_csv_param(params, "plugins") or None,
        cloud_types=_csv_param(params, "cloud_types") or None,
        ext=parse_ext(params.get("ext") or ""),
    )


def _describe_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "body"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


def parse_body(raw: bytes) -> SearchRequest:
    """Decode a JSON request body into a raw request."""

    try:
        # strict: mistyped values such as "refresh": "yes" are rejected, not coerced
        return SearchRequest.model_validate_json(raw, strict=True)
    except ValidationError as exc:
        raise ClientInputError(f"invalid request parameters: {_describe_validation_error(exc)}") from exc


def canonical_result_type(raw: str) -> str:
    raw = raw.strip()
    if raw in RESULT_TYPE_ALIASES:
        return RESULT_TYPE_ALIASES[raw].value
    try:
        return ResultType(raw).value
    except ValueError:
        accepted = ", ".join(["merge"] + [item.value for item in ResultType])
        raise ClientInputError(f"invalid res parameter: {raw!r} (expected one of {accepted})") from None


def canonicalize(request: SearchRequest, default_channels: Sequence[str]) -> SearchRequest:
    """Apply defaults and the source-type exclusion rules.

    ``tg`` searches never carry plugins and ``plugin`` searches never carry
    channels. Source types outside the known set are handed to the engine
    untouched.
    """

    channels = list(request.channels or []) or list(default_channels) or None
    plugins = request.plugins or None
    source_type = request.source_type.strip() or SourceType.ALL.value

    source = SourceType.parse(source_type)
    if source is SourceType.TG:
        plugins = None
    elif source is SourceType.PLUGIN:
        channels = None

    return request.model_copy(
        update={
            "channels": channels,
            "result_type": canonical_result_type(request.result_type),
            "source_type": source_type,
            "plugins": plugins,
            "cloud_types": request.cloud_types or None,
            "ext": request.ext if request.ext is not None else {},
        }
    )


def normalize_request(
    transport: Transport,
    raw: Union[Mapping[str, str], bytes],
    default_channels: Sequence[str],
) -> SearchRequest:
    if transport is Transport.QUERY:
        request = parse_query(raw)  # type: ignore[arg-type]
    else:
        request = parse_body(raw)  # type: ignore[arg-type]
    return canonicalize(request, default_channels)


__all__ = [
    "Transport",
    "canonical_result_type",
    "canonicalize",
    "normalize_request",
    "parse_body",
    "parse_ext",
    "parse_query",
]
