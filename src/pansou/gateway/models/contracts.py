from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceType(str, Enum):
    """Which backends a search fans out to."""

    TG = "tg"
    PLUGIN = "plugin"
    ALL = "all"

    @classmethod
    def parse(cls, raw: str) -> Optional["SourceType"]:
        try:
            return cls(raw)
        except ValueError:
            return None


class ResultType(str, Enum):
    """Result shapes the search engine knows how to produce."""

    ALL = "all"
    RESULTS = "results"
    MERGED_BY_TYPE = "merged_by_type"


# client-facing shorthand for MERGED_BY_TYPE
RESULT_TYPE_ALIASES: Dict[str, ResultType] = {
    "": ResultType.MERGED_BY_TYPE,
    "merge": ResultType.MERGED_BY_TYPE,
}


class Category(str, Enum):
    """Catalog browse shortcuts accepted by the douban proxy as ``cat``."""

    HOT = "hot"
    MOVIE = "movie"
    TV = "tv"
    VARIETY = "variety"

    @classmethod
    def parse(cls, raw: str) -> Optional["Category"]:
        try:
            return cls(raw)
        except ValueError:
            return None


class SearchRequest(BaseModel):
    """Search parameters in the shape the engine consumes.

    Field aliases are the wire names used by both the query string and the
    JSON body, so one model serves both transports.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    keyword: str = Field(default="", alias="kw")
    channels: Optional[List[str]] = None
    concurrency: int = Field(default=0, alias="conc")
    force_refresh: bool = Field(default=False, alias="refresh")
    result_type: str = Field(default="", alias="res")
    source_type: str = Field(default="", alias="src")
    plugins: Optional[List[str]] = None
    cloud_types: Optional[List[str]] = None
    ext: Optional[Dict[str, Any]] = None

    @field_validator("keyword", "result_type", "source_type", mode="before")
    @classmethod
    def null_to_empty_string(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("concurrency", mode="before")
    @classmethod
    def null_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("force_refresh", mode="before")
    @classmethod
    def null_to_false(cls, value: Any) -> Any:
        return False if value is None else value


class ApiResponse(BaseModel):
    """JSON envelope shared by every structured gateway response."""

    code: int
    message: str
    data: Any = None

    @classmethod
    def success(cls, data: Any) -> "ApiResponse":
        return cls(code=0, message="success", data=data)

    @classmethod
    def failure(cls, code: int, message: str) -> "ApiResponse":
        return cls(code=code, message=message)

    def to_content(self) -> Dict[str, Any]:
        # data is omitted rather than sent as null
        content: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            content["data"] = jsonable_encoder(self.data)
        return content


class HealthStatus(BaseModel):
    status: str = "ok"
    plugins_enabled: bool
    channels: List[str]
    channels_count: int
    plugin_count: Optional[int] = None
    plugins: Optional[List[str]] = None


class TokenVerifyRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    token: Optional[str] = None

    @field_validator("token", mode="before")
    @classmethod
    def coerce_token(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)
