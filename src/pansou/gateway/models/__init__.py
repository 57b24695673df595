from .contracts import (
    RESULT_TYPE_ALIASES,
    ApiResponse,
    Category,
    HealthStatus,
    ResultType,
    SearchRequest,
    SourceType,
    TokenVerifyRequest,
)

__all__ = [
    "ApiResponse",
    "Category",
    "HealthStatus",
    "RESULT_TYPE_ALIASES",
    "ResultType",
    "SearchRequest",
    "SourceType",
    "TokenVerifyRequest",
]
