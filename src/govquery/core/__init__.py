"""Core types for govquery."""

from govquery.core.types import (
    CacheStats,
    ClientConfig,
    DeployResponse,
    ExecuteRequest,
    ExecuteResponse,
    HealthFeatures,
    HealthResponse,
    QueryRequest,
    QueryResponse,
    RetryMode,
    SchemaColumn,
    SchemaInfo,
    ShallowAST,
    SQLErrorKind,
    SQLParseResult,
)

__all__ = [
    "ClientConfig",
    "RetryMode",
    "QueryRequest",
    "QueryResponse",
    "SchemaColumn",
    "SchemaInfo",
    "HealthFeatures",
    "HealthResponse",
    "ExecuteRequest",
    "ExecuteResponse",
    "DeployResponse",
    "ShallowAST",
    "SQLErrorKind",
    "SQLParseResult",
    "CacheStats",
]
