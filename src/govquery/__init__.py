"""govquery - Resilient client for a natural-language-to-SQL backend.

Wraps the GovQuery REST backend with a TTL response cache, per-attempt
timeouts with linear-backoff retries, and a local heuristic SQL pre-check.

Example:
    import asyncio

    from govquery import GovQueryClient

    async def main():
        async with GovQueryClient(base_url="http://localhost:8000") as client:
            if not await client.is_available():
                return
            schemas = await client.list_schemas()  # cached for 5 minutes
            response = await client.convert_to_sql(
                {"query": "Median income by state", "table_codes": ["B19013"]}
            )
            check = client.validate_sql(response.sql_query)  # local, no network
            if check.valid:
                rows = await client.execute_sql(response.sql_query, max_rows=20)

    asyncio.run(main())
"""

from govquery.cache import TTLCache, build_key, default_cache
from govquery.client import GovQueryClient
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
from govquery.exceptions import (
    BackendError,
    ConfigurationError,
    GovQueryError,
    HttpStatusError,
    RequestTimeoutError,
    SQLValidationError,
    TransportFailureError,
)
from govquery.sql import SQLValidator, format_sql, parse_sql, validate_sql
from govquery.tools import ToolDefinition, ToolRegistry
from govquery.transport import RequestExecutor, RetryOrchestrator, RetryPolicy

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "GovQueryClient",
    "ClientConfig",
    "RetryMode",
    # Cache
    "TTLCache",
    "default_cache",
    "build_key",
    "CacheStats",
    # Transport
    "RequestExecutor",
    "RetryOrchestrator",
    "RetryPolicy",
    # Payloads
    "QueryRequest",
    "QueryResponse",
    "SchemaColumn",
    "SchemaInfo",
    "HealthFeatures",
    "HealthResponse",
    "ExecuteRequest",
    "ExecuteResponse",
    "DeployResponse",
    # SQL validation
    "SQLValidator",
    "SQLParseResult",
    "ShallowAST",
    "SQLErrorKind",
    "parse_sql",
    "format_sql",
    "validate_sql",
    # Tools
    "ToolDefinition",
    "ToolRegistry",
    # Exceptions
    "GovQueryError",
    "ConfigurationError",
    "BackendError",
    "RequestTimeoutError",
    "TransportFailureError",
    "HttpStatusError",
    "SQLValidationError",
]
