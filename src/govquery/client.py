"""GovQuery API client.

Composes the TTL cache, the retry orchestrator and the request executor
behind named operations that mirror the backend's REST endpoints.

Example:
    async with GovQueryClient(base_url="http://localhost:8000") as client:
        health = await client.health_check()
        response = await client.convert_to_sql({"query": "Population of Texas"})
        result = await client.execute_sql(response.sql_query, max_rows=10, validate=True)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from govquery.cache import keys
from govquery.cache.backend import TTLCache, default_cache
from govquery.core.types import (
    ClientConfig,
    DeployResponse,
    ExecuteRequest,
    ExecuteResponse,
    HealthResponse,
    QueryRequest,
    QueryResponse,
    SchemaInfo,
    SQLParseResult,
)
from govquery.exceptions import GovQueryError, SQLValidationError, TransportFailureError
from govquery.sql.validator import SQLValidator
from govquery.transport.executor import RequestExecutor
from govquery.transport.retry import RetryOrchestrator, RetryPolicy

logger = logging.getLogger(__name__)

HEALTH_TTL = 30.0
HEALTH_ERROR_TTL = 5.0
SCHEMA_TTL = 300.0

T = TypeVar("T")

_schema_list = TypeAdapter(list[SchemaInfo])


def _decode(validate: Callable[[Any], T], payload: Any, endpoint: str) -> T:
    """Validate a 2xx payload; a body of the wrong shape is a transport failure."""
    try:
        return validate(payload)
    except ValidationError as e:
        raise TransportFailureError(
            f"Unexpected payload from {endpoint}: {e.error_count()} validation error(s)",
            endpoint,
        ) from e


class GovQueryClient:
    """Client for the GovQuery query-conversion backend.

    Health checks and schema lookups are served from the cache when a live
    entry exists. Conversions, executions and deployments always go to the
    backend. Every backend call runs under the retry policy derived from the
    client's ``ClientConfig``.

    Concurrent identical calls that both miss the cache each reach the
    backend; no request de-duplication is done.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        cache: TTLCache | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
        **overrides: Any,
    ) -> None:
        """Initialize the client.

        Args:
            config: Full configuration; when omitted it is read from the
                environment via ``ClientConfig.from_env``
            cache: Cache to use (defaults to the process-wide cache)
            http_client: Optional httpx client, e.g. with a mock transport
            sleep: Optional backoff sleep, for tests
            **overrides: Config fields that override ``config`` or the
                environment (e.g. ``base_url=...``, ``timeout_ms=...``)
        """
        if config is None:
            config = ClientConfig.from_env(**overrides)
        elif overrides:
            updates = {k: v for k, v in overrides.items() if v is not None}
            config = ClientConfig(**{**config.model_dump(), **updates})
        self._config = config
        self._cache = cache if cache is not None else default_cache
        self._executor = RequestExecutor(config.base_url, http_client=http_client)
        policy = RetryPolicy(
            max_attempts=config.retry_attempts,
            base_delay=config.retry_base_delay,
            mode=config.retry_mode,
        )
        self._retry = (
            RetryOrchestrator(policy, sleep=sleep) if sleep else RetryOrchestrator(policy)
        )
        self._validator = SQLValidator()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def cache(self) -> TTLCache:
        return self._cache

    async def _request(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request under the retry policy and return the JSON payload."""
        return await self._retry.run(
            lambda: self._executor.execute(
                method, endpoint, body=body, timeout=self._config.timeout
            ),
            endpoint=f"{method} {endpoint}",
        )

    # === Cached operations ===

    async def health_check(self) -> HealthResponse:
        """Get backend health.

        Never raises: a failed check returns an ``unhealthy`` status, cached
        briefly so that repeated polling does not hammer a down backend.
        """
        cache_key = keys.health_key()
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        try:
            payload = await self._request("GET", "/")
            result = HealthResponse.model_validate(payload)
        except GovQueryError as e:
            logger.error(f"Health check failed: {e}")
            result = HealthResponse.unhealthy(str(e))
            self._cache.set(cache_key, result, HEALTH_ERROR_TTL)
            return result
        except ValueError as e:
            logger.error(f"Health check returned an unexpected payload: {e}")
            result = HealthResponse.unhealthy(f"Invalid health payload: {e}")
            self._cache.set(cache_key, result, HEALTH_ERROR_TTL)
            return result

        self._cache.set(cache_key, result, HEALTH_TTL)
        return result

    async def is_available(self) -> bool:
        """Whether the most recent (possibly cached) health check was healthy."""
        health = await self.health_check()
        return health.is_healthy

    async def list_schemas(self) -> list[SchemaInfo]:
        """List the table schemas the backend knows about."""
        cache_key = keys.schemas_key()
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        payload = await self._request("GET", "/schemas")
        result = _decode(_schema_list.validate_python, payload, "GET /schemas")
        self._cache.set(cache_key, result, SCHEMA_TTL)
        return result

    async def get_schema(self, table_code: str) -> SchemaInfo:
        """Get a single table schema by its code."""
        cache_key = keys.schema_key(table_code)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        endpoint = f"/schema/{quote(table_code, safe='')}"
        payload = await self._request("GET", endpoint)
        result = _decode(SchemaInfo.model_validate, payload, f"GET {endpoint}")
        self._cache.set(cache_key, result, SCHEMA_TTL)
        return result

    # === Live operations ===

    async def convert_to_sql(self, request: QueryRequest | dict[str, Any]) -> QueryResponse:
        """Convert a natural-language question to SQL."""
        return await self._convert("/", request)

    async def convert_to_sql_simple(
        self, request: QueryRequest | dict[str, Any]
    ) -> QueryResponse:
        """Convert via the backend's simplified conversion path."""
        return await self._convert("/simple", request)

    async def _convert(
        self, endpoint: str, request: QueryRequest | dict[str, Any]
    ) -> QueryResponse:
        query_request = QueryRequest.model_validate(request)
        payload = await self._request(
            "POST", endpoint, body=query_request.model_dump(exclude_none=True)
        )
        return _decode(QueryResponse.model_validate, payload, f"POST {endpoint}")

    async def execute_sql(
        self,
        sql: str,
        max_rows: int | None = None,
        validate: bool = False,
    ) -> ExecuteResponse:
        """Execute SQL on the backend.

        Args:
            sql: SQL to run
            max_rows: Optional row cap
            validate: Run the local validator first and refuse rejected SQL

        Raises:
            SQLValidationError: If ``validate`` is set and the SQL is rejected
            BackendError: If the backend call fails after all retries
        """
        if validate:
            check = self.validate_sql(sql)
            if not check.valid:
                raise SQLValidationError(check)

        request = ExecuteRequest(sql=sql, max_rows=max_rows)
        payload = await self._request(
            "POST", "/execute", body=request.model_dump(exclude_none=True)
        )
        return _decode(ExecuteResponse.model_validate, payload, "POST /execute")

    async def parse_sql(self, sql: str) -> SQLParseResult:
        """Validate SQL remotely with the backend's parser."""
        payload = await self._request("POST", "/parse-sql", body={"sql": sql})
        return _decode(SQLParseResult.model_validate, payload, "POST /parse-sql")

    def validate_sql(self, sql: str) -> SQLParseResult:
        """Validate SQL locally. Heuristic only; see ``govquery.sql.validator``."""
        return self._validator.parse(sql)

    async def deploy(self) -> DeployResponse:
        """Ask the backend to deploy its model app."""
        payload = await self._request("POST", "/deploy")
        return _decode(DeployResponse.model_validate, payload, "POST /deploy")

    # === Cache control ===

    def invalidate(self, key: str) -> bool:
        """Drop one cached response. Returns whether it was cached."""
        return self._cache.delete(key)

    def clear_cache(self) -> None:
        self._cache.clear()

    # === Lifecycle ===

    async def aclose(self) -> None:
        await self._executor.aclose()

    async def __aenter__(self) -> GovQueryClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"GovQueryClient(base_url={self._config.base_url!r}, "
            f"timeout_ms={self._config.timeout_ms}, "
            f"retry_attempts={self._config.retry_attempts})"
        )
