"""Core types for govquery.

All types mirror the JSON payloads exchanged with the GovQuery backend and are
JSON-serializable for agent consumption.
"""

from __future__ import annotations

import os
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from govquery.exceptions import ConfigurationError

DEFAULT_BASE_URL = "http://localhost:8000"


class RetryMode(StrEnum):
    """Which failed outcomes the retry orchestrator replays."""

    ALL = "all"  # Every failure class, including 4xx
    TRANSIENT = "transient"  # Timeouts, transport failures, 5xx and 429 only

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid retry mode values."""
        return [m.value for m in cls]


class SQLErrorKind(StrEnum):
    """Reasons the local SQL validator rejects a statement."""

    EMPTY_INPUT = "empty_input"
    INVALID_KEYWORD = "invalid_keyword"
    UNBALANCED_PARENTHESES = "unbalanced_parentheses"
    MISSING_REQUIRED_CLAUSE = "missing_required_clause"


# === Client configuration ===


class ClientConfig(BaseModel):
    """Connection settings for a GovQueryClient.

    Frozen: a client keeps the same configuration for its whole lifetime.
    """

    base_url: str = Field(default=DEFAULT_BASE_URL, description="Backend base URL")
    timeout_ms: int = Field(default=30_000, gt=0, description="Per-attempt timeout")
    retry_attempts: int = Field(default=3, ge=1, description="Total attempts per call")
    retry_base_delay_ms: int = Field(
        default=1_000, ge=0, description="Linear backoff unit between attempts"
    )
    retry_mode: RetryMode = Field(default=RetryMode.ALL, description="Retry classification")

    model_config = ConfigDict(frozen=True)

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("base_url must not be empty")
        return value.strip()

    @property
    def timeout(self) -> float:
        """Per-attempt timeout in seconds."""
        return self.timeout_ms / 1000

    @property
    def retry_base_delay(self) -> float:
        """Backoff unit in seconds."""
        return self.retry_base_delay_ms / 1000

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientConfig:
        """Build a config from environment variables.

        Priority:
        1. Explicit keyword overrides (``None`` values are ignored)
        2. GOVQUERY_BACKEND_URL / GOVQUERY_TIMEOUT_MS / GOVQUERY_RETRY_ATTEMPTS
        3. Defaults

        Raises:
            ConfigurationError: If an environment value is not a valid number, or
                the resolved settings fail validation
        """
        values: dict[str, Any] = {}
        if env_url := os.getenv("GOVQUERY_BACKEND_URL"):
            values["base_url"] = env_url
        for env_name, field_name in (
            ("GOVQUERY_TIMEOUT_MS", "timeout_ms"),
            ("GOVQUERY_RETRY_ATTEMPTS", "retry_attempts"),
        ):
            raw = os.getenv(env_name)
            if raw:
                try:
                    values[field_name] = int(raw)
                except ValueError as e:
                    raise ConfigurationError(
                        f"{env_name} must be an integer, got '{raw}'",
                        {"variable": env_name, "value": raw},
                    ) from e
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**values)
        except ValidationError as e:
            fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
            raise ConfigurationError(
                f"Invalid client configuration: {', '.join(fields)}",
                {"fields": fields, "errors": [err["msg"] for err in e.errors()]},
            ) from e


# === Backend payloads ===


class _Payload(BaseModel):
    """Backend payload; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")


class QueryRequest(_Payload):
    """Natural-language query to convert to SQL."""

    query: str = Field(..., min_length=1, description="Natural language question")
    table_codes: list[str] | None = Field(default=None, description="Tables to focus on")
    model_choice: str | None = Field(default=None, description="'auto', 't5' or 'sqlcoder'")
    max_tokens: int | None = None
    temperature: float | None = None


class QueryResponse(_Payload):
    """Result of a natural-language to SQL conversion."""

    sql_query: str = ""
    confidence: float | None = None
    explanation: str | None = None
    error: str | None = None
    schema_context_used: list[str] | None = None
    model_used: str | None = None
    prompt_length: int | None = None
    auto_selected: bool | None = None
    deployment_status: str | None = None


class SchemaColumn(_Payload):
    """A column of a backend table schema."""

    name: str
    type: str
    description: str | None = None


class SchemaInfo(_Payload):
    """Descriptor of one dataset table known to the backend."""

    table_code: str
    table_name: str
    geography_levels: list[str] = Field(default_factory=list)
    columns: list[SchemaColumn] = Field(default_factory=list)


class HealthFeatures(_Payload):
    """Feature flags reported by the health endpoint."""

    auto_deployment: bool = False
    cold_start_fallback: bool = False
    smart_error_recovery: bool = False
    auto_stop: str = ""


class HealthResponse(_Payload):
    """Backend health/status payload."""

    status: str
    schemas_loaded: int | None = None
    modal_app_running: bool | None = None
    modal_app_name: str | None = None
    deployment_attempted: bool | None = None
    features: HealthFeatures | None = None
    error: str | None = None

    @property
    def is_healthy(self) -> bool:
        return self.status != "unhealthy"

    @classmethod
    def unhealthy(cls, error: str) -> HealthResponse:
        """Sentinel returned when the health check itself failed."""
        return cls(
            status="unhealthy",
            schemas_loaded=0,
            modal_app_running=False,
            modal_app_name="",
            deployment_attempted=False,
            error=error,
        )


class ExecuteRequest(_Payload):
    """SQL execution request."""

    sql: str
    max_rows: int | None = None


class ExecuteResponse(_Payload):
    """Result of executing SQL on the backend."""

    success: bool
    row_count: int | None = None
    columns: list[str] | None = None
    rows: list[Any] | None = None
    execution_time_ms: float | None = None
    error: str | None = None


class DeployResponse(_Payload):
    """Result of asking the backend to deploy its model app."""

    status: str
    message: str = ""
    app_name: str | None = None


# === SQL validation ===


class ShallowAST(BaseModel):
    """Flat record of clause boundaries, not an expression tree."""

    statement_type: str = "SELECT"
    columns: list[str] = Field(default_factory=list)
    from_: str | None = Field(default=None, alias="from")
    where: str | None = None
    group_by: str | None = None
    order_by: str | None = None
    limit: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class SQLParseResult(BaseModel):
    """Outcome of the local SQL pre-check.

    Rejections are returned as data (``valid=False``), never raised.
    ``ast`` and ``formatted_sql`` are only set for accepted statements.
    """

    valid: bool
    formatted_sql: str | None = None
    ast: ShallowAST | None = None
    error: str | None = None
    error_kind: SQLErrorKind | None = None
    warnings: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


# === Cache ===


class CacheStats(BaseModel):
    """Counters for a TTL cache."""

    entries: int = 0
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0
