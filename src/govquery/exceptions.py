"""Custom exceptions for govquery.

Errors carry an actionable message plus a context dict, so callers (and
agents consuming ``to_dict()``) can tell "backend unreachable" apart from
"backend rejected the request".
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from govquery.core.types import SQLParseResult


class GovQueryError(Exception):
    """Base exception for all govquery errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict for agent consumption."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(GovQueryError):
    """Client configuration is invalid."""

    pass


# === Backend errors ===


class BackendError(GovQueryError):
    """A call to the remote backend failed after all retry attempts."""

    kind = "backend"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        context = dict(context or {})
        context.setdefault("kind", self.kind)
        super().__init__(message, context)

    @property
    def unreachable(self) -> bool:
        """True when the backend could not be reached at all."""
        return False


class RequestTimeoutError(BackendError):
    """The backend did not answer within the configured timeout."""

    kind = "timeout"

    def __init__(self, timeout: float, endpoint: str | None = None) -> None:
        message = f"Request timeout after {timeout:g}s"
        if endpoint:
            message = f"{message} ({endpoint})"
        super().__init__(message, {"timeout_s": timeout, "endpoint": endpoint})
        self.timeout = timeout
        self.endpoint = endpoint

    @property
    def unreachable(self) -> bool:
        return True


class TransportFailureError(BackendError):
    """Connection-level failure: DNS, refused connection, or malformed JSON."""

    kind = "transport"

    def __init__(self, cause: str, endpoint: str | None = None) -> None:
        super().__init__(cause, {"cause": cause, "endpoint": endpoint})
        self.cause = cause
        self.endpoint = endpoint

    @property
    def unreachable(self) -> bool:
        return True


class HttpStatusError(BackendError):
    """The backend answered with a non-2xx status."""

    kind = "http"

    def __init__(self, status_code: int, detail: str, endpoint: str | None = None) -> None:
        super().__init__(
            detail,
            {"status_code": status_code, "detail": detail, "endpoint": endpoint},
        )
        self.status_code = status_code
        self.detail = detail
        self.endpoint = endpoint


# === Local validation ===


class SQLValidationError(GovQueryError):
    """Local SQL pre-check rejected a statement before it was sent."""

    def __init__(self, result: SQLParseResult) -> None:
        message = f"SQL rejected by local validator: {result.error}"
        super().__init__(
            message,
            {"error": result.error, "error_kind": result.error_kind},
        )
        self.result = result
