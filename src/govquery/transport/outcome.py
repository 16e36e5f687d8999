"""Classified result of a single backend request attempt."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from govquery.exceptions import (
    BackendError,
    HttpStatusError,
    RequestTimeoutError,
    TransportFailureError,
)


class OutcomeKind(StrEnum):
    """Tags of the RequestOutcome union."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"
    HTTP_ERROR = "http_error"


@dataclass(frozen=True, slots=True)
class Success:
    payload: Any
    kind: OutcomeKind = OutcomeKind.SUCCESS

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Timeout:
    timeout_s: float
    kind: OutcomeKind = OutcomeKind.TIMEOUT

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return f"timed out after {self.timeout_s:g}s"

    def to_error(self, endpoint: str | None = None) -> BackendError:
        return RequestTimeoutError(self.timeout_s, endpoint)


@dataclass(frozen=True, slots=True)
class TransportFailure:
    cause: str
    kind: OutcomeKind = OutcomeKind.TRANSPORT_ERROR

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        return f"transport failure: {self.cause}"

    def to_error(self, endpoint: str | None = None) -> BackendError:
        return TransportFailureError(self.cause, endpoint)


@dataclass(frozen=True, slots=True)
class HttpFailure:
    status_code: int
    detail: str
    kind: OutcomeKind = OutcomeKind.HTTP_ERROR

    @property
    def ok(self) -> bool:
        return False

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500

    def describe(self) -> str:
        return f"HTTP {self.status_code}: {self.detail}"

    def to_error(self, endpoint: str | None = None) -> BackendError:
        return HttpStatusError(self.status_code, self.detail, endpoint)


Failure = Timeout | TransportFailure | HttpFailure
RequestOutcome = Success | Failure
