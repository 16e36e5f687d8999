"""Request execution and retry for the GovQuery backend."""

from govquery.transport.executor import RequestExecutor, join_url
from govquery.transport.outcome import (
    HttpFailure,
    OutcomeKind,
    RequestOutcome,
    Success,
    Timeout,
    TransportFailure,
)
from govquery.transport.retry import RetryOrchestrator, RetryPolicy

__all__ = [
    "RequestExecutor",
    "join_url",
    "RequestOutcome",
    "OutcomeKind",
    "Success",
    "Timeout",
    "TransportFailure",
    "HttpFailure",
    "RetryOrchestrator",
    "RetryPolicy",
]
