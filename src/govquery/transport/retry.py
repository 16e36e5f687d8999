"""Retry orchestration with linear backoff."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from govquery.core.types import RetryMode
from govquery.transport.outcome import Failure, HttpFailure, RequestOutcome

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 425, 429})


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts to make and how long to wait between them.

    After failed attempt ``n`` the orchestrator waits ``n * base_delay``
    seconds; there is no wait after the final attempt.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    mode: RetryMode = RetryMode.ALL

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")

    def delay_for(self, attempt: int) -> float:
        return attempt * self.base_delay

    def should_retry(self, outcome: Failure) -> bool:
        """Whether a failed outcome is worth another attempt under this policy."""
        if self.mode == RetryMode.ALL:
            return True
        if isinstance(outcome, HttpFailure):
            return outcome.is_server_error or outcome.status_code in RETRYABLE_STATUS_CODES
        return True


class RetryOrchestrator:
    """Replays a request attempt until it succeeds or the policy gives up.

    Attempts are strictly sequential. Cancelling the task running ``run``
    cancels the in-flight attempt (or the backoff sleep) and skips any
    remaining attempts.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def run(
        self,
        attempt_fn: Callable[[], Awaitable[RequestOutcome]],
        endpoint: str | None = None,
    ) -> Any:
        """Run ``attempt_fn`` under the retry policy.

        Args:
            attempt_fn: Performs one attempt and returns its outcome
            endpoint: Label used in log lines and raised errors

        Returns:
            The payload of the first successful attempt

        Raises:
            BackendError: The last failure, once attempts are exhausted or the
                failure is not retryable
        """
        max_attempts = self._policy.max_attempts
        attempt = 1
        while True:
            outcome = await attempt_fn()
            if outcome.ok:
                return outcome.payload

            if attempt >= max_attempts or not self._policy.should_retry(outcome):
                logger.warning(
                    f"Request to {endpoint or 'backend'} failed after "
                    f"{attempt} attempt(s): {outcome.describe()}"
                )
                raise outcome.to_error(endpoint)

            delay = self._policy.delay_for(attempt)
            logger.warning(
                f"Request to {endpoint or 'backend'} failed, retrying "
                f"({attempt}/{max_attempts}) in {delay:g}s: {outcome.describe()}"
            )
            await self._sleep(delay)
            attempt += 1
