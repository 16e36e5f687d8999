"""Single-attempt HTTP executor for the GovQuery backend."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from govquery.transport.outcome import (
    HttpFailure,
    RequestOutcome,
    Success,
    Timeout,
    TransportFailure,
)

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def join_url(base_url: str, endpoint: str) -> str:
    """Join a base URL and an endpoint path with exactly one slash."""
    base = base_url[:-1] if base_url.endswith("/") else base_url
    path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
    return f"{base}{path}"


def _error_detail(response: httpx.Response) -> str:
    """Extract the ``detail`` message of an error response, if present."""
    fallback = f"HTTP {response.status_code}: {response.reason_phrase}"
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict) and data.get("detail"):
        detail = data["detail"]
        return detail if isinstance(detail, str) else str(detail)
    return fallback


class RequestExecutor:
    """Performs exactly one request attempt and classifies the outcome.

    The timeout is enforced by racing the request against a timer. When the
    timer wins, the in-flight request task is cancelled, which aborts the
    underlying transport call.

    Only ``asyncio.CancelledError`` escapes ``execute``; every other failure
    is returned as a ``RequestOutcome``.
    """

    def __init__(self, base_url: str, http_client: httpx.AsyncClient | None = None) -> None:
        """Initialize the executor.

        Args:
            base_url: Backend base URL
            http_client: Optional client to use; the executor only closes
                clients it created itself
        """
        self._base_url = base_url
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()

    @property
    def base_url(self) -> str:
        return self._base_url

    async def execute(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None = None,
        timeout: float = 30.0,
    ) -> RequestOutcome:
        """Send one request and classify the result.

        Args:
            method: HTTP method
            endpoint: Path relative to the base URL
            body: JSON body, if any
            timeout: Seconds before the attempt is abandoned

        Returns:
            Success, Timeout, TransportFailure or HttpFailure
        """
        url = join_url(self._base_url, endpoint)
        logger.debug(f"{method} {url}")

        try:
            response = await asyncio.wait_for(
                self._client.request(
                    method,
                    url,
                    json=body,
                    headers=JSON_HEADERS,
                    timeout=None,
                ),
                timeout=timeout,
            )
        except TimeoutError:
            return Timeout(timeout)
        except httpx.TimeoutException:
            return Timeout(timeout)
        except httpx.TransportError as e:
            return TransportFailure(str(e) or e.__class__.__name__)

        if not response.is_success:
            return HttpFailure(response.status_code, _error_detail(response))

        try:
            return Success(response.json())
        except ValueError as e:
            return TransportFailure(f"Invalid JSON in response from {url}: {e}")

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client:
            await self._client.aclose()
