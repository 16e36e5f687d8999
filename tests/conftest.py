"""Shared test fixtures for govquery."""

import inspect
from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio

from govquery import ClientConfig, GovQueryClient, TTLCache

BASE_URL = "http://govquery.test"

HEALTHY = {
    "status": "healthy",
    "schemas_loaded": 2,
    "modal_app_running": True,
    "modal_app_name": "govquery-sql",
    "deployment_attempted": False,
}

SCHEMAS = [
    {
        "table_code": "B01001",
        "table_name": "Sex by Age",
        "geography_levels": ["state", "county"],
        "columns": [
            {"name": "geo_id", "type": "TEXT"},
            {"name": "total_population", "type": "INTEGER", "description": "Total"},
        ],
    },
    {
        "table_code": "B19013",
        "table_name": "Median Household Income",
        "geography_levels": ["state"],
        "columns": [{"name": "median_income", "type": "INTEGER"}],
    },
]


class FakeBackend:
    """Routes requests to canned responses and records every call.

    A route holds a queue of responses; each call pops the next one until a
    single response is left, which then answers every later call. A response
    is a ``(status, body)`` tuple (str bodies are sent raw, anything else as
    JSON), an exception to raise, or a callable taking the request.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Any]] = {}
        self.calls: list[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Any) -> None:
        self.routes[(method, path)] = list(responses)

    def count(self, method: str, path: str) -> int:
        return sum(1 for r in self.calls if r.method == method and r.url.path == path)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"detail": "Not Found"})

        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            result = response(request)
            if inspect.isawaitable(result):
                result = await result
            return result

        status, body = response
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


class RecordingSleep:
    """Backoff sleep that records requested delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def cache() -> TTLCache:
    return TTLCache()


@pytest_asyncio.fixture
async def http_client(backend: FakeBackend) -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(backend.handler)) as client:
        yield client


@pytest.fixture
def make_client(
    http_client: httpx.AsyncClient,
    cache: TTLCache,
    sleeper: RecordingSleep,
) -> Callable[..., GovQueryClient]:
    """Factory for clients wired to the fake backend."""

    def _make(**overrides: Any) -> GovQueryClient:
        config = ClientConfig(base_url=BASE_URL, **overrides)
        return GovQueryClient(config, cache=cache, http_client=http_client, sleep=sleeper)

    return _make


@pytest.fixture
def client(make_client: Callable[..., GovQueryClient]) -> GovQueryClient:
    return make_client()


@pytest.fixture
def healthy_payload() -> dict[str, Any]:
    return dict(HEALTHY)


@pytest.fixture
def schemas_payload() -> list[dict[str, Any]]:
    return [dict(s) for s in SCHEMAS]
