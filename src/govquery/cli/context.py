"""CLI context management for client configuration and shared state."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from govquery.cache.backend import TTLCache
from govquery.client import GovQueryClient
from govquery.core.types import ClientConfig

T = TypeVar("T")


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Holds the resolved client configuration and output preferences. Each
    command gets a fresh client with its own cache, since nothing outlives a
    single CLI invocation.
    """

    config: ClientConfig
    json_output: bool

    def make_client(self) -> GovQueryClient:
        return GovQueryClient(self.config, cache=TTLCache())

    def run(self, operation: Callable[[GovQueryClient], Awaitable[T]]) -> T:
        """Run an async client operation to completion.

        Args:
            operation: Receives an open client and returns an awaitable

        Returns:
            Whatever the operation returns
        """

        async def _run() -> T:
            async with self.make_client() as client:
                return await operation(client)

        return asyncio.run(_run())
