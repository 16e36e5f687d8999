"""Tool registry exposing GovQuery operations to agents."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from govquery.exceptions import BackendError, GovQueryError
from govquery.tools.base import ToolDefinition, function_to_tool_definition

if TYPE_CHECKING:
    from govquery.client import GovQueryClient

logger = logging.getLogger(__name__)

BACKEND_UNAVAILABLE = "GovQuery backend is not available"


class ToolRegistry:
    """Registry of GovQuery tools for agent frameworks.

    Tool functions never raise for backend failures; they return
    ``{"success": False, "error": ...}`` so an agent can report the problem.
    """

    def __init__(self, client: GovQueryClient) -> None:
        self._client = client
        self._tools: dict[str, ToolDefinition] = {}
        self._register_default_tools()

    def _register_default_tools(self) -> None:
        self.register(
            name="govquery_convert_query",
            description="Query government census and demographic data using natural "
            "language. Converts a question (e.g. 'What is the population of California?') "
            "into SQL over datasets such as population, income, education and employment.",
            func=self._tool_convert_query,
        )
        self.register(
            name="govquery_list_schemas",
            description="List the available government data tables with their columns. "
            "Use this to find table codes before converting a query.",
            func=self._tool_list_schemas,
        )
        self.register(
            name="govquery_validate_sql",
            description="Check SQL locally for obvious problems (empty statement, unknown "
            "leading keyword, unbalanced parentheses, SELECT without FROM) and format it. "
            "Passing this check does not guarantee the SQL runs.",
            func=self._tool_validate_sql,
        )
        self.register(
            name="govquery_execute_sql",
            description="Execute a SQL query against the government data backend and "
            "return the resulting rows.",
            func=self._tool_execute_sql,
        )

    async def _tool_convert_query(
        self,
        query: str,
        table_codes: list[str] | None = None,
        model_choice: str = "auto",
    ) -> dict[str, Any]:
        """Convert a natural language question to SQL (tool wrapper).

        Args:
            query: Natural language question about government data
            table_codes: Optional table codes to focus on (e.g. ['B01001'])
            model_choice: 'auto', 't5' or 'sqlcoder'
        """
        try:
            response = await self._client.convert_to_sql(
                {
                    "query": query,
                    "table_codes": table_codes,
                    "model_choice": model_choice,
                    "max_tokens": 512,
                    "temperature": 0.1,
                }
            )
        except GovQueryError as e:
            logger.error(f"GovQuery tool error: {e}")
            return {"success": False, "error": _tool_error_message(e), "query": query}

        if response.error:
            return {
                "success": False,
                "error": response.error,
                "query": query,
                "sql_query": response.sql_query,
            }

        return {
            "success": True,
            "query": query,
            "sql_query": response.sql_query,
            "confidence": response.confidence,
            "explanation": response.explanation,
            "model_used": response.model_used,
            "schema_context_used": response.schema_context_used,
            "deployment_status": response.deployment_status,
            "auto_selected": response.auto_selected,
        }

    async def _tool_list_schemas(self) -> dict[str, Any]:
        """List available tables (tool wrapper)."""
        try:
            schemas = await self._client.list_schemas()
        except GovQueryError as e:
            return {"success": False, "error": _tool_error_message(e)}
        return {"success": True, "schemas": [s.model_dump() for s in schemas]}

    def _tool_validate_sql(self, sql: str) -> dict[str, Any]:
        """Validate SQL locally (tool wrapper)."""
        return self._client.validate_sql(sql).model_dump(by_alias=True, exclude_none=True)

    async def _tool_execute_sql(self, sql: str, max_rows: int | None = None) -> dict[str, Any]:
        """Execute SQL after a local pre-check (tool wrapper)."""
        try:
            result = await self._client.execute_sql(sql, max_rows=max_rows, validate=True)
        except GovQueryError as e:
            return {"success": False, "error": _tool_error_message(e), "sql": sql}
        return result.model_dump(exclude_none=True)

    def register(
        self,
        name: str,
        func: Callable[..., Any],
        description: str | None = None,
    ) -> ToolDefinition:
        tool = function_to_tool_definition(func, name=name, description=description)
        self._tools[name] = tool
        return tool

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def list_tools(self) -> list[str]:
        return list(self._tools.keys())

    def get_all(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def to_openai_format(self) -> list[dict[str, Any]]:
        """Export all tools in OpenAI function calling format."""
        return [tool.to_openai_format() for tool in self._tools.values()]

    def to_anthropic_format(self) -> list[dict[str, Any]]:
        """Export all tools in Anthropic Claude format."""
        return [tool.to_anthropic_format() for tool in self._tools.values()]

    def to_dict(self) -> list[dict[str, Any]]:
        return [tool.to_dict() for tool in self._tools.values()]


def _tool_error_message(error: GovQueryError) -> str:
    if isinstance(error, BackendError) and error.unreachable:
        return f"{BACKEND_UNAVAILABLE}: {error.message}"
    return error.message
