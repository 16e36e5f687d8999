"""Tools for agent integrations."""

from govquery.tools.base import ToolDefinition, function_to_tool_definition
from govquery.tools.registry import ToolRegistry

__all__ = [
    "ToolDefinition",
    "ToolRegistry",
    "function_to_tool_definition",
]
