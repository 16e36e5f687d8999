"""Tool definitions for agent integrations.

Client operations are described to LLM agents as JSON Schema tools. The
schema is derived from the wrapper function's signature; the summary line and
``Args:`` section of its docstring become the tool and parameter descriptions.
"""

from __future__ import annotations

import inspect
import re
import types
import typing
from collections.abc import Callable
from typing import Any, get_args, get_origin, get_type_hints

from pydantic import BaseModel

_SCALAR_SCHEMAS: dict[Any, dict[str, Any]] = {
    str: {"type": "string"},
    int: {"type": "integer"},
    float: {"type": "number"},
    bool: {"type": "boolean"},
    list: {"type": "array"},
    dict: {"type": "object"},
    type(None): {"type": "null"},
}

_ARG_LINE_RE = re.compile(r"^\s+(\w+):\s*(.+)$")


class ToolDefinition(BaseModel):
    """A client operation described for agent consumption.

    ``function`` may be sync or async; ``invoke`` awaits it when needed.
    """

    name: str
    description: str
    parameters: dict[str, Any]
    function: Callable[..., Any] | None = None

    model_config = {"arbitrary_types_allowed": True}

    async def invoke(self, **kwargs: Any) -> Any:
        if self.function is None:
            raise ValueError(f"Tool '{self.name}' has no function bound")
        result = self.function(**kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }

    def to_openai_format(self) -> dict[str, Any]:
        """OpenAI function calling format."""
        return {"type": "function", "function": self.to_dict()}

    def to_anthropic_format(self) -> dict[str, Any]:
        """Anthropic tool-use format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }


def python_type_to_json_schema(python_type: Any) -> dict[str, Any]:
    """Map a Python annotation to a JSON Schema fragment.

    ``X | None`` collapses to the schema of ``X``; unknown types fall back
    to string.
    """
    origin = get_origin(python_type)
    args = get_args(python_type)

    if origin in (typing.Union, types.UnionType):
        members = [a for a in args if a is not type(None)]
        if len(members) == 1:
            return python_type_to_json_schema(members[0])
        return {"anyOf": [python_type_to_json_schema(a) for a in members]}

    if origin is list:
        schema: dict[str, Any] = {"type": "array"}
        if args:
            schema["items"] = python_type_to_json_schema(args[0])
        return schema

    if origin is dict:
        return {"type": "object"}

    return dict(_SCALAR_SCHEMAS.get(python_type, {"type": "string"}))


def _split_docstring(doc: str | None) -> tuple[str, dict[str, str]]:
    """Return the summary paragraph and per-argument descriptions."""
    if not doc:
        return "", {}

    text = inspect.cleandoc(doc)
    summary, _, rest = text.partition("\n\n")
    arg_docs: dict[str, str] = {}
    in_args = False
    for line in rest.splitlines():
        if line.strip() == "Args:":
            in_args = True
            continue
        if in_args:
            match = _ARG_LINE_RE.match(line)
            if match:
                arg_docs[match.group(1)] = match.group(2).strip()
            elif line and not line[0].isspace():
                in_args = False
    return " ".join(summary.split()), arg_docs


def function_to_tool_definition(
    func: Callable[..., Any],
    name: str | None = None,
    description: str | None = None,
) -> ToolDefinition:
    """Build a ToolDefinition from a function signature and docstring.

    Args:
        func: Function, coroutine function or bound method to expose
        name: Override function name
        description: Override description (uses the docstring summary if not provided)

    Returns:
        ToolDefinition for the function
    """
    summary, arg_docs = _split_docstring(func.__doc__)
    tool_name = name or func.__name__
    hints = get_type_hints(func)

    properties: dict[str, Any] = {}
    required: list[str] = []
    for param_name, param in inspect.signature(func).parameters.items():
        if param_name == "self":
            continue

        param_schema = python_type_to_json_schema(hints.get(param_name, str))
        if param_name in arg_docs:
            param_schema["description"] = arg_docs[param_name]
        if param.default is inspect.Parameter.empty:
            required.append(param_name)
        elif param.default is not None:
            param_schema["default"] = param.default
        properties[param_name] = param_schema

    parameters: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        parameters["required"] = required

    return ToolDefinition(
        name=tool_name,
        description=(description or summary or f"Execute {tool_name}").strip(),
        parameters=parameters,
        function=func,
    )
