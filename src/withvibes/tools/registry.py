"""Tool registration."""

import inspect
import logging
import types
from collections.abc import Callable
from typing import Any, Union, get_args, get_origin, get_type_hints

from withvibes.tools.base import Tool, ToolFunction, ToolParameter, ToolSchema

logger = logging.getLogger(__name__)


def _python_type_to_json_schema(py_type: Any) -> str:
    """Convert Python type hint to JSON Schema type.

    Args:
        py_type: Python type annotation

    Returns:
        JSON Schema type string
    """
    # Unwrap Union types (including Optional)
    if get_origin(py_type) in (Union, types.UnionType):
        non_none = [arg for arg in get_args(py_type) if arg is not type(None)]
        if non_none:
            py_type = non_none[0]

    type_map = {
        str: "string",
        int: "integer",
        float: "number",
        bool: "boolean",
        list: "array",
        dict: "object",
    }

    return type_map.get(py_type, "string")


def build_schema(fn: ToolFunction, description: str, name: str | None = None) -> ToolSchema:
    """Introspect a function's signature and docstring into a tool schema.

    Parameter descriptions are taken from ``param_name: description`` lines
    in the docstring.
    """
    hints = get_type_hints(fn)
    sig = inspect.signature(fn)

    parameters: list[ToolParameter] = []
    for param_name, param in sig.parameters.items():
        param_desc = f"Parameter {param_name}"
        if fn.__doc__:
            for line in fn.__doc__.split("\n"):
                line = line.strip()
                if line.startswith(f"{param_name}:"):
                    param_desc = line[len(param_name) + 1 :].strip()
                    break

        parameters.append(
            ToolParameter(
                name=param_name,
                type=_python_type_to_json_schema(hints.get(param_name, str)),
                description=param_desc,
                required=param.default is inspect.Parameter.empty,
            )
        )

    return ToolSchema(name=name or fn.__name__, description=description, parameters=parameters)


class ToolRegistry:
    """Name-indexed collection of tools owned by one plugin instance."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool_obj: Tool) -> Tool:
        """Add a tool. A later registration under the same name replaces it."""
        if tool_obj.name in self._tools:
            logger.warning("Tool '%s' registered twice; replacing", tool_obj.name)
        self._tools[tool_obj.name] = tool_obj
        return tool_obj

    def tool(
        self,
        description: str,
        name: str | None = None,
    ) -> Callable[[ToolFunction], ToolFunction]:
        """Decorator to register an async function as a tool.

        Example:
            @registry.tool(description="Store an important fact in memory")
            async def remember(fact: str) -> str:
                '''fact: The fact to remember'''
                ...
        """

        def decorator(fn: ToolFunction) -> ToolFunction:
            self.register(Tool(schema=build_schema(fn, description, name), fn=fn))
            return fn

        return decorator

    def get(self, name: str) -> Tool:
        """Get a registered tool by name.

        Raises:
            KeyError: If tool not found
        """
        return self._tools[name]

    def all(self) -> dict[str, Tool]:
        """Copy of all registered tools keyed by name."""
        return self._tools.copy()

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
