"""Tool model shared by memory and skills.

Tools are async functions returning a string, described by a JSON Schema so
the host can expose them for function calling. Each plugin instance owns a
:class:`~withvibes.tools.registry.ToolRegistry`.
"""

from withvibes.tools.base import Tool, ToolParameter, ToolSchema
from withvibes.tools.registry import ToolRegistry

__all__ = ["Tool", "ToolParameter", "ToolRegistry", "ToolSchema"]
