"""Tool types handed to the host agent."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any


@dataclass
class ToolParameter:
    """One named argument of a tool."""

    name: str
    type: str  # JSON Schema type
    description: str
    required: bool = True


@dataclass
class ToolSchema:
    """Name, description and arguments the agent sees for a tool."""

    name: str
    description: str
    parameters: list[ToolParameter]


# Tools are async callables returning the text shown to the agent
ToolFunction = Callable[..., Awaitable[str]]


@dataclass
class Tool:
    """A schema bound to the coroutine that implements it."""

    schema: ToolSchema
    fn: ToolFunction

    @property
    def name(self) -> str:
        return self.schema.name

    async def execute(self, **kwargs: Any) -> str:
        return await self.fn(**kwargs)
