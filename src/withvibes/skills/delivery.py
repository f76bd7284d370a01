"""Durable injection of skills into a live conversation.

Hosts prune tool results aggressively to save context, but keep ordinary
conversation messages much longer. A skill's instructions therefore travel
as two ordinary messages marked as needing no reply, not as the tool result:

1. a header naming the skill being loaded
2. the skill's base directory followed by its full content

The tool result itself is only a short confirmation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from withvibes.skills.manifest import SkillBundle
from withvibes.skills.registry import SkillRegistry
from withvibes.tools.base import Tool, ToolSchema
from withvibes.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class HostSession(Protocol):
    """Handle on the conversation messages are injected into."""

    async def inject(self, text: str, *, no_reply: bool = True) -> None:
        """Append a message to the conversation.

        With ``no_reply`` the host records the message without asking the
        agent to answer it.
        """
        ...


def header_message(bundle: SkillBundle) -> str:
    return f'The "{bundle.name}" skill is loading\n{bundle.name}'


def body_message(bundle: SkillBundle) -> str:
    return f"Base directory for this skill: {bundle.base_dir}\n\n{bundle.content}"


class SkillDelivery:
    """Loads skills from a registry into host sessions."""

    def __init__(self, registry: SkillRegistry):
        self.registry = registry

    async def invoke(self, bundle_id: str, session: HostSession | None) -> str:
        """Inject a skill into the session.

        Never raises; failures come back as a string the calling agent can
        act on.

        Args:
            bundle_id: Skill name or tool name
            session: Conversation to inject into

        Returns:
            Confirmation or error string
        """
        bundle = self.registry.get(bundle_id)
        if bundle is None:
            return f'Error: Unknown skill "{bundle_id}"'

        if session is None:
            return f'Failed to load skill "{bundle.name}": no active session'

        try:
            await session.inject(header_message(bundle), no_reply=True)
            await session.inject(body_message(bundle), no_reply=True)
        except Exception as e:
            logger.error("Injecting skill '%s' failed: %s", bundle.name, e)
            return f'Failed to load skill "{bundle.name}": {e}'

        logger.debug("Skill '%s' injected", bundle.name)
        return f"Launching skill: {bundle.name}"


def build_skill_tools(
    delivery: SkillDelivery,
    session_provider: Callable[[], HostSession | None],
    registry: ToolRegistry | None = None,
) -> list[Tool]:
    """Expose each skill as a parameterless tool.

    Args:
        delivery: Delivery protocol bound to the skill registry
        session_provider: Returns the session to inject into at call time
        registry: Tool registry to add the tools to

    Returns:
        One tool per skill, in discovery order
    """
    registry = registry or ToolRegistry()
    tools = []

    for bundle in delivery.registry:

        async def load_skill(_bundle_id: str = bundle.name) -> str:
            return await delivery.invoke(_bundle_id, session_provider())

        schema = ToolSchema(name=bundle.tool_name, description=bundle.description, parameters=[])
        tools.append(registry.register(Tool(schema=schema, fn=load_skill)))

    return tools
