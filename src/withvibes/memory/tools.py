"""User-facing memory tools: remember and recall.

Results are shown to the user inside the conversation, so every failure is
returned as a descriptive string instead of raised.
"""

from __future__ import annotations

import logging
from typing import Any

from withvibes.config.schema import MemoryConfig
from withvibes.exceptions import StoreError
from withvibes.memory.models import FactRecord, MessageUnit, Role
from withvibes.memory.store import StoreClient
from withvibes.tools.base import Tool
from withvibes.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

MEMORY_PREFIX = "[MEMORY] "


def validate_text(value: Any, label: str, max_length: int) -> tuple[str | None, str | None]:
    """Validate a tool argument locally, before any network call.

    Returns:
        Tuple of (trimmed value, error message); exactly one is None
    """
    if not isinstance(value, str):
        return None, f"Error: {label} is required and must be a string"

    trimmed = value.strip()
    if not trimmed:
        return None, f"Error: {label} cannot be empty"

    if len(trimmed) > max_length:
        return None, (
            f"Error: {label} is too long ({len(trimmed)} characters, max {max_length})"
        )

    return trimmed, None


def format_facts(facts: list[FactRecord]) -> str:
    """Render search results as a bullet list."""
    lines = []
    for record in facts:
        line = f"- {record.fact}"
        if record.valid_from and record.valid_to:
            line += f" (valid {record.valid_from} to {record.valid_to})"
        elif record.valid_from:
            line += f" (since {record.valid_from})"
        lines.append(line)
    return f"Found {len(facts)} relevant memories:\n" + "\n".join(lines)


def _failure(action: str, error: Exception) -> str:
    error_type = error.classification if isinstance(error, StoreError) else "Unknown Error"
    return (
        f"Failed to {action}: {error_type} - {error}. "
        "Check ZEP_API_KEY and network connection."
    )


def build_memory_tools(
    store: StoreClient,
    subject_id: str,
    conversation_id: str,
    config: MemoryConfig | None = None,
    registry: ToolRegistry | None = None,
) -> list[Tool]:
    """Create the remember and recall tools bound to one subject.

    Args:
        store: Store client
        subject_id: Memory owner searched by recall
        conversation_id: Thread that remember appends to
        config: Length limits and result count
        registry: Registry to add the tools to (a private one if omitted)

    Returns:
        The two tools, remember first
    """
    config = config or MemoryConfig()
    registry = registry or ToolRegistry()

    @registry.tool(description="Store an important fact in memory")
    async def remember(fact: str) -> str:
        """Store a fact.

        fact: The fact to remember
        """
        trimmed, error = validate_text(fact, "Fact", config.remember_max_length)
        if error:
            return error

        try:
            await store.append_messages(
                conversation_id,
                [MessageUnit(role=Role.SUBJECT, text=f"{MEMORY_PREFIX}{trimmed}")],
            )
        except Exception as e:
            logger.error("remember failed for %s: %s", subject_id, type(e).__name__)
            return _failure("store memory", e)

        return f"Remembered: {trimmed}"

    @registry.tool(description="Search memories for relevant facts")
    async def recall(query: str) -> str:
        """Search facts.

        query: What to search for
        """
        trimmed, error = validate_text(query, "Query", config.recall_max_length)
        if error:
            return error

        try:
            facts = await store.search_facts(subject_id, trimmed, config.recall_limit)
        except Exception as e:
            logger.error("recall failed for %s: %s", subject_id, type(e).__name__)
            return _failure("search memory", e)

        if not facts:
            return "No relevant memories for this query."
        return format_facts(facts)

    return [registry.get("remember"), registry.get("recall")]
