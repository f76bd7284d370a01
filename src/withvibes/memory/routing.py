"""Chunking and routing of message text to store write paths.

The thread message API rejects payloads above a hard ceiling, while graph
ingestion accepts larger ones. Text that fits goes straight to the thread;
anything larger is cut into ordered segments below the graph ceiling.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from withvibes.memory.models import DirectWrite, MessageUnit, Role, Route, SegmentedWrite


def extract_text(parts: Iterable[Any]) -> str:
    """Join the text of every part that carries one.

    Parts may be mappings (``{"type": "text", "text": ...}``) or objects with
    a ``text`` attribute. Parts without text (files, tool calls) are ignored.
    """
    texts: list[str] = []
    for part in parts:
        if isinstance(part, Mapping):
            text = part.get("text")
        else:
            text = getattr(part, "text", None)
        if isinstance(text, str):
            texts.append(text)
    return "\n".join(texts)


def split_segments(text: str, segment_limit: int) -> list[str]:
    """Split text into consecutive slices of at most ``segment_limit`` chars.

    Joining the result reproduces ``text`` exactly. No slice is empty.
    """
    if segment_limit < 1:
        raise ValueError(f"segment_limit must be positive, got {segment_limit}")
    return [text[i : i + segment_limit] for i in range(0, len(text), segment_limit)]


def route(
    text: str,
    direct_limit: int,
    segment_limit: int,
    role: Role = Role.AGENT,
) -> Route | None:
    """Classify text as a direct or segmented write.

    Args:
        text: Extracted message text
        direct_limit: Largest text sent as a single thread message
        segment_limit: Largest segment sent through graph ingestion
        role: Author of the text

    Returns:
        DirectWrite, SegmentedWrite, or None when there is nothing to store
    """
    if direct_limit < 1:
        raise ValueError(f"direct_limit must be positive, got {direct_limit}")

    if not text:
        return None

    unit = MessageUnit(role=role, text=text)
    if len(text) <= direct_limit:
        return DirectWrite(unit)

    return SegmentedWrite(unit, tuple(split_segments(text, segment_limit)))
