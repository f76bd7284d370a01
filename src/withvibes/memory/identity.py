"""Stable conversation identity for a subject and working directory."""

import hashlib
import logging
import os

logger = logging.getLogger(__name__)

DIGEST_WIDTH = 8


def directory_digest(origin_path: str) -> str:
    """Short, stable hex digest of a filesystem path."""
    return hashlib.md5(os.fsencode(origin_path)).hexdigest()[:DIGEST_WIDTH]


def resolve_conversation_id(
    subject_id: str,
    origin_path: str | None = None,
    override: str | None = None,
) -> str:
    """Derive the conversation (thread) ID for a subject.

    Returning to the same directory reattaches to the same thread, so no
    lookup table is needed to resume memory.

    Args:
        subject_id: Memory owner
        origin_path: Working directory the host was started in
        override: Explicit thread ID, returned verbatim when set

    Returns:
        Conversation ID
    """
    if override:
        return override

    if not origin_path:
        logger.warning(
            "No directory provided. Using subject-level thread only; "
            "memories from different projects may merge."
        )
        return f"thread-{subject_id}"

    return f"thread-{subject_id}-{directory_digest(origin_path)}"
