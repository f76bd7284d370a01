"""Durable conversation memory backed by Zep Cloud.

Every message the host produces is routed by size and written through a
per-subject ordered queue: short messages go to the conversation thread,
long ones are split into segments for graph ingestion. The remember and
recall tools give the agent explicit access to the same store.

Components:

- :func:`resolve_conversation_id` - Stable thread ID per subject and directory
- :class:`ZepStoreClient` - Idempotent async client for the Zep REST API
- :func:`route` - Direct vs segmented write classification
- :class:`OrderedWriteQueue` - One in-flight write per subject, FIFO
- :class:`MessageIngestor` - Host message hook to write jobs
- :func:`build_memory_tools` - remember/recall tools
"""

from withvibes.memory.identity import resolve_conversation_id
from withvibes.memory.ingest import MessageIngestor
from withvibes.memory.models import (
    DirectWrite,
    FactRecord,
    MessageUnit,
    Role,
    SegmentedWrite,
    WriteJob,
    WriteResult,
    WriteStatus,
)
from withvibes.memory.queue import OrderedWriteQueue
from withvibes.memory.routing import extract_text, route, split_segments
from withvibes.memory.store import StoreClient, ZepStoreClient
from withvibes.memory.tools import build_memory_tools

__all__ = [
    "DirectWrite",
    "FactRecord",
    "MessageIngestor",
    "MessageUnit",
    "OrderedWriteQueue",
    "Role",
    "SegmentedWrite",
    "StoreClient",
    "WriteJob",
    "WriteResult",
    "WriteStatus",
    "ZepStoreClient",
    "build_memory_tools",
    "extract_text",
    "resolve_conversation_id",
    "route",
    "split_segments",
]
