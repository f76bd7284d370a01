"""Message ingestion: host message hook to ordered store writes."""

import logging
from collections.abc import Iterable
from typing import Any

from withvibes.memory.models import Role, WriteJob, WriteResult
from withvibes.memory.queue import OrderedWriteQueue
from withvibes.memory.routing import extract_text, route

logger = logging.getLogger(__name__)


class MessageIngestor:
    """Turns each produced message into a write job on the queue.

    Blocking or non-blocking behavior is the queue's; see
    :class:`OrderedWriteQueue`.
    """

    def __init__(
        self,
        queue: OrderedWriteQueue,
        subject_id: str,
        conversation_id: str,
        direct_limit: int = 2500,
        segment_limit: int = 4500,
    ):
        self.queue = queue
        self.subject_id = subject_id
        self.conversation_id = conversation_id
        self.direct_limit = direct_limit
        self.segment_limit = segment_limit

    async def ingest(self, role: str | None, parts: Iterable[Any]) -> WriteResult | None:
        """Store one message.

        Args:
            role: Host role tag ("user" for the subject, anything else is the agent)
            parts: Message parts; only text parts are stored

        Returns:
            The write result in blocking mode. None in non-blocking mode or
            when the message has no text.
        """
        logger.debug("Storing message from role: %s", role)

        text = extract_text(parts)
        routed = route(text, self.direct_limit, self.segment_limit, role=Role.from_host(role))
        if routed is None:
            logger.debug("No text content to store")
            return None

        job = WriteJob(
            subject_id=self.subject_id,
            conversation_id=self.conversation_id,
            route=routed,
        )
        return await self.queue.enqueue(job)
