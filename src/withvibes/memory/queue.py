"""Ordered write queue for memory store writes.

Each subject gets its own lane: an ``asyncio.Queue`` drained by a single
worker task, so at most one write per subject is in flight and writes land
in submission order. Lanes for different subjects run independently.

The queue is owned by one ingestion pipeline and is not meant to be shared
between call sites.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import itertools
import logging
from dataclasses import dataclass, field

from withvibes.exceptions import StoreError
from withvibes.memory.models import DirectWrite, SegmentedWrite, WriteJob, WriteResult
from withvibes.memory.store import StoreClient

logger = logging.getLogger(__name__)


@dataclass
class _Lane:
    """Per-subject FIFO and its worker."""

    subject_id: str
    queue: asyncio.Queue[tuple[WriteJob, asyncio.Future[WriteResult]]] = field(
        default_factory=asyncio.Queue
    )
    task: asyncio.Task[None] | None = None
    in_flight: WriteJob | None = None

    @property
    def pending(self) -> int:
        return self.queue.qsize() + (1 if self.in_flight is not None else 0)


class OrderedWriteQueue:
    """Serializes store writes per subject.

    Two execution modes:

    - blocking: :meth:`enqueue` waits for the job and returns its result
    - non-blocking: :meth:`enqueue` returns immediately; the outcome is only
      logged

    Store failures never propagate out of the queue. A failed job is logged
    with its error class and dropped; nothing is retried.

    Usage:
        queue = OrderedWriteQueue(store, blocking=False)
        await queue.enqueue(job)
        ...
        await queue.close()  # waits for everything queued
    """

    def __init__(self, store: StoreClient, blocking: bool = False, warn_depth: int = 50):
        """
        Initialize the queue.

        Args:
            store: Store client that performs the writes
            blocking: Wait for each job in :meth:`enqueue`
            warn_depth: Queue depth per subject above which a warning is logged
        """
        self.store = store
        self.blocking = blocking
        self.warn_depth = warn_depth
        self._lanes: dict[str, _Lane] = {}
        self._sequence = itertools.count(1)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Jobs queued or in flight across all subjects."""
        return sum(lane.pending for lane in self._lanes.values())

    def depth(self, subject_id: str) -> int:
        """Jobs queued or in flight for one subject."""
        lane = self._lanes.get(subject_id)
        return lane.pending if lane else 0

    def submit(self, job: WriteJob) -> asyncio.Future[WriteResult]:
        """Schedule a job and return a future for its result.

        Never rejects: above ``warn_depth`` a warning is logged and the job
        is queued anyway. Must be called from within a running event loop.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[WriteResult] = loop.create_future()
        job = dataclasses.replace(job, sequence=next(self._sequence))

        if self._closed:
            logger.warning(
                "Write #%d for %s dropped: queue is closed", job.sequence, job.subject_id
            )
            future.set_result(WriteResult.dropped("queue closed"))
            return future

        lane = self._lane(job.subject_id)
        lane.queue.put_nowait((job, future))

        depth = lane.pending
        if depth > self.warn_depth:
            logger.warning(
                "Write queue for %s is %d deep (threshold %d); writes are falling behind",
                job.subject_id,
                depth,
                self.warn_depth,
            )
        elif depth > 1:
            logger.debug("Pending storage operations for %s: %d", job.subject_id, depth)

        return future

    async def enqueue(self, job: WriteJob) -> WriteResult | None:
        """Submit a job according to the execution mode.

        Returns:
            The job's result in blocking mode, None in non-blocking mode
        """
        future = self.submit(job)
        if self.blocking:
            return await future
        return None

    def _lane(self, subject_id: str) -> _Lane:
        lane = self._lanes.get(subject_id)
        if lane is None:
            lane = _Lane(subject_id=subject_id)
            self._lanes[subject_id] = lane
        if lane.task is None or lane.task.done():
            lane.task = asyncio.create_task(self._worker(lane))
        return lane

    async def _worker(self, lane: _Lane) -> None:
        """Drain one subject's lane, one job at a time."""
        while True:
            job, future = await lane.queue.get()
            lane.in_flight = job
            try:
                result = await self._execute(job)
                if not future.done():
                    future.set_result(result)
            finally:
                lane.in_flight = None
                lane.queue.task_done()

    async def _execute(self, job: WriteJob) -> WriteResult:
        route = job.route
        written = 0
        try:
            if isinstance(route, DirectWrite):
                await self.store.append_messages(job.conversation_id, [route.unit])
            elif isinstance(route, SegmentedWrite):
                logger.debug(
                    "Message too long (%d chars), storing %d segments via graph",
                    route.size,
                    len(route.segments),
                )
                for segment in route.segments:
                    await self.store.append_fact(job.subject_id, segment)
                    written += 1
            else:
                raise TypeError(f"Unknown route type: {type(route).__name__}")
        except StoreError as e:
            return self._dropped(job, e.classification, written)
        except Exception as e:
            # Keep the lane alive whatever the store client raises
            return self._dropped(job, type(e).__name__, written)

        logger.debug("Write #%d stored (%s, %d chars)", job.sequence, job.kind, route.size)
        return WriteResult.delivered(segments_written=written)

    def _dropped(self, job: WriteJob, error_class: str, written: int) -> WriteResult:
        reason = error_class
        if isinstance(job.route, SegmentedWrite):
            reason = f"{error_class} after {written}/{len(job.route.segments)} segments"
        logger.error(
            "Error storing message #%d for %s (%s, %d chars): %s",
            job.sequence,
            job.subject_id,
            job.kind,
            job.route.size,
            reason,
        )
        return WriteResult.dropped(reason, segments_written=written)

    async def drain(self) -> None:
        """Wait until every queued and in-flight job has been attempted."""
        while True:
            lanes = [lane for lane in self._lanes.values() if lane.pending]
            if not lanes:
                return
            await asyncio.gather(*(lane.queue.join() for lane in lanes))

    async def close(self) -> None:
        """Drain outstanding jobs, then stop the workers.

        Jobs submitted after close are dropped with reason "queue closed".
        """
        pending = self.pending
        if pending:
            logger.info("Flushing %d pending memory writes", pending)
        await self.drain()
        self._closed = True
        for lane in self._lanes.values():
            if lane.task and not lane.task.done():
                lane.task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await lane.task
