"""Data types for the memory write pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    """Author of a message unit."""

    SUBJECT = "subject"  # the human the memory belongs to
    AGENT = "agent"

    @classmethod
    def from_host(cls, role: str | None) -> Role:
        """Map a host role tag ("user", "assistant", ...) to a Role."""
        return cls.SUBJECT if role == "user" else cls.AGENT


@dataclass(frozen=True)
class MessageUnit:
    """One turn's extracted text."""

    role: Role
    text: str


@dataclass(frozen=True)
class DirectWrite:
    """Store the unit as a thread message."""

    unit: MessageUnit

    @property
    def size(self) -> int:
        return len(self.unit.text)


@dataclass(frozen=True)
class SegmentedWrite:
    """Store the unit as ordered graph segments."""

    unit: MessageUnit
    segments: tuple[str, ...]

    @property
    def size(self) -> int:
        return len(self.unit.text)


Route = DirectWrite | SegmentedWrite


@dataclass(frozen=True)
class WriteJob:
    """A routed write scheduled for one subject."""

    subject_id: str
    conversation_id: str
    route: Route
    sequence: int = 0

    @property
    def kind(self) -> str:
        return "direct" if isinstance(self.route, DirectWrite) else "segmented"


class WriteStatus(Enum):
    """Outcome of a write job."""

    DELIVERED = "delivered"
    DROPPED = "dropped"


@dataclass(frozen=True)
class WriteResult:
    """Best-effort outcome of a write job.

    Dropped results carry a reason; nothing is retried.
    """

    status: WriteStatus
    reason: str | None = None
    segments_written: int = 0

    @classmethod
    def delivered(cls, segments_written: int = 0) -> WriteResult:
        return cls(WriteStatus.DELIVERED, segments_written=segments_written)

    @classmethod
    def dropped(cls, reason: str, segments_written: int = 0) -> WriteResult:
        return cls(WriteStatus.DROPPED, reason=reason, segments_written=segments_written)

    @property
    def ok(self) -> bool:
        return self.status is WriteStatus.DELIVERED


@dataclass
class FactRecord:
    """A fact returned by a memory search."""

    fact: str
    valid_from: str | None = None
    valid_to: str | None = None
