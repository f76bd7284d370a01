"""Pytest configuration and shared fixtures."""

import asyncio

import pytest

from withvibes.config.schema import MemoryConfig, WithvibesConfig
from withvibes.exceptions import StoreError
from withvibes.memory.models import FactRecord


class FakeStore:
    """In-memory StoreClient that records calls in order.

    ``gate`` (an asyncio.Event) holds every write until set, ``delays`` maps
    a text to a sleep before that write completes, and ``fail_on`` maps a
    text to the StoreError raised when writing it.
    """

    def __init__(self):
        self.calls: list[tuple] = []
        self.started: list[str] = []
        self.facts: list[FactRecord] = []
        self.gate: asyncio.Event | None = None
        self.delays: dict[str, float] = {}
        self.fail_on: dict[str, StoreError] = {}
        self.existing: set[str] = set()
        self.ensure_error: Exception | None = None
        self.search_error: StoreError | None = None

    async def _write(self, kind: str, key: str, text: str) -> None:
        self.started.append(text)
        if self.gate is not None:
            await self.gate.wait()
        if text in self.delays:
            await asyncio.sleep(self.delays[text])
        if text in self.fail_on:
            raise self.fail_on[text]
        self.calls.append((kind, key, text))

    async def ensure_subject(self, subject_id):
        if self.ensure_error:
            raise self.ensure_error
        self.calls.append(("ensure_subject", subject_id))
        if subject_id in self.existing:
            return False
        self.existing.add(subject_id)
        return True

    async def ensure_conversation(self, conversation_id, subject_id):
        if self.ensure_error:
            raise self.ensure_error
        self.calls.append(("ensure_conversation", conversation_id, subject_id))
        if conversation_id in self.existing:
            return False
        self.existing.add(conversation_id)
        return True

    async def append_messages(self, conversation_id, units):
        for unit in units:
            await self._write("message", conversation_id, unit.text)

    async def append_fact(self, subject_id, text):
        await self._write("fact", subject_id, text)

    async def search_facts(self, subject_id, query, limit):
        self.calls.append(("search", subject_id, query, limit))
        if self.search_error:
            raise self.search_error
        return self.facts[:limit]

    def written(self) -> list[str]:
        return [call[2] for call in self.calls if call[0] in ("message", "fact")]


class FakeSession:
    """HostSession that records injected messages."""

    def __init__(self):
        self.messages: list[tuple[str, bool]] = []

    async def inject(self, text, *, no_reply=True):
        self.messages.append((text, no_reply))


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def memory_config() -> WithvibesConfig:
    """Config with memory enabled and skills discovery off."""
    config = WithvibesConfig(memory=MemoryConfig(api_key="zep_test_key_1234"))
    config.skills.enabled = False
    return config


VALID_SKILL = """---
name: {name}
description: {description}
license: MIT
allowed-tools: Read, Grep
metadata:
  version: "1.0"
---

# {name}

Use the helper script in scripts/run.sh.
"""


@pytest.fixture
def skill_text():
    """Factory for SKILL.md documents."""

    def make(name: str, description: str = "Builds things carefully and explains the result") -> str:
        return VALID_SKILL.format(name=name, description=description)

    return make
