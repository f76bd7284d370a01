"""Withvibes plugin: wires memory and skills into a host agent runtime.

The host drives the lifecycle:

1. :meth:`WithvibesPlugin.start` once, with the project directory
2. :meth:`WithvibesPlugin.on_message` after every produced message
3. tools from :attr:`WithvibesPlugin.tools` when the agent calls them
4. :meth:`WithvibesPlugin.shutdown` before the process exits

Nothing in the write path raises into the host. Without ``ZEP_API_KEY`` the
memory layer is a no-op and only skills are available.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from withvibes.config.loader import load_config, mask_api_key
from withvibes.config.schema import WithvibesConfig
from withvibes.exceptions import ConfigError, StoreError
from withvibes.memory.identity import resolve_conversation_id
from withvibes.memory.ingest import MessageIngestor
from withvibes.memory.models import WriteResult
from withvibes.memory.queue import OrderedWriteQueue
from withvibes.memory.store import StoreClient, ZepStoreClient
from withvibes.memory.tools import build_memory_tools
from withvibes.skills.delivery import HostSession, SkillDelivery, build_skill_tools
from withvibes.skills.registry import SkillRegistry
from withvibes.skills.source import FilesystemSkillSource, SkillSource
from withvibes.tools.base import Tool
from withvibes.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    """Set the package log level from the debug toggle."""
    logging.getLogger("withvibes").setLevel(logging.DEBUG if debug else logging.INFO)


class WithvibesPlugin:
    """Memory and skills for one host process."""

    def __init__(
        self,
        config: WithvibesConfig,
        skills: SkillRegistry | None = None,
        store: StoreClient | None = None,
        directory: str | None = None,
    ):
        """
        Initialize the plugin without touching the network.

        Prefer :meth:`start`, which also discovers skills and prepares the
        subject and conversation in the store.

        Args:
            config: Validated configuration
            skills: Discovered skills (empty registry if None)
            store: Store client; created from config when memory is enabled
            directory: Project directory the host runs in
        """
        self.config = config
        self.directory = directory
        self.skills = skills or SkillRegistry()
        self.delivery = SkillDelivery(self.skills)
        self._registry = ToolRegistry()
        self._session: HostSession | None = None
        self._owns_store = False

        self.store: StoreClient | None = None
        self.queue: OrderedWriteQueue | None = None
        self.ingestor: MessageIngestor | None = None
        self.subject_id = config.memory.subject_id
        self.conversation_id: str | None = None

        memory = config.memory
        if memory.enabled:
            self.conversation_id = resolve_conversation_id(
                memory.subject_id, directory, override=memory.conversation_id
            )
            if store is None:
                store = ZepStoreClient(
                    api_key=memory.api_key or "",
                    base_url=memory.base_url,
                    timeout=memory.timeout,
                )
                self._owns_store = True
            self.store = store
            self.queue = OrderedWriteQueue(
                store,
                blocking=not memory.async_storage,
                warn_depth=memory.queue_warn_depth,
            )
            self.ingestor = MessageIngestor(
                self.queue,
                subject_id=memory.subject_id,
                conversation_id=self.conversation_id,
                direct_limit=memory.direct_limit,
                segment_limit=memory.segment_limit,
            )
            build_memory_tools(
                store,
                memory.subject_id,
                self.conversation_id,
                config=memory,
                registry=self._registry,
            )

        build_skill_tools(self.delivery, lambda: self._session, registry=self._registry)

    @classmethod
    async def start(
        cls,
        directory: str | Path | None = None,
        config: WithvibesConfig | None = None,
        store: StoreClient | None = None,
        skill_source: SkillSource | None = None,
        session: HostSession | None = None,
    ) -> WithvibesPlugin:
        """Load config, discover skills and prepare the memory store.

        Args:
            directory: Project directory the host runs in
            config: Configuration (loaded from file and environment if None)
            store: Store client override
            skill_source: Skill source override (filesystem scan of the
                configured paths if None)
            session: Session skills are injected into

        Returns:
            Started plugin
        """
        if config is None:
            try:
                config = load_config()
            except ConfigError as e:
                logger.error("Invalid configuration (%s). Falling back to defaults.", e)
                config = WithvibesConfig()
        configure_logging(config.debug)
        logger.debug("Plugin loading...")

        directory_str = str(directory) if directory is not None else None

        skills = SkillRegistry()
        if config.skills.enabled:
            if skill_source is None:
                skill_source = FilesystemSkillSource(config.skills.paths, base=directory)
            skills = SkillRegistry.from_source(
                skill_source,
                min_description_length=config.skills.min_description_length,
                on_duplicate=config.skills.on_duplicate,
            )

        if not config.memory.enabled:
            logger.warning("No ZEP_API_KEY found. Memory disabled.")

        plugin = cls(config, skills=skills, store=store, directory=directory_str)
        plugin.bind_session(session)

        if plugin.memory_enabled:
            logger.debug(
                "Initialized for user: %s thread: %s key: %s",
                plugin.subject_id,
                plugin.conversation_id,
                mask_api_key(config.memory.api_key or ""),
            )
            await plugin._ensure_identity()

        return plugin

    async def _ensure_identity(self) -> None:
        """Create subject and conversation, tolerating "already exists"."""
        if self.store is None or self.conversation_id is None:
            return
        try:
            await self.store.ensure_subject(self.subject_id)
            await self.store.ensure_conversation(self.conversation_id, self.subject_id)
        except Exception as e:
            kind = e.classification if isinstance(e, StoreError) else type(e).__name__
            logger.critical(
                "Error setting up user/thread (%s: %s). "
                "Plugin will continue but memory features may not work correctly.",
                kind,
                e,
            )

    @property
    def memory_enabled(self) -> bool:
        return self.ingestor is not None

    @property
    def tools(self) -> dict[str, Tool]:
        """Tools to expose to the agent, keyed by name."""
        return self._registry.all()

    def bind_session(self, session: HostSession | None) -> None:
        """Set the session skills are injected into."""
        self._session = session

    async def invoke_skill(self, bundle_id: str, session: HostSession | None = None) -> str:
        """Load a skill into a session (the bound one by default)."""
        return await self.delivery.invoke(bundle_id, session or self._session)

    async def on_message(self, role: str | None, parts: Iterable[Any]) -> WriteResult | None:
        """Host hook, called once per produced message.

        Returns:
            The write result in blocking mode, otherwise None
        """
        if self.ingestor is None:
            return None
        try:
            return await self.ingestor.ingest(role, parts)
        except Exception as e:
            logger.exception("Error storing message")
            return WriteResult.dropped(type(e).__name__)

    async def shutdown(self) -> None:
        """Flush pending writes and release the store client."""
        if self.queue is not None:
            await self.queue.close()
        if self._owns_store and isinstance(self.store, ZepStoreClient):
            await self.store.close()

    async def __aenter__(self) -> WithvibesPlugin:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()
