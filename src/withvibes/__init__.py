"""Withvibes - persistent memory and skills for agent sessions.

Withvibes gives an otherwise stateless chat runtime durable, searchable
memory backed by Zep Cloud knowledge graphs, and injects skill bundles into
a running conversation on demand.

Key modules:

- :mod:`withvibes.plugin` - Plugin lifecycle: startup, message hook, shutdown
- :mod:`withvibes.memory` - Conversation identity, ordered writes, remember/recall tools
- :mod:`withvibes.skills` - Skill discovery, manifest validation and durable injection
- :mod:`withvibes.tools` - Tool schema and registry shared by memory and skills
- :mod:`withvibes.config` - Configuration loading from YAML and environment
"""

__version__ = "0.2.0"
