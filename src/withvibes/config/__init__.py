"""Configuration for withvibes.

Settings come from an optional YAML file (``~/.withvibes/withvibes.yaml``)
overlaid with ``ZEP_*`` environment variables. Everything has a default, so
the plugin runs with no file at all; without ``ZEP_API_KEY`` the memory
layer becomes a no-op.
"""

from withvibes.config.loader import load_config, mask_api_key
from withvibes.config.schema import MemoryConfig, SkillsConfig, WithvibesConfig

__all__ = ["MemoryConfig", "SkillsConfig", "WithvibesConfig", "load_config", "mask_api_key"]
