"""Configuration loading and validation."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from withvibes.config.schema import WithvibesConfig
from withvibes.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".withvibes" / "withvibes.yaml"

# Environment variable -> (section, field)
ENV_VARS: dict[str, tuple[str | None, str]] = {
    "ZEP_API_KEY": ("memory", "api_key"),
    "ZEP_USER_ID": ("memory", "subject_id"),
    "ZEP_THREAD_ID": ("memory", "conversation_id"),
    "ZEP_ASYNC_STORAGE": ("memory", "async_storage"),
    "ZEP_BASE_URL": ("memory", "base_url"),
    "ZEP_DEBUG": (None, "debug"),
}

_BOOL_FIELDS = {"async_storage", "debug"}
# Toggles where anything other than a true value means off
_PERMISSIVE_FIELDS = {"debug"}
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, value: str, permissive: bool = False) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if permissive or lowered in _FALSE:
        return False
    raise ConfigError(f"Invalid boolean for {name}: {value!r}")


def _apply_environment(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Overlay recognized environment variables on file-based config data."""
    for name, (section, field) in ENV_VARS.items():
        raw = environ.get(name)
        if raw is None:
            continue
        # Empty strings mean "unset" for everything except booleans
        if raw == "" and field not in _BOOL_FIELDS:
            continue

        if field in _BOOL_FIELDS:
            value: Any = _parse_bool(name, raw, permissive=field in _PERMISSIVE_FIELDS)
        else:
            value = raw
        if section is None:
            data[field] = value
        else:
            target = data.setdefault(section, {})
            if not isinstance(target, dict):
                raise ConfigError(f"Config section '{section}' must be a mapping")
            target[field] = value
    return data


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> WithvibesConfig:
    """Load configuration from an optional YAML file and the environment.

    Environment variables (``ZEP_API_KEY``, ``ZEP_USER_ID``, ``ZEP_THREAD_ID``,
    ``ZEP_ASYNC_STORAGE``, ``ZEP_BASE_URL``, ``ZEP_DEBUG``) take precedence
    over values from the file.

    Args:
        path: Path to config file. If None, tries default location.
              If file doesn't exist, only defaults and environment apply.
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Validated configuration object

    Raises:
        ConfigError: If the file or an environment value is invalid
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if environ is None:
        environ = os.environ

    config_data: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e

        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ConfigError(f"Config file {path} must contain a mapping")
            config_data = loaded

    config_data = _apply_environment(config_data, environ)

    try:
        config = WithvibesConfig(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e

    api_key = config.memory.api_key
    if api_key and not api_key.startswith("zep_"):
        logger.warning("ZEP_API_KEY does not look like a Zep key (expected 'zep_' prefix)")

    return config


def mask_api_key(api_key: str) -> str:
    """Mask an API key for display, keeping only the last four characters."""
    if api_key.startswith("zep_"):
        return f"zep_{'•' * max(0, len(api_key) - 8)}{api_key[-4:]}"
    return "•" * len(api_key)
