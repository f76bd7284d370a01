"""Tests for configuration loading and validation."""

import logging
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from withvibes.config.loader import load_config, mask_api_key
from withvibes.config.schema import MemoryConfig, WithvibesConfig
from withvibes.exceptions import ConfigError


def test_default_config():
    """Test that default config has expected values."""
    config = WithvibesConfig()

    assert config.memory.api_key is None
    assert config.memory.enabled is False
    assert config.memory.subject_id == "default-user"
    assert config.memory.conversation_id is None
    assert config.memory.async_storage is True
    assert config.memory.direct_limit == 2500
    assert config.memory.segment_limit == 4500
    assert config.memory.remember_max_length == 2500
    assert config.memory.recall_max_length == 500
    assert config.memory.recall_limit == 5

    assert config.skills.enabled is True
    assert config.skills.min_description_length == 20
    assert config.skills.on_duplicate == "first-wins"
    assert config.debug is False


def test_load_config_nonexistent_returns_defaults(tmp_path: Path):
    config = load_config(tmp_path / "nonexistent.yaml", environ={})

    assert config == WithvibesConfig()


def test_load_config_empty_file_returns_defaults(tmp_path: Path):
    config_path = tmp_path / "empty.yaml"
    config_path.write_text("")

    assert load_config(config_path, environ={}) == WithvibesConfig()


def test_load_config_from_file(tmp_path: Path):
    config_path = tmp_path / "withvibes.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "memory": {"subject_id": "alice", "direct_limit": 1000},
                "skills": {"paths": ["/opt/skills"], "on_duplicate": "error"},
            }
        )
    )

    config = load_config(config_path, environ={})

    assert config.memory.subject_id == "alice"
    assert config.memory.direct_limit == 1000
    assert config.memory.segment_limit == 4500
    assert config.skills.paths == ["/opt/skills"]
    assert config.skills.on_duplicate == "error"


def test_environment_overrides_file(tmp_path: Path):
    config_path = tmp_path / "withvibes.yaml"
    config_path.write_text("memory:\n  subject_id: from-file\n")

    config = load_config(
        config_path,
        environ={
            "ZEP_API_KEY": "zep_abc123",
            "ZEP_USER_ID": "from-env",
            "ZEP_THREAD_ID": "thread-fixed",
            "ZEP_ASYNC_STORAGE": "false",
            "ZEP_DEBUG": "true",
        },
    )

    assert config.memory.api_key == "zep_abc123"
    assert config.memory.enabled is True
    assert config.memory.subject_id == "from-env"
    assert config.memory.conversation_id == "thread-fixed"
    assert config.memory.async_storage is False
    assert config.debug is True


def test_empty_environment_values_are_unset(tmp_path: Path):
    config = load_config(tmp_path / "none.yaml", environ={"ZEP_API_KEY": "", "ZEP_USER_ID": ""})

    assert config.memory.api_key is None
    assert config.memory.subject_id == "default-user"


def test_invalid_boolean(tmp_path: Path):
    with pytest.raises(ConfigError, match="ZEP_ASYNC_STORAGE"):
        load_config(tmp_path / "none.yaml", environ={"ZEP_ASYNC_STORAGE": "maybe"})


@pytest.mark.parametrize("value,expected", [("true", True), ("TRUE", True), ("verbose", False), ("", False)])
def test_debug_toggle_is_permissive(tmp_path: Path, value, expected):
    config = load_config(tmp_path / "none.yaml", environ={"ZEP_DEBUG": value})
    assert config.debug is expected


def test_invalid_yaml(tmp_path: Path):
    config_path = tmp_path / "bad.yaml"
    config_path.write_text("memory: [unclosed\n")

    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(config_path, environ={})


def test_non_mapping_file(tmp_path: Path):
    config_path = tmp_path / "list.yaml"
    config_path.write_text("- a\n- b\n")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(config_path, environ={})


def test_validation_failure(tmp_path: Path):
    config_path = tmp_path / "invalid.yaml"
    config_path.write_text("memory:\n  direct_limit: 0\n")

    with pytest.raises(ConfigError, match="validation failed"):
        load_config(config_path, environ={})


def test_segment_limit_must_fit_payload_ceiling():
    with pytest.raises(ValidationError, match="segment_limit"):
        MemoryConfig(segment_limit=5000, fact_payload_limit=5000)


def test_unexpected_key_format_warns(tmp_path: Path, caplog):
    with caplog.at_level(logging.WARNING, logger="withvibes.config.loader"):
        config = load_config(tmp_path / "none.yaml", environ={"ZEP_API_KEY": "sk-wrong"})

    assert config.memory.enabled is True
    assert "zep_" in caplog.text


def test_mask_api_key():
    assert mask_api_key("zep_abcdefgh1234") == "zep_••••••••1234"
    assert mask_api_key("secret") == "••••••"
    assert "abcdefgh" not in mask_api_key("zep_abcdefgh1234")
