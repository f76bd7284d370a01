"""Skill manifest and bundle models."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from withvibes.exceptions import SkillValidationError

DEFAULT_MIN_DESCRIPTION_LENGTH = 20

_FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)(.*)\Z", re.DOTALL)


class SkillManifest(BaseModel):
    """Validated front-matter of a SKILL.md file.

    Pass ``context={"min_description_length": n}`` to ``model_validate`` to
    override the minimum description length.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(
        description="Skill identifier: lowercase letters, digits and hyphens",
        pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$",
    )
    description: str = Field(description="What the skill does and when to use it")
    license: str | None = None
    allowed_tools: list[str] = Field(default_factory=list, alias="allowed-tools")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("description")
    @classmethod
    def _description_length(cls, value: str, info: ValidationInfo) -> str:
        value = value.strip()
        minimum = DEFAULT_MIN_DESCRIPTION_LENGTH
        if info.context and "min_description_length" in info.context:
            minimum = info.context["min_description_length"]
        if len(value) < minimum:
            raise ValueError(f"description must be at least {minimum} characters")
        return value

    @field_validator("allowed_tools", mode="before")
    @classmethod
    def _split_tools(cls, value: Any) -> Any:
        # Accept "Read, Grep" or "Read Grep" as well as a YAML list
        if isinstance(value, str):
            return [tool for tool in re.split(r"[,\s]+", value) if tool]
        return value


def parse_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Split a SKILL.md document into its YAML header and body.

    Raises:
        SkillValidationError: If the header is missing or not a YAML mapping
    """
    match = _FRONT_MATTER.match(text.lstrip("\ufeff"))
    if not match:
        raise SkillValidationError("missing '---' front-matter header")

    header, body = match.groups()
    try:
        data = yaml.safe_load(header)
    except yaml.YAMLError as e:
        raise SkillValidationError(f"invalid YAML front-matter: {e}") from e

    if not isinstance(data, dict):
        raise SkillValidationError("front-matter must be a mapping")

    return data, body.strip()


def tool_name_for(relative_dir: str) -> str:
    """Tool name for a skill directory, e.g. ``zep-memory`` -> ``skills_zep_memory``."""
    return "skills_" + relative_dir.strip("/").replace("/", "_").replace("-", "_")


@dataclass(frozen=True)
class SkillDocument:
    """A raw SKILL.md as read from a source."""

    path: Path
    base_dir: Path
    relative_dir: str  # posix path of base_dir below its root
    text: str


@dataclass(frozen=True)
class SkillBundle:
    """A discovered, validated skill."""

    manifest: SkillManifest
    content: str
    base_dir: Path
    path: Path
    tool_name: str

    @property
    def name(self) -> str:
        return self.manifest.name

    @property
    def description(self) -> str:
        return self.manifest.description
