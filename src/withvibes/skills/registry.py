"""Skill discovery and the read-only skill registry.

Discovery runs once at startup. Each SKILL.md is parsed and validated on its
own: a broken skill is logged and skipped, never preventing the rest from
loading. The resulting registry is immutable.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Literal

from pydantic import ValidationError

from withvibes.exceptions import DuplicateSkillError, SkillValidationError
from withvibes.skills.manifest import (
    DEFAULT_MIN_DESCRIPTION_LENGTH,
    SkillBundle,
    SkillDocument,
    SkillManifest,
    parse_front_matter,
    tool_name_for,
)
from withvibes.skills.source import FilesystemSkillSource, SkillSource

logger = logging.getLogger(__name__)

DuplicatePolicy = Literal["first-wins", "error"]


def load_bundle(
    document: SkillDocument,
    min_description_length: int = DEFAULT_MIN_DESCRIPTION_LENGTH,
) -> SkillBundle:
    """Parse and validate one skill document.

    Raises:
        SkillValidationError: If the front-matter or manifest is invalid
    """
    data, body = parse_front_matter(document.text)

    try:
        manifest = SkillManifest.model_validate(
            data, context={"min_description_length": min_description_length}
        )
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'manifest'}: {err['msg']}"
            for err in e.errors()
        )
        raise SkillValidationError(problems) from e

    dir_name = Path(document.relative_dir).name
    if manifest.name != dir_name:
        raise SkillValidationError(
            f"name '{manifest.name}' does not match directory '{dir_name or '.'}'"
        )

    return SkillBundle(
        manifest=manifest,
        content=body,
        base_dir=document.base_dir,
        path=document.path,
        tool_name=tool_name_for(document.relative_dir),
    )


def load_bundles(
    source: SkillSource,
    min_description_length: int = DEFAULT_MIN_DESCRIPTION_LENGTH,
    on_duplicate: DuplicatePolicy = "first-wins",
) -> tuple[SkillBundle, ...]:
    """Discover every valid skill from a source, in discovery order.

    Args:
        source: Where to read SKILL.md documents from
        min_description_length: Shorter descriptions are rejected
        on_duplicate: "first-wins" skips later duplicates with a warning,
            "error" raises DuplicateSkillError

    Returns:
        Valid bundles, first occurrence of each name only
    """
    bundles: dict[str, SkillBundle] = {}
    tool_names: set[str] = set()

    for document in source.iter_documents():
        try:
            bundle = load_bundle(document, min_description_length)
        except SkillValidationError as e:
            logger.warning("Skipping invalid skill %s: %s", document.path, e)
            continue

        existing = bundles.get(bundle.name)
        if existing is not None or bundle.tool_name in tool_names:
            if on_duplicate == "error":
                raise DuplicateSkillError(
                    f"Skill '{bundle.name}' at {bundle.path} duplicates an earlier skill"
                )
            logger.warning(
                "Duplicate skill '%s' at %s ignored; keeping %s",
                bundle.name,
                bundle.path,
                existing.path if existing else bundle.tool_name,
            )
            continue

        bundles[bundle.name] = bundle
        tool_names.add(bundle.tool_name)
        logger.debug("Discovered skill '%s' (%s)", bundle.name, bundle.tool_name)

    return tuple(bundles.values())


def discover_skills(
    root_directory: str | Path,
    min_description_length: int = DEFAULT_MIN_DESCRIPTION_LENGTH,
    on_duplicate: DuplicatePolicy = "first-wins",
) -> tuple[SkillBundle, ...]:
    """Discover skills below a single directory."""
    return load_bundles(
        FilesystemSkillSource([root_directory]),
        min_description_length=min_description_length,
        on_duplicate=on_duplicate,
    )


class SkillRegistry:
    """Immutable set of discovered skills, looked up by name or tool name."""

    def __init__(self, bundles: tuple[SkillBundle, ...] = ()):
        self._bundles = tuple(bundles)
        self._by_key: dict[str, SkillBundle] = {}
        for bundle in self._bundles:
            self._by_key[bundle.name] = bundle
            self._by_key[bundle.tool_name] = bundle

    @classmethod
    def from_source(
        cls,
        source: SkillSource,
        min_description_length: int = DEFAULT_MIN_DESCRIPTION_LENGTH,
        on_duplicate: DuplicatePolicy = "first-wins",
    ) -> SkillRegistry:
        """Discover skills and build a registry from them."""
        bundles = load_bundles(source, min_description_length, on_duplicate)
        logger.info("Loaded %d skills", len(bundles))
        return cls(bundles)

    @property
    def bundles(self) -> tuple[SkillBundle, ...]:
        return self._bundles

    def get(self, key: str) -> SkillBundle | None:
        """Find a skill by its name or its tool name."""
        return self._by_key.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[SkillBundle]:
        return iter(self._bundles)

    def __len__(self) -> int:
        return len(self._bundles)
