"""Where skill documents come from."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Protocol

from withvibes.skills.manifest import SkillDocument

logger = logging.getLogger(__name__)

SKILL_FILENAME = "SKILL.md"


class SkillSource(Protocol):
    """Yields skill documents in discovery order."""

    def iter_documents(self) -> Iterable[SkillDocument]: ...


class FilesystemSkillSource:
    """Scans directories recursively for SKILL.md files.

    Roots are scanned in the given order; within a root, files are sorted so
    discovery order is stable. Missing roots are ignored.
    """

    def __init__(self, roots: Iterable[str | Path], base: str | Path | None = None):
        """
        Args:
            roots: Skill root directories; ``~`` is expanded
            base: Directory that relative roots resolve against (cwd if None)
        """
        base_path = Path(base) if base is not None else Path.cwd()
        self.roots: list[Path] = []
        for root in roots:
            path = Path(root).expanduser()
            if not path.is_absolute():
                path = base_path / path
            self.roots.append(path)

    def iter_documents(self) -> Iterator[SkillDocument]:
        for root in self.roots:
            if not root.is_dir():
                logger.debug("Skill root %s does not exist, skipping", root)
                continue

            for path in sorted(root.rglob(SKILL_FILENAME)):
                if not path.is_file():
                    continue
                try:
                    text = path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    logger.warning("Failed to read skill %s: %s", path, e)
                    continue

                base_dir = path.parent
                yield SkillDocument(
                    path=path,
                    base_dir=base_dir,
                    relative_dir=base_dir.relative_to(root).as_posix(),
                    text=text,
                )


class InMemorySkillSource:
    """Fixed list of documents, for tests and embedded skills."""

    def __init__(self, documents: Iterable[SkillDocument]):
        self.documents = list(documents)

    @classmethod
    def from_texts(cls, texts: dict[str, str], root: str | Path = "/skills") -> InMemorySkillSource:
        """Build documents from ``{relative_dir: SKILL.md text}``."""
        root_path = Path(root)
        return cls(
            SkillDocument(
                path=root_path / relative_dir / SKILL_FILENAME,
                base_dir=root_path / relative_dir,
                relative_dir=relative_dir,
                text=text,
            )
            for relative_dir, text in texts.items()
        )

    def iter_documents(self) -> Iterator[SkillDocument]:
        return iter(self.documents)
