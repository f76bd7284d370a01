"""Skills: discoverable bundles of instructions loaded into a session on demand.

A skill is a directory holding a ``SKILL.md`` with YAML front-matter
(``name``, ``description``, optional ``license``, ``allowed-tools`` and
``metadata``) followed by free-form instructions. Skills are discovered once
at startup and exposed as ``skills_<name>`` tools; invoking one injects its
content into the conversation as ordinary messages so the host does not
prune it with other tool output.
"""

from withvibes.skills.delivery import HostSession, SkillDelivery, build_skill_tools
from withvibes.skills.manifest import SkillBundle, SkillDocument, SkillManifest, parse_front_matter
from withvibes.skills.registry import SkillRegistry, discover_skills, load_bundles
from withvibes.skills.source import FilesystemSkillSource, InMemorySkillSource, SkillSource

__all__ = [
    "FilesystemSkillSource",
    "HostSession",
    "InMemorySkillSource",
    "SkillBundle",
    "SkillDelivery",
    "SkillDocument",
    "SkillManifest",
    "SkillRegistry",
    "SkillSource",
    "build_skill_tools",
    "discover_skills",
    "load_bundles",
    "parse_front_matter",
]
