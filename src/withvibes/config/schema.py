"""Pydantic models for withvibes configuration."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator


class MemoryConfig(BaseModel):
    """Memory store and write pipeline configuration."""

    api_key: str | None = Field(
        default=None,
        description="Zep Cloud API key. Memory is disabled when unset",
    )
    subject_id: str = Field(
        default="default-user",
        description="Memory owner. Each subject has an isolated knowledge graph",
        min_length=1,
    )
    conversation_id: str | None = Field(
        default=None,
        description="Explicit thread ID, skips derivation from the working directory",
    )
    async_storage: bool = Field(
        default=True,
        description="Queue writes in the background instead of awaiting each one",
    )
    base_url: str = Field(
        default="https://api.getzep.com/api/v2",
        description="Zep API base URL",
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds", gt=0)
    direct_limit: int = Field(
        default=2500,
        description="Largest message (characters) sent through the thread message API",
        ge=1,
    )
    segment_limit: int = Field(
        default=4500,
        description="Largest segment (characters) sent through the graph ingestion API",
        ge=1,
    )
    fact_payload_limit: int = Field(
        default=5000,
        description="Hard payload ceiling of the graph ingestion API",
        ge=1,
    )
    queue_warn_depth: int = Field(
        default=50,
        description="Queue depth per subject above which a warning is logged",
        ge=1,
    )
    remember_max_length: int = Field(default=2500, description="Maximum fact length", ge=1)
    recall_max_length: int = Field(default=500, description="Maximum query length", ge=1)
    recall_limit: int = Field(
        default=5, description="Number of facts returned by recall", ge=1, le=50
    )

    @model_validator(mode="after")
    def _check_limits(self) -> "MemoryConfig":
        if self.segment_limit >= self.fact_payload_limit:
            raise ValueError(
                f"segment_limit ({self.segment_limit}) must be below "
                f"fact_payload_limit ({self.fact_payload_limit})"
            )
        return self

    @property
    def enabled(self) -> bool:
        """Memory features are active only with an API key."""
        return bool(self.api_key)


class SkillsConfig(BaseModel):
    """Skill discovery configuration."""

    enabled: bool = Field(default=True, description="Discover and expose skills")
    paths: list[str] = Field(
        default=[
            "~/.config/opencode/skills",
            "~/.opencode/skills",
            ".opencode/skills",
        ],
        description="Skill roots. Relative paths resolve against the project directory",
    )
    min_description_length: int = Field(
        default=20,
        description="Skills with shorter descriptions are rejected",
        ge=1,
    )
    on_duplicate: Literal["first-wins", "error"] = Field(
        default="first-wins",
        description="'first-wins' skips later duplicates, 'error' fails discovery",
    )


class WithvibesConfig(BaseModel):
    """Root configuration schema for withvibes."""

    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    skills: SkillsConfig = Field(default_factory=SkillsConfig)
    debug: bool = Field(default=False, description="Verbose logging")
