"""Exception hierarchy for withvibes."""

from __future__ import annotations


class WithvibesError(Exception):
    """Base class for all withvibes errors."""


class ConfigError(WithvibesError):
    """Configuration loading or validation error."""


class StoreError(WithvibesError):
    """A request to the memory store failed.

    Attributes:
        status: HTTP status code, or None for transport-level failures
        network: True when no response was received at all
    """

    def __init__(self, message: str, status: int | None = None, network: bool = False):
        super().__init__(message)
        self.message = message
        self.status = status
        self.network = network

    @property
    def classification(self) -> str:
        """Short error class suitable for logs and user-facing strings."""
        if self.status is not None:
            return f"API Error {self.status}"
        if self.network:
            return "Network Error"
        return "Unknown Error"

    @property
    def is_conflict(self) -> bool:
        """Whether this is an "already exists" response."""
        return self.status == 409 or "already exists" in self.message.lower()


class SkillError(WithvibesError):
    """Base class for skill discovery errors."""


class SkillValidationError(SkillError):
    """A skill manifest failed validation."""


class DuplicateSkillError(SkillError):
    """Two skills declared the same name."""
