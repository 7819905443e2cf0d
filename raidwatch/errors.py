"""raidwatch exception hierarchy."""

from __future__ import annotations


class RaidwatchError(Exception):
    """Base exception for all raidwatch errors."""


class TransportError(RaidwatchError):
    """Fetching, sending or calling through the stream transport failed."""


class ClassificationError(RaidwatchError):
    """The AI classification request failed or returned an unusable payload."""


class PersistenceError(RaidwatchError):
    """Writing the cursor state to disk failed."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Failed to persist {path}: {message}")


class ConfigurationError(RaidwatchError):
    """Required configuration is missing or invalid at startup."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__("Missing required configuration: " + ", ".join(self.missing))
