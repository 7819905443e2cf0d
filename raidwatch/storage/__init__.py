"""Persistence for intake progress."""

from raidwatch.storage.cursor_store import CursorStore

__all__ = ["CursorStore"]
