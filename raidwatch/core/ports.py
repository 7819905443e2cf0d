"""Port interfaces consumed by the escalation core."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from raidwatch.core.models import CallOutcome, Cursor, StreamItem, ThreatAssessment


class StreamTransportPort(Protocol):
    """Channel reader plus direct message and voice call sender."""

    async def connect(self) -> None:
        """Open the transport session."""

    async def disconnect(self) -> None:
        """Release the transport session."""

    async def fetch_since(self, last_seen_id: int | None) -> list[StreamItem]:
        """Return items newer than ``last_seen_id`` in source order (newest first)."""

    async def send_direct_message(self, recipient: str, text: str) -> bool:
        """Send ``text`` to ``recipient`` and report success."""

    async def place_call(self, recipient: str, *, timeout_s: float) -> CallOutcome:
        """Ring ``recipient``, wait up to ``timeout_s`` for pickup, always hang up."""


class ClassifierPort(Protocol):
    """Batch threat classification contract."""

    async def classify(self, items: Sequence[StreamItem]) -> list[ThreatAssessment]:
        """Return one assessment per item, index-aligned with ``items``."""


class CursorStorePort(Protocol):
    """Durable intake bookkeeping."""

    def load(self) -> Cursor:
        """Load persisted state and return a snapshot."""

    def record_seen(self, item_id: int) -> None:
        """Mark one id as seen and persist."""

    def advance_cursor_to(self, item_id: int) -> None:
        """Move ``last_seen_id`` forward and persist."""

    def is_seen(self, item_id: int) -> bool:
        """Return True when ``item_id`` is inside the dedup window."""

    @property
    def cursor(self) -> Cursor:
        """Current in-memory snapshot."""
