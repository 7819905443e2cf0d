"""Domain models for the alert escalation core."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class ThreatLevel(Enum):
    """Ordinal severity classes used to pick the response type."""

    NONE = "none"
    YELLOW = "yellow"
    PURPLE = "purple"
    ORANGE = "orange"
    RED = "red"


_CALL_LEVELS = frozenset({ThreatLevel.RED})
_MESSAGE_LEVELS = frozenset({ThreatLevel.RED, ThreatLevel.ORANGE, ThreatLevel.PURPLE})


class CallOutcome(Enum):
    """Result of one call attempt."""

    ANSWERED = "answered"
    TIMED_OUT = "timed_out"
    FAILED_TO_INITIATE = "failed_to_initiate"


@dataclass(frozen=True, slots=True, kw_only=True)
class StreamItem:
    """One inbound post from the monitored channel."""

    id: int
    text: str
    observed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True, slots=True, kw_only=True)
class Cursor:
    """Snapshot of intake progress plus the recent-id dedup window."""

    last_seen_id: int | None = None
    seen_ids: frozenset[int] = frozenset()


@dataclass(frozen=True, slots=True, kw_only=True)
class ThreatAssessment:
    """Classifier verdict for one stream item."""

    level: ThreatLevel
    need_call: bool
    need_message: bool
    confidence: int
    reason: str
    city_mentioned: bool

    def __post_init__(self) -> None:
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"confidence must be within 0..100, got {self.confidence}")
        if self.level in _CALL_LEVELS and not self.need_call:
            raise ValueError(f"level {self.level.value} requires need_call")
        if self.level in _MESSAGE_LEVELS - _CALL_LEVELS and not self.need_message:
            raise ValueError(f"level {self.level.value} requires need_message")
        if self.level not in _MESSAGE_LEVELS and (self.need_call or self.need_message):
            raise ValueError(f"level {self.level.value} must not request a call or message")

    @classmethod
    def for_level(
        cls,
        level: ThreatLevel,
        *,
        confidence: int,
        reason: str,
        city_mentioned: bool,
    ) -> "ThreatAssessment":
        """Build an assessment whose response flags are derived from ``level``."""
        return cls(
            level=level,
            need_call=level in _CALL_LEVELS,
            need_message=level in _MESSAGE_LEVELS,
            confidence=max(0, min(100, int(confidence))),
            reason=reason,
            city_mentioned=city_mentioned,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class CallAttempt:
    """One iteration of a call campaign."""

    attempt_number: int
    outcome: CallOutcome


@dataclass(frozen=True, slots=True, kw_only=True)
class CampaignResult:
    """Outcome of a bounded sequence of call attempts."""

    attempts: tuple[CallAttempt, ...]
    failure_notified: bool = False
    interrupted: bool = False

    @property
    def answered(self) -> bool:
        return any(a.outcome is CallOutcome.ANSWERED for a in self.attempts)

    @property
    def status(self) -> str:
        if self.answered:
            return "success"
        return "interrupted" if self.interrupted else "exhausted"


@dataclass(frozen=True, slots=True, kw_only=True)
class CycleReport:
    """Summary of one poll cycle, returned by the controller."""

    skipped: bool = False
    fetched: int = 0
    messages_sent: int = 0
    escalated_item_id: int | None = None
    campaign: CampaignResult | None = None
