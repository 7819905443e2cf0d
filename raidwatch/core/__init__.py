"""Typed core of the alert escalation engine."""

from raidwatch.core.models import (
    CallAttempt,
    CallOutcome,
    CampaignResult,
    Cursor,
    CycleReport,
    StreamItem,
    ThreatAssessment,
    ThreatLevel,
)

__all__ = [
    "CallAttempt",
    "CallOutcome",
    "CampaignResult",
    "Cursor",
    "CycleReport",
    "StreamItem",
    "ThreatAssessment",
    "ThreatLevel",
]
