"""Escalation engine: poll loop, controller state machine and call campaign."""

from raidwatch.escalation.campaign import CallRetryEngine
from raidwatch.escalation.controller import EscalationController, EscalationState
from raidwatch.escalation.monitor import AlertMonitor

__all__ = ["AlertMonitor", "CallRetryEngine", "EscalationController", "EscalationState"]
