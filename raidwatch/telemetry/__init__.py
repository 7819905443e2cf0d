"""Telemetry backends for raidwatch counters."""

from raidwatch.telemetry.base import NoopTelemetry, TelemetryPort
from raidwatch.telemetry.inmemory import InMemoryTelemetry

__all__ = [
    "InMemoryTelemetry",
    "NoopTelemetry",
    "TelemetryPort",
]
