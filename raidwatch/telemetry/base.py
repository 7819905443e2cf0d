"""Telemetry port used by the poll loop and the call engine."""

from __future__ import annotations

from typing import Protocol, TypeAlias, runtime_checkable

Labels: TypeAlias = tuple[tuple[str, str], ...]


@runtime_checkable
class TelemetryPort(Protocol):
    """Sink for the monitor's operational numbers.

    Counters track poll cycles, notifications and call attempts; the gauge
    tracks the size of the dedup window; timings record how long each call
    attempt rang.
    """

    def incr(self, name: str, value: int = 1, labels: Labels = ()) -> None:
        """Add ``value`` to counter ``name``, e.g. ``incr("call_attempts", labels=(("outcome", "answered"),))``."""

    def gauge(self, name: str, value: float, labels: Labels = ()) -> None:
        """Record the current value of ``name``."""

    def timing(self, name: str, seconds: float, labels: Labels = ()) -> None:
        """Record one duration sample for ``name``."""


class NoopTelemetry:
    """Drops every sample; the default when no backend is wired in."""

    def incr(self, name: str, value: int = 1, labels: Labels = ()) -> None:
        del name, value, labels

    def gauge(self, name: str, value: float, labels: Labels = ()) -> None:
        del name, value, labels

    def timing(self, name: str, seconds: float, labels: Labels = ()) -> None:
        del name, seconds, labels
