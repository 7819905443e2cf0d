"""Process-local telemetry backend.

The running monitor logs a counter summary on shutdown; tests read the same
numbers to check what a cycle or campaign did.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import TypeAlias

from raidwatch.telemetry.base import Labels

MetricKey: TypeAlias = tuple[str, Labels]


def _render(key: MetricKey) -> str:
    name, labels = key
    if not labels:
        return name
    return name + "{" + ",".join(f"{k}={v}" for k, v in labels) + "}"


@dataclass
class InMemoryTelemetry:
    """Counters, gauges and timings keyed by ``(name, labels)``."""

    counters: Counter[MetricKey] = field(default_factory=Counter)
    gauges: dict[MetricKey, float] = field(default_factory=dict)
    timings: defaultdict[MetricKey, list[float]] = field(default_factory=lambda: defaultdict(list))

    def incr(self, name: str, value: int = 1, labels: Labels = ()) -> None:
        self.counters[(name, tuple(labels))] += value

    def gauge(self, name: str, value: float, labels: Labels = ()) -> None:
        self.gauges[(name, tuple(labels))] = float(value)

    def timing(self, name: str, seconds: float, labels: Labels = ()) -> None:
        self.timings[(name, tuple(labels))].append(float(seconds))

    # ── Inspection ───────────────────────────────────────────────────

    def get_counter(self, name: str, labels: Labels = ()) -> int:
        """Value of one exact series; 0 when it was never incremented."""
        return self.counters[(name, tuple(labels))]

    def total(self, name: str) -> int:
        """Sum of ``name`` across all label sets."""
        return sum(v for (metric, _), v in self.counters.items() if metric == name)

    def get_gauge(self, name: str, labels: Labels = ()) -> float | None:
        return self.gauges.get((name, tuple(labels)))

    def get_timings(self, name: str, labels: Labels = ()) -> list[float]:
        return list(self.timings.get((name, tuple(labels)), ()))

    def snapshot(self) -> dict[str, int]:
        """Counters as ``{"name{label=value}": count}`` for the shutdown log line."""
        return {_render(key): value for key, value in sorted(self.counters.items())}

    def reset(self) -> None:
        self.counters.clear()
        self.gauges.clear()
        self.timings.clear()
