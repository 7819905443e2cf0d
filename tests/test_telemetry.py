from raidwatch.telemetry import InMemoryTelemetry, NoopTelemetry, TelemetryPort


def test_backends_satisfy_port() -> None:
    assert isinstance(InMemoryTelemetry(), TelemetryPort)
    assert isinstance(NoopTelemetry(), TelemetryPort)


def test_labelled_series_are_separate() -> None:
    telemetry = InMemoryTelemetry()
    telemetry.incr("call_attempts", labels=(("outcome", "timed_out"),))
    telemetry.incr("call_attempts", labels=(("outcome", "timed_out"),))
    telemetry.incr("call_attempts", labels=(("outcome", "answered"),))

    assert telemetry.get_counter("call_attempts", (("outcome", "timed_out"),)) == 2
    assert telemetry.get_counter("call_attempts") == 0
    assert telemetry.total("call_attempts") == 3


def test_snapshot_renders_labels() -> None:
    telemetry = InMemoryTelemetry()
    telemetry.incr("poll_cycles", 4)
    telemetry.incr("notifications_sent", labels=(("kind", "warning"),))

    assert telemetry.snapshot() == {"notifications_sent{kind=warning}": 1, "poll_cycles": 4}


def test_gauge_timing_and_reset() -> None:
    telemetry = InMemoryTelemetry()
    telemetry.gauge("seen_ids", 12)
    telemetry.timing("call_attempt_seconds", 1.5)

    assert telemetry.get_gauge("seen_ids") == 12.0
    assert telemetry.get_timings("call_attempt_seconds") == [1.5]

    telemetry.reset()

    assert telemetry.get_gauge("seen_ids") is None
    assert telemetry.snapshot() == {}
    assert telemetry.get_timings("call_attempt_seconds") == []
