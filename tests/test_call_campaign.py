import asyncio

import pytest

from raidwatch.core.models import CallOutcome
from raidwatch.errors import TransportError
from raidwatch.escalation import CallRetryEngine
from raidwatch.escalation.messages import CALL_FAILURE_TEXT
from raidwatch.telemetry import InMemoryTelemetry


class CallingTransport:
    """Records calls and messages; call outcomes are scripted per attempt."""

    def __init__(self, outcomes=(), *, send_ok: bool = True) -> None:
        self.outcomes = list(outcomes)
        self.send_ok = send_ok
        self.calls: list[tuple[str, float]] = []
        self.sent: list[tuple[str, str]] = []
        self.on_call = None

    async def place_call(self, recipient: str, *, timeout_s: float) -> CallOutcome:
        self.calls.append((recipient, timeout_s))
        if self.on_call is not None:
            self.on_call()
        outcome = self.outcomes.pop(0) if self.outcomes else CallOutcome.TIMED_OUT
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def send_direct_message(self, recipient: str, text: str) -> bool:
        self.sent.append((recipient, text))
        return self.send_ok


def _engine(transport: CallingTransport, **overrides) -> CallRetryEngine:
    options = dict(
        transport=transport,
        recipient="42",
        max_retries=3,
        retry_interval_s=0,
        call_timeout_s=40,
    )
    options.update(overrides)
    return CallRetryEngine(**options)


async def test_unanswered_campaign_sends_one_failure_notice() -> None:
    transport = CallingTransport()
    telemetry = InMemoryTelemetry()

    result = await _engine(transport, telemetry=telemetry).run()

    assert len(transport.calls) == 3
    assert transport.calls[0] == ("42", 40.0)
    assert transport.sent == [("42", CALL_FAILURE_TEXT)]
    assert result.status == "exhausted"
    assert result.failure_notified is True
    assert [a.attempt_number for a in result.attempts] == [1, 2, 3]
    assert telemetry.get_counter("call_attempts", (("outcome", "timed_out"),)) == 3
    assert telemetry.get_counter("campaigns_exhausted") == 1
    assert telemetry.get_counter("notifications_sent", (("kind", "call_failure"),)) == 1
    assert len(telemetry.get_timings("call_attempt_seconds", (("outcome", "timed_out"),))) == 3


async def test_answer_stops_the_campaign() -> None:
    transport = CallingTransport([CallOutcome.TIMED_OUT, CallOutcome.ANSWERED])

    result = await _engine(transport).run()

    assert len(transport.calls) == 2
    assert transport.sent == []
    assert result.answered
    assert result.status == "success"
    assert result.failure_notified is False


async def test_first_attempt_answered() -> None:
    transport = CallingTransport([CallOutcome.ANSWERED])

    result = await _engine(transport).run()

    assert len(result.attempts) == 1
    assert transport.sent == []


async def test_failed_initiation_uses_an_attempt() -> None:
    transport = CallingTransport([TransportError("PEER_ID_INVALID"), CallOutcome.ANSWERED])

    result = await _engine(transport).run()

    assert [a.outcome for a in result.attempts] == [CallOutcome.FAILED_TO_INITIATE, CallOutcome.ANSWERED]


async def test_every_initiation_fails() -> None:
    transport = CallingTransport([TransportError("x")] * 3)

    result = await _engine(transport).run()

    assert len(result.attempts) == 3
    assert all(a.outcome is CallOutcome.FAILED_TO_INITIATE for a in result.attempts)
    assert len(transport.sent) == 1


async def test_undelivered_failure_notice_is_reported() -> None:
    transport = CallingTransport(send_ok=False)
    telemetry = InMemoryTelemetry()

    result = await _engine(transport, max_retries=1, telemetry=telemetry).run()

    assert result.failure_notified is False
    assert telemetry.get_counter("notification_failures", (("kind", "call_failure"),)) == 1


async def test_stop_event_ends_campaign_between_attempts() -> None:
    stop = asyncio.Event()
    transport = CallingTransport()
    transport.on_call = stop.set

    result = await _engine(transport, retry_interval_s=30, stop_event=stop).run()

    assert len(transport.calls) == 1
    assert result.interrupted
    assert result.status == "interrupted"
    assert transport.sent == [("42", CALL_FAILURE_TEXT)]


async def test_retry_interval_waits_without_stop_event() -> None:
    transport = CallingTransport()

    result = await asyncio.wait_for(_engine(transport, max_retries=2, retry_interval_s=0.01).run(), timeout=5)

    assert len(result.attempts) == 2


def test_max_retries_must_be_positive() -> None:
    with pytest.raises(ValueError):
        _engine(CallingTransport(), max_retries=0)
