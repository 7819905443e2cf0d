"""Bounded call campaign: retried voice calls with a final text fallback."""

from __future__ import annotations

import asyncio
import time

from loguru import logger

from raidwatch.core.models import CallAttempt, CallOutcome, CampaignResult
from raidwatch.core.ports import StreamTransportPort
from raidwatch.errors import TransportError
from raidwatch.escalation.messages import CALL_FAILURE_TEXT
from raidwatch.telemetry.base import NoopTelemetry, TelemetryPort


class CallRetryEngine:
    """Ring the recipient up to ``max_retries`` times until someone answers.

    Each attempt is bounded by ``call_timeout_s`` inside the transport, and
    attempts are separated by ``retry_interval_s``. A failure to even start a
    call still uses up one attempt. When every attempt goes unanswered a
    single failure notice is sent as a direct message.

    ``stop_event`` lets process shutdown end the campaign between attempts;
    the attempt already in progress always runs to completion.
    """

    def __init__(
        self,
        *,
        transport: StreamTransportPort,
        recipient: str,
        max_retries: int,
        retry_interval_s: float,
        call_timeout_s: float,
        failure_text: str = CALL_FAILURE_TEXT,
        telemetry: TelemetryPort | None = None,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        self._transport = transport
        self._recipient = recipient
        self._max_retries = int(max_retries)
        self._retry_interval_s = max(0.0, float(retry_interval_s))
        self._call_timeout_s = float(call_timeout_s)
        self._failure_text = failure_text
        self._telemetry = telemetry or NoopTelemetry()
        self._stop_event = stop_event

    async def run(self) -> CampaignResult:
        logger.info("call campaign started  recipient={} max_retries={}", self._recipient, self._max_retries)
        attempts: list[CallAttempt] = []

        for number in range(1, self._max_retries + 1):
            logger.info("call attempt {}/{}", number, self._max_retries)
            started = time.monotonic()
            outcome = await self._attempt()
            attempts.append(CallAttempt(attempt_number=number, outcome=outcome))
            labels = (("outcome", outcome.value),)
            self._telemetry.incr("call_attempts", labels=labels)
            self._telemetry.timing("call_attempt_seconds", time.monotonic() - started, labels=labels)

            if outcome is CallOutcome.ANSWERED:
                logger.info("call answered on attempt {}", number)
                self._telemetry.incr("campaigns_answered")
                return CampaignResult(attempts=tuple(attempts))

            if number < self._max_retries:
                logger.info("call not answered, next attempt in {}s", self._retry_interval_s)
                if await self._wait_or_stop(self._retry_interval_s):
                    logger.warning("shutdown requested, call campaign stopped after attempt {}", number)
                    notified = await self._notify_failure()
                    return CampaignResult(
                        attempts=tuple(attempts),
                        failure_notified=notified,
                        interrupted=True,
                    )

        logger.warning("all {} call attempts went unanswered", self._max_retries)
        self._telemetry.incr("campaigns_exhausted")
        notified = await self._notify_failure()
        return CampaignResult(attempts=tuple(attempts), failure_notified=notified)

    async def _attempt(self) -> CallOutcome:
        try:
            return await self._transport.place_call(self._recipient, timeout_s=self._call_timeout_s)
        except TransportError as e:
            logger.error("call could not be placed: {}", e)
            return CallOutcome.FAILED_TO_INITIATE

    async def _wait_or_stop(self, seconds: float) -> bool:
        """Sleep between attempts. Returns True when shutdown was requested."""
        if self._stop_event is None:
            await asyncio.sleep(seconds)
            return False
        if self._stop_event.is_set():
            return True
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except TimeoutError:
            return False
        return True

    async def _notify_failure(self) -> bool:
        try:
            sent = await self._transport.send_direct_message(self._recipient, self._failure_text)
        except TransportError as e:
            logger.error("failure notice could not be sent: {}", e)
            sent = False
        if sent:
            logger.info("failure notice sent to {}", self._recipient)
            self._telemetry.incr("notifications_sent", labels=(("kind", "call_failure"),))
        else:
            self._telemetry.incr("notification_failures", labels=(("kind", "call_failure"),))
        return sent
