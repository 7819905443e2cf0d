"""Poll-cycle state machine deciding between a text notice and a call campaign."""

from __future__ import annotations

from enum import Enum

from loguru import logger

from raidwatch.core.models import CampaignResult, CycleReport, StreamItem, ThreatAssessment
from raidwatch.core.ports import ClassifierPort, CursorStorePort, StreamTransportPort
from raidwatch.errors import PersistenceError, TransportError
from raidwatch.escalation.campaign import CallRetryEngine
from raidwatch.escalation.messages import format_critical_alert, format_warning
from raidwatch.telemetry.base import NoopTelemetry, TelemetryPort
from raidwatch.utils.helpers import truncate


class EscalationState(Enum):
    IDLE = "idle"
    ESCALATING = "escalating"


class EscalationController:
    """Runs one poll cycle per ``tick``.

    While a critical response is in progress the controller is ``ESCALATING``
    and every tick is skipped without fetching. Items are marked seen as soon
    as they are read, before classification, so a post whose notification
    fails is not retried on the next tick.
    """

    def __init__(
        self,
        *,
        transport: StreamTransportPort,
        classifier: ClassifierPort,
        store: CursorStorePort,
        campaign: CallRetryEngine,
        recipient: str,
        monitored_city: str,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        self._transport = transport
        self._classifier = classifier
        self._store = store
        self._campaign = campaign
        self._recipient = recipient
        self._city = monitored_city
        self._telemetry = telemetry or NoopTelemetry()
        self._state = EscalationState.IDLE

    @property
    def state(self) -> EscalationState:
        return self._state

    @property
    def is_escalating(self) -> bool:
        return self._state is EscalationState.ESCALATING

    async def tick(self) -> CycleReport:
        """Run one poll cycle: fetch, dedupe, classify, respond."""
        if self.is_escalating:
            logger.info("escalation in progress, skipping poll cycle")
            self._telemetry.incr("poll_skipped_escalating")
            return CycleReport(skipped=True)

        self._telemetry.incr("poll_cycles")
        items = await self._read_new_items()
        self._telemetry.gauge("seen_ids", len(self._store.cursor.seen_ids))
        if not items:
            logger.debug("no new posts")
            return CycleReport()

        logger.info("new posts: {}", len(items))
        self._telemetry.incr("items_fetched", len(items))
        assessments = await self._classifier.classify(items)

        messages_sent = 0
        for item, assessment in zip(items, assessments, strict=True):
            logger.info(
                "post {}: {} ({}%) {} | {}",
                item.id,
                assessment.level.value,
                assessment.confidence,
                assessment.reason,
                truncate(item.text.replace("\n", " "), 100),
            )
            if assessment.need_call:
                campaign = await self._escalate(item, assessment)
                # one critical response per cycle; later posts are already marked seen
                return CycleReport(
                    fetched=len(items),
                    messages_sent=messages_sent,
                    escalated_item_id=item.id,
                    campaign=campaign,
                )
            if assessment.need_message and await self._send(format_warning(item, assessment, self._city), "warning"):
                messages_sent += 1

        return CycleReport(fetched=len(items), messages_sent=messages_sent)

    # ── Internals ────────────────────────────────────────────────────

    async def _read_new_items(self) -> list[StreamItem]:
        cursor = self._store.cursor
        try:
            fetched = await self._transport.fetch_since(cursor.last_seen_id)
        except TransportError as e:
            logger.error("fetch failed: {}", e)
            return []

        fresh: list[StreamItem] = []
        for item in sorted(fetched, key=lambda i: i.id):
            if cursor.last_seen_id is not None and item.id <= cursor.last_seen_id:
                continue
            if self._store.is_seen(item.id):
                continue
            fresh.append(item)
            self._mark_read(item.id)
        return fresh

    def _mark_read(self, item_id: int) -> None:
        for persist in (self._store.record_seen, self._store.advance_cursor_to):
            try:
                persist(item_id)
            except PersistenceError as e:
                # in-memory state has still advanced; a restart may re-read this post
                logger.error("cursor not persisted for post {}: {}", item_id, e)

    async def _escalate(self, item: StreamItem, assessment: ThreatAssessment) -> CampaignResult:
        self._state = EscalationState.ESCALATING
        logger.warning("critical threat in post {}, starting escalation", item.id)
        try:
            await self._send(format_critical_alert(item, assessment, self._city), "critical")
            result = await self._campaign.run()
            logger.info("escalation finished  status={} attempts={}", result.status, len(result.attempts))
            return result
        finally:
            self._state = EscalationState.IDLE

    async def _send(self, text: str, kind: str) -> bool:
        try:
            sent = await self._transport.send_direct_message(self._recipient, text)
        except TransportError as e:
            logger.error("{} notice could not be sent: {}", kind, e)
            sent = False
        if sent:
            self._telemetry.incr("notifications_sent", labels=(("kind", kind),))
        else:
            self._telemetry.incr("notification_failures", labels=(("kind", kind),))
        return sent
