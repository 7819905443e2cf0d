"""Application bootstrap and runtime wiring for the alert monitor."""

from __future__ import annotations

import asyncio
import signal
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from raidwatch.classify import build_classifier
from raidwatch.config.loader import validate_startup
from raidwatch.escalation import AlertMonitor, CallRetryEngine, EscalationController
from raidwatch.storage import CursorStore
from raidwatch.telemetry import InMemoryTelemetry

if TYPE_CHECKING:
    from raidwatch.config.schema import Config
    from raidwatch.core.ports import ClassifierPort, StreamTransportPort
    from raidwatch.providers.base import LLMProvider


def configure_logging(config: "Config", *, verbose: bool = False) -> None:
    """Install the stderr sink and, when enabled, a rotating file sink."""
    level = "DEBUG" if verbose else config.logging.level
    logger.remove()
    logger.add(sys.stderr, level=level)
    if config.logging.file_enabled:
        from raidwatch.utils.helpers import get_state_path

        logger.add(
            get_state_path("logs") / "raidwatch.log",
            level=level,
            rotation=config.logging.rotation,
            retention=config.logging.retention,
            enqueue=True,
        )


@dataclass(slots=True)
class MonitorRuntime:
    """Everything the long-running process needs, wired together."""

    transport: "StreamTransportPort"
    store: CursorStore
    classifier: "ClassifierPort"
    controller: EscalationController
    monitor: AlertMonitor
    telemetry: InMemoryTelemetry
    stop_event: asyncio.Event

    async def run(self) -> None:
        """Connect, poll until stopped, then release the transport."""
        self.store.load()
        await self.transport.connect()
        try:
            await self.monitor.run()
        finally:
            await self.transport.disconnect()
            logger.info("counters {}", self.telemetry.snapshot())

    def request_stop(self, reason: str = "") -> None:
        if not self.stop_event.is_set():
            logger.info("stopping monitor{}", f" ({reason})" if reason else "")
        self.stop_event.set()

    def install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_stop, sig.name)
            except NotImplementedError:
                # Windows event loops lack add_signal_handler; Ctrl+C still raises
                pass


def build_transport(config: "Config") -> "StreamTransportPort":
    from raidwatch.transport.telegram import TelegramTransport

    tg = config.telegram
    return TelegramTransport(
        api_id=tg.api_id,
        api_hash=tg.api_hash,
        session_path=str(tg.session_file),
        channel=tg.channel,
        fetch_limit=tg.fetch_limit,
        connection_retries=tg.connection_retries,
    )


def build_runtime(
    config: "Config",
    *,
    transport: "StreamTransportPort | None" = None,
    provider: "LLMProvider | None" = None,
    store: CursorStore | None = None,
) -> MonitorRuntime:
    """Validate config and assemble the monitor. Raises ConfigurationError."""
    validate_startup(config)

    stop_event = asyncio.Event()
    telemetry = InMemoryTelemetry()
    transport = transport or build_transport(config)
    store = store or CursorStore(
        config.storage.cursor_file,
        max_seen_ids=config.storage.max_seen_ids,
    )
    classifier = build_classifier(config, provider=provider)
    recipient = config.alert.recipient_id.strip()

    campaign = CallRetryEngine(
        transport=transport,
        recipient=recipient,
        max_retries=config.calls.max_retries,
        retry_interval_s=config.calls.retry_interval_s,
        call_timeout_s=config.calls.call_timeout_s,
        telemetry=telemetry,
        stop_event=stop_event,
    )
    controller = EscalationController(
        transport=transport,
        classifier=classifier,
        store=store,
        campaign=campaign,
        recipient=recipient,
        monitored_city=config.alert.monitored_city,
        telemetry=telemetry,
    )
    monitor = AlertMonitor(
        controller=controller,
        poll_interval_s=config.schedule.poll_interval_s,
        stop_event=stop_event,
    )
    return MonitorRuntime(
        transport=transport,
        store=store,
        classifier=classifier,
        controller=controller,
        monitor=monitor,
        telemetry=telemetry,
        stop_event=stop_event,
    )
