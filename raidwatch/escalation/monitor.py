"""Fixed-cadence scheduling loop around the escalation controller."""

from __future__ import annotations

import asyncio

from loguru import logger

from raidwatch.escalation.controller import EscalationController


class AlertMonitor:
    """Ticks the controller immediately, then every ``poll_interval_s``.

    The wait is re-armed only after the previous cycle (campaign included)
    has fully completed, so cycles never overlap. ``stop()`` ends the loop at
    the next wait point.
    """

    def __init__(
        self,
        *,
        controller: EscalationController,
        poll_interval_s: float,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        self._controller = controller
        self._poll_interval_s = float(poll_interval_s)
        self._stop_event = stop_event or asyncio.Event()
        self._cycles = 0

    @property
    def stop_event(self) -> asyncio.Event:
        return self._stop_event

    @property
    def cycles(self) -> int:
        return self._cycles

    async def run(self) -> None:
        logger.info("monitoring started, polling every {}s", self._poll_interval_s)
        while not self._stop_event.is_set():
            await self._run_cycle()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._poll_interval_s)
            except TimeoutError:
                continue
        logger.info("monitoring stopped after {} cycles", self._cycles)

    def stop(self) -> None:
        self._stop_event.set()

    async def _run_cycle(self) -> None:
        self._cycles += 1
        try:
            await self._controller.tick()
        except Exception:
            logger.exception("poll cycle {} failed", self._cycles)
