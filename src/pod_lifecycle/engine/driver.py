"""TickDriver — runs reconciliation ticks on a fixed period, one at a time."""

from __future__ import annotations

import asyncio

import structlog

from pod_lifecycle.engine.errors import InternalFault, ReconcileFault, TransportFault
from pod_lifecycle.engine.reconciler import ReconciliationEngine, TickResult

log = structlog.get_logger()


class TickDriver:
    """Calls ``engine.tick()`` forever, sleeping ``interval_seconds`` after each tick."""

    def __init__(
        self,
        engine: ReconciliationEngine,
        interval_seconds: float = 15.0,
        tick_timeout_seconds: float | None = None,
    ) -> None:
        self._engine = engine
        self.interval_seconds = interval_seconds
        self.tick_timeout_seconds = tick_timeout_seconds
        self._task: asyncio.Task | None = None
        self._running = False
        self.ticks_completed = 0

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the tick loop as a background task."""
        self._running = True
        self._task = asyncio.create_task(self._run())
        log.info("tick driver started", interval=self.interval_seconds)

    async def stop(self) -> None:
        """Stop the tick loop, cancelling an in-flight tick."""
        self._running = False
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        log.info("tick driver stopped", ticks=self.ticks_completed)

    async def run_forever(self) -> None:
        """Run the tick loop in the caller's task until cancelled."""
        self._running = True
        log.info("tick driver running", interval=self.interval_seconds)
        await self._run()

    async def run_once(self) -> TickResult | None:
        """Run a single tick. Returns None if the tick timed out or crashed."""
        try:
            if self.tick_timeout_seconds:
                result = await asyncio.wait_for(
                    self._engine.tick(), timeout=self.tick_timeout_seconds
                )
            else:
                result = await self._engine.tick()
        except asyncio.TimeoutError:
            self._engine.report(
                TransportFault(
                    "tick timed out", timeout_seconds=self.tick_timeout_seconds
                )
            )
            return None
        except ReconcileFault as fault:
            self._engine.report(fault)
            return None
        except Exception as e:
            log.exception("tick error")
            self._engine.report(
                InternalFault(f"tick failed: {e}", error_type=type(e).__name__)
            )
            return None

        self.ticks_completed += 1
        return result

    async def _run(self) -> None:
        try:
            while self._running:
                await self.run_once()
                await asyncio.sleep(self.interval_seconds)
        except asyncio.CancelledError:
            pass
