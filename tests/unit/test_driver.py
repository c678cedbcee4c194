import asyncio
from unittest.mock import AsyncMock, MagicMock

from pod_lifecycle.engine.driver import TickDriver
from pod_lifecycle.engine.errors import ConsistencyFault, InternalFault, TransportFault
from pod_lifecycle.models.events import EventType


class TestRunOnce:
    async def test_returns_tick_result(self, engine, source) -> None:
        source.set_workloads(("p1", "Running"))
        driver = TickDriver(engine, interval_seconds=0.01)

        result = await driver.run_once()

        assert result is not None
        assert driver.ticks_completed == 1
        assert "p1" in engine.state.active

    async def test_timeout_reported_as_transport_fault(self) -> None:
        engine = MagicMock()

        async def slow_tick():
            await asyncio.sleep(10)

        engine.tick = slow_tick
        driver = TickDriver(engine, interval_seconds=0.01, tick_timeout_seconds=0.05)

        assert await driver.run_once() is None

        engine.report.assert_called_once()
        fault = engine.report.call_args.args[0]
        assert isinstance(fault, TransportFault)
        assert fault.context["timeout_seconds"] == 0.05
        assert driver.ticks_completed == 0

    async def test_unexpected_error_does_not_escape(self) -> None:
        engine = MagicMock()
        engine.tick = AsyncMock(side_effect=RuntimeError("boom"))
        driver = TickDriver(engine, interval_seconds=0.01)
        assert await driver.run_once() is None
        fault = engine.report.call_args.args[0]
        assert isinstance(fault, InternalFault)
        assert fault.message == "tick failed: boom"


class TestLoop:
    async def test_ticks_repeat_until_stopped(self, engine) -> None:
        driver = TickDriver(engine, interval_seconds=0.01)
        await driver.start()
        await asyncio.sleep(0.2)
        await driver.stop()

        assert driver.ticks_completed >= 2
        assert not driver.is_running

    async def test_ticks_never_overlap(self) -> None:
        in_flight = 0
        max_in_flight = 0

        async def tick():
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            await asyncio.sleep(0.03)
            in_flight -= 1

        engine = MagicMock()
        engine.tick = tick
        driver = TickDriver(engine, interval_seconds=0.0)
        await driver.start()
        await asyncio.sleep(0.2)
        await driver.stop()

        assert max_in_flight == 1
        assert driver.ticks_completed >= 2

    async def test_loop_survives_crashing_tick(self) -> None:
        engine = MagicMock()
        engine.tick = AsyncMock(side_effect=RuntimeError("boom"))
        driver = TickDriver(engine, interval_seconds=0.01)
        await driver.start()
        await asyncio.sleep(0.1)
        await driver.stop()
        assert engine.tick.await_count >= 2

    async def test_run_forever_cancellable(self, engine) -> None:
        driver = TickDriver(engine, interval_seconds=0.01)
        task = asyncio.create_task(driver.run_forever())
        await asyncio.sleep(0.05)
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        assert driver.ticks_completed >= 1

    async def test_stop_without_start(self, engine) -> None:
        await TickDriver(engine).stop()


class TestTimeoutRecovery:
    async def test_cancelled_first_sighting_is_logged_next_tick(self, engine, source, sink) -> None:
        source.set_workloads(("p1", "Running"))
        source.detail_delay = 1.0
        driver = TickDriver(engine, interval_seconds=0.01, tick_timeout_seconds=0.05)

        assert await driver.run_once() is None
        assert "p1" not in engine.state.active

        source.detail_delay = 0.0
        await driver.run_once()
        await driver.run_once()

        assert "p1" in engine.state.active
        assert sink.types_for("p1") == ["first_observed"]

    async def test_cancelled_status_change_is_logged_next_tick(self, engine, source, sink) -> None:
        source.set_workloads(("p1", "Pending"))
        driver = TickDriver(engine, interval_seconds=0.01, tick_timeout_seconds=0.05)
        await driver.run_once()

        source.set_workloads(("p1", "Running"))
        source.detail_delay = 1.0
        assert await driver.run_once() is None
        assert engine.state.active.get("p1").status.value == "Pending"

        source.detail_delay = 0.0
        await driver.run_once()
        await driver.run_once()

        changes = sink.of_type(EventType.STATUS_CHANGED)
        assert len(changes) == 1
        assert changes[0].payload["old_status"] == "Pending"
        assert changes[0].payload["status"] == "Running"


class TestCrashReporting:
    async def test_crashing_tick_emits_fault_event(self, engine, source, sink) -> None:
        source.list_workloads = AsyncMock(
            side_effect=AttributeError("'NoneType' object has no attribute 'name'")
        )
        driver = TickDriver(engine, interval_seconds=0.01)

        assert await driver.run_once() is None

        faults = sink.of_type(EventType.FAULT)
        assert len(faults) == 1
        assert faults[0].stream == "diagnostic"
        assert faults[0].payload["kind"] == "internal"
        assert faults[0].payload["error_type"] == "AttributeError"
        assert "no attribute 'name'" in faults[0].payload["message"]

    async def test_escaped_reconcile_fault_reported_as_is(self) -> None:
        engine = MagicMock()
        engine.tick = AsyncMock(side_effect=ConsistencyFault("duplicate record", workload="p1"))
        driver = TickDriver(engine, interval_seconds=0.01)

        assert await driver.run_once() is None

        fault = engine.report.call_args.args[0]
        assert isinstance(fault, ConsistencyFault)
        assert fault.workload == "p1"
