"""Tests for the Scheduler: tasks, the event pump and wait_for."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from craft.system.config import SystemConfig
from craft.system.events import (
    EventQueue,
    MouseButton,
    ScrollDirection,
    SystemSignals,
)
from craft.system.scheduler import Scheduler, TaskState


# ---------------------------------------------------------------------------
# Event routing
# ---------------------------------------------------------------------------


class TestRouting:
    def test_fixed_fields_are_unpacked(self) -> None:
        signals = SystemSignals()
        clicks: list[tuple[int, int, int]] = []
        signals.mouse_click.subscribe(lambda b, x, y: clicks.append((b, x, y)))

        assert signals.route(("mouse_click", 1, 5, 6))
        assert clicks == [(1, 5, 6)]

    def test_missing_fields_are_none(self) -> None:
        signals = SystemSignals()
        keys: list[tuple[Any, ...]] = []
        signals.key.subscribe(lambda *args: keys.append(args))

        signals.route(("key", 30))
        assert keys == [(30, None)]

    def test_task_complete_success_passes_extra_values(self) -> None:
        signals = SystemSignals()
        seen: list[tuple[Any, ...]] = []
        signals.task_complete.subscribe(lambda *args: seen.append(args))

        signals.route(("task_complete", 5, True, "a", "b"))
        assert seen == [(5, True, "a", "b")]

    def test_task_complete_failure_passes_reason(self) -> None:
        signals = SystemSignals()
        seen: list[tuple[Any, ...]] = []
        signals.task_complete.subscribe(lambda *args: seen.append(args))

        signals.route(("task_complete", 6, False, "no such peripheral"))
        assert seen == [(6, False, "no such peripheral")]

    def test_unknown_and_empty_events_are_not_routed(self) -> None:
        signals = SystemSignals()
        assert not signals.route(("timer", 3))
        assert not signals.route(())

    def test_every_kind_has_a_signal(self) -> None:
        signals = SystemSignals()
        for kind in SystemSignals.kinds():
            assert hasattr(signals, kind)


# ---------------------------------------------------------------------------
# Tasks and pump
# ---------------------------------------------------------------------------


class TestPump:
    @pytest.mark.asyncio
    async def test_failing_task_does_not_stop_alarm(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        queue = EventQueue()
        scheduler = Scheduler(queue)
        alarms: list[int] = []
        scheduler.signals.alarm.subscribe(alarms.append)

        async def failing() -> None:
            raise RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="craft.system.scheduler"):
            task = scheduler.spawn("failing", failing)
            queue.push("alarm", 7)
            queue.push("terminate")
            await scheduler.run()
            await scheduler.join()

        assert alarms == [7]
        assert task.failed
        assert isinstance(task.error, RuntimeError)
        assert task.state is TaskState.COMPLETED
        assert task not in scheduler.tasks
        assert "failing" in caplog.text

    @pytest.mark.asyncio
    async def test_terminate_stops_the_pump(self) -> None:
        queue = EventQueue()
        scheduler = Scheduler(queue)
        terminated: list[bool] = []
        scheduler.signals.terminate.subscribe(lambda: terminated.append(True))

        queue.push("terminate")
        queue.push("alarm", 1)
        await scheduler.run()

        assert terminated == [True]
        assert scheduler.terminated
        assert queue.pending() == 1
        assert scheduler.pump is not None
        assert scheduler.pump.state is TaskState.COMPLETED

    @pytest.mark.asyncio
    async def test_handler_error_is_contained(self) -> None:
        queue = EventQueue()
        scheduler = Scheduler(queue)
        alarms: list[int] = []

        def broken(_: str) -> None:
            raise ValueError("bad handler")

        scheduler.signals.char.subscribe(broken)
        scheduler.signals.alarm.subscribe(alarms.append)

        queue.push("char", "a")
        queue.push("alarm", 2)
        queue.push("terminate")
        await scheduler.run()

        assert alarms == [2]

    @pytest.mark.asyncio
    async def test_unknown_events_are_dropped(self) -> None:
        queue = EventQueue()
        scheduler = Scheduler(queue)
        alarms: list[int] = []
        scheduler.signals.alarm.subscribe(alarms.append)

        queue.push("speaker_audio_empty", "left")
        queue.push("alarm", 3)
        queue.push("terminate")
        await scheduler.run()

        assert alarms == [3]

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self) -> None:
        queue = EventQueue()
        scheduler = Scheduler(queue, SystemConfig(pump_name="Events"))

        first = scheduler.start()
        second = scheduler.start()
        assert first is second
        assert first.name == "Events"

        queue.push("terminate")
        await scheduler.run()

    @pytest.mark.asyncio
    async def test_completed_task_leaves_active_set(self) -> None:
        scheduler = Scheduler(EventQueue())
        ran: list[str] = []

        async def body() -> None:
            ran.append("body")

        task = scheduler.spawn("worker", body, "does work")
        assert task in scheduler.tasks
        assert task.description == "does work"

        await scheduler.join()
        assert ran == ["body"]
        assert not task.failed
        assert scheduler.tasks == set()


class TestWaitFor:
    @pytest.mark.asyncio
    async def test_returns_signal_arguments(self) -> None:
        queue = EventQueue()
        scheduler = Scheduler(queue)
        results: list[Any] = []

        async def waiter() -> None:
            results.append(await scheduler.wait_for(scheduler.signals.key))

        scheduler.spawn("waiter", waiter)
        queue.push("key", 28, False)
        queue.push("terminate")
        await scheduler.run()
        await scheduler.join()

        assert results == [(28, False)]
        assert len(scheduler.signals.key) == 0

    @pytest.mark.asyncio
    async def test_returns_none_on_terminate(self) -> None:
        queue = EventQueue()
        scheduler = Scheduler(queue)
        results: list[Any] = []

        async def waiter() -> None:
            results.append(await scheduler.wait_for(scheduler.signals.alarm))

        scheduler.spawn("waiter", waiter)
        queue.push("terminate")
        await scheduler.run()
        await scheduler.join()

        assert results == [None]
        assert len(scheduler.signals.terminate) == 0

    @pytest.mark.asyncio
    async def test_after_terminate_returns_none_immediately(self) -> None:
        queue = EventQueue()
        scheduler = Scheduler(queue)
        queue.push("terminate")
        await scheduler.run()

        assert await scheduler.wait_for(scheduler.signals.alarm) is None


class TestEnums:
    def test_mouse_values_match_host_numbers(self) -> None:
        assert MouseButton(2) is MouseButton.RIGHT
        assert ScrollDirection(-1) is ScrollDirection.UP
