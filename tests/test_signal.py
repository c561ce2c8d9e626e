"""Tests for Signal and Connection."""

from __future__ import annotations

import pytest

from craft.utils.errors import AlreadyDisconnectedError
from craft.utils.signal import Connection, Signal


class TestSignalFire:
    def test_fires_handlers_in_subscription_order(self) -> None:
        signal: Signal[int] = Signal()
        calls: list[tuple[str, int]] = []
        signal.subscribe(lambda n: calls.append(("a", n)))
        signal.subscribe(lambda n: calls.append(("b", n)))
        signal.fire(3)
        assert calls == [("a", 3), ("b", 3)]

    def test_fire_without_handlers_is_noop(self) -> None:
        signal: Signal[()] = Signal()
        signal.fire()
        assert len(signal) == 0
        assert not signal

    def test_handler_added_during_fire_runs_next_time(self) -> None:
        signal: Signal[()] = Signal()
        calls: list[str] = []

        def late() -> None:
            calls.append("late")

        def early() -> None:
            calls.append("early")
            signal.subscribe(late)

        signal.subscribe(early)
        signal.fire()
        assert calls == ["early"]

        signal.fire()
        assert calls == ["early", "early", "late"]

    def test_handler_removed_during_fire_still_runs_this_time(self) -> None:
        signal: Signal[()] = Signal()
        calls: list[str] = []
        connections: dict[str, Connection] = {}

        def first() -> None:
            calls.append("first")
            if connections["second"].connected:
                connections["second"].disconnect()

        def second() -> None:
            calls.append("second")

        signal.subscribe(first)
        connections["second"] = signal.subscribe(second)
        signal.fire()
        assert calls == ["first", "second"]

        signal.fire()
        assert calls == ["first", "second", "first"]

    def test_same_handler_subscribed_twice_runs_once(self) -> None:
        signal: Signal[()] = Signal()
        calls: list[int] = []

        def handler() -> None:
            calls.append(1)

        signal.subscribe(handler)
        signal.subscribe(handler)
        signal.fire()
        assert calls == [1]
        assert len(signal) == 1

    def test_handler_exception_propagates(self) -> None:
        signal: Signal[()] = Signal()

        def boom() -> None:
            raise ValueError("boom")

        signal.subscribe(boom)
        with pytest.raises(ValueError):
            signal.fire()


class TestConnection:
    def test_disconnect_unsubscribes(self) -> None:
        signal: Signal[str] = Signal()
        seen: list[str] = []
        connection = signal.subscribe(seen.append)
        assert connection.connected

        connection.disconnect()
        signal.fire("x")
        assert seen == []
        assert not connection.connected

    def test_second_disconnect_raises(self) -> None:
        signal: Signal[()] = Signal()
        connection = signal.subscribe(lambda: None)
        connection.disconnect()
        with pytest.raises(AlreadyDisconnectedError):
            connection.disconnect()

    def test_wrap_runs_callback_once(self) -> None:
        calls: list[int] = []
        connection = Connection.wrap(lambda: calls.append(1))
        connection.disconnect()
        assert calls == [1]

    def test_unsubscribe_unknown_handler_is_noop(self) -> None:
        signal: Signal[()] = Signal()
        signal.unsubscribe(lambda: None)
        assert len(signal) == 0
