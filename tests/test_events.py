"""Tests for the event bus."""

import asyncio

import pytest

from exthost.extensions.events import EventBus


class TestEventBus:
    """Test subscription and delivery."""

    def test_emit_delivers_in_order(self):
        bus = EventBus()
        received = []
        bus.on("ping", lambda value: received.append(("a", value)))
        bus.on("ping", lambda value: received.append(("b", value)))

        assert bus.emit("ping", 1) == 2
        assert received == [("a", 1), ("b", 1)]

    def test_once_fires_a_single_time(self):
        bus = EventBus()
        received = []
        bus.once("ping", received.append)

        bus.emit("ping", 1)
        bus.emit("ping", 2)
        assert received == [1]
        assert bus.listener_count("ping") == 0

    def test_dispose_is_idempotent(self):
        bus = EventBus()
        subscription = bus.on("ping", lambda: None)
        subscription.dispose()
        subscription.dispose()
        assert bus.listener_count("ping") == 0
        assert bus.event_names() == []

    def test_off(self):
        bus = EventBus()
        callback = lambda: None  # noqa: E731
        bus.on("ping", callback)
        assert bus.off("ping", callback) is True
        assert bus.off("ping", callback) is False

    def test_failing_listener_does_not_stop_delivery(self, caplog):
        bus = EventBus()
        received = []

        def broken():
            raise ValueError("listener exploded")

        bus.on("ping", broken)
        bus.on("ping", lambda: received.append("ok"))

        bus.emit("ping")
        assert received == ["ok"]
        assert "listener exploded" in caplog.text

    def test_remove_all_listeners_for_one_event(self):
        bus = EventBus()
        bus.on("a", lambda: None)
        bus.on("b", lambda: None)
        bus.remove_all_listeners("a")
        assert bus.event_names() == ["b"]

    @pytest.mark.asyncio
    async def test_async_listener_is_scheduled(self):
        bus = EventBus()
        received = []

        async def listener(value):
            await asyncio.sleep(0)
            received.append(value)

        bus.on("ping", listener)
        bus.emit("ping", 42)
        await bus.drain()
        assert received == [42]

    @pytest.mark.asyncio
    async def test_emit_async_awaits_listeners(self):
        bus = EventBus()
        received = []

        async def listener(value):
            received.append(value)

        bus.on("ping", listener)
        assert await bus.emit_async("ping", "x") == 1
        assert received == ["x"]
