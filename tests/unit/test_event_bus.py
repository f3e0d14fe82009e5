"""
Unit tests for EventBus.

Covers wildcard matching, priority ordering, error isolation, one-shot
listeners and background (LOW) listeners.
"""

import asyncio

import pytest

from src.core.event import EventBus, ListenerPriority, matches


class TestMatches:
    @pytest.mark.parametrize(
        "event_name,pattern,expected",
        [
            ("skill.leveled_up", "*", True),
            ("skill.leveled_up", "skill.*", True),
            ("skill.leveled_up", "player.*", False),
            ("equipment.changed", "*.changed", True),
            ("skill.training_started", "skill.*_started", True),
            ("skill.training_stopped", "skill.*_started", False),
            ("player.registered", "player.registered", True),
        ],
    )
    def test_patterns(self, event_name, pattern, expected):
        assert matches(event_name, pattern) is expected


class TestPublish:
    async def test_exact_and_wildcard_listeners(self, event_bus):
        received = []
        event_bus.subscribe("skill.leveled_up", lambda p: received.append(("exact", p)))
        event_bus.subscribe("skill.*", lambda p: received.append(("wild", p)))

        await event_bus.publish("skill.leveled_up", {"new_level": 2})

        assert sorted(tag for tag, _ in received) == ["exact", "wild"]

    async def test_priority_order(self, event_bus):
        order = []
        event_bus.subscribe(
            "player.registered", lambda p: order.append("normal"), identifier="normal"
        )
        event_bus.subscribe(
            "player.registered",
            lambda p: order.append("critical"),
            priority=ListenerPriority.CRITICAL,
            identifier="critical",
        )
        event_bus.subscribe(
            "player.registered",
            lambda p: order.append("high"),
            priority=ListenerPriority.HIGH,
            identifier="high",
        )

        await event_bus.publish("player.registered", {})

        assert order == ["critical", "high", "normal"]

    async def test_failing_listener_is_isolated(self, event_bus):
        received = []

        def broken(payload):
            raise RuntimeError("boom")

        event_bus.subscribe("equipment.changed", broken, identifier="broken")
        event_bus.subscribe("equipment.changed", received.append, identifier="ok")

        results = await event_bus.publish("equipment.changed", {"slot": "tool"})

        assert received == [{"slot": "tool"}]
        assert None in results
        assert event_bus.get_metrics()["errors"]["equipment.changed"] == 1

    async def test_async_listener_result(self, event_bus):
        async def listener(payload):
            return payload["value"] * 2

        event_bus.subscribe("skill.progress_applied", listener)

        assert await event_bus.publish("skill.progress_applied", {"value": 21}) == [42]

    async def test_slow_critical_listener_times_out(self):
        bus = EventBus(critical_timeout_seconds=0.01)

        async def slow(payload):
            await asyncio.sleep(1)

        bus.subscribe("skill.leveled_up", slow, priority=ListenerPriority.CRITICAL)

        assert await bus.publish("skill.leveled_up", {}) == [None]

    async def test_no_listeners(self, event_bus):
        assert await event_bus.publish("skill.training_started", {}) == []


class TestSubscription:
    def test_listener_must_take_one_argument(self, event_bus):
        with pytest.raises(ValueError):
            event_bus.subscribe("skill.*", lambda a, b: None)

    def test_duplicate_identifier_ignored(self, event_bus):
        event_bus.subscribe("skill.*", lambda p: None, identifier="same")
        event_bus.subscribe("skill.*", lambda p: None, identifier="same")

        assert event_bus.get_metrics()["listener_count"] == 1

    async def test_unsubscribe(self, event_bus):
        received = []
        event_bus.subscribe("skill.*", received.append, identifier="gone")

        assert event_bus.unsubscribe("skill.*", "gone")
        await event_bus.publish("skill.leveled_up", {})

        assert received == []
        assert not event_bus.unsubscribe("skill.*", "gone")

    async def test_once_listener(self, event_bus):
        received = []
        event_bus.subscribe("player.registered", received.append, once=True)

        await event_bus.publish("player.registered", {"n": 1})
        await event_bus.publish("player.registered", {"n": 2})

        assert received == [{"n": 1}]

    async def test_low_priority_runs_in_background(self, event_bus):
        received = []

        async def background(payload):
            await asyncio.sleep(0)
            received.append(payload)

        event_bus.subscribe("skill.leveled_up", background, priority=ListenerPriority.LOW)

        results = await event_bus.publish("skill.leveled_up", {"n": 1})
        await event_bus.drain()

        assert results == []
        assert received == [{"n": 1}]
        assert event_bus.get_background_task_count() == 0

    def test_timeouts_from_config(self, config_manager):
        config_manager.set("core.event.listener_timeout.critical_seconds", 2.5)

        bus = EventBus(config_manager)

        assert bus._critical_timeout == 2.5
        assert bus._high_timeout == 5.0
