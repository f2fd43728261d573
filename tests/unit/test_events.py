"""Unit tests for the in-process event bus."""

import pytest
from libs.common.events import EventBus, ListenerPriority


@pytest.mark.asyncio
@pytest.mark.unit
async def test_listeners_run_in_priority_order():
    bus = EventBus()
    calls = []

    async def low(data):
        calls.append("low")

    async def critical(data):
        calls.append("critical")

    def normal(data):
        calls.append("normal")

    bus.subscribe("evt", low, priority=ListenerPriority.LOW)
    bus.subscribe("evt", normal)
    bus.subscribe("evt", critical, priority=ListenerPriority.CRITICAL)

    result = await bus.publish("evt", {})

    assert calls == ["critical", "normal", "low"]
    assert result.delivered == 3
    assert result.ok


@pytest.mark.asyncio
@pytest.mark.unit
async def test_failing_listener_does_not_stop_others():
    bus = EventBus()
    calls = []

    async def broken(data):
        raise RuntimeError("boom")

    async def healthy(data):
        calls.append(data["value"])

    bus.subscribe("evt", broken, priority=ListenerPriority.HIGH)
    bus.subscribe("evt", healthy)

    result = await bus.publish("evt", {"value": 42})

    assert calls == [42]
    assert result.delivered == 1
    assert result.failed == 1
    assert not result.ok


@pytest.mark.unit
def test_duplicate_subscription_is_ignored():
    bus = EventBus()

    async def handler(data):
        pass

    first = bus.subscribe("evt", handler)
    second = bus.subscribe("evt", handler)

    assert first == second
    assert bus.listeners("evt") == [first]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_once_listener_is_removed_after_delivery():
    bus = EventBus()
    calls = []

    async def handler(data):
        calls.append(1)

    bus.subscribe("evt", handler, once=True)
    await bus.publish("evt", {})
    await bus.publish("evt", {})

    assert calls == [1]
    assert bus.listeners("evt") == []
    assert bus.published["evt"] == 2


@pytest.mark.unit
def test_unsubscribe():
    bus = EventBus()

    async def handler(data):
        pass

    identifier = bus.subscribe("evt", handler, identifier="custom")

    assert bus.unsubscribe("evt", identifier) is True
    assert bus.unsubscribe("evt", identifier) is False
