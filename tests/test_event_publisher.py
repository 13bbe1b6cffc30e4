"""Tests for EventPublisher: per-kind subscription, delivery, one-shot waits."""

import asyncio
import logging
from unittest.mock import Mock

import pytest

from julius_client.EventPublisher import EventPublisher
from julius_client.protocol.types import EngineInfo, EventKind, JuliusEvent, SystemInfo


# Test Fixtures

@pytest.fixture
def publisher():
    """Create a publisher instance."""
    return EventPublisher(verbose=False)


@pytest.fixture
def engine_info_event():
    return JuliusEvent(EventKind.ENGINEINFO, EngineInfo(conf="fast", type="Julius", version="4.6"))


# Subscription Management Tests

def test_subscribe_adds_handler(publisher):
    """Verify registration is counted per kind and overall."""
    publisher.subscribe(EventKind.RECOGOUT, Mock())

    assert publisher.subscriber_count(EventKind.RECOGOUT) == 1
    assert publisher.subscriber_count(EventKind.INPUT) == 0
    assert publisher.subscriber_count() == 1


def test_duplicate_subscribe_ignored(publisher):
    """Verify subscribing the same handler twice for a kind is idempotent."""
    handler = Mock()
    publisher.subscribe(EventKind.RECOGOUT, handler)
    publisher.subscribe(EventKind.RECOGOUT, handler)

    assert publisher.subscriber_count(EventKind.RECOGOUT) == 1


def test_subscribe_accepts_kind_value_string(publisher, engine_info_event):
    handler = Mock()
    publisher.subscribe("ENGINEINFO", handler)

    publisher.publish(engine_info_event)

    handler.assert_called_once_with(engine_info_event.payload)


def test_subscribe_rejects_unknown_kind(publisher):
    with pytest.raises(ValueError):
        publisher.subscribe("NOT_A_KIND", Mock())


def test_unsubscribe_removes_handler(publisher, engine_info_event):
    handler = Mock()
    publisher.subscribe(EventKind.ENGINEINFO, handler)
    publisher.unsubscribe(EventKind.ENGINEINFO, handler)

    publisher.publish(engine_info_event)

    handler.assert_not_called()
    assert publisher.subscriber_count() == 0


def test_unsubscribe_unknown_handler_is_noop(publisher):
    publisher.unsubscribe(EventKind.ENGINEINFO, Mock())
    assert publisher.subscriber_count() == 0


# Publishing Tests

def test_publish_only_reaches_matching_kind(publisher, engine_info_event):
    engine_handler = Mock()
    sysinfo_handler = Mock()
    publisher.subscribe(EventKind.ENGINEINFO, engine_handler)
    publisher.subscribe(EventKind.SYSINFO, sysinfo_handler)

    publisher.publish(engine_info_event)

    engine_handler.assert_called_once_with(engine_info_event.payload)
    sysinfo_handler.assert_not_called()


def test_signal_kinds_call_handler_without_arguments(publisher):
    handler = Mock()
    publisher.subscribe(EventKind.STARTRECOG, handler)

    publisher.publish(JuliusEvent(EventKind.STARTRECOG))

    handler.assert_called_once_with()


def test_failing_handler_does_not_block_others(publisher, engine_info_event, caplog):
    """Verify one handler's exception is logged and the rest still run."""
    failing = Mock(side_effect=RuntimeError("boom"))
    healthy = Mock()
    publisher.subscribe(EventKind.ENGINEINFO, failing)
    publisher.subscribe(EventKind.ENGINEINFO, healthy)

    with caplog.at_level(logging.ERROR):
        publisher.publish(engine_info_event)

    healthy.assert_called_once_with(engine_info_event.payload)
    assert "failed on ENGINEINFO" in caplog.text


def test_handler_may_unsubscribe_during_publish(publisher, engine_info_event):
    calls = []

    def once(payload):
        calls.append(payload)
        publisher.unsubscribe(EventKind.ENGINEINFO, once)

    publisher.subscribe(EventKind.ENGINEINFO, once)
    publisher.publish(engine_info_event)
    publisher.publish(engine_info_event)

    assert calls == [engine_info_event.payload]


# One-shot Wait Tests

def test_wait_for_resolves_with_next_payload(publisher):
    async def scenario():
        reply = publisher.wait_for(EventKind.SYSINFO)
        publisher.publish(JuliusEvent(EventKind.SYSINFO, SystemInfo(process="ACTIVE")))
        return await reply

    assert asyncio.run(scenario()) == SystemInfo(process="ACTIVE")
    assert publisher.subscriber_count() == 0


def test_wait_for_ignores_other_kinds(publisher, engine_info_event):
    async def scenario():
        reply = publisher.wait_for(EventKind.SYSINFO)
        publisher.publish(engine_info_event)
        return reply.done()

    assert asyncio.run(scenario()) is False


def test_wait_for_resolves_once(publisher):
    async def scenario():
        reply = publisher.wait_for(EventKind.SYSINFO)
        publisher.publish(JuliusEvent(EventKind.SYSINFO, SystemInfo(process="ACTIVE")))
        publisher.publish(JuliusEvent(EventKind.SYSINFO, SystemInfo(process="SLEEP")))
        return await reply

    assert asyncio.run(scenario()) == SystemInfo(process="ACTIVE")


def test_wait_for_signal_kind_resolves_with_none(publisher):
    async def scenario():
        reply = publisher.wait_for(EventKind.ENDRECOG)
        publisher.publish(JuliusEvent(EventKind.ENDRECOG))
        return await reply

    assert asyncio.run(scenario()) is None


def test_cancelled_wait_is_unregistered(publisher):
    async def scenario():
        reply = publisher.wait_for(EventKind.SYSINFO)
        reply.cancel()
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert publisher.subscriber_count() == 0


def test_abandoned_wait_times_out_and_unregisters(publisher):
    async def scenario():
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(publisher.wait_for(EventKind.SYSINFO), timeout=0.05)
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert publisher.subscriber_count() == 0
