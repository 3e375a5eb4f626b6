import asyncio
import logging

import pytest

from wkworkers.network.events import EventEmitter, add_event_listener, remove_event_listeners


def test_failing_listener_does_not_block_others(caplog):
    emitter = EventEmitter()
    received = []

    def _broken(_payload):
        raise RuntimeError("listener bug")

    emitter.on("evt", _broken)
    emitter.on("evt", received.append)

    assert emitter.emit("evt", {"n": 1}) is True
    assert received == [{"n": 1}]
    assert any(record.levelno == logging.ERROR for record in caplog.records)


def test_remove_event_listeners_detaches_all():
    emitter = EventEmitter()
    received = []
    listeners = [
        add_event_listener(emitter, "a", received.append),
        add_event_listener(emitter, "b", received.append),
    ]

    remove_event_listeners(listeners)

    assert emitter.emit("a", 1) is False
    assert emitter.emit("b", 2) is False
    assert received == []


@pytest.mark.asyncio
async def test_async_listener_is_scheduled():
    emitter = EventEmitter()
    done = asyncio.Event()

    async def _listener(_payload):
        done.set()

    emitter.on("evt", _listener)
    emitter.emit("evt", None)

    await asyncio.wait_for(done.wait(), timeout=0.5)
