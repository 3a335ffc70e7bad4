# app/tests/unit/test_event_dispatcher.py
import pytest

from app.domain.events import MessagesRead
from app.infrastructure.event_dispatcher import EventDispatcher


@pytest.mark.asyncio
async def test_event_dispatcher():
    dispatcher = EventDispatcher()

    events_received = []

    async def test_handler(event):
        events_received.append(event)

    dispatcher.register("MessagesRead", test_handler)

    event = MessagesRead(conversation_id="c1", reader_id="u1", message_ids=["m1"])
    await dispatcher.dispatch(event)

    assert len(events_received) == 1
    assert isinstance(events_received[0], MessagesRead)


@pytest.mark.asyncio
async def test_unregistered_handler_is_not_called():
    dispatcher = EventDispatcher()
    calls = []

    async def handler(event):
        calls.append(event)

    dispatcher.register("MessagesRead", handler)
    dispatcher.unregister("MessagesRead", handler)
    # unknown handlers are ignored
    dispatcher.unregister("MessagesRead", handler)

    await dispatcher.dispatch(
        MessagesRead(conversation_id="c1", reader_id="u1", message_ids=[])
    )
    assert calls == []


@pytest.mark.asyncio
async def test_handler_may_unregister_during_dispatch():
    dispatcher = EventDispatcher()
    calls = []

    async def once(event):
        calls.append("once")
        dispatcher.unregister("MessagesRead", once)

    async def always(event):
        calls.append("always")

    dispatcher.register("MessagesRead", once)
    dispatcher.register("MessagesRead", always)

    event = MessagesRead(conversation_id="c1", reader_id="u1", message_ids=[])
    await dispatcher.dispatch(event)
    await dispatcher.dispatch(event)

    assert calls == ["once", "always", "always"]
