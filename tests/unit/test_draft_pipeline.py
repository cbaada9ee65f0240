"""Planner -> queuer -> consumer -> gateway, wired together over in-memory adapters."""
from __future__ import annotations

import random
from datetime import timedelta

import pytest

from pairchat.application.policies.pairing import DisjointPairing
from pairchat.infrastructure.content.phrases import RandomPhraseGenerator
from pairchat.infrastructure.presence.memory import InMemoryPresenceStore
from pairchat.infrastructure.ws.gateway import RealtimeGateway
from pairchat.infrastructure.ws.manager import ConnectionManager
from pairchat.workers.draft_consumer import DraftConsumer
from pairchat.workers.draft_planner import DraftPlanner
from pairchat.workers.draft_queuer import DraftQueuer
from pairchat.workers.periodic import Every
from tests.conftest import FakeDraftQueue, FakeWebSocket, make_user


@pytest.mark.asyncio
async def test_planned_draft_reaches_online_receiver(uow, uow_factory, clock):
    uow.users.add(make_user(1), make_user(2))
    queue = FakeDraftQueue()
    gateway = RealtimeGateway(ConnectionManager(), InMemoryPresenceStore(), uow_factory)
    planner = DraftPlanner(
        uow_factory,
        DisjointPairing(random.Random(3)),
        RandomPhraseGenerator(rng=random.Random(3)),
        Every(60),
        clock=clock,
        rng=random.Random(3),
    )
    queuer = DraftQueuer(uow_factory, queue, Every(60), clock=clock)
    consumer = DraftConsumer(uow_factory, queue, gateway, clock=clock)

    assert await planner.run_once() == 1
    (draft,) = uow.drafts._store.values()
    assert {draft.sender_id, draft.receiver_id} == {1, 2}
    sockets = {1: FakeWebSocket(), 2: FakeWebSocket()}
    for user_id, ws in sockets.items():
        await gateway.open(ws, user_id)

    # Nothing is due until send_at has passed
    assert await queuer.run_once() == 0
    clock.advance(draft.send_at - clock.now() + timedelta(seconds=1))
    assert await queuer.run_once() == 1
    assert queue.published == [draft.id]

    delivery = await queue.receive()
    event = await consumer.handle(delivery)

    assert event is not None
    conv = await uow.conversations.get_by_pair(1, 2)
    assert conv.unread_for(draft.receiver_id) == 1
    assert conv.unread_for(draft.sender_id) == 0
    assert uow.drafts._store[draft.id].sent is True
    assert queue.acked == [delivery]
    (received,) = sockets[draft.receiver_id].events("message_received")
    assert received["data"]["message"]["content"] == draft.content
    assert received["data"]["conversationId"] == str(conv.id)
    assert sockets[draft.sender_id].events("message_received") == []
