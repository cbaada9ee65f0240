from __future__ import annotations

from datetime import timedelta

import pytest

from pairchat.workers.draft_queuer import DraftQueuer
from pairchat.workers.periodic import Every
from tests.conftest import NOW, FakeDraftQueue, make_draft


def _queuer(uow_factory, queue, clock, batch_size=100) -> DraftQueuer:
    return DraftQueuer(uow_factory, queue, Every(60), batch_size=batch_size, clock=clock)


@pytest.mark.asyncio
async def test_queues_due_drafts_in_batches(uow, uow_factory, clock):
    drafts = [make_draft(send_at=NOW - timedelta(seconds=i)) for i in range(150)]
    await uow.drafts_w.bulk_create(drafts)
    queue = FakeDraftQueue()
    queuer = _queuer(uow_factory, queue, clock)

    assert await queuer.run_once() == 100
    assert await queuer.run_once() == 50
    assert await queuer.run_once() == 0

    assert len(queue.published) == 150
    assert len(set(queue.published)) == 150
    assert all(d.queued and d.queued_at == NOW for d in uow.drafts._store.values())


@pytest.mark.asyncio
async def test_future_and_sent_drafts_are_skipped(uow, uow_factory, clock):
    due = make_draft()
    future = make_draft(send_at=NOW + timedelta(minutes=5))
    done = make_draft(sent=True, sent_at=NOW - timedelta(hours=1))
    await uow.drafts_w.bulk_create([due, future, done])
    queue = FakeDraftQueue()

    assert await _queuer(uow_factory, queue, clock).run_once() == 1

    assert queue.published == [due.id]
    assert uow.drafts._store[future.id].queued is False


@pytest.mark.asyncio
async def test_failed_publish_stays_unqueued(uow, uow_factory, clock):
    ok = make_draft(send_at=NOW - timedelta(minutes=2))
    broken = make_draft(send_at=NOW - timedelta(minutes=1))
    await uow.drafts_w.bulk_create([ok, broken])
    queue = FakeDraftQueue(fail_publish_for={broken.id})

    assert await _queuer(uow_factory, queue, clock).run_once() == 1

    assert uow.drafts._store[ok.id].queued is True
    assert uow.drafts._store[broken.id].queued is False

    # Picked up again once the broker recovers
    queue.fail_publish_for.clear()
    assert await _queuer(uow_factory, queue, clock).run_once() == 1
    assert queue.published == [ok.id, broken.id]


@pytest.mark.asyncio
async def test_queues_oldest_first(uow, uow_factory, clock):
    newer = make_draft(send_at=NOW - timedelta(minutes=1))
    older = make_draft(send_at=NOW - timedelta(minutes=10))
    await uow.drafts_w.bulk_create([newer, older])
    queue = FakeDraftQueue()

    await _queuer(uow_factory, queue, clock, batch_size=1).run_once()

    assert queue.published == [older.id]
