from __future__ import annotations

from datetime import timedelta

import pytest

from pairchat.workers.draft_cleanup import DraftCleanup
from pairchat.workers.periodic import Every
from tests.conftest import NOW, make_draft


@pytest.mark.asyncio
async def test_removes_only_old_sent_drafts(uow, uow_factory, clock):
    old_sent = make_draft(sent=True, sent_at=NOW - timedelta(days=8))
    recent_sent = make_draft(sent=True, sent_at=NOW - timedelta(days=1))
    old_unsent = make_draft(send_at=NOW - timedelta(days=10))
    await uow.drafts_w.bulk_create([old_sent, recent_sent, old_unsent])

    cleanup = DraftCleanup(uow_factory, Every(60), retention=timedelta(days=7), clock=clock)
    deleted = await cleanup.run_once()

    assert deleted == 1
    assert set(uow.drafts._store) == {recent_sent.id, old_unsent.id}
    assert uow._committed is True
