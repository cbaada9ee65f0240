from __future__ import annotations

from datetime import datetime, timezone

import pytest

from pairchat.workers.periodic import DailyAt, Every


def test_every_is_constant():
    assert Every(60).seconds_until_next(datetime.now(timezone.utc)) == 60


def test_every_rejects_non_positive():
    with pytest.raises(ValueError):
        Every(0)


def test_daily_at_later_today():
    # 23:00 UTC is 02:00 next day in Istanbul (UTC+3)
    sched = DailyAt(2, 0, "Europe/Istanbul")
    now = datetime(2024, 5, 1, 22, 0, tzinfo=timezone.utc)

    assert sched.seconds_until_next(now) == 3600
    assert sched.next_run(now).hour == 2


def test_daily_at_rolls_over_to_tomorrow():
    sched = DailyAt(2, 0, "Europe/Istanbul")
    now = datetime(2024, 5, 1, 23, 0, tzinfo=timezone.utc)  # 02:00 local, just fired

    assert sched.seconds_until_next(now) == 24 * 3600


def test_daily_at_across_dst_change():
    # Europe/Berlin springs forward on 2024-03-31: the day is 23 hours long
    sched = DailyAt(3, 0, "Europe/Berlin")
    now = datetime(2024, 3, 30, 2, 0, tzinfo=timezone.utc)  # 03:00 CET

    assert sched.seconds_until_next(now) == 23 * 3600
