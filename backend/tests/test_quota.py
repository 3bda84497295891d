from datetime import datetime, timedelta

from fairmind.services.quota_service import DailyQuota


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_consumes_up_to_the_daily_limit():
    quota = DailyQuota(3, clock=Clock(datetime(2026, 3, 1, 9)))

    assert quota.try_consume("u1") == (True, 2)
    assert quota.try_consume("u1") == (True, 1)
    assert quota.try_consume("u1") == (True, 0)
    assert quota.try_consume("u1") == (False, 0)
    assert quota.used_today("u1") == 3
    assert quota.remaining("u2") == 3


def test_resets_after_midnight():
    clock = Clock(datetime(2026, 3, 1, 23, 59))
    quota = DailyQuota(1, clock=clock)
    assert quota.try_consume("u1") == (True, 0)
    assert quota.try_consume("u1") == (False, 0)

    clock.now += timedelta(minutes=2)
    assert quota.try_consume("u1") == (True, 0)


def test_refund_returns_a_unit():
    quota = DailyQuota(1, clock=Clock(datetime(2026, 3, 1)))
    quota.try_consume("u1")
    quota.refund("u1")
    assert quota.remaining("u1") == 1

    quota.refund("u1")
    assert quota.used_today("u1") == 0
