"""
Daily resolution quota
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Dict, Tuple

from fairmind.core.logging_config import get_logger
from fairmind.core.utils import utc_now

logger = get_logger(__name__)


@dataclass
class _Usage:
    count: int
    reset_on: date


class DailyQuota:
    """Per-user counter that resets at the first use after midnight UTC.

    ``try_consume`` checks and increments in one step with no await in
    between, so concurrent handlers in the event loop cannot both take the
    last unit.
    """

    def __init__(self, daily_limit: int, clock: Callable[[], datetime] = utc_now):
        self.daily_limit = daily_limit
        self._clock = clock
        self._usage: Dict[str, _Usage] = {}

    def _current(self, user_id: str) -> _Usage:
        today = self._clock().date()
        usage = self._usage.get(user_id)
        if usage is None or usage.reset_on < today:
            usage = _Usage(count=0, reset_on=today)
            self._usage[user_id] = usage
        return usage

    def try_consume(self, user_id: str) -> Tuple[bool, int]:
        """Take one unit if available; returns (allowed, remaining after this call)"""
        usage = self._current(user_id)
        if usage.count >= self.daily_limit:
            return False, 0
        usage.count += 1
        return True, self.daily_limit - usage.count

    def refund(self, user_id: str):
        """Give back a unit taken by try_consume for a request that did not complete"""
        usage = self._current(user_id)
        if usage.count > 0:
            usage.count -= 1

    def used_today(self, user_id: str) -> int:
        return self._current(user_id).count

    def remaining(self, user_id: str) -> int:
        return max(self.daily_limit - self.used_today(user_id), 0)

    def clear(self):
        self._usage.clear()
