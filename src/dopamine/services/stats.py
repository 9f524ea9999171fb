"""Statistics and streak engine for user profiles."""

import logging
import threading
import weakref
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from dopamine.domain.errors import NotFoundError, ValidationError
from dopamine.domain.users import UserStatistics
from dopamine.services.feeds import ChangeFeed

_logger = logging.getLogger(__name__)


class StatisticsRepository(Protocol):
    """Persistence interface for the statistics embedded in a user profile."""

    def get_statistics(self, user_id: str) -> UserStatistics | None:
        """Return the user's statistics, or None when the profile is missing."""

    def save_statistics(self, user_id: str, statistics: UserStatistics) -> None:
        """Overwrite the user's statistics."""


@dataclass
class StatisticsService:
    """Maintains running totals and the day-based streak.

    Every mutation for a user runs its read-modify-write under that user's
    lock, so concurrent completions in this process never lose an update.
    """

    repository: StatisticsRepository
    feed: ChangeFeed[UserStatistics]
    timezone_name: str = "UTC"
    # Entries vanish once no caller holds the lock.
    _locks: weakref.WeakValueDictionary[str, threading.Lock] = field(
        default_factory=weakref.WeakValueDictionary, repr=False
    )
    _locks_guard: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def get_statistics(self, user_id: str) -> UserStatistics:
        statistics = self.repository.get_statistics(user_id)
        if statistics is None:
            raise NotFoundError(f"User {user_id} not found")
        return statistics

    def record_completion(self, user_id: str, duration_minutes: int) -> UserStatistics:
        """Count one completed order worth ``duration_minutes``."""
        if duration_minutes < 0:
            raise ValidationError("Duration must not be negative")
        with self._lock_for(user_id):
            current = self.get_statistics(user_id)
            updated = replace(
                current,
                total_activities_completed=current.total_activities_completed + 1,
                total_minutes=current.total_minutes + duration_minutes,
            )
            self.repository.save_statistics(user_id, updated)
        _logger.info(
            "Recorded completion for user %s (+%s min)", user_id, duration_minutes
        )
        self.feed.publish(user_id, updated)
        return updated

    def update_streak(self, user_id: str, new_streak: int) -> UserStatistics:
        """Set the current streak and raise the longest streak if exceeded."""
        if new_streak < 0:
            raise ValidationError("Streak must not be negative")
        with self._lock_for(user_id):
            updated = _with_streak(self.get_statistics(user_id), new_streak)
            self.repository.save_statistics(user_id, updated)
        self.feed.publish(user_id, updated)
        return updated

    def record_active_day(self, user_id: str, day: date | None = None) -> UserStatistics:
        """Advance the streak for activity completed on ``day``.

        The same day leaves the streak unchanged, the following day extends
        it, and any gap restarts it at 1. Days earlier than the last active
        day are ignored.
        """
        active_day = day or self.today()
        with self._lock_for(user_id):
            current = self.get_statistics(user_id)
            last = current.last_active_on
            if last is not None and active_day <= last:
                return current
            if last is not None and active_day - last == timedelta(days=1):
                streak = current.current_streak + 1
            else:
                streak = 1
            updated = replace(_with_streak(current, streak), last_active_on=active_day)
            self.repository.save_statistics(user_id, updated)
        self.feed.publish(user_id, updated)
        return updated

    def today(self) -> date:
        return datetime.now(tz=ZoneInfo(self.timezone_name)).date()

    def _lock_for(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock


def _with_streak(statistics: UserStatistics, streak: int) -> UserStatistics:
    return replace(
        statistics,
        current_streak=streak,
        longest_streak=max(statistics.longest_streak, streak),
    )
