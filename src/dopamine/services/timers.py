"""Live countdowns for in-progress activities.

Each running countdown owns one asyncio task. While the countdown runs the
task ticks on an interval; once the countdown completes the task is replaced
by a dismissal task that tears the countdown down after a short delay.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from dopamine.domain.errors import ValidationError
from dopamine.domain.timers import (
    CountdownTimer,
    TimerAttributes,
    TimerPhase,
    TimerState,
)
from dopamine.services.feeds import ChangeFeed

_logger = logging.getLogger(__name__)


# (user_id, activity_id)
TimerKey = tuple[str, str]


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _LiveCountdown:
    timer: CountdownTimer
    task: asyncio.Task[None] | None = None


@dataclass
class LiveCountdownService:
    """Schedules countdown ticks and publishes every state change.

    Countdowns and their feed entries are keyed by ``(user_id, activity_id)``,
    so one user can never see or control another user's countdown.
    """

    feed: ChangeFeed[TimerState]
    tick_seconds: float = 1.0
    dismissal_seconds: float = 3.0
    clock: Callable[[], datetime] = _utcnow
    _countdowns: dict[TimerKey, _LiveCountdown] = field(
        default_factory=dict, repr=False
    )

    async def start(
        self,
        user_id: str,
        activity_id: str,
        activity_name: str,
        activity_icon: str,
        duration_minutes: int,
    ) -> TimerState:
        """Start a countdown, replacing the user's existing one for the activity."""
        if duration_minutes < 0:
            raise ValidationError("Duration must not be negative")
        key = (user_id, activity_id)
        await self.stop(user_id, activity_id)

        attributes = TimerAttributes(
            activity_id=activity_id,
            activity_name=activity_name,
            activity_icon=activity_icon,
            total_duration_minutes=duration_minutes,
        )
        countdown = _LiveCountdown(timer=CountdownTimer.start(attributes, self.clock()))
        self._countdowns[key] = countdown
        state = countdown.timer.snapshot()
        self.feed.publish(key, state)
        countdown.task = asyncio.create_task(self._run_ticks(key, countdown))
        _logger.info(
            "Countdown started: %s for user %s (%s min)",
            activity_id,
            user_id,
            duration_minutes,
        )
        return state

    async def tick(self, user_id: str, activity_id: str) -> TimerState | None:
        """Recompute the remaining time now; returns None for unknown ids."""
        return self._tick((user_id, activity_id))

    async def pause(self, user_id: str, activity_id: str) -> TimerState | None:
        key = (user_id, activity_id)
        countdown = self._countdowns.get(key)
        if countdown is None or countdown.timer.phase != TimerPhase.RUNNING:
            return self.state(user_id, activity_id)
        _cancel_task(countdown)
        state = countdown.timer.pause(self.clock())
        self.feed.publish(key, state)
        return state

    async def resume(self, user_id: str, activity_id: str) -> TimerState | None:
        key = (user_id, activity_id)
        countdown = self._countdowns.get(key)
        if countdown is None or countdown.timer.phase != TimerPhase.PAUSED:
            return self.state(user_id, activity_id)
        state = countdown.timer.resume(self.clock())
        self.feed.publish(key, state)
        countdown.task = asyncio.create_task(self._run_ticks(key, countdown))
        return state

    async def complete(self, user_id: str, activity_id: str) -> TimerState | None:
        """Force the countdown to zero and dismiss it after the delay."""
        key = (user_id, activity_id)
        countdown = self._countdowns.get(key)
        if countdown is None:
            return None
        if countdown.timer.phase == TimerPhase.COMPLETED:
            return countdown.timer.snapshot()
        state = countdown.timer.complete(self.clock())
        self.feed.publish(key, state)
        _logger.info("Countdown completed: %s for user %s", activity_id, user_id)
        self._schedule_dismissal(key, countdown)
        return state

    async def stop(self, user_id: str, activity_id: str) -> bool:
        """Tear the countdown down immediately."""
        key = (user_id, activity_id)
        countdown = self._countdowns.get(key)
        if countdown is None:
            return False
        self._teardown(key, countdown)
        _logger.info("Countdown stopped: %s for user %s", activity_id, user_id)
        return True

    async def stop_all(self) -> None:
        for user_id, activity_id in list(self._countdowns):
            await self.stop(user_id, activity_id)
        _logger.info("All countdowns stopped")

    def state(self, user_id: str, activity_id: str) -> TimerState | None:
        countdown = self._countdowns.get((user_id, activity_id))
        if countdown is None:
            return None
        return countdown.timer.snapshot()

    def active_keys(self) -> list[TimerKey]:
        return list(self._countdowns)

    def _tick(self, key: TimerKey) -> TimerState | None:
        countdown = self._countdowns.get(key)
        if countdown is None:
            return None
        was_completed = countdown.timer.phase == TimerPhase.COMPLETED
        state = countdown.timer.tick(self.clock())
        self.feed.publish(key, state)
        if state.phase == TimerPhase.COMPLETED and not was_completed:
            _logger.info("Countdown finished: %s", key)
            self._schedule_dismissal(key, countdown)
        return state

    async def _run_ticks(self, key: TimerKey, countdown: _LiveCountdown) -> None:
        while self._countdowns.get(key) is countdown:
            await asyncio.sleep(self.tick_seconds)
            if self._countdowns.get(key) is not countdown:
                return
            state = self._tick(key)
            if state is None or state.phase != TimerPhase.RUNNING:
                return

    def _schedule_dismissal(self, key: TimerKey, countdown: _LiveCountdown) -> None:
        _cancel_task(countdown)
        countdown.task = asyncio.create_task(self._dismiss_later(key, countdown))

    async def _dismiss_later(self, key: TimerKey, countdown: _LiveCountdown) -> None:
        await asyncio.sleep(self.dismissal_seconds)
        if self._countdowns.get(key) is countdown:
            countdown.task = None
            self._teardown(key, countdown)
            _logger.info("Countdown dismissed: %s", key)

    def _teardown(self, key: TimerKey, countdown: _LiveCountdown) -> None:
        _cancel_task(countdown)
        self._countdowns.pop(key, None)
        self.feed.publish(
            key,
            TimerState(
                activity_id=key[1],
                remaining_seconds=countdown.timer.remaining_seconds,
                is_paused=False,
                last_update_time=self.clock(),
                phase=TimerPhase.IDLE,
            ),
        )
        self.feed.discard(key)


def _cancel_task(countdown: _LiveCountdown) -> None:
    task = countdown.task
    countdown.task = None
    if task is not None and task is not asyncio.current_task() and not task.done():
        task.cancel()
