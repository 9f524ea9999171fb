"""Countdown timer state machine backing the lock-screen widget."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

SECONDS_PER_MINUTE = 60


class TimerPhase(StrEnum):
    """Lifecycle phase of a countdown."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TimerAttributes:
    """Static data shown for the whole lifetime of a countdown."""

    activity_id: str
    activity_name: str
    activity_icon: str
    total_duration_minutes: int


@dataclass(frozen=True)
class TimerState:
    """Dynamic countdown data published on every change."""

    activity_id: str
    remaining_seconds: int
    is_paused: bool
    last_update_time: datetime
    phase: TimerPhase


@dataclass
class CountdownTimer:
    """Wall-clock driven countdown for a single activity.

    Remaining time is derived from the running time accumulated since start,
    with paused intervals excluded, so a late or missed wakeup never drifts the
    displayed value away from real elapsed time.
    """

    attributes: TimerAttributes
    remaining_seconds: int
    last_update_time: datetime
    phase: TimerPhase = TimerPhase.RUNNING
    _accumulated_seconds: float = field(default=0.0, repr=False)
    _segment_started_at: datetime | None = field(default=None, repr=False)

    @classmethod
    def start(cls, attributes: TimerAttributes, now: datetime) -> "CountdownTimer":
        total = attributes.total_duration_minutes * SECONDS_PER_MINUTE
        return cls(
            attributes=attributes,
            remaining_seconds=total,
            last_update_time=now,
            _segment_started_at=now,
        )

    @property
    def total_seconds(self) -> int:
        return self.attributes.total_duration_minutes * SECONDS_PER_MINUTE

    @property
    def is_paused(self) -> bool:
        return self.phase == TimerPhase.PAUSED

    def tick(self, now: datetime) -> TimerState:
        """Advance the countdown to ``now`` and return the published state."""
        if self.phase != TimerPhase.RUNNING:
            return self.snapshot()
        self.remaining_seconds = min(self.remaining_seconds, self._remaining_at(now))
        self.last_update_time = now
        if self.remaining_seconds == 0:
            self._accumulated_seconds = float(self.total_seconds)
            self._segment_started_at = None
            self.phase = TimerPhase.COMPLETED
        return self.snapshot()

    def pause(self, now: datetime) -> TimerState:
        if self.phase == TimerPhase.RUNNING:
            self.remaining_seconds = min(self.remaining_seconds, self._remaining_at(now))
            self._accumulated_seconds = self._elapsed_at(now)
            self._segment_started_at = None
            self.phase = TimerPhase.PAUSED
            self.last_update_time = now
        return self.snapshot()

    def resume(self, now: datetime) -> TimerState:
        if self.phase == TimerPhase.PAUSED:
            self._segment_started_at = now
            self.phase = TimerPhase.RUNNING
            self.last_update_time = now
        return self.snapshot()

    def complete(self, now: datetime) -> TimerState:
        """Force the countdown to zero."""
        self.remaining_seconds = 0
        self._accumulated_seconds = float(self.total_seconds)
        self._segment_started_at = None
        self.phase = TimerPhase.COMPLETED
        self.last_update_time = now
        return self.snapshot()

    def snapshot(self) -> TimerState:
        return TimerState(
            activity_id=self.attributes.activity_id,
            remaining_seconds=self.remaining_seconds,
            is_paused=self.is_paused,
            last_update_time=self.last_update_time,
            phase=self.phase,
        )

    def _elapsed_at(self, now: datetime) -> float:
        elapsed = self._accumulated_seconds
        if self._segment_started_at is not None:
            elapsed += max(0.0, (now - self._segment_started_at).total_seconds())
        return elapsed

    def _remaining_at(self, now: datetime) -> int:
        return max(0, self.total_seconds - int(self._elapsed_at(now)))
