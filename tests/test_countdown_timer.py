"""Tests for the countdown timer state machine."""

from datetime import UTC, datetime, timedelta

from dopamine.domain.timers import CountdownTimer, TimerAttributes, TimerPhase

START = datetime(2024, 5, 1, 9, 0, tzinfo=UTC)


def _timer(minutes: int = 1) -> CountdownTimer:
    attributes = TimerAttributes(
        activity_id="1",
        activity_name="5-Min Breathing",
        activity_icon="🧘",
        total_duration_minutes=minutes,
    )
    return CountdownTimer.start(attributes, START)


def test_start_uses_full_duration() -> None:
    state = _timer(5).snapshot()

    assert state.remaining_seconds == 300
    assert state.phase == TimerPhase.RUNNING
    assert not state.is_paused


def test_tick_follows_wall_clock() -> None:
    timer = _timer()

    state = timer.tick(START + timedelta(seconds=42.5))

    assert state.remaining_seconds == 18
    assert state.last_update_time == START + timedelta(seconds=42.5)


def test_remaining_never_increases_while_running() -> None:
    timer = _timer()
    previous = timer.remaining_seconds

    for second in (1, 1, 3, 2, 10, 59):
        state = timer.tick(START + timedelta(seconds=second))
        assert state.remaining_seconds <= previous
        previous = state.remaining_seconds


def test_paused_time_is_excluded() -> None:
    timer = _timer()
    timer.tick(START + timedelta(seconds=10))
    paused = timer.pause(START + timedelta(seconds=20))

    assert paused.is_paused
    assert timer.tick(START + timedelta(seconds=500)).remaining_seconds == 40

    timer.resume(START + timedelta(seconds=500))
    state = timer.tick(START + timedelta(seconds=510))

    assert state.remaining_seconds == 30
    assert state.phase == TimerPhase.RUNNING


def test_reaching_zero_completes() -> None:
    timer = _timer()

    state = timer.tick(START + timedelta(minutes=5))

    assert state.remaining_seconds == 0
    assert state.phase == TimerPhase.COMPLETED
    assert timer.resume(START + timedelta(minutes=6)).phase == TimerPhase.COMPLETED


def test_zero_duration_completes_on_first_tick() -> None:
    timer = _timer(0)

    state = timer.tick(START)

    assert state.remaining_seconds == 0
    assert state.phase == TimerPhase.COMPLETED


def test_complete_forces_zero() -> None:
    timer = _timer(30)

    state = timer.complete(START + timedelta(seconds=5))

    assert state.remaining_seconds == 0
    assert state.phase == TimerPhase.COMPLETED
