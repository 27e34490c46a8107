"""Pomodoro timer state machine.

Every transition is a pure function: it takes a TimerState and returns a new
one, leaving the input untouched. Mode changes beyond start/pause (entering a
break, resetting for the next work period) are driven by the session layer.
"""

from dataclasses import replace

from .models import TimerMode, TimerState


def start(state: TimerState) -> TimerState:
    """Start or resume work, keeping elapsed progress.

    A state with nothing remaining switches to WORK but cannot run.
    """
    return replace(state, mode=TimerMode.WORK, is_running=state.remaining_millis > 0)


def pause(state: TimerState) -> TimerState:
    """Pause the timer, keeping the remaining time."""
    return replace(state, mode=TimerMode.PAUSED, is_running=False)


def tick(state: TimerState, elapsed_millis: int) -> TimerState:
    """Count down by elapsed_millis.

    Args:
        state: Current state
        elapsed_millis: Milliseconds elapsed since the last tick

    Returns:
        New state; reaching zero stops the timer
    """
    if elapsed_millis < 0:
        raise ValueError("elapsed_millis must not be negative")
    if elapsed_millis == 0:
        return state
    remaining = max(0, state.remaining_millis - elapsed_millis)
    return replace(state, remaining_millis=remaining, is_running=remaining > 0)


def is_complete(state: TimerState) -> bool:
    """Check if a timed period has run out."""
    return state.total_millis > 0 and state.remaining_millis == 0


def enter_break(state: TimerState, duration_millis: int) -> TimerState:
    """Begin a running break of the given length."""
    if duration_millis <= 0:
        raise ValueError("break duration must be greater than zero")
    return replace(
        state,
        mode=TimerMode.BREAK,
        total_millis=duration_millis,
        remaining_millis=duration_millis,
        is_running=True,
    )


def reset(state: TimerState, duration_millis: int) -> TimerState:
    """Return a paused state holding a fresh work period."""
    return replace(
        state,
        mode=TimerMode.PAUSED,
        total_millis=duration_millis,
        remaining_millis=duration_millis,
        is_running=False,
    )
