"""Pomodoro session driver: work/break cycling on top of the timer state machine."""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable

from . import timer
from .config import TimerConfig
from .models import TimerMode, TimerState
from .persistence import TimerPersistence
from .scheduler import LONG_BREAK, SHORT_BREAK, ReminderScheduler
from .timeutils import local_now

logger = logging.getLogger(__name__)

KEY_COMPLETED_SESSIONS = "completed_sessions"
KEY_PAUSED_IN_BREAK = "paused_in_break"
RESTORED_BREAK_LABEL = "Break"

ACTIVE_MODES = frozenset({TimerMode.WORK, TimerMode.BREAK})


class PomodoroSession:
    """Drives the persisted timer through work and break periods.

    Every operation reloads the snapshot first, so separate processes (the CLI
    and the daemon) can act on the same session.
    """

    def __init__(
        self,
        persistence: TimerPersistence,
        scheduler: ReminderScheduler,
        config: TimerConfig,
        now: Callable[[], datetime] = local_now,
    ):
        """Initialize session.

        Args:
            persistence: Snapshot storage
            scheduler: Scheduler used for break reminders
            config: Timer durations
            now: Clock returning the current aware datetime
        """
        self.persistence = persistence
        self.scheduler = scheduler
        self.config = config
        self._now = now

    @property
    def work_millis(self) -> int:
        return self.config.work_minutes * 60_000

    @property
    def completed_sessions(self) -> int:
        return self.persistence.get_counter(KEY_COMPLETED_SESSIONS)

    def status(self) -> TimerState:
        """Load the current state.

        Snapshots do not record the running flag; a WORK or BREAK snapshot with
        time left is treated as running.
        """
        state = self.persistence.load()
        if state.mode in ACTIVE_MODES and state.remaining_millis > 0:
            state = replace(state, is_running=True)
        return state

    def _paused_in_break(self, state: TimerState) -> bool:
        # pause() drops the BREAK mode, so the break origin is kept separately.
        return state.mode == TimerMode.PAUSED and self.persistence.get_counter(KEY_PAUSED_IN_BREAK) > 0

    def _save(self, state: TimerState) -> TimerState:
        self.persistence.save(state)
        return state

    def start(self) -> TimerState:
        """Start or resume a work period.

        Starting during a break, or while a break is paused, abandons the break
        and begins a fresh work period. Any pending break reminder is dropped.
        """
        state = self.status()
        self.scheduler.cancel_pomodoro_break()
        if state.mode == TimerMode.BREAK or self._paused_in_break(state) or state.remaining_millis == 0:
            state = timer.reset(state, self.work_millis)

        state = timer.start(state)
        self.persistence.set_counter(KEY_PAUSED_IN_BREAK, 0)
        logger.info(f"Work started: remaining={state.remaining_seconds}s")
        return self._save(state)

    def pause(self) -> TimerState:
        """Pause the timer and drop any pending break reminder."""
        state = self.status()
        if state.mode == TimerMode.BREAK:
            self.scheduler.cancel_pomodoro_break()
            self.persistence.set_counter(KEY_PAUSED_IN_BREAK, 1)
        state = timer.pause(state)
        logger.info(f"Timer paused: remaining={state.remaining_seconds}s")
        return self._save(state)

    def reset(self) -> TimerState:
        """Stop everything and prepare a fresh work period."""
        self.scheduler.cancel_pomodoro_break()
        state = timer.reset(TimerState(), self.work_millis)
        self.persistence.set_counter(KEY_PAUSED_IN_BREAK, 0)
        logger.info("Timer reset")
        return self._save(state)

    def skip(self) -> TimerState:
        """End the current work or break period immediately."""
        state = self.status()
        if state.mode == TimerMode.WORK:
            state = self._finish_work(state)
        elif state.mode == TimerMode.BREAK:
            self.scheduler.cancel_pomodoro_break()
            state = self._finish_break(state)
        else:
            return state
        return self._save(state)

    def advance(self, elapsed_millis: int) -> TimerState:
        """Count a running period down and handle completion.

        Args:
            elapsed_millis: Time elapsed since the previous call

        Returns:
            State after the tick and any resulting transition
        """
        state = self.status()
        if not state.is_running:
            return state

        state = timer.tick(state, elapsed_millis)
        if timer.is_complete(state):
            if state.mode == TimerMode.WORK:
                state = self._finish_work(state)
            elif state.mode == TimerMode.BREAK:
                state = self._finish_break(state)
        return self._save(state)

    def restore(self) -> TimerState:
        """Cold-start recovery: re-arm the break reminder of an ongoing break."""
        state = self.status()
        if state.mode == TimerMode.BREAK and state.is_running:
            fire_at = self._now() + timedelta(milliseconds=state.remaining_millis)
            self.scheduler.schedule_pomodoro_break(fire_at, RESTORED_BREAK_LABEL)
            logger.info(f"Restored break, {state.remaining_seconds}s left")
        return state

    def _finish_work(self, state: TimerState) -> TimerState:
        completed = self.completed_sessions + 1
        if completed >= self.config.long_break_after:
            label = LONG_BREAK
            minutes = self.config.long_break_minutes
            completed = 0
        else:
            label = SHORT_BREAK
            minutes = self.config.short_break_minutes
        self.persistence.set_counter(KEY_COMPLETED_SESSIONS, completed)

        break_millis = minutes * 60_000
        state = timer.enter_break(state, break_millis)
        self.scheduler.schedule_pomodoro_break(
            self._now() + timedelta(milliseconds=break_millis),
            label,
        )
        logger.info(f"Work period complete, {label.lower()} of {minutes} minutes started")
        return state

    def _finish_break(self, state: TimerState) -> TimerState:
        # A break that runs out keeps its alarm so the daemon still delivers
        # "break finished"; start() drops it if it has not fired yet.
        logger.info("Break over")
        return timer.reset(state, self.work_millis)
