"""Display formatting for DayMate - progress bars, alarm lists and timelines."""

from typing import Optional

import click

from .config import TimerConfig
from .models import Alarm, ReminderKind, Recurrence, TimelineEvent, TimerMode, TimerState
from .timeutils import from_millis, hour_label


def format_time(seconds: int) -> str:
    """Format seconds as MM:SS.

    Args:
        seconds: Number of seconds

    Returns:
        Formatted time string
    """
    minutes = seconds // 60
    secs = seconds % 60
    return f"{minutes:02d}:{secs:02d}"


def progress_bar(current: int, total: int, width: int = 20, filled: str = "█", empty: str = "░") -> str:
    """Create an ASCII progress bar.

    Args:
        current: Current value
        total: Total value
        width: Width of the bar in characters
        filled: Character for filled portion
        empty: Character for empty portion

    Returns:
        Progress bar string
    """
    if total == 0:
        return empty * width

    ratio = min(current / total, 1.0)
    filled_width = int(width * ratio)
    empty_width = width - filled_width
    return filled * filled_width + empty * empty_width


def print_header(text: str) -> None:
    """Print a styled header.

    Args:
        text: Header text
    """
    width = 50
    click.echo()
    click.echo("═" * width)
    click.echo(f" {text}")
    click.echo("═" * width)


def print_subheader(text: str) -> None:
    """Print a styled subheader."""
    click.echo()
    click.echo(f"── {text} ──")


def _period_seconds(state: TimerState, config_timer: TimerConfig) -> int:
    # Snapshots only keep the remaining time, so the period length comes from config.
    if state.mode == TimerMode.BREAK:
        longest = config_timer.long_break_minutes * 60
        if state.remaining_seconds > config_timer.short_break_minutes * 60:
            return longest
        return config_timer.short_break_minutes * 60
    return config_timer.work_minutes * 60


def print_timer_status(
    state: TimerState,
    config_timer: Optional[TimerConfig] = None,
    completed_sessions: int = 0,
) -> None:
    """Print current timer status.

    Args:
        state: Current timer state
        config_timer: Timer configuration for total time calculation
        completed_sessions: Work sessions completed since the last long break
    """
    time_str = format_time(state.remaining_seconds)

    if state.mode == TimerMode.PAUSED:
        click.secho("\n⏸  PAUSED", fg="yellow", bold=True)
    elif state.mode == TimerMode.WORK:
        click.secho("\n🍅 WORK", fg="red", bold=True)
    else:
        click.secho("\n☕ BREAK", fg="green", bold=True)

    click.echo(f"\n   {time_str}")

    if config_timer:
        total_seconds = _period_seconds(state, config_timer)
        elapsed = max(0, total_seconds - state.remaining_seconds)
        bar = progress_bar(elapsed, total_seconds, width=30)
        click.echo(f"   [{bar}]")

    click.echo(f"\n   Sessions since long break: {completed_sessions}")


def describe_alarm(alarm: Alarm) -> str:
    """One-line description of a registered alarm."""
    fire_at = from_millis(alarm.fire_at_millis)
    when = f"{fire_at.strftime('%Y-%m-%d %H:%M')} ({hour_label(fire_at)})"
    payload = alarm.payload
    if payload.kind == ReminderKind.TODO:
        what = f"todo #{payload.subject_id}: {payload.title}"
    elif payload.kind == ReminderKind.POMODORO_BREAK:
        what = payload.title
    else:
        what = f"daily: {payload.title}"
    repeat = " ↻" if alarm.recurrence == Recurrence.DAILY else ""
    return f"{when}  {what}{repeat}"


def print_alarms(alarms: list[Alarm]) -> None:
    """Print pending alarms.

    Args:
        alarms: Alarms ordered by fire time
    """
    if not alarms:
        click.echo("No pending reminders.")
        return

    print_subheader("Pending reminders")
    for alarm in alarms:
        click.echo(f"  {describe_alarm(alarm)}")


def print_timeline(events: list[TimelineEvent]) -> None:
    """Print the prayer timeline.

    Args:
        events: Timeline events ordered by time
    """
    if not events:
        click.echo("No prayer times given.")
        return

    print_header("Prayer Timeline")
    for event in events:
        click.echo(f"  {event.time_label:>5}  {event.time_range}  {event.title}")


def print_setup_complete() -> None:
    """Print setup completion message."""
    click.echo()
    click.secho("✓ Setup complete!", fg="green", bold=True)
    click.echo()
    click.echo("Get started:")
    click.echo("  daymate daemon       - Run reminders in the background")
    click.echo("  daymate start        - Start a pomodoro")
    click.echo("  daymate remind add   - Remind me about a todo")
    click.echo("  daymate --help       - See all commands")
