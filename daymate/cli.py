"""Main CLI entry point for DayMate - reminders and a pomodoro timer with Telegram notifications."""

import logging
from typing import Optional

import click

from . import __version__
from .config import Config, ConfigManager
from .daemon import ReminderDaemon
from .delivery import ReminderDeliveryHandler
from .display import (
    print_alarms,
    print_header,
    print_setup_complete,
    print_subheader,
    print_timeline,
    print_timer_status,
)
from .errors import AppConfigurationError, ParseError
from .models import DAILY_REMINDER_ID, ReminderKind, ReminderPayload, TimerMode, Todo
from .notifier import TelegramNotifier, build_presenter, check_connection_sync
from .persistence import JsonFileStore, TimerPersistence
from .scheduler import ReminderScheduler
from .session import PomodoroSession
from .storage import SqliteAlarmRegistry
from .timeline import build_prayer_timeline

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: int, log_file: Optional[str] = None) -> None:
    """Configure root logging for the CLI or the daemon."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        filename=log_file,
        force=True,
    )


def get_config_manager(ctx: click.Context) -> ConfigManager:
    """Get the config manager created by the main group."""
    return ctx.ensure_object(dict).setdefault("config_manager", ConfigManager())


def load_config(ctx: click.Context) -> Config:
    """Load configuration, exiting with an error when it is unusable."""
    try:
        return get_config_manager(ctx).load()
    except AppConfigurationError as e:
        click.secho(f"Error: {e}", fg="red")
        ctx.exit(1)


def require_setup(ctx: click.Context) -> None:
    """Ensure setup has been completed."""
    if not get_config_manager(ctx).is_configured():
        click.echo("DayMate is not configured. Run 'daymate setup' first.")
        ctx.exit(1)


def get_registry(ctx: click.Context) -> SqliteAlarmRegistry:
    """Get the alarm registry shared with the daemon."""
    return SqliteAlarmRegistry(get_config_manager(ctx).db_file)


def get_scheduler(ctx: click.Context) -> ReminderScheduler:
    """Get a scheduler over the alarm registry."""
    return ReminderScheduler(get_registry(ctx))


def get_session(ctx: click.Context) -> PomodoroSession:
    """Get the pomodoro session shared with the daemon."""
    cm = get_config_manager(ctx)
    config = load_config(ctx)
    return PomodoroSession(
        TimerPersistence(JsonFileStore(cm.state_file)),
        get_scheduler(ctx),
        config.timer,
    )


def warn_if_daemon_stopped(ctx: click.Context) -> None:
    if not get_config_manager(ctx).get_pid():
        click.secho("Daemon is not running; run 'daymate daemon' to count down and send reminders.", fg="yellow")


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, version: bool, verbose: bool) -> None:
    """DayMate - to-do reminders, a daily nudge and a pomodoro timer.

    Use 'daymate daemon' to run reminders in the background and 'daymate start'
    to begin a pomodoro.
    """
    if verbose:
        setup_logging(logging.DEBUG)
    ctx.ensure_object(dict)
    get_config_manager(ctx)

    if version:
        click.echo(f"daymate {__version__}")
        return

    if ctx.invoked_subcommand is None:
        if not get_config_manager(ctx).is_configured():
            click.echo("Welcome to DayMate!")
            click.echo("Run 'daymate setup' to configure.")
            return

        ctx.invoke(status)


# ============================================================================
# Setup Command
# ============================================================================

@main.command()
@click.option("--telegram-token", prompt=False, help="Telegram bot token")
@click.option("--telegram-chat-id", prompt=False, help="Telegram chat ID")
@click.pass_context
def setup(ctx: click.Context, telegram_token: Optional[str], telegram_chat_id: Optional[str]) -> None:
    """Configure DayMate settings interactively."""
    cm = get_config_manager(ctx)
    config = load_config(ctx)

    print_header("DayMate Setup")

    click.echo("\nTelegram notifications (optional)")
    click.echo("To get a bot token, message @BotFather on Telegram")
    click.echo("To get your chat ID, message @userinfobot")

    if telegram_token is None:
        telegram_token = click.prompt(
            "Bot token",
            default=config.telegram.bot_token or "",
            show_default=False,
        )

    if telegram_chat_id is None:
        telegram_chat_id = click.prompt(
            "Chat ID",
            default=config.telegram.chat_id or "",
            show_default=False,
        )

    config.telegram.bot_token = telegram_token.strip()
    config.telegram.chat_id = telegram_chat_id.strip()
    config.telegram.enabled = bool(config.telegram.bot_token and config.telegram.chat_id)

    if config.telegram.enabled:
        click.echo("\nTesting Telegram connection...")
        success, message = check_connection_sync(config.telegram)
        if success:
            click.secho(f"✓ {message}", fg="green")
        else:
            click.secho(f"✗ {message}", fg="red")
            if not click.confirm("Save anyway?", default=True):
                config.telegram.enabled = False

    print_subheader("Timer Settings")
    click.echo(f"Work duration: {config.timer.work_minutes} minutes")
    click.echo(f"Short break: {config.timer.short_break_minutes} minutes")
    click.echo(f"Long break: {config.timer.long_break_minutes} minutes")

    if click.confirm("Customize timer durations?", default=False):
        config.timer.work_minutes = click.prompt(
            "Work duration (minutes)", default=config.timer.work_minutes, type=click.IntRange(min=1)
        )
        config.timer.short_break_minutes = click.prompt(
            "Short break (minutes)", default=config.timer.short_break_minutes, type=click.IntRange(min=1)
        )
        config.timer.long_break_minutes = click.prompt(
            "Long break (minutes)", default=config.timer.long_break_minutes, type=click.IntRange(min=1)
        )

    cm.save(config)
    print_setup_complete()


# ============================================================================
# Daemon Commands
# ============================================================================

@main.command()
@click.option("--foreground", "-f", is_flag=True, help="Run in the foreground instead of forking")
@click.pass_context
def daemon(ctx: click.Context, foreground: bool) -> None:
    """Start the background reminder daemon."""
    require_setup(ctx)

    cm = get_config_manager(ctx)
    config = load_config(ctx)

    if foreground:
        click.echo("Running in foreground. Press Ctrl+C to stop.")
    else:
        if not TelegramNotifier(config.telegram).enabled:
            click.secho(
                "Telegram is not configured: reminders from the background daemon only go to "
                f"{cm.config_dir / 'daemon.log'}. Run 'daymate setup' or use --foreground.",
                fg="yellow",
            )
        cm.ensure_dirs()
        setup_logging(logging.INFO, str(cm.config_dir / "daemon.log"))
        click.echo("Daemon starting in background. Use 'daymate stop' to stop it.")

    try:
        ReminderDaemon(cm).start(daemonize=not foreground)
    except RuntimeError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)


@main.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Stop the background daemon."""
    cm = get_config_manager(ctx)
    pid = cm.get_pid()
    if not pid:
        click.echo("Daemon is not running.")
        return

    if ReminderDaemon(cm).stop():
        click.echo("Daemon stopped.")
    else:
        click.echo(f"Could not stop daemon (PID {pid}).")


# ============================================================================
# Timer Commands
# ============================================================================

@main.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show timer status and pending reminders."""
    config = load_config(ctx)
    session = get_session(ctx)

    print_timer_status(session.status(), config.timer, session.completed_sessions)

    pid = get_config_manager(ctx).get_pid()
    click.echo(f"\n   Daemon: {'running (PID ' + str(pid) + ')' if pid else 'stopped'}")

    print_alarms(get_registry(ctx).list_alarms())


@main.command()
@click.pass_context
def start(ctx: click.Context) -> None:
    """Start or resume a work period."""
    state = get_session(ctx).start()
    click.echo("Work period started.")
    print_timer_status(state, load_config(ctx).timer)
    warn_if_daemon_stopped(ctx)


@main.command()
@click.pass_context
def pause(ctx: click.Context) -> None:
    """Pause the timer."""
    state = get_session(ctx).pause()
    click.echo("Timer paused. Use 'daymate start' to continue.")
    print_timer_status(state, load_config(ctx).timer)


@main.command()
@click.pass_context
def skip(ctx: click.Context) -> None:
    """Skip the current work or break period."""
    session = get_session(ctx)
    before = session.status()
    state = session.skip()
    if before.mode == TimerMode.PAUSED:
        click.echo("Timer is paused; nothing to skip.")
        return
    click.echo("Skipped to next period.")
    print_timer_status(state, load_config(ctx).timer, session.completed_sessions)


@main.command()
@click.pass_context
def reset(ctx: click.Context) -> None:
    """Reset the timer to a fresh work period."""
    state = get_session(ctx).reset()
    click.echo("Timer reset.")
    print_timer_status(state, load_config(ctx).timer)


# ============================================================================
# Reminder Commands
# ============================================================================

@main.group()
def remind() -> None:
    """Manage reminders."""
    pass


@remind.command(name="add")
@click.argument("todo_id", type=click.IntRange(min=0))
@click.argument("title")
@click.option("--date", "-d", "date_str", required=True, help="Date in YYYY-MM-DD format")
@click.option("--time", "-t", "time_str", required=True, help="Time in HH:MM format")
@click.option("--description", default="", help="Reminder text")
@click.pass_context
def remind_add(
    ctx: click.Context,
    todo_id: int,
    title: str,
    date_str: str,
    time_str: str,
    description: str,
) -> None:
    """Remind about a to-do at a date and time."""
    todo = Todo(
        id=todo_id,
        title=title,
        description=description,
        date=date_str,
        time=time_str,
        remind_me=True,
    )
    try:
        scheduled = get_scheduler(ctx).schedule(todo)
    except ParseError as e:
        click.secho(f"Error: {e}", fg="red")
        ctx.exit(1)

    if scheduled:
        click.secho(f"✓ Reminder set for {date_str} {time_str}: {title}", fg="green")
        warn_if_daemon_stopped(ctx)
    else:
        click.echo(f"{date_str} {time_str} is in the past; no reminder set.")


@remind.command(name="cancel")
@click.argument("todo_id", type=click.IntRange(min=0))
@click.pass_context
def remind_cancel(ctx: click.Context, todo_id: int) -> None:
    """Cancel the reminder of a to-do."""
    get_scheduler(ctx).cancel(todo_id)
    click.echo(f"Reminder for to-do #{todo_id} cancelled.")


@remind.command(name="daily")
@click.option("--hour", type=click.IntRange(0, 23), default=None, help="Hour of day (0-23)")
@click.option("--minute", type=click.IntRange(0, 59), default=None, help="Minute (0-59)")
@click.option("--off", is_flag=True, help="Turn the daily reminder off")
@click.pass_context
def remind_daily(ctx: click.Context, hour: Optional[int], minute: Optional[int], off: bool) -> None:
    """Set or turn off the daily planning reminder."""
    cm = get_config_manager(ctx)
    config = load_config(ctx)
    scheduler = get_scheduler(ctx)

    if off:
        config.reminders.daily_enabled = False
        cm.save(config)
        scheduler.cancel_daily_reminder()
        click.echo("Daily reminder turned off.")
        return

    if hour is not None:
        config.reminders.daily_hour = hour
    if minute is not None:
        config.reminders.daily_minute = minute
    config.reminders.daily_enabled = True
    cm.save(config)

    fire_at = scheduler.schedule_daily_reminder(config.reminders.daily_hour, config.reminders.daily_minute)
    click.secho(
        f"✓ Daily reminder at {config.reminders.daily_hour:02d}:{config.reminders.daily_minute:02d}, "
        f"next on {fire_at.strftime('%Y-%m-%d')}",
        fg="green",
    )


@remind.command(name="list")
@click.pass_context
def remind_list(ctx: click.Context) -> None:
    """List pending reminders."""
    print_alarms(get_registry(ctx).list_alarms())


# ============================================================================
# Prayer Timeline
# ============================================================================

@main.command()
@click.argument("timings", nargs=-1, required=True)
@click.pass_context
def prayers(ctx: click.Context, timings: tuple[str, ...]) -> None:
    """Show today's prayer timeline from NAME=TIME pairs, e.g. Fajr=04:56."""
    parsed = {}
    for item in timings:
        name, sep, value = item.partition("=")
        if not sep or not value.strip():
            raise click.BadParameter(f"expected NAME=TIME, got {item!r}", param_hint="TIMINGS")
        parsed[name.strip().capitalize()] = value.strip()

    try:
        events = build_prayer_timeline(parsed)
    except ParseError as e:
        click.secho(f"Error: {e}", fg="red")
        ctx.exit(1)

    print_timeline(events)


# ============================================================================
# Notifications
# ============================================================================

@main.command(name="notify-test")
@click.pass_context
def notify_test(ctx: click.Context) -> None:
    """Send a test notification through the configured channel."""
    config = load_config(ctx)
    handler = ReminderDeliveryHandler(build_presenter(config.telegram))
    payload = ReminderPayload(
        subject_id=DAILY_REMINDER_ID,
        title="DayMate",
        description="Notifications are working.",
        kind=ReminderKind.DAILY,
    )
    if handler.on_deliver(payload):
        click.secho("✓ Test notification sent", fg="green")
    else:
        click.secho("✗ Test notification was not delivered", fg="red")
        ctx.exit(1)


if __name__ == "__main__":
    main()
