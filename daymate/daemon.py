"""Background daemon for DayMate - fires due alarms and drives the pomodoro timer."""

import logging
import os
import signal
import sqlite3
import sys
import time
from datetime import datetime
from typing import Callable, Optional

from .config import ConfigManager
from .delivery import ReminderDeliveryHandler
from .errors import DayMateError
from .notifier import NotificationPresenter, build_presenter
from .persistence import JsonFileStore, TimerPersistence
from .scheduler import ReminderScheduler
from .session import PomodoroSession
from .storage import SqliteAlarmRegistry
from .timeutils import local_now

logger = logging.getLogger(__name__)


class AlarmDispatcher:
    """Delivers due alarms from the registry, one at a time."""

    def __init__(self, registry: SqliteAlarmRegistry, handler: ReminderDeliveryHandler):
        """Initialize dispatcher.

        Args:
            registry: Registry holding pending alarms
            handler: Delivery callback for fired alarms
        """
        self.registry = registry
        self.handler = handler

    def dispatch_due(self, now: datetime) -> int:
        """Deliver every alarm due at now.

        Args:
            now: Current aware instant

        Returns:
            Number of notifications posted
        """
        delivered = 0
        for alarm in self.registry.due(now):
            if self.handler.on_deliver(alarm.payload):
                delivered += 1
            next_fire = self.registry.complete(alarm, now)
            if next_fire is not None:
                logger.info(f"Alarm {alarm.alarm_id} re-armed for {next_fire.isoformat()}")
        return delivered


class ReminderDaemon:
    """Background process that fires reminders and counts the timer down."""

    def __init__(
        self,
        config_manager: ConfigManager,
        presenter: Optional[NotificationPresenter] = None,
        now: Callable[[], datetime] = local_now,
    ):
        """Initialize daemon.

        Args:
            config_manager: Configuration manager instance
            presenter: Notification presenter (picked from config when omitted)
            now: Clock returning the current aware datetime
        """
        self.config_manager = config_manager
        self.config = config_manager.load()
        self._now = now

        self.registry = SqliteAlarmRegistry(config_manager.db_file)
        self.scheduler = ReminderScheduler(self.registry, now=now)
        self.session = PomodoroSession(
            TimerPersistence(JsonFileStore(config_manager.state_file)),
            self.scheduler,
            self.config.timer,
            now=now,
        )
        self.handler = ReminderDeliveryHandler(presenter or build_presenter(self.config.telegram))
        self.dispatcher = AlarmDispatcher(self.registry, self.handler)

        self._running = False

    def _signal_handler(self, signum, frame):
        """Handle termination signals."""
        logger.info(f"Received signal {signum}, stopping daemon")
        self._running = False

    def _daemonize(self) -> None:
        """Fork process to background."""
        # First fork
        try:
            pid = os.fork()
            if pid > 0:
                # Parent exits
                sys.exit(0)
        except OSError as e:
            logger.error(f"First fork failed: {e}")
            sys.exit(1)

        # Decouple from parent
        os.chdir("/")
        os.setsid()
        os.umask(0)

        # Second fork
        try:
            pid = os.fork()
            if pid > 0:
                sys.exit(0)
        except OSError as e:
            logger.error(f"Second fork failed: {e}")
            sys.exit(1)

        sys.stdout.flush()
        sys.stderr.flush()

        with open("/dev/null", "r") as devnull:
            os.dup2(devnull.fileno(), sys.stdin.fileno())
        with open("/dev/null", "w") as devnull:
            os.dup2(devnull.fileno(), sys.stdout.fileno())
            os.dup2(devnull.fileno(), sys.stderr.fileno())

    def prepare(self) -> None:
        """Cold-start work: re-arm an ongoing break and the daily reminder."""
        self.session.restore()
        reminders = self.config.reminders
        if reminders.daily_enabled:
            self.scheduler.schedule_daily_reminder(reminders.daily_hour, reminders.daily_minute)
        else:
            self.scheduler.cancel_daily_reminder()

    def run_once(self, elapsed_millis: int) -> None:
        """One loop iteration: fire due alarms, then advance the timer.

        Args:
            elapsed_millis: Time since the previous iteration
        """
        try:
            self.dispatcher.dispatch_due(self._now())
        except (DayMateError, sqlite3.Error) as e:
            logger.error(f"Alarm dispatch failed: {e}")

        try:
            self.session.advance(elapsed_millis)
        except (DayMateError, sqlite3.Error) as e:
            logger.error(f"Timer update failed: {e}")

    def start(self, daemonize: bool = True) -> None:
        """Start the daemon.

        Args:
            daemonize: Whether to fork to background

        Raises:
            RuntimeError: if a daemon is already running
        """
        existing_pid = self.config_manager.get_pid()
        if existing_pid:
            raise RuntimeError(f"Daemon already running (PID {existing_pid})")

        if daemonize:
            self._daemonize()
        self.config_manager.set_pid(os.getpid())

        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        self._running = True
        try:
            self.prepare()
            self._run_loop()
        finally:
            self._cleanup()

    def _run_loop(self) -> None:
        """Main loop."""
        interval = self.config.reminders.poll_interval_seconds
        last = time.monotonic()
        while self._running:
            time.sleep(interval)
            current = time.monotonic()
            elapsed_millis = int((current - last) * 1000)
            last = current
            self.run_once(elapsed_millis)

    def _cleanup(self) -> None:
        """Clean up on exit."""
        self.config_manager.clear_pid()
        logger.info("Daemon stopped")

    def stop(self) -> bool:
        """Stop the running daemon.

        Returns:
            True if the daemon was stopped, False if not running
        """
        pid = self.config_manager.get_pid()
        if not pid:
            return False

        try:
            os.kill(pid, signal.SIGTERM)
            # Wait for process to exit
            for _ in range(10):
                time.sleep(0.1)
                try:
                    os.kill(pid, 0)
                except ProcessLookupError:
                    break
            self.config_manager.clear_pid()
            return True
        except ProcessLookupError:
            self.config_manager.clear_pid()
            return False
        except PermissionError as e:
            logger.error(f"Failed to stop daemon: {e}")
            return False
