"""Configuration management for DayMate."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import toml

from .errors import AppConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class TelegramConfig:
    """Telegram bot configuration."""
    bot_token: str = ""
    chat_id: str = ""
    enabled: bool = False


@dataclass
class TimerConfig:
    """Timer duration settings."""
    work_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    long_break_after: int = 4  # work sessions before a long break


@dataclass
class ReminderConfig:
    """Reminder scheduling settings."""
    daily_enabled: bool = True
    daily_hour: int = 10
    daily_minute: int = 0
    poll_interval_seconds: float = 5.0


@dataclass
class Config:
    """Main application configuration."""
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    timer: TimerConfig = field(default_factory=TimerConfig)
    reminders: ReminderConfig = field(default_factory=ReminderConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create Config from dictionary."""
        telegram_data = data.get("telegram", {})
        timer_data = data.get("timer", {})
        reminder_data = data.get("reminders", {})

        return cls(
            telegram=TelegramConfig(
                bot_token=telegram_data.get("bot_token", ""),
                chat_id=str(telegram_data.get("chat_id", "")),
                enabled=telegram_data.get("enabled", False),
            ),
            timer=TimerConfig(
                work_minutes=timer_data.get("work_minutes", 25),
                short_break_minutes=timer_data.get("short_break_minutes", 5),
                long_break_minutes=timer_data.get("long_break_minutes", 15),
                long_break_after=timer_data.get("long_break_after", 4),
            ),
            reminders=ReminderConfig(
                daily_enabled=reminder_data.get("daily_enabled", True),
                daily_hour=reminder_data.get("daily_hour", 10),
                daily_minute=reminder_data.get("daily_minute", 0),
                poll_interval_seconds=reminder_data.get("poll_interval_seconds", 5.0),
            ),
        )

    def to_dict(self) -> dict:
        """Convert Config to dictionary."""
        return {
            "telegram": {
                "bot_token": self.telegram.bot_token,
                "chat_id": self.telegram.chat_id,
                "enabled": self.telegram.enabled,
            },
            "timer": {
                "work_minutes": self.timer.work_minutes,
                "short_break_minutes": self.timer.short_break_minutes,
                "long_break_minutes": self.timer.long_break_minutes,
                "long_break_after": self.timer.long_break_after,
            },
            "reminders": {
                "daily_enabled": self.reminders.daily_enabled,
                "daily_hour": self.reminders.daily_hour,
                "daily_minute": self.reminders.daily_minute,
                "poll_interval_seconds": self.reminders.poll_interval_seconds,
            },
        }

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            AppConfigurationError: if any value is out of range
        """
        for name in ("work_minutes", "short_break_minutes", "long_break_minutes", "long_break_after"):
            value = getattr(self.timer, name)
            if not isinstance(value, int) or value <= 0:
                raise AppConfigurationError(f"timer.{name} must be a positive integer, got {value!r}")
        hour = self.reminders.daily_hour
        if not isinstance(hour, int) or not 0 <= hour <= 23:
            raise AppConfigurationError(f"reminders.daily_hour must be 0-23, got {hour!r}")
        minute = self.reminders.daily_minute
        if not isinstance(minute, int) or not 0 <= minute <= 59:
            raise AppConfigurationError(f"reminders.daily_minute must be 0-59, got {minute!r}")
        interval = self.reminders.poll_interval_seconds
        if not isinstance(interval, (int, float)) or interval <= 0:
            raise AppConfigurationError(
                f"reminders.poll_interval_seconds must be a number greater than zero, got {interval!r}"
            )


class ConfigManager:
    """Manages configuration file operations."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize config manager.

        Args:
            config_dir: Override config directory (for testing)
        """
        if config_dir is None:
            env_dir = os.getenv("DAYMATE_HOME")
            self.config_dir = Path(env_dir).expanduser() if env_dir else Path.home() / ".daymate"
        else:
            self.config_dir = config_dir

        self.config_file = self.config_dir / "config.toml"
        self.db_file = self.config_dir / "daymate.db"
        self.state_file = self.config_dir / "timer.state"
        self.pid_file = self.config_dir / "daemon.pid"

    def ensure_dirs(self) -> None:
        """Create config directory if it doesn't exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load(self) -> Config:
        """Load configuration from file.

        Returns:
            Config object with loaded or default values

        Raises:
            AppConfigurationError: if the file holds out-of-range values
        """
        if not self.config_file.exists():
            return Config()

        try:
            data = toml.load(self.config_file)
            config = Config.from_dict(data)
        except (toml.TomlDecodeError, OSError, ValueError) as e:
            logger.warning(f"Failed to read {self.config_file}, using defaults: {e}")
            return Config()

        config.validate()
        return config

    def save(self, config: Config) -> None:
        """Save configuration to file.

        Args:
            config: Configuration to save
        """
        self.ensure_dirs()
        with open(self.config_file, "w") as f:
            toml.dump(config.to_dict(), f)

    def is_configured(self) -> bool:
        """Check if initial setup has been completed."""
        return self.config_file.exists()

    def get_pid(self) -> Optional[int]:
        """Get the PID of the running daemon.

        Returns:
            PID if the daemon is running, None otherwise
        """
        if not self.pid_file.exists():
            return None

        try:
            pid = int(self.pid_file.read_text().strip())
            # Check if process is actually running
            os.kill(pid, 0)
            return pid
        except (ValueError, ProcessLookupError, PermissionError):
            # Process doesn't exist or PID file is invalid
            self.pid_file.unlink(missing_ok=True)
            return None

    def set_pid(self, pid: int) -> None:
        """Save daemon PID.

        Args:
            pid: Process ID to save
        """
        self.ensure_dirs()
        self.pid_file.write_text(str(pid))

    def clear_pid(self) -> None:
        """Remove PID file."""
        self.pid_file.unlink(missing_ok=True)
