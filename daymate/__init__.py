"""DayMate - to-do reminders and pomodoro breaks with Telegram notifications."""

__version__ = "0.1.0"
