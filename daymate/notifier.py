"""Notification presenters: Telegram chat messages and console output."""

import asyncio
import html
import logging
from typing import Protocol

import click
from telegram import Bot
from telegram.error import TelegramError

from .config import TelegramConfig

logger = logging.getLogger(__name__)


class NotificationPresenter(Protocol):
    """Shows user-visible notifications keyed by a notification id."""

    def ensure_channel(self) -> bool:
        ...

    def post(self, notification_id: int, title: str, body: str) -> bool:
        ...


def format_message(title: str, body: str) -> str:
    """Render a notification as Telegram HTML."""
    text = f"🔔 <b>{html.escape(title)}</b>"
    if body:
        text += f"\n\n{html.escape(body)}"
    return text


class TelegramNotifier:
    """Posts notifications to a Telegram chat.

    Posting again with the same notification id deletes the previous message
    first, so repeated reminders replace each other instead of piling up.
    """

    def __init__(self, config: TelegramConfig):
        """Initialize notifier with config.

        Args:
            config: Telegram configuration
        """
        self.config = config
        self._posted: dict[int, int] = {}

    @property
    def enabled(self) -> bool:
        """Check if Telegram notifications are enabled and configured."""
        return (
            self.config.enabled
            and bool(self.config.bot_token)
            and bool(self.config.chat_id)
        )

    def ensure_channel(self) -> bool:
        """Check the chat can receive notifications. Safe to call repeatedly."""
        if not self.enabled:
            logger.warning("Telegram notifications are not configured")
            return False
        return True

    async def _send(self, notification_id: int, text: str) -> None:
        async with Bot(token=self.config.bot_token) as bot:
            previous = self._posted.get(notification_id)
            if previous is not None:
                try:
                    await bot.delete_message(chat_id=self.config.chat_id, message_id=previous)
                except TelegramError as e:
                    logger.debug(f"Could not remove previous message {previous}: {e}")
            message = await bot.send_message(
                chat_id=self.config.chat_id,
                text=text,
                parse_mode="HTML",
            )
            self._posted[notification_id] = message.message_id

    def post(self, notification_id: int, title: str, body: str) -> bool:
        """Send a notification to the configured chat.

        Args:
            notification_id: Key identifying the notification
            title: Notification title
            body: Notification text

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.enabled:
            return False

        try:
            asyncio.run(self._send(notification_id, format_message(title, body)))
            return True
        except (TelegramError, RuntimeError, OSError) as e:
            logger.error(f"Failed to send notification {notification_id}: {e}")
            return False


class ConsoleNotifier:
    """Prints notifications to the terminal and the log.

    A backgrounded daemon has no terminal, so the log line is the only
    record of the notification there.
    """

    def ensure_channel(self) -> bool:
        return True

    def post(self, notification_id: int, title: str, body: str) -> bool:
        text = f"{title} - {body}" if body else title
        logger.info(f"Notification {notification_id}: {text}")
        click.secho(f"\n🔔 {title}", fg="cyan", bold=True)
        if body:
            click.echo(f"   {body}")
        return True


def build_presenter(config: TelegramConfig) -> NotificationPresenter:
    """Pick Telegram when configured, otherwise the console."""
    notifier = TelegramNotifier(config)
    if notifier.enabled:
        return notifier
    return ConsoleNotifier()


async def check_telegram_connection(config: TelegramConfig) -> tuple[bool, str]:
    """Test Telegram bot connection and send test message.

    Args:
        config: Telegram configuration to test

    Returns:
        Tuple of (success, message)
    """
    if not config.bot_token:
        return False, "Bot token not configured"

    if not config.chat_id:
        return False, "Chat ID not configured"

    try:
        async with Bot(token=config.bot_token) as bot:
            me = await bot.get_me()
            await bot.send_message(
                chat_id=config.chat_id,
                text="🔔 <b>DayMate</b>\n\nConnection test successful!",
                parse_mode="HTML",
            )
        return True, f"Connected as @{me.username}"
    except (TelegramError, OSError) as e:
        return False, f"Connection failed: {e}"


def check_connection_sync(config: TelegramConfig) -> tuple[bool, str]:
    """Synchronous wrapper for check_telegram_connection.

    Args:
        config: Telegram configuration to test

    Returns:
        Tuple of (success, message)
    """
    return asyncio.run(check_telegram_connection(config))
