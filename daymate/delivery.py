"""Turns fired alarms into notifications."""

import logging
from typing import Any, Mapping, Union

from .errors import DeliveryFailure
from .models import ReminderKind, ReminderPayload
from .notifier import NotificationPresenter

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Task Reminder"
DEFAULT_TODO_BODY = "You have a task to do"


def _coerce_payload(payload: Union[ReminderPayload, Mapping[str, Any]]) -> ReminderPayload:
    if isinstance(payload, ReminderPayload):
        return payload
    try:
        return ReminderPayload.from_dict(dict(payload))
    except (KeyError, TypeError, ValueError) as e:
        raise DeliveryFailure(f"Malformed reminder payload {payload!r}: {e}") from e


class ReminderDeliveryHandler:
    """Callback target for fired alarms.

    on_deliver never raises. A delivery that cannot be shown is logged and
    dropped, because the caller has no useful way to recover from it.
    """

    def __init__(self, presenter: NotificationPresenter):
        self.presenter = presenter

    def on_deliver(self, payload: Union[ReminderPayload, Mapping[str, Any]]) -> bool:
        """Show the notification for a fired alarm.

        Args:
            payload: Reminder payload, or its dictionary form

        Returns:
            True if a notification was posted
        """
        try:
            reminder = _coerce_payload(payload)
            self.presenter.ensure_channel()

            title = reminder.title or DEFAULT_TITLE
            body = reminder.description
            if reminder.kind == ReminderKind.TODO and not body:
                body = DEFAULT_TODO_BODY

            posted = self.presenter.post(reminder.notification_id, title, body)
        except Exception as e:
            logger.error(f"Dropping reminder delivery: {e}")
            return False

        if posted:
            logger.info(f"Delivered {reminder.kind.value} reminder {reminder.subject_id}: {title}")
        else:
            logger.warning(f"Notification for {reminder.kind.value} reminder {reminder.subject_id} was not shown")
        return posted
