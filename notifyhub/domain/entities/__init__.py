"""Domain entities exposed by the application."""

from .action_result import ActionResult
from .digest import DigestOutcome, DigestStatus
from .notification import (
    BODY_MAX_LENGTH,
    CATEGORY_GENERAL,
    CATEGORY_MESSAGE,
    CATEGORY_MILESTONE,
    CATEGORY_PROJECT_UPDATE,
    NOTIFICATION_CATEGORIES,
    TITLE_MAX_LENGTH,
    Notification,
)
from .push_event import EVENT_NOTIFICATION, EVENT_UNREAD_COUNT, PushEvent
from .reminder import (
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    PRIORITY_URGENT,
    REMINDER_PRIORITIES,
    Reminder,
)
from .reminder_send_log import ReminderSendLog
from .user import ROLE_ADMIN, ROLE_CLIENT, User

__all__ = [
    "ActionResult",
    "DigestOutcome",
    "DigestStatus",
    "Notification",
    "CATEGORY_PROJECT_UPDATE",
    "CATEGORY_MESSAGE",
    "CATEGORY_MILESTONE",
    "CATEGORY_GENERAL",
    "NOTIFICATION_CATEGORIES",
    "TITLE_MAX_LENGTH",
    "BODY_MAX_LENGTH",
    "PushEvent",
    "EVENT_NOTIFICATION",
    "EVENT_UNREAD_COUNT",
    "Reminder",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "PRIORITY_HIGH",
    "PRIORITY_URGENT",
    "REMINDER_PRIORITIES",
    "ReminderSendLog",
    "User",
    "ROLE_ADMIN",
    "ROLE_CLIENT",
]
