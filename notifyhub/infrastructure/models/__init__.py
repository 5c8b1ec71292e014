"""ORM models used by the application infrastructure."""

from .user import UserModel
from .notification import NotificationModel
from .reminder import ReminderModel
from .reminder_send_log import ReminderSendLogModel

__all__ = [
    "UserModel",
    "NotificationModel",
    "ReminderModel",
    "ReminderSendLogModel",
]
