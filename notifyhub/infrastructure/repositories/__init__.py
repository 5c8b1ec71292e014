"""Repository implementations for infrastructure layer."""

from .notification_repository import NotificationRepository
from .reminder_repository import ReminderRepository
from .reminder_send_log_repository import ReminderSendLogRepository
from .user_repository import UserRepository

__all__ = [
    "NotificationRepository",
    "ReminderRepository",
    "ReminderSendLogRepository",
    "UserRepository",
]
