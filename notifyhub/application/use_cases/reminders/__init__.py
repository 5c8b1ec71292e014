"""Daily reminder digest use cases."""

from .composer import DigestComposer
from .digest import ReminderDigest, build_reminder_digest, classify_urgency, group_by_priority

__all__ = [
    "DigestComposer",
    "ReminderDigest",
    "build_reminder_digest",
    "classify_urgency",
    "group_by_priority",
]
