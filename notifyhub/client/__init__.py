"""Client-side helpers that keep unread state in sync with the server."""

from .http import NotificationsApiClient, SessionReminderCheck
from .sync import DEFAULT_POLL_INTERVAL, NotificationSyncEngine, SyncHandle, SyncState

__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "NotificationSyncEngine",
    "NotificationsApiClient",
    "SessionReminderCheck",
    "SyncHandle",
    "SyncState",
]
