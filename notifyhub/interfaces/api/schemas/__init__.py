from .notification import (
    NotificationMarkReadRequest,
    NotificationRead,
    ReadStateUpdate,
    UnreadCountRead,
)
from .reminder import DigestOutcomeRead

__all__ = [
    "NotificationMarkReadRequest",
    "NotificationRead",
    "ReadStateUpdate",
    "UnreadCountRead",
    "DigestOutcomeRead",
]
