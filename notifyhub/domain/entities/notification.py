"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

CATEGORY_PROJECT_UPDATE = "project_update"
CATEGORY_MESSAGE = "message"
CATEGORY_MILESTONE = "milestone"
CATEGORY_GENERAL = "general"

NOTIFICATION_CATEGORIES = (
    CATEGORY_PROJECT_UPDATE,
    CATEGORY_MESSAGE,
    CATEGORY_MILESTONE,
    CATEGORY_GENERAL,
)

TITLE_MAX_LENGTH = 200
BODY_MAX_LENGTH = 1000


@dataclass
class Notification:
    """Information message delivered to a specific recipient.

    ``read_at`` is set exactly when ``is_read`` is true, and read state only
    ever moves from unread to read.
    """

    id: int | None
    recipient_id: int
    category: str
    title: str
    body: str
    project_id: int | None = None
    link: str | None = None
    is_read: bool = False
    read_at: datetime | None = None
    created_at: datetime | None = None


__all__ = [
    "Notification",
    "CATEGORY_PROJECT_UPDATE",
    "CATEGORY_MESSAGE",
    "CATEGORY_MILESTONE",
    "CATEGORY_GENERAL",
    "NOTIFICATION_CATEGORIES",
    "TITLE_MAX_LENGTH",
    "BODY_MAX_LENGTH",
]
