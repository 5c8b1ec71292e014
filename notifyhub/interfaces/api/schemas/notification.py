"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark a batch of notifications as read."""

    ids: list[int] = Field(..., min_length=1, max_length=500, description="Notification ids")

    def unique_ids(self) -> list[int]:
        """Return the list of identifiers without duplicates preserving order."""

        return list(dict.fromkeys(self.ids))


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: int
    recipient_id: int
    project_id: int | None = None
    category: str
    title: str
    body: str
    link: str | None = None
    is_read: bool
    created_at: datetime
    read_at: datetime | None = None


class UnreadCountRead(BaseModel):
    count: int


class ReadStateUpdate(BaseModel):
    """Number of notifications that actually moved from unread to read."""

    updated: int
    unread_count: int


__all__ = [
    "NotificationMarkReadRequest",
    "NotificationRead",
    "UnreadCountRead",
    "ReadStateUpdate",
]
