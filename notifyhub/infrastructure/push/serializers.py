"""Wire representation of notifications sent over push channels."""

from __future__ import annotations

from typing import Any

from notifyhub.domain.entities import Notification


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the push payload representation for ``notification``."""

    return {
        "id": notification.id,
        "recipient_id": notification.recipient_id,
        "project_id": notification.project_id,
        "category": notification.category,
        "title": notification.title,
        "body": notification.body,
        "link": notification.link,
        "is_read": notification.is_read,
        "created_at": notification.created_at.isoformat()
        if notification.created_at
        else None,
        "read_at": notification.read_at.isoformat() if notification.read_at else None,
    }


__all__ = ["serialize_notification"]
