"""Domain entity representing an administrator reminder."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"
PRIORITY_URGENT = "urgent"

# Most pressing first; the digest renders groups in this order.
REMINDER_PRIORITIES = (PRIORITY_URGENT, PRIORITY_HIGH, PRIORITY_MEDIUM, PRIORITY_LOW)


@dataclass
class Reminder:
    """Follow-up item that administrators receive in the daily digest."""

    id: int | None
    title: str
    description: str
    reminder_date: datetime
    created_by: int
    priority: str = PRIORITY_MEDIUM
    is_completed: bool = False
    completed_at: datetime | None = None
    client_id: int | None = None
    client_name: str | None = None
    tags: list[str] = field(default_factory=list)
    created_at: datetime | None = None


__all__ = [
    "Reminder",
    "PRIORITY_LOW",
    "PRIORITY_MEDIUM",
    "PRIORITY_HIGH",
    "PRIORITY_URGENT",
    "REMINDER_PRIORITIES",
]
