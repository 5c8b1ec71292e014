"""Domain entity recording when a recipient last received the digest."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class ReminderSendLog:
    """Day-granular record of the last digest claimed for ``recipient_email``."""

    recipient_email: str
    last_sent_date: date
    pending_count: int = 0
    send_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["ReminderSendLog"]
