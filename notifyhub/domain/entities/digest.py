"""Outcome of a reminder digest dispatch attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class DigestStatus(str, Enum):
    """Possible results of :meth:`DigestComposer.try_dispatch`."""

    SENT = "sent"
    ALREADY_SENT_TODAY = "already_sent_today"
    NOTHING_DUE = "nothing_due"
    DISPATCH_FAILED = "dispatch_failed"


@dataclass
class DigestOutcome:
    """Result reported back to the page load that triggered the check."""

    status: DigestStatus
    recipient_email: str
    day: date
    reminder_count: int = 0
    by_priority: dict[str, int] = field(default_factory=dict)
    by_urgency: dict[str, int] = field(default_factory=dict)
    error: str | None = None

    @property
    def sent(self) -> bool:
        return self.status is DigestStatus.SENT

    @property
    def claimed(self) -> bool:
        """Whether this call claimed the day, whatever happened to the email."""

        return self.status in (DigestStatus.SENT, DigestStatus.DISPATCH_FAILED)


__all__ = ["DigestStatus", "DigestOutcome"]
