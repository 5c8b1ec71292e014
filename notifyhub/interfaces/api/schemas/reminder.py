"""Pydantic models describing reminder digest outcomes."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field

from notifyhub.domain.entities import DigestStatus


class DigestOutcomeRead(BaseModel):
    status: DigestStatus
    day: date
    sent: bool
    reminder_count: int = 0
    by_priority: dict[str, int] = Field(default_factory=dict)
    by_urgency: dict[str, int] = Field(default_factory=dict)


__all__ = ["DigestOutcomeRead"]
