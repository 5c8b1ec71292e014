"""Persistence helpers for reminders feeding the daily digest."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.orm import Session

from notifyhub.domain.entities import REMINDER_PRIORITIES, Reminder
from notifyhub.domain.errors import NotFound
from notifyhub.infrastructure.database import store_errors
from notifyhub.infrastructure.models import ReminderModel
from notifyhub.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_naive_datetime,
)

_TITLE_MAX_LENGTH = 200
_DESCRIPTION_MAX_LENGTH = 2000


class ReminderRepository:
    """Provide the operations the digest needs over :class:`Reminder` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, reminder: Reminder) -> Reminder:
        if reminder.priority not in REMINDER_PRIORITIES:
            raise ValueError(f"Unknown reminder priority '{reminder.priority}'")
        title = (reminder.title or "").strip()
        if not title or len(title) > _TITLE_MAX_LENGTH:
            raise ValueError(f"Reminder title must be 1 to {_TITLE_MAX_LENGTH} characters")
        description = (reminder.description or "").strip()
        if len(description) > _DESCRIPTION_MAX_LENGTH:
            raise ValueError(f"Reminder description exceeds {_DESCRIPTION_MAX_LENGTH} characters")
        model = ReminderModel(
            title=title,
            description=description,
            reminder_date=ensure_app_naive_datetime(reminder.reminder_date),
            priority=reminder.priority,
            is_completed=reminder.is_completed,
            completed_at=ensure_app_naive_datetime(reminder.completed_at),
            client_id=reminder.client_id,
            created_by=reminder.created_by,
            tags=[tag.strip().lower() for tag in reminder.tags if tag.strip()],
        )
        with store_errors(self.session):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def list_due(self, until: datetime) -> Sequence[Reminder]:
        """Return open reminders dated at or before ``until``, oldest first."""

        query = (
            self.session.query(ReminderModel)
            .filter(ReminderModel.is_completed.is_(False))
            .filter(ReminderModel.reminder_date <= ensure_app_naive_datetime(until))
            .order_by(ReminderModel.reminder_date.asc(), ReminderModel.id.asc())
        )
        with store_errors(self.session):
            models = query.all()
        return [self._to_entity(model) for model in models]

    def mark_completed(self, reminder_id: int) -> Reminder:
        with store_errors(self.session):
            model = self.session.get(ReminderModel, reminder_id)
            if model is None:
                raise NotFound(f"Reminder with id {reminder_id} not found")
            if not model.is_completed:
                model.is_completed = True
                model.completed_at = now_in_app_naive_datetime()
                self.session.commit()
                self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: ReminderModel) -> Reminder:
        client_name = None
        if model.client is not None:
            client_name = model.client.name.strip() or model.client.email
        return Reminder(
            id=model.id,
            title=model.title,
            description=model.description,
            reminder_date=ensure_app_timezone(model.reminder_date),
            priority=model.priority,
            is_completed=bool(model.is_completed),
            completed_at=ensure_app_timezone(model.completed_at),
            client_id=model.client_id,
            client_name=client_name,
            created_by=model.created_by,
            tags=list(model.tags or []),
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["ReminderRepository"]
