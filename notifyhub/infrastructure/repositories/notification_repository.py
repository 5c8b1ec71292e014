"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Iterable

from sqlalchemy import case, func, update
from sqlalchemy.orm import Session

from notifyhub.domain.entities import (
    BODY_MAX_LENGTH,
    NOTIFICATION_CATEGORIES,
    TITLE_MAX_LENGTH,
    Notification,
)
from notifyhub.domain.errors import NotFound
from notifyhub.infrastructure.database import store_errors
from notifyhub.infrastructure.models import NotificationModel
from notifyhub.utils import ensure_app_timezone, now_in_app_naive_datetime


class NotificationRepository:
    """Durable store for :class:`Notification` records and their read state.

    Every query and mutation is scoped to a single recipient; ids owned by
    somebody else are treated exactly like unknown ids.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(
        self,
        recipient_id: int,
        category: str,
        title: str,
        body: str,
        *,
        project_id: int | None = None,
        link: str | None = None,
    ) -> Notification:
        if category not in NOTIFICATION_CATEGORIES:
            raise ValueError(f"Unknown notification category '{category}'")
        title = _clean_text(title, field="title", max_length=TITLE_MAX_LENGTH)
        body = _clean_text(body, field="body", max_length=BODY_MAX_LENGTH)
        link = link.strip() or None if link else None

        model = NotificationModel(
            recipient_id=recipient_id,
            project_id=project_id,
            category=category,
            title=title,
            body=body,
            link=link,
            is_read=False,
            read_at=None,
            created_at=now_in_app_naive_datetime(),
        )
        with store_errors(self.session):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        return self._to_entity(model)

    def list_for_recipient(
        self, recipient_id: int, *, limit: int | None = 50
    ) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient_id == recipient_id)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        with store_errors(self.session):
            models = query.all()
        return [self._to_entity(model) for model in models]

    def list_unread_for_recipient(
        self, recipient_id: int, *, limit: int | None = 50
    ) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.recipient_id == recipient_id)
            .filter(NotificationModel.is_read.is_(False))
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        with store_errors(self.session):
            models = query.all()
        return [self._to_entity(model) for model in models]

    def get_for_recipient(self, recipient_id: int, notification_id: int) -> Notification:
        with store_errors(self.session):
            model = (
                self.session.query(NotificationModel)
                .filter(NotificationModel.id == notification_id)
                .filter(NotificationModel.recipient_id == recipient_id)
                .one_or_none()
            )
        if model is None:
            raise NotFound(f"Notification with id {notification_id} not found")
        return self._to_entity(model)

    def unread_count(self, recipient_id: int) -> int:
        query = (
            self.session.query(func.count(NotificationModel.id))
            .filter(NotificationModel.recipient_id == recipient_id)
            .filter(NotificationModel.is_read.is_(False))
        )
        with store_errors(self.session):
            count = query.scalar()
            # End the read transaction so the next poll sees fresh state.
            self.session.commit()
        return int(count or 0)

    def mark_read(self, recipient_id: int, notification_ids: Iterable[int]) -> int:
        """Mark the recipient's unread ``notification_ids`` as read.

        Returns how many records actually changed state.
        """

        ids = sorted({int(i) for i in notification_ids if i is not None})
        if not ids:
            return 0
        statement = (
            update(NotificationModel)
            .where(NotificationModel.id.in_(ids))
            .where(NotificationModel.recipient_id == recipient_id)
            .where(NotificationModel.is_read.is_(False))
            .values(is_read=True, read_at=_read_timestamp())
            .execution_options(synchronize_session=False)
        )
        return self._apply_transition(statement)

    def mark_all_read(self, recipient_id: int) -> int:
        """Mark every unread notification of ``recipient_id`` as read.

        A single conditional ``UPDATE`` so concurrent counts never observe a
        partially applied transition.
        """

        statement = (
            update(NotificationModel)
            .where(NotificationModel.recipient_id == recipient_id)
            .where(NotificationModel.is_read.is_(False))
            .values(is_read=True, read_at=_read_timestamp())
            .execution_options(synchronize_session=False)
        )
        return self._apply_transition(statement)

    def _apply_transition(self, statement) -> int:
        with store_errors(self.session):
            result = self.session.execute(statement)
            transitioned = int(result.rowcount or 0)
            self.session.commit()
        self.session.expire_all()
        return transitioned

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            recipient_id=model.recipient_id,
            project_id=model.project_id,
            category=model.category,
            title=model.title,
            body=model.body,
            link=model.link,
            is_read=bool(model.is_read),
            read_at=ensure_app_timezone(model.read_at),
            created_at=ensure_app_timezone(model.created_at),
        )


def _read_timestamp():
    # Naive local clocks can step back across a DST change; read_at never
    # precedes created_at.
    now = now_in_app_naive_datetime()
    return case((NotificationModel.created_at > now, NotificationModel.created_at), else_=now)


def _clean_text(value: str, *, field: str, max_length: int) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError(f"Notification {field} must not be empty")
    if len(cleaned) > max_length:
        raise ValueError(f"Notification {field} exceeds {max_length} characters")
    return cleaned


__all__ = ["NotificationRepository"]
