"""Persistence helpers for the reminder digest send log."""

from __future__ import annotations

from datetime import date

import logging

from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notifyhub.domain.entities import ReminderSendLog
from notifyhub.infrastructure.database import store_errors
from notifyhub.infrastructure.models import ReminderSendLogModel
from notifyhub.utils import ensure_app_timezone, now_in_app_naive_datetime

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class ReminderSendLogRepository:
    """Read and claim calendar days for digest recipients."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, recipient_email: str) -> ReminderSendLog | None:
        with store_errors(self.session):
            model = (
                self.session.query(ReminderSendLogModel)
                .filter(ReminderSendLogModel.recipient_email == normalize_email(recipient_email))
                .one_or_none()
            )
            # Release the read snapshot before the claim is attempted.
            self.session.commit()
        return self._to_entity(model) if model else None

    def claim_day(self, recipient_email: str, day: date, *, pending_count: int) -> bool:
        """Atomically record ``day`` as sent for ``recipient_email``.

        Returns ``True`` only for the single caller whose conditional write
        moved ``last_sent_date`` to ``day``. Callers that find the day already
        claimed, or that lose a concurrent race, get ``False``.
        """

        email = normalize_email(recipient_email)
        now = now_in_app_naive_datetime()
        advance = (
            update(ReminderSendLogModel)
            .where(ReminderSendLogModel.recipient_email == email)
            .where(ReminderSendLogModel.last_sent_date < day)
            .values(
                last_sent_date=day,
                pending_count=pending_count,
                send_count=ReminderSendLogModel.send_count + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        with store_errors(self.session):
            result = self.session.execute(advance)
            advanced = result.rowcount == 1
            self.session.commit()
            if advanced:
                return True

            # No earlier row moved forward: either the row is missing or the
            # day is already taken. The unique key decides between racers.
            try:
                self.session.execute(
                    insert(ReminderSendLogModel).values(
                        recipient_email=email,
                        last_sent_date=day,
                        pending_count=pending_count,
                        send_count=1,
                        created_at=now,
                        updated_at=now,
                    )
                )
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
                logger.info("Digest day %s already claimed for %s", day, email)
                return False
        return True

    @staticmethod
    def _to_entity(model: ReminderSendLogModel) -> ReminderSendLog:
        return ReminderSendLog(
            recipient_email=model.recipient_email,
            last_sent_date=model.last_sent_date,
            pending_count=model.pending_count,
            send_count=model.send_count,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["ReminderSendLogRepository", "normalize_email"]
