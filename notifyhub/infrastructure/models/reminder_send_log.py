"""SQLAlchemy model for the per-recipient digest send log."""

from sqlalchemy import Column, Date, DateTime, Integer, String

from notifyhub.infrastructure.database import Base
from notifyhub.utils import now_in_app_naive_datetime


class ReminderSendLogModel(Base):
    """One row per recipient; ``last_sent_date`` only moves forward."""

    __tablename__ = "reminder_send_log"

    id = Column(Integer, primary_key=True, index=True)
    recipient_email = Column(String(120), nullable=False, unique=True, index=True)
    last_sent_date = Column(Date(), nullable=False)
    pending_count = Column(Integer, nullable=False, default=0)
    send_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)
    updated_at = Column(
        DateTime(),
        nullable=False,
        default=now_in_app_naive_datetime,
        onupdate=now_in_app_naive_datetime,
    )


__all__ = ["ReminderSendLogModel"]
