"""SQLAlchemy model for administrator reminders."""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression

from notifyhub.infrastructure.database import Base
from notifyhub.utils import now_in_app_naive_datetime


class ReminderModel(Base):
    """Database representation of a reminder feeding the daily digest."""

    __tablename__ = "reminder"
    __table_args__ = (Index("ix_reminder_date_completed", "reminder_date", "is_completed"),)

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    reminder_date = Column(DateTime(), nullable=False, index=True)
    priority = Column(String(10), nullable=False, default="medium", index=True)
    is_completed = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    completed_at = Column(DateTime(), nullable=True)
    client_id = Column(Integer, ForeignKey("user.id"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("user.id"), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(), nullable=False, default=now_in_app_naive_datetime)

    client = relationship("UserModel", foreign_keys=[client_id], lazy="joined")


__all__ = ["ReminderModel"]
