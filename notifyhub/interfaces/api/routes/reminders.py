"""Administrator trigger for the daily reminder digest."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from notifyhub.application.use_cases.reminders import DigestComposer
from notifyhub.domain.entities import User
from notifyhub.domain.errors import StoreUnavailable
from notifyhub.infrastructure.database import get_db
from notifyhub.interfaces.api.dependencies import require_admin, store_unavailable
from notifyhub.interfaces.api.schemas import DigestOutcomeRead

router = APIRouter(prefix="/admin/reminders", tags=["reminders"])


@router.post("/digest", response_model=DigestOutcomeRead)
def check_reminder_digest(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> DigestOutcomeRead:
    """Send today's digest to the calling administrator unless already sent.

    Called opportunistically whenever an admin page loads.
    """

    try:
        outcome = DigestComposer(db).try_dispatch(current_user.email)
    except StoreUnavailable as exc:
        raise store_unavailable(exc) from exc
    return DigestOutcomeRead(
        status=outcome.status,
        day=outcome.day,
        sent=outcome.sent,
        reminder_count=outcome.reminder_count,
        by_priority=outcome.by_priority,
        by_urgency=outcome.by_urgency,
    )
