"""Digest Composer: at most one reminder digest per recipient per day."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.orm import Session

from notifyhub.config import Settings, get_settings
from notifyhub.domain.entities import DigestOutcome, DigestStatus
from notifyhub.domain.errors import DispatchFailed
from notifyhub.infrastructure import email as email_service
from notifyhub.infrastructure.repositories import (
    ReminderRepository,
    ReminderSendLogRepository,
)
from notifyhub.infrastructure.repositories.reminder_send_log_repository import normalize_email
from notifyhub.utils import ensure_app_timezone, now_in_app_timezone

from .digest import build_reminder_digest

logger = logging.getLogger(__name__)

EmailSender = Callable[..., bool]


class DigestComposer:
    """Decide whether a digest is due, claim the day, then send it.

    The claim is written before the email goes out. A failed or timed-out
    send therefore still counts as the day's digest: under-sending is
    preferred to duplicates, and nothing is retried within the call.
    """

    def __init__(
        self,
        session: Session,
        *,
        send_email: EmailSender | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        self._reminders = ReminderRepository(session)
        self._send_log = ReminderSendLogRepository(session)
        self._send_email = send_email or email_service.send_email
        self._settings = settings or get_settings()
        self._clock = clock

    def try_dispatch(self, recipient_email: str) -> DigestOutcome:
        email = normalize_email(recipient_email)
        now = ensure_app_timezone(self._clock())
        today = now.date()

        entry = self._send_log.get(email)
        if entry is not None and entry.last_sent_date >= today:
            logger.info("Reminder digest already sent to %s on %s", email, entry.last_sent_date)
            return DigestOutcome(status=DigestStatus.ALREADY_SENT_TODAY, recipient_email=email, day=today)

        until = now + timedelta(days=self._settings.reminder_lookahead_days)
        reminders = self._reminders.list_due(until)
        if not reminders:
            logger.info("No reminders due for %s; digest skipped without claiming %s", email, today)
            return DigestOutcome(status=DigestStatus.NOTHING_DUE, recipient_email=email, day=today)

        digest = build_reminder_digest(reminders, now=now, app_url=self._settings.app_url)
        outcome = DigestOutcome(
            status=DigestStatus.SENT,
            recipient_email=email,
            day=today,
            reminder_count=digest.reminder_count,
            by_priority=digest.by_priority,
            by_urgency=digest.by_urgency,
        )

        if not self._send_log.claim_day(email, today, pending_count=digest.reminder_count):
            logger.info("Reminder digest for %s on %s claimed by a concurrent request", email, today)
            return DigestOutcome(status=DigestStatus.ALREADY_SENT_TODAY, recipient_email=email, day=today)

        try:
            delivered = self._send_email(
                digest.subject,
                digest.html,
                email,
                timeout=self._settings.email_timeout_seconds,
            )
        except Exception as exc:
            logger.exception("Reminder digest email to %s raised", email)
            failure = DispatchFailed(str(exc) or exc.__class__.__name__)
        else:
            failure = None if delivered else DispatchFailed("Email sender reported failure")

        if failure is not None:
            outcome.status = DigestStatus.DISPATCH_FAILED
            outcome.error = str(failure)
            logger.error(
                "Reminder digest to %s failed after claiming %s; it will not be retried today",
                email,
                today,
            )
            return outcome

        logger.info("Reminder digest sent to %s with %s reminders", email, digest.reminder_count)
        return outcome


__all__ = ["DigestComposer"]
