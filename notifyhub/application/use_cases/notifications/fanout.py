"""Best-effort fan-out of notifications triggered by primary actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, TypeVar

from sqlalchemy.orm import Session

from notifyhub.domain.entities import EVENT_NOTIFICATION, ActionResult, Notification
from notifyhub.domain.errors import StoreUnavailable
from notifyhub.infrastructure.email import send_notification_email
from notifyhub.infrastructure.push import PushGateway, serialize_notification
from notifyhub.infrastructure.repositories import NotificationRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

NotificationEmailSender = Callable[..., bool]


@dataclass
class FanOutResult:
    """What happened to one recipient during a fan-out."""

    recipient_id: int
    notification: Notification | None = None
    pushed: bool = False
    emailed: bool = False
    error: BaseException | None = None

    @property
    def stored(self) -> bool:
        return self.notification is not None


def fan_out_notification(
    session: Session,
    gateway: PushGateway,
    *,
    recipient_id: int,
    category: str,
    title: str,
    body: str,
    project_id: int | None = None,
    link: str | None = None,
    email: str | None = None,
    email_subject: str | None = None,
    send_email: NotificationEmailSender = send_notification_email,
) -> FanOutResult:
    """Store a notification, push it, and optionally mirror it by email.

    The record is written in a session of its own on the caller's bind, so the
    caller's transaction is neither committed nor rolled back here. Creation
    failures are reported on the result instead of raised; the next client
    poll reconciles whatever push could not deliver.
    """

    result = FanOutResult(recipient_id=recipient_id)
    try:
        with Session(bind=session.get_bind()) as side_session:
            notification = NotificationRepository(side_session).create(
                recipient_id,
                category,
                title,
                body,
                project_id=project_id,
                link=link,
            )
    except StoreUnavailable as exc:
        logger.warning("Notification for recipient %s not stored: %s", recipient_id, exc)
        result.error = exc
        return result
    except Exception as exc:
        logger.exception("Notification for recipient %s could not be created", recipient_id)
        result.error = exc
        return result

    result.notification = notification
    result.pushed = gateway.publish(
        recipient_id, EVENT_NOTIFICATION, serialize_notification(notification)
    )

    if email:
        try:
            result.emailed = send_email(
                email, notification.title, notification.body, link=link, subject=email_subject
            )
        except Exception as exc:
            logger.exception("Notification email to %s failed", email)
            result.error = exc
    return result


def fan_out_many(
    session: Session,
    gateway: PushGateway,
    recipient_ids: Iterable[int],
    **kwargs,
) -> list[FanOutResult]:
    """Fan out the same notification to every distinct recipient.

    One recipient failing never stops the others.
    """

    results: list[FanOutResult] = []
    seen: set[int] = set()
    for recipient_id in recipient_ids:
        if not recipient_id or recipient_id in seen:
            continue
        seen.add(recipient_id)
        results.append(
            fan_out_notification(session, gateway, recipient_id=recipient_id, **kwargs)
        )
    return results


def run_with_side_effects(
    primary: Callable[[], T], *side_effects: Callable[[T], object]
) -> ActionResult[T]:
    """Run ``primary`` and then each side effect on its value.

    Errors from ``primary`` propagate. Errors from side effects, raised or
    reported through an ``error`` attribute on their result, are logged and
    collected on the returned :class:`ActionResult`.
    """

    value = primary()
    errors: list[BaseException] = []
    for side_effect in side_effects:
        try:
            outcome = side_effect(value)
        except Exception as exc:
            logger.exception("Side effect %r failed after primary action", side_effect)
            errors.append(exc)
            continue
        outcomes = outcome if isinstance(outcome, list) else [outcome]
        for item in outcomes:
            error = getattr(item, "error", None)
            if isinstance(error, BaseException):
                errors.append(error)
    return ActionResult(value=value, side_effect_errors=errors)


__all__ = [
    "FanOutResult",
    "fan_out_notification",
    "fan_out_many",
    "run_with_side_effects",
]
