"""Producer helpers for the notification categories raised by other features."""

from __future__ import annotations

from sqlalchemy.orm import Session

from notifyhub.domain.entities import (
    CATEGORY_MESSAGE,
    CATEGORY_MILESTONE,
    CATEGORY_PROJECT_UPDATE,
)
from notifyhub.infrastructure.push import PushGateway

from .fanout import FanOutResult, fan_out_notification

_PREVIEW_LENGTH = 140


def _project_link(project_id: int) -> str:
    return f"/dashboard/projects/{project_id}"


def notify_project_update(
    session: Session,
    gateway: PushGateway,
    *,
    recipient_id: int,
    project_id: int,
    project_name: str,
    update_message: str,
    email: str | None = None,
) -> FanOutResult:
    """Tell the project owner that something changed on their project."""

    title = f"Project Update: {project_name}"
    return fan_out_notification(
        session,
        gateway,
        recipient_id=recipient_id,
        category=CATEGORY_PROJECT_UPDATE,
        title=title,
        body=update_message,
        project_id=project_id,
        link=_project_link(project_id),
        email=email,
        email_subject=title,
    )


def notify_new_message(
    session: Session,
    gateway: PushGateway,
    *,
    recipient_id: int,
    project_id: int,
    sender_name: str,
    message_text: str,
) -> FanOutResult:
    """Announce a new project message; never emailed, push and poll only."""

    preview = message_text.strip()
    if len(preview) > _PREVIEW_LENGTH:
        preview = f"{preview[:_PREVIEW_LENGTH]}..."
    return fan_out_notification(
        session,
        gateway,
        recipient_id=recipient_id,
        category=CATEGORY_MESSAGE,
        title=f"New message from {sender_name}",
        body=preview or "(no text)",
        project_id=project_id,
        link=f"{_project_link(project_id)}#messages",
    )


def notify_milestone(
    session: Session,
    gateway: PushGateway,
    *,
    recipient_id: int,
    project_id: int,
    deliverable_title: str,
    notes: str | None = None,
    email: str | None = None,
) -> FanOutResult:
    """Inform the client that a deliverable was approved."""

    suffix = f": {notes}" if notes else "!"
    return fan_out_notification(
        session,
        gateway,
        recipient_id=recipient_id,
        category=CATEGORY_MILESTONE,
        title="Deliverable Approved",
        body=f'Your deliverable "{deliverable_title}" has been approved{suffix}',
        project_id=project_id,
        link=_project_link(project_id),
        email=email,
        email_subject=f"Deliverable Approved - {deliverable_title}",
    )


__all__ = ["notify_project_update", "notify_new_message", "notify_milestone"]
