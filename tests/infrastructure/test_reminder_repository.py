"""Tests for the reminder store feeding the digest."""

from __future__ import annotations

from datetime import timedelta

import pytest

from notifyhub.domain.entities import PRIORITY_URGENT, Reminder
from notifyhub.domain.errors import NotFound
from notifyhub.infrastructure.repositories import ReminderRepository
from notifyhub.utils import now_in_app_timezone


def _reminder(admin, title: str, offset: timedelta, **kwargs) -> Reminder:
    return Reminder(
        id=None,
        title=title,
        description=kwargs.pop("description", "Details"),
        reminder_date=now_in_app_timezone() + offset,
        created_by=admin.id,
        **kwargs,
    )


def test_list_due_returns_open_reminders_oldest_first(session, admin) -> None:
    repository = ReminderRepository(session)
    newer = repository.create(_reminder(admin, "Newer", timedelta(hours=-1)))
    older = repository.create(_reminder(admin, "Older", timedelta(days=-2)))
    repository.create(_reminder(admin, "Future", timedelta(days=2)))
    done = repository.create(_reminder(admin, "Done", timedelta(days=-1)))
    repository.mark_completed(done.id)

    due = repository.list_due(now_in_app_timezone())

    assert [reminder.id for reminder in due] == [older.id, newer.id]


def test_create_normalizes_fields_and_resolves_client(session, admin, make_user) -> None:
    client = make_user("client@example.com", name="Acme Corp")

    reminder = ReminderRepository(session).create(
        _reminder(
            admin,
            "  Call Acme  ",
            timedelta(hours=-1),
            priority=PRIORITY_URGENT,
            client_id=client.id,
            tags=[" Billing ", ""],
        )
    )

    assert reminder.title == "Call Acme"
    assert reminder.client_name == "Acme Corp"
    assert reminder.tags == ["billing"]
    assert reminder.reminder_date.tzinfo is not None


@pytest.mark.parametrize(
    "overrides",
    [
        {"priority": "critical"},
        {"title": "   "},
        {"title": "t" * 201},
        {"description": "d" * 2001},
    ],
)
def test_create_rejects_invalid_reminders(session, admin, overrides) -> None:
    title = overrides.pop("title", "Valid")

    with pytest.raises(ValueError):
        ReminderRepository(session).create(_reminder(admin, title, timedelta(0), **overrides))


def test_mark_completed(session, admin) -> None:
    repository = ReminderRepository(session)
    reminder = repository.create(_reminder(admin, "Call", timedelta(hours=-1)))

    completed = repository.mark_completed(reminder.id)

    assert completed.is_completed is True
    assert completed.completed_at is not None
    with pytest.raises(NotFound):
        repository.mark_completed(99_999)
