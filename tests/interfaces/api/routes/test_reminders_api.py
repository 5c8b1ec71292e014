"""Integration tests for the administrator reminder digest trigger."""

from __future__ import annotations

from datetime import timedelta

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

from notifyhub.domain.entities import PRIORITY_URGENT, Reminder
from notifyhub.infrastructure import email as email_module
from notifyhub.infrastructure.repositories import ReminderRepository
from notifyhub.utils import now_in_app_timezone


@pytest.fixture()
def client():
    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def sent_emails(monkeypatch):
    sent = []

    def fake_send_email(subject, html_content, recipient, **kwargs):
        sent.append((subject, recipient))
        return True

    monkeypatch.setattr(email_module, "send_email", fake_send_email)
    return sent


def _add_due_reminder(session, admin) -> None:
    ReminderRepository(session).create(
        Reminder(
            id=None,
            title="Renew hosting",
            description="The hosting plan expires soon",
            reminder_date=now_in_app_timezone() - timedelta(hours=1),
            created_by=admin.id,
            priority=PRIORITY_URGENT,
        )
    )


def test_digest_requires_an_admin(client: TestClient, make_user, auth_headers) -> None:
    user = make_user("client@example.com")

    assert client.post("/admin/reminders/digest").status_code == 401
    assert client.post("/admin/reminders/digest", headers=auth_headers(user)).status_code == 403


def test_digest_is_sent_once_per_page_load_day(client, session, admin, auth_headers, sent_emails) -> None:
    _add_due_reminder(session, admin)
    headers = auth_headers(admin)

    first = client.post("/admin/reminders/digest", headers=headers)
    second = client.post("/admin/reminders/digest", headers=headers)

    assert first.status_code == 200
    assert first.json()["status"] == "sent"
    assert first.json()["sent"] is True
    assert first.json()["reminder_count"] == 1
    assert first.json()["by_priority"] == {"urgent": 1}
    assert second.json()["status"] == "already_sent_today"
    assert sent_emails == [("Daily Reminders: 1 need attention", "admin@example.com")]


def test_digest_with_nothing_due(client, admin, auth_headers, sent_emails) -> None:
    response = client.post("/admin/reminders/digest", headers=auth_headers(admin))

    assert response.json()["status"] == "nothing_due"
    assert response.json()["sent"] is False
    assert sent_emails == []


def test_digest_without_email_configuration_reports_failure(client, session, admin, auth_headers) -> None:
    _add_due_reminder(session, admin)

    response = client.post("/admin/reminders/digest", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json()["status"] == "dispatch_failed"
