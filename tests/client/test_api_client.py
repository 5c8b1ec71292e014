"""Tests for the async API client running against the ASGI application."""

from __future__ import annotations

from datetime import timedelta

import httpx
import pytest

from notifyhub.client import NotificationsApiClient, NotificationSyncEngine, SessionReminderCheck
from notifyhub.domain.entities import CATEGORY_MESSAGE, PRIORITY_HIGH, Reminder, User
from notifyhub.domain.errors import NotFound, Unauthorized
from notifyhub.infrastructure import email as email_module
from notifyhub.infrastructure.repositories import NotificationRepository, ReminderRepository
from notifyhub.infrastructure.security import create_access_token
from notifyhub.utils import now_in_app_timezone

pytestmark = pytest.mark.anyio


@pytest.fixture()
def app():
    from main import create_app

    return create_app()


@pytest.fixture()
async def api_client(app):
    """Build an API client for a user that talks to the app in-process."""

    transports: list[httpx.AsyncClient] = []

    def _client(user) -> NotificationsApiClient:
        http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")
        transports.append(http)
        token = create_access_token({"sub": user.email})
        return NotificationsApiClient("http://testserver", token, client=http)

    yield _client
    for http in transports:
        await http.aclose()


async def test_client_reads_and_clears_unread_state(session, make_user, api_client) -> None:
    user = make_user("ana@example.com")
    repository = NotificationRepository(session)
    created = [repository.create(user.id, CATEGORY_MESSAGE, f"Message {i}", "Hi") for i in range(3)]

    client = api_client(user)

    assert await client.unread_count() == 3
    listed = await client.list_notifications(limit=2)
    assert [item["id"] for item in listed] == [created[2].id, created[1].id]

    assert await client.mark_read([created[0].id]) == {"updated": 1, "unread_count": 2}
    assert await client.mark_all_read() == {"updated": 2, "unread_count": 0}
    assert (await client.get_notification(created[0].id))["is_read"] is True


async def test_client_maps_error_statuses(make_user, api_client) -> None:
    user = make_user("ana@example.com")
    client = api_client(user)

    with pytest.raises(NotFound):
        await client.get_notification(12345)

    stranger = api_client(User(id=None, email="ghost@example.com", name="Ghost"))
    with pytest.raises(Unauthorized):
        await stranger.unread_count()


async def test_sync_engine_converges_through_the_api(session, make_user, api_client) -> None:
    user = make_user("ana@example.com")
    repository = NotificationRepository(session)
    client = api_client(user)
    counts = []
    engine = NotificationSyncEngine(client.unread_count, on_count_changed=counts.append)

    await engine.poll_once()
    repository.create(user.id, CATEGORY_MESSAGE, "New message from Bob", "Hi")
    await engine.poll_once()
    await client.mark_all_read()
    await engine.poll_once()

    assert counts == [0, 1, 0]


async def test_session_reminder_check_runs_once(session, admin, api_client, monkeypatch) -> None:
    sent = []
    monkeypatch.setattr(
        email_module, "send_email", lambda subject, html, recipient, **kwargs: sent.append(recipient) or True
    )
    ReminderRepository(session).create(
        Reminder(
            id=None,
            title="Renew domain",
            description="Expires this week",
            reminder_date=now_in_app_timezone() - timedelta(minutes=5),
            created_by=admin.id,
            priority=PRIORITY_HIGH,
        )
    )
    client = api_client(admin)
    check = SessionReminderCheck(client)

    outcome = await check.on_admin_page_load()
    again = await check.on_admin_page_load()

    assert outcome["status"] == "sent"
    assert again is None
    assert check.checked is True
    assert sent == ["admin@example.com"]

    fresh_session_check = SessionReminderCheck(client)
    assert (await fresh_session_check.on_admin_page_load())["status"] == "already_sent_today"
    assert sent == ["admin@example.com"]


async def test_session_reminder_check_swallows_errors(make_user, api_client) -> None:
    user = make_user("client@example.com")
    client = api_client(user)
    check = SessionReminderCheck(client)

    assert await check.on_admin_page_load() is None
    assert check.checked is True
