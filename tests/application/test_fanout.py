"""Tests for notification fan-out and best-effort side effects."""

from __future__ import annotations

import anyio
import pytest

from notifyhub.application.use_cases.notifications import (
    fan_out_many,
    fan_out_notification,
    notify_milestone,
    notify_new_message,
    notify_project_update,
    run_with_side_effects,
)
from notifyhub.config import get_settings
from notifyhub.domain.entities import (
    CATEGORY_MESSAGE,
    CATEGORY_MILESTONE,
    CATEGORY_PROJECT_UPDATE,
    EVENT_NOTIFICATION,
)
from notifyhub.domain.errors import StoreUnavailable
from notifyhub.infrastructure.push import PushGateway
from notifyhub.infrastructure.repositories import NotificationRepository


class RecordingGateway(PushGateway):
    def __init__(self) -> None:
        super().__init__(get_settings(), lambda settings: None)
        self.published: list[tuple[int, str, dict]] = []

    def publish(self, recipient_id, event, payload):
        self.published.append((recipient_id, event, payload))
        return True


@pytest.fixture()
def gateway() -> RecordingGateway:
    return RecordingGateway()


def test_fan_out_stores_then_pushes(session, make_user, gateway) -> None:
    user = make_user("ana@example.com")

    result = fan_out_notification(
        session,
        gateway,
        recipient_id=user.id,
        category=CATEGORY_PROJECT_UPDATE,
        title="Project Update: Site",
        body="Design approved",
        project_id=3,
        link="/dashboard/projects/3",
    )

    assert result.stored and result.pushed
    assert result.emailed is False
    assert result.error is None
    ((recipient_id, event, payload),) = gateway.published
    assert recipient_id == user.id
    assert event == EVENT_NOTIFICATION
    assert payload["id"] == result.notification.id
    assert payload["title"] == "Project Update: Site"
    assert NotificationRepository(session).unread_count(user.id) == 1


def test_fan_out_keeps_the_notification_when_push_is_unavailable(session, make_user) -> None:
    user = make_user("ana@example.com")
    gateway = PushGateway(get_settings(), lambda settings: None)

    result = fan_out_notification(
        session,
        gateway,
        recipient_id=user.id,
        category=CATEGORY_MESSAGE,
        title="New message from Bob",
        body="Hi",
    )

    assert result.stored is True
    assert result.pushed is False
    assert NotificationRepository(session).unread_count(user.id) == 1


def test_fan_out_reports_store_outage_without_raising(session, make_user, gateway, monkeypatch) -> None:
    user = make_user("ana@example.com")

    def unavailable(*_args, **_kwargs):
        raise StoreUnavailable("down")

    monkeypatch.setattr(NotificationRepository, "create", unavailable)

    result = fan_out_notification(
        session,
        gateway,
        recipient_id=user.id,
        category=CATEGORY_MESSAGE,
        title="New message",
        body="Hi",
    )

    assert result.stored is False
    assert isinstance(result.error, StoreUnavailable)
    assert gateway.published == []


def test_fan_out_email_failure_is_recorded(session, make_user, gateway) -> None:
    user = make_user("ana@example.com")

    def failing_email(*_args, **_kwargs):
        raise RuntimeError("smtp down")

    result = fan_out_notification(
        session,
        gateway,
        recipient_id=user.id,
        category=CATEGORY_MILESTONE,
        title="Deliverable Approved",
        body="Approved",
        email=user.email,
        send_email=failing_email,
    )

    assert result.stored and result.pushed
    assert result.emailed is False
    assert isinstance(result.error, RuntimeError)


def test_fan_out_many_skips_duplicate_recipients(session, make_user, gateway) -> None:
    ana = make_user("ana@example.com")
    bob = make_user("bob@example.com")

    results = fan_out_many(
        session,
        gateway,
        [ana.id, bob.id, ana.id, None],
        category=CATEGORY_PROJECT_UPDATE,
        title="Project Update: Site",
        body="Launched",
    )

    assert [result.recipient_id for result in results] == [ana.id, bob.id]
    assert all(result.stored for result in results)


def test_event_helpers_build_titles_and_links(session, make_user, gateway) -> None:
    user = make_user("ana@example.com")

    update = notify_project_update(
        session,
        gateway,
        recipient_id=user.id,
        project_id=9,
        project_name="Website",
        update_message="Phase 2 started",
    )
    message = notify_new_message(
        session,
        gateway,
        recipient_id=user.id,
        project_id=9,
        sender_name="Bob",
        message_text="x" * 200,
    )
    milestone = notify_milestone(
        session,
        gateway,
        recipient_id=user.id,
        project_id=9,
        deliverable_title="Logo",
    )

    assert update.notification.title == "Project Update: Website"
    assert update.notification.link == "/dashboard/projects/9"
    assert message.notification.title == "New message from Bob"
    assert message.notification.body == "x" * 140 + "..."
    assert message.notification.link == "/dashboard/projects/9#messages"
    assert milestone.notification.category == CATEGORY_MILESTONE
    assert milestone.notification.body == 'Your deliverable "Logo" has been approved!'


def test_side_effect_failures_do_not_undo_the_primary_action() -> None:
    calls = []

    def primary():
        calls.append("primary")
        return 42

    def broken(value):
        raise RuntimeError(f"failed for {value}")

    def recorded(value):
        calls.append(value)

    result = run_with_side_effects(primary, broken, recorded)

    assert result.value == 42
    assert calls == ["primary", 42]
    assert result.side_effects_ok is False
    assert [str(error) for error in result.side_effect_errors] == ["failed for 42"]


def test_side_effect_results_with_errors_are_collected(session, make_user, gateway, monkeypatch) -> None:
    user = make_user("ana@example.com")

    def unavailable(*_args, **_kwargs):
        raise StoreUnavailable("down")

    monkeypatch.setattr(NotificationRepository, "create", unavailable)

    result = run_with_side_effects(
        lambda: "project saved",
        lambda _value: fan_out_many(
            session,
            gateway,
            [user.id],
            category=CATEGORY_PROJECT_UPDATE,
            title="Project Update",
            body="Saved",
        ),
    )

    assert result.value == "project saved"
    assert len(result.side_effect_errors) == 1
    assert isinstance(result.side_effect_errors[0], StoreUnavailable)


@pytest.mark.anyio
async def test_pushed_notification_arrives_on_a_live_subscription(session, make_user) -> None:
    user = make_user("ana@example.com")
    gateway = PushGateway(get_settings())
    subscription = gateway.subscribe(user.id)

    result = fan_out_notification(
        session,
        gateway,
        recipient_id=user.id,
        category=CATEGORY_MESSAGE,
        title="New message from Bob",
        body="Hi",
    )

    with anyio.fail_after(1):
        event = await subscription.__anext__()
    assert event.payload["id"] == result.notification.id
    assert event.payload["is_read"] is False
    await subscription.aclose()


def test_invalid_content_is_reported_not_raised(session, make_user, gateway) -> None:
    user = make_user("ana@example.com")

    result = notify_project_update(
        session,
        gateway,
        recipient_id=user.id,
        project_id=4,
        project_name="P" * 250,
        update_message="Renamed",
    )

    assert result.stored is False
    assert isinstance(result.error, ValueError)
    assert gateway.published == []
    assert NotificationRepository(session).unread_count(user.id) == 0


def test_fan_out_many_attempts_every_recipient_with_a_bad_payload(session, make_user, gateway) -> None:
    ana = make_user("ana@example.com")
    bob = make_user("bob@example.com")

    results = fan_out_many(
        session,
        gateway,
        [ana.id, bob.id],
        category="general",
        title="Hi",
        body="x" * 1001,
    )

    assert [result.recipient_id for result in results] == [ana.id, bob.id]
    assert all(isinstance(result.error, ValueError) for result in results)
    assert not any(result.stored for result in results)


def test_fan_out_leaves_the_callers_transaction_alone(session, make_user, gateway) -> None:
    from notifyhub.infrastructure.models import UserModel

    user = make_user("ana@example.com")
    session.add(UserModel(email="pending@example.com", name="Pending", role="client", is_active=True))

    result = fan_out_notification(
        session,
        gateway,
        recipient_id=user.id,
        category=CATEGORY_MESSAGE,
        title="New message from Bob",
        body="Hi",
    )
    session.rollback()

    assert result.stored is True
    assert session.query(UserModel).filter_by(email="pending@example.com").count() == 0
    assert NotificationRepository(session).unread_count(user.id) == 1
