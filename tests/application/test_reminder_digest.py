"""Tests for rendering the reminder digest."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from notifyhub.application.use_cases.reminders import (
    build_reminder_digest,
    classify_urgency,
    group_by_priority,
)
from notifyhub.domain.entities import PRIORITY_HIGH, PRIORITY_LOW, PRIORITY_URGENT, Reminder
from notifyhub.utils import get_app_timezone


@pytest.fixture()
def now() -> datetime:
    return datetime(2026, 3, 10, 0, 10, tzinfo=get_app_timezone())


def _reminder(title: str, when: datetime, priority: str = PRIORITY_HIGH, **kwargs) -> Reminder:
    return Reminder(
        id=None,
        title=title,
        description=kwargs.pop("description", "Details"),
        reminder_date=when,
        created_by=1,
        priority=priority,
        **kwargs,
    )


@pytest.mark.parametrize(
    ("offset", "expected"),
    [
        (timedelta(minutes=-20), "overdue"),
        (timedelta(hours=-30), "overdue"),
        (timedelta(hours=5), "today"),
        (timedelta(days=1), "tomorrow"),
        (timedelta(days=3), "upcoming"),
    ],
)
def test_classify_urgency_uses_calendar_days(now, offset, expected) -> None:
    assert classify_urgency(now + offset, now) == expected


def test_groups_are_ordered_by_priority_and_skip_empty(now) -> None:
    reminders = [
        _reminder("Low", now, PRIORITY_LOW),
        _reminder("Urgent", now, PRIORITY_URGENT),
    ]

    groups = group_by_priority(reminders, now)

    assert list(groups) == ["urgent", "low"]


def test_digest_subject_counts_items_needing_attention(now) -> None:
    reminders = [
        _reminder("Yesterday", now - timedelta(days=1)),
        _reminder("Today", now + timedelta(hours=3), PRIORITY_URGENT),
        _reminder("Tomorrow", now + timedelta(days=1), PRIORITY_LOW),
    ]

    digest = build_reminder_digest(reminders, now=now, app_url="https://app.example.com/")

    assert digest.subject == "Daily Reminders: 2 need attention"
    assert digest.reminder_count == 3
    assert digest.by_urgency == {"overdue": 1, "today": 1, "tomorrow": 1}
    assert 'href="https://app.example.com/admin/reminders"' in digest.html
    assert "3 pending reminders" in digest.html


def test_digest_html_escapes_and_truncates(now) -> None:
    reminder = _reminder(
        "<b>Call</b>",
        now,
        description="d" * 200,
        client_name="Acme & Co",
    )

    digest = build_reminder_digest([reminder], now=now, app_url="https://app.example.com")

    assert "&lt;b&gt;Call&lt;/b&gt;" in digest.html
    assert "Acme &amp; Co" in digest.html
    assert "d" * 150 + "..." in digest.html
    assert "d" * 151 not in digest.html
    assert "1 pending reminder<" in digest.html
