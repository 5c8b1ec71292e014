"""Build the daily reminder digest email."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from html import escape
from typing import Sequence

from notifyhub.domain.entities import REMINDER_PRIORITIES, Reminder
from notifyhub.utils import ensure_app_timezone

URGENCY_OVERDUE = "overdue"
URGENCY_TODAY = "today"
URGENCY_TOMORROW = "tomorrow"
URGENCY_UPCOMING = "upcoming"

_DESCRIPTION_LIMIT = 150

_PRIORITY_COLORS = {
    "urgent": ("#fee2e2", "#991b1b"),
    "high": ("#fef3c7", "#92400e"),
    "medium": ("#dbeafe", "#1e40af"),
    "low": ("#e5e7eb", "#374151"),
}
_URGENCY_COLORS = {
    URGENCY_OVERDUE: "#dc2626",
    URGENCY_TODAY: "#ea580c",
    URGENCY_TOMORROW: "#ca8a04",
    URGENCY_UPCOMING: "#2563eb",
}


@dataclass
class DigestItem:
    reminder: Reminder
    urgency: str


@dataclass
class ReminderDigest:
    """Rendered digest plus the counts reported back to the caller."""

    subject: str
    html: str
    groups: dict[str, list[DigestItem]] = field(default_factory=dict)
    by_urgency: dict[str, int] = field(default_factory=dict)

    @property
    def reminder_count(self) -> int:
        return sum(len(items) for items in self.groups.values())

    @property
    def by_priority(self) -> dict[str, int]:
        return {priority: len(items) for priority, items in self.groups.items()}


def classify_urgency(reminder_date: datetime, now: datetime) -> str:
    """Label a reminder by calendar days between ``now`` and its date."""

    local_date = ensure_app_timezone(reminder_date)
    local_now = ensure_app_timezone(now)
    days = (local_date.date() - local_now.date()).days
    if days < 0:
        return URGENCY_OVERDUE
    if days == 0:
        return URGENCY_TODAY
    if days == 1:
        return URGENCY_TOMORROW
    return URGENCY_UPCOMING


def group_by_priority(reminders: Sequence[Reminder], now: datetime) -> dict[str, list[DigestItem]]:
    """Group ``reminders`` by priority, most pressing first, empty groups dropped."""

    groups: dict[str, list[DigestItem]] = {priority: [] for priority in REMINDER_PRIORITIES}
    for reminder in reminders:
        item = DigestItem(reminder=reminder, urgency=classify_urgency(reminder.reminder_date, now))
        groups.setdefault(reminder.priority, []).append(item)
    return {priority: items for priority, items in groups.items() if items}


def build_reminder_digest(
    reminders: Sequence[Reminder], *, now: datetime, app_url: str
) -> ReminderDigest:
    groups = group_by_priority(reminders, now)
    urgency = Counter(item.urgency for items in groups.values() for item in items)
    attention = urgency[URGENCY_OVERDUE] + urgency[URGENCY_TODAY]
    subject = f"Daily Reminders: {attention} need attention"
    html = _render_html(groups, now=now, app_url=app_url, total=len(reminders))
    return ReminderDigest(subject=subject, html=html, groups=groups, by_urgency=dict(urgency))


def _render_html(
    groups: dict[str, list[DigestItem]], *, now: datetime, app_url: str, total: int
) -> str:
    local_now = ensure_app_timezone(now)
    parts = [
        "<!DOCTYPE html><html><body style=\"font-family: Arial, sans-serif; color: #333;\">",
        "<div style=\"max-width: 600px; margin: 0 auto; padding: 20px;\">",
        "<div style=\"background: #2563eb; color: white; padding: 20px; text-align: center;\">",
        "<h1>Daily Reminders</h1>",
        f"<p>{local_now.strftime('%A, %B %d, %Y')}</p>",
        "</div>",
    ]
    for priority, items in groups.items():
        parts.append(_render_group(priority, items))

    reminders_url = f"{app_url.rstrip('/')}/admin/reminders"
    plural = "" if total == 1 else "s"
    parts.extend(
        [
            "<div style=\"text-align: center; margin: 30px 0;\">",
            f"<a href=\"{escape(reminders_url, quote=True)}\">View All Reminders</a>",
            "</div>",
            "<div style=\"text-align: center; color: #666; font-size: 12px;\">",
            f"<p>You're receiving this because you have {total} pending reminder{plural}</p>",
            "</div></div></body></html>",
        ]
    )
    return "".join(parts)


def _render_group(priority: str, items: list[DigestItem]) -> str:
    background, color = _PRIORITY_COLORS.get(priority, _PRIORITY_COLORS["low"])
    rows = [
        "<div style=\"background: #f9fafb; padding: 20px; margin: 15px 0;\">",
        f"<div style=\"font-size: 18px; font-weight: bold; color: {color};\">"
        f"{escape(priority.title())} ({len(items)})</div>",
    ]
    for item in items:
        reminder = item.reminder
        border = _URGENCY_COLORS.get(item.urgency, _URGENCY_COLORS[URGENCY_UPCOMING])
        due = ensure_app_timezone(reminder.reminder_date)
        rows.append(
            f"<div style=\"background: white; padding: 15px; margin: 10px 0; border-left: 4px solid {border};\">"
            f"<div style=\"font-weight: bold;\">{escape(reminder.title)} "
            f"<span style=\"background: {background}; color: {color}; padding: 2px 8px;\">"
            f"{escape(item.urgency)}</span></div>"
            f"<div style=\"font-size: 13px; color: #6b7280;\">{escape(reminder.client_name or 'No client')}</div>"
            f"<div style=\"font-size: 14px; color: #6b7280;\">{escape(_truncate(reminder.description))}</div>"
            f"<div style=\"font-size: 12px; color: {border};\">Due: {due.strftime('%Y-%m-%d %H:%M')}</div>"
            "</div>"
        )
    rows.append("</div>")
    return "".join(rows)


def _truncate(text: str) -> str:
    if len(text) <= _DESCRIPTION_LIMIT:
        return text
    return f"{text[:_DESCRIPTION_LIMIT]}..."


__all__ = [
    "DigestItem",
    "ReminderDigest",
    "build_reminder_digest",
    "classify_urgency",
    "group_by_priority",
    "URGENCY_OVERDUE",
    "URGENCY_TODAY",
    "URGENCY_TOMORROW",
    "URGENCY_UPCOMING",
]
