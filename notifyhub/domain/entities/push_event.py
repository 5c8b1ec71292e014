"""Typed payload relayed over the push transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

EVENT_NOTIFICATION = "notification"
EVENT_UNREAD_COUNT = "unread-count"


@dataclass(frozen=True)
class PushEvent:
    """Event delivered on a transport channel."""

    channel: str
    event: str
    payload: dict[str, Any] = field(default_factory=dict)


__all__ = ["PushEvent", "EVENT_NOTIFICATION", "EVENT_UNREAD_COUNT"]
