"""Public helpers for emitting domain notifications."""

from .events import notify_milestone, notify_new_message, notify_project_update
from .fanout import (
    FanOutResult,
    fan_out_many,
    fan_out_notification,
    run_with_side_effects,
)

__all__ = [
    "FanOutResult",
    "fan_out_notification",
    "fan_out_many",
    "run_with_side_effects",
    "notify_project_update",
    "notify_new_message",
    "notify_milestone",
]
