"""Errors raised by the notification and reminder subsystem."""

from __future__ import annotations


class NotifyHubError(RuntimeError):
    """Base class for every error raised by the subsystem."""


class Unauthorized(NotifyHubError):
    """The caller has no valid identity."""


class NotFound(NotifyHubError):
    """The requested record or recipient does not exist."""


class StoreUnavailable(NotifyHubError):
    """The durable store could not be reached. Callers may retry later."""


class TransportUnavailable(NotifyHubError):
    """The push transport is not configured or cannot be reached."""


class DispatchFailed(NotifyHubError):
    """The email sender failed after the day had already been claimed."""


__all__ = [
    "NotifyHubError",
    "Unauthorized",
    "NotFound",
    "StoreUnavailable",
    "TransportUnavailable",
    "DispatchFailed",
]
