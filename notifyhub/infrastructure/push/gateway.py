"""Push Channel Gateway: logical recipient events over the push transport."""

from __future__ import annotations

import hmac
import logging
import threading
from typing import Any, AsyncIterator, Callable, Protocol

from notifyhub.config import Settings
from notifyhub.domain.entities import PushEvent
from notifyhub.domain.errors import TransportUnavailable

from .relay import ChannelRelay

logger = logging.getLogger(__name__)


class TransportSubscription(Protocol):
    def __aiter__(self) -> AsyncIterator[PushEvent]: ...

    async def aclose(self) -> None: ...


class PushTransport(Protocol):
    """Minimal publish/subscribe surface the gateway relies on."""

    key: str

    def publish(self, channel: str, event: str, payload: Any) -> None: ...

    def subscribe(self, channel: str) -> TransportSubscription: ...


TransportFactory = Callable[[Settings], "PushTransport | None"]


def build_default_transport(settings: Settings) -> ChannelRelay | None:
    """Return the relay transport, or ``None`` when push is not configured."""

    if not settings.push_key:
        return None
    return ChannelRelay(key=settings.push_key, cluster=settings.push_cluster)


class PushSubscription:
    """Typed event stream for one recipient, optionally filtered by event name."""

    enabled = True

    def __init__(self, subscription: TransportSubscription, *, event: str | None = None) -> None:
        self._subscription = subscription
        self._iterator = subscription.__aiter__()
        self._event = event

    def __aiter__(self) -> "PushSubscription":
        return self

    async def __anext__(self) -> PushEvent:
        while True:
            message = await self._iterator.__anext__()
            if self._event is None or message.event == self._event:
                return message

    async def aclose(self) -> None:
        await self._subscription.aclose()


class DisabledSubscription:
    """Stand-in returned when push is unavailable; it ends immediately."""

    enabled = False

    def __aiter__(self) -> "DisabledSubscription":
        return self

    async def __anext__(self) -> PushEvent:
        raise StopAsyncIteration

    async def aclose(self) -> None:
        return None


class PushGateway:
    """Process-scoped wrapper around a lazily constructed push transport.

    Publishing and subscribing never raise: a missing configuration or a
    failing transport turns them into no-ops so callers fall back to polling.
    """

    def __init__(
        self,
        settings: Settings,
        transport_factory: TransportFactory = build_default_transport,
    ) -> None:
        self._settings = settings
        self._transport_factory = transport_factory
        self._transport: PushTransport | None = None
        self._resolved = False
        self._warned = False
        self._lock = threading.Lock()

    @staticmethod
    def channel_for(recipient_id: int) -> str:
        return f"user-{recipient_id}"

    @property
    def enabled(self) -> bool:
        return self._get_transport() is not None

    def accepts_key(self, key: str | None) -> bool:
        """Return ``True`` when ``key`` matches the configured transport key."""

        transport = self._get_transport()
        if transport is None or not key:
            return False
        return hmac.compare_digest(str(transport.key), str(key))

    def publish(self, recipient_id: int, event: str, payload: Any) -> bool:
        """Publish ``event`` on the recipient's channel.

        Returns ``True`` once the event was handed to the transport.
        """

        transport = self._get_transport()
        if transport is None:
            return False
        channel = self.channel_for(recipient_id)
        try:
            transport.publish(channel, event, payload)
        except TransportUnavailable as exc:
            logger.warning("Push publish dropped: %s", exc)
            return False
        except Exception:
            logger.exception("Push publish of '%s' on %s failed", event, channel)
            return False
        return True

    def subscribe(
        self, recipient_id: int, event: str | None = None
    ) -> PushSubscription | DisabledSubscription:
        transport = self._get_transport()
        if transport is None:
            return DisabledSubscription()
        channel = self.channel_for(recipient_id)
        try:
            subscription = transport.subscribe(channel)
        except Exception:
            logger.exception("Push subscription to %s failed; polling only", channel)
            return DisabledSubscription()
        return PushSubscription(subscription, event=event)

    def _get_transport(self) -> PushTransport | None:
        with self._lock:
            if not self._resolved:
                try:
                    self._transport = self._transport_factory(self._settings)
                except TransportUnavailable as exc:
                    logger.error("Push transport could not be created: %s", exc)
                    self._transport = None
                self._resolved = True
            transport = self._transport
            warn = transport is None and not self._warned
            if warn:
                self._warned = True
        if warn:
            logger.warning(
                "Push transport not configured; realtime delivery disabled, clients rely on polling. "
                "Set PUSH_KEY to enable it."
            )
        return transport


__all__ = [
    "PushGateway",
    "PushSubscription",
    "DisabledSubscription",
    "PushTransport",
    "TransportFactory",
    "build_default_transport",
]
