"""In-process channel relay used as the push transport."""

from __future__ import annotations

import asyncio
import copy
import logging
import threading
from collections import defaultdict
from datetime import date, datetime
from typing import Any, DefaultDict, Set

import anyio
from anyio import from_thread
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from notifyhub.domain.entities import PushEvent
from notifyhub.domain.errors import TransportUnavailable

logger = logging.getLogger(__name__)


class ChannelSubscription:
    """Async iterator over the events published on one channel."""

    def __init__(
        self,
        relay: "ChannelRelay",
        channel: str,
        send_stream: MemoryObjectSendStream,
        receive_stream: MemoryObjectReceiveStream,
    ) -> None:
        self.channel = channel
        self._relay = relay
        self._send = send_stream
        self._receive = receive_stream
        self._closed = False

    def __aiter__(self) -> "ChannelSubscription":
        return self

    async def __anext__(self) -> PushEvent:
        try:
            return await self._receive.receive()
        except (anyio.EndOfStream, anyio.ClosedResourceError):
            raise StopAsyncIteration from None

    def close(self) -> None:
        """Detach from the relay and release both stream ends."""

        if self._closed:
            return
        self._closed = True
        self._relay._discard(self.channel, self._send)
        self._send.close()
        self._receive.close()

    async def aclose(self) -> None:
        self.close()


class ChannelRelay:
    """Stateless relay from channel names to live subscribers.

    Subscribers are grouped by channel the same way websocket connections are
    grouped by user; a subscriber that cannot receive is dropped rather than
    allowed to fail the publisher.
    """

    def __init__(self, *, key: str, cluster: str = "local", buffer_size: int = 64) -> None:
        self.key = key
        self.cluster = cluster
        self._buffer_size = buffer_size
        self._subscribers: DefaultDict[str, Set[MemoryObjectSendStream]] = defaultdict(set)
        self._lock = threading.Lock()

    def subscribe(self, channel: str) -> ChannelSubscription:
        send_stream, receive_stream = anyio.create_memory_object_stream(self._buffer_size)
        with self._lock:
            self._subscribers[channel].add(send_stream)
        return ChannelSubscription(self, channel, send_stream, receive_stream)

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._subscribers.get(channel, ()))

    def publish(self, channel: str, event: str, payload: Any) -> None:
        """Deliver ``event`` to every subscriber of ``channel``.

        Callable from the event loop or from an AnyIO worker thread; deliveries
        from worker threads are handed back to the loop that owns the streams.
        Any other thread cannot reach that loop, so its events are dropped.
        """

        message = PushEvent(channel=channel, event=event, payload=serialize_payload(payload))
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run_sync(self._deliver, message)
            except RuntimeError as exc:
                if self.subscriber_count(channel):
                    raise TransportUnavailable(
                        f"Cannot deliver '{event}' on {channel} outside the event loop"
                    ) from exc
        else:
            self._deliver(message)

    def _deliver(self, message: PushEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers.get(message.channel, ()))
        for stream in subscribers:
            try:
                stream.send_nowait(message)
            except anyio.WouldBlock:
                logger.warning(
                    "Dropping '%s' event for slow subscriber on %s", message.event, message.channel
                )
            except (anyio.ClosedResourceError, anyio.BrokenResourceError):
                self._discard(message.channel, stream)

    def _discard(self, channel: str, stream: MemoryObjectSendStream) -> None:
        with self._lock:
            streams = self._subscribers.get(channel)
            if streams is None:
                return
            streams.discard(stream)
            if not streams:
                self._subscribers.pop(channel, None)


def serialize_payload(payload: Any) -> dict[str, Any]:
    """Return a JSON-serializable deep copy of ``payload``."""

    if payload is None:
        return {}
    data = copy.deepcopy(payload)
    if not isinstance(data, dict):
        data = {"value": data}
    _normalize_datetime_values(data)
    return data


def _normalize_datetime_values(data: dict[str, object] | list[object]) -> None:
    """Convert dates nested inside ``data`` into ISO strings."""

    if isinstance(data, dict):
        for key, value in data.items():
            if isinstance(value, (datetime, date)):
                data[key] = value.isoformat()
            elif isinstance(value, (dict, list)):
                _normalize_datetime_values(value)
    elif isinstance(data, list):
        for index, item in enumerate(data):
            if isinstance(item, (datetime, date)):
                data[index] = item.isoformat()
            elif isinstance(item, (dict, list)):
                _normalize_datetime_values(item)


__all__ = ["ChannelRelay", "ChannelSubscription", "serialize_payload"]
