"""Client Sync Engine: polling plus push subscription for unread state.

Polling is the correctness path; push is an optimization layered on top. The
two sources are not ordered relative to each other, so the same update may be
observed twice and consumers must tolerate repeats.
"""

from __future__ import annotations

import inspect
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Awaitable, Callable, Mapping, Sequence

import anyio
from anyio.abc import TaskGroup

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 30.0

CountFetcher = Callable[[], Awaitable[int]]
ListFetcher = Callable[[], Awaitable[Sequence[Mapping[str, Any]]]]
Handler = Callable[..., Any]


@dataclass
class SyncState:
    """Client-visible unread state, rebuilt from the server on every poll."""

    unread_count: int = 0
    last_known_notification_ids: set[int] = field(default_factory=set)
    last_poll_timestamp: datetime | None = None
    initialized: bool = False


class SyncHandle:
    """Stops a running engine; stopping more than once is harmless."""

    def __init__(self, scope: anyio.CancelScope, finished: anyio.Event) -> None:
        self._scope = scope
        self._finished = finished

    @property
    def stopped(self) -> bool:
        return self._scope.cancel_called

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    def stop(self) -> None:
        self._scope.cancel()

    cancel = stop

    async def wait(self) -> None:
        """Wait until the poll task and the subscription are released."""

        await self._finished.wait()


class NotificationSyncEngine:
    """Reconcile the unread count with the server by poll and push."""

    def __init__(
        self,
        fetch_unread_count: CountFetcher,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        fetch_notifications: ListFetcher | None = None,
        subscribe: Callable[[], Any] | None = None,
        push_event: str | None = None,
        on_count_changed: Handler | None = None,
        on_new_notifications: Handler | None = None,
        on_push_event: Handler | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        self.state = SyncState()
        self.interval = interval
        self._fetch_unread_count: CountFetcher | None = fetch_unread_count
        self._fetch_notifications = fetch_notifications
        self._subscribe = subscribe
        self._push_event = push_event
        self._on_count_changed = on_count_changed
        self._on_new_notifications = on_new_notifications
        self._on_push_event = on_push_event
        self._subscription: Any = None
        self._active = False
        self._released = False

    @property
    def active(self) -> bool:
        return self._active

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None

    async def start(self, task_group: TaskGroup) -> SyncHandle:
        """Run the engine inside ``task_group`` and return its stop handle."""

        self._ensure_startable()
        scope = anyio.CancelScope()
        finished = anyio.Event()
        self._active = True
        task_group.start_soon(self._run, scope, finished)
        return SyncHandle(scope, finished)

    @asynccontextmanager
    async def running(self) -> AsyncIterator[SyncHandle]:
        """Run the engine for the duration of the ``async with`` block."""

        self._ensure_startable()
        async with anyio.create_task_group() as task_group:
            handle = await self.start(task_group)
            try:
                yield handle
            finally:
                handle.stop()

    def _ensure_startable(self) -> None:
        if self._active or self._released:
            raise RuntimeError("A sync engine can only be started once")

    async def poll_once(self) -> int:
        """Run a single poll tick and return the resulting unread count."""

        fetch = self._fetch_unread_count
        if fetch is None:
            return self.state.unread_count
        try:
            count = int(await fetch())
        except Exception:
            logger.warning("Unread count poll failed; keeping %s", self.state.unread_count, exc_info=True)
            return self.state.unread_count

        state = self.state
        previous = state.unread_count
        first_poll = not state.initialized
        state.unread_count = count
        state.initialized = True
        state.last_poll_timestamp = datetime.now(timezone.utc)

        if first_poll:
            await self._refresh_known_notifications()
        elif count > previous:
            fresh = await self._refresh_known_notifications()
            await self._emit(self._on_new_notifications, count - previous, fresh)

        if first_poll or count != previous:
            await self._emit(self._on_count_changed, count)
        return count

    async def _run(self, scope: anyio.CancelScope, finished: anyio.Event) -> None:
        try:
            with scope:
                async with anyio.create_task_group() as workers:
                    workers.start_soon(self._poll_loop)
                    if self._subscribe is not None:
                        workers.start_soon(self._push_loop)
        finally:
            self._release()
            finished.set()

    async def _poll_loop(self) -> None:
        # Ticks run back to back, so a tick never starts while one is in flight.
        while True:
            await self.poll_once()
            await anyio.sleep(self.interval)

    async def _push_loop(self) -> None:
        try:
            subscription = self._subscribe()
            if inspect.isawaitable(subscription):
                subscription = await subscription
        except Exception:
            logger.warning("Push subscription failed; continuing with polling only", exc_info=True)
            return

        if not getattr(subscription, "enabled", True):
            logger.info("Push delivery disabled; continuing with polling only")
        self._subscription = subscription
        try:
            async for event in subscription:
                if self._push_event is not None and getattr(event, "event", None) != self._push_event:
                    continue
                await self._emit(self._on_push_event, event)
        except anyio.get_cancelled_exc_class():
            raise
        except Exception:
            logger.warning("Push subscription lost; continuing with polling only", exc_info=True)
        finally:
            self._subscription = None
            with anyio.CancelScope(shield=True):
                await _close_subscription(subscription)

    async def _refresh_known_notifications(self) -> list[Mapping[str, Any]]:
        """Refresh known ids and return notifications not seen before."""

        if self._fetch_notifications is None:
            return []
        try:
            notifications = list(await self._fetch_notifications())
        except Exception:
            logger.warning("Notification list refresh failed", exc_info=True)
            return []

        known = self.state.last_known_notification_ids
        fresh = [item for item in notifications if item.get("id") not in known]
        self.state.last_known_notification_ids = {
            item["id"] for item in notifications if item.get("id") is not None
        }
        return fresh

    async def _emit(self, handler: Handler | None, *args: Any) -> None:
        if handler is None:
            return
        try:
            result = handler(*args)
            if inspect.isawaitable(result):
                await result
        except anyio.get_cancelled_exc_class():
            raise
        except Exception:
            logger.exception("Sync handler %r failed", handler)

    def _release(self) -> None:
        self._active = False
        self._released = True
        self._subscription = None
        self._fetch_unread_count = None
        self._fetch_notifications = None
        self._subscribe = None
        self._on_count_changed = None
        self._on_new_notifications = None
        self._on_push_event = None


async def _close_subscription(subscription: Any) -> None:
    close = getattr(subscription, "aclose", None)
    if close is None:
        return
    try:
        await close()
    except Exception:
        logger.debug("Closing push subscription failed", exc_info=True)


__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "NotificationSyncEngine",
    "SyncHandle",
    "SyncState",
]
