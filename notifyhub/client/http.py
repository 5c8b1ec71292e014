"""HTTP client for the notification endpoints."""

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from notifyhub.domain.errors import NotFound, NotifyHubError, StoreUnavailable, Unauthorized

logger = logging.getLogger(__name__)

_STATUS_ERRORS: dict[int, type[NotifyHubError]] = {
    401: Unauthorized,
    404: NotFound,
    503: StoreUnavailable,
}


class NotificationsApiClient:
    """Thin async wrapper around the notification API for one signed-in user."""

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._headers = {"Authorization": f"Bearer {token}"}

    async def __aenter__(self) -> "NotificationsApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def unread_count(self) -> int:
        data = await self._request("GET", "/notifications/unread-count")
        return int(data["count"])

    async def list_notifications(self, limit: int | None = None) -> list[dict[str, Any]]:
        params = {"limit": limit} if limit is not None else None
        return await self._request("GET", "/notifications/", params=params)

    async def get_notification(self, notification_id: int) -> dict[str, Any]:
        return await self._request("GET", f"/notifications/{notification_id}")

    async def mark_read(self, ids: Iterable[int]) -> dict[str, Any]:
        return await self._request(
            "POST", "/notifications/mark-read", json={"ids": list(ids)}
        )

    async def mark_all_read(self) -> dict[str, Any]:
        return await self._request("POST", "/notifications/mark-all-read")

    async def check_reminder_digest(self) -> dict[str, Any]:
        return await self._request("POST", "/admin/reminders/digest")

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        response = await self._client.request(method, url, headers=self._headers, **kwargs)
        error_cls = _STATUS_ERRORS.get(response.status_code)
        if error_cls is not None:
            detail = _response_detail(response)
            raise error_cls(detail or f"{method} {url} returned {response.status_code}")
        response.raise_for_status()
        return response.json()


class SessionReminderCheck:
    """Ask the server for the reminder digest at most once per session.

    The flag only saves a request. The server's daily claim decides whether an
    email is actually sent, so losing the flag never causes a duplicate.
    """

    def __init__(self, client: NotificationsApiClient) -> None:
        self._client = client
        self._checked = False

    @property
    def checked(self) -> bool:
        return self._checked

    async def on_admin_page_load(self) -> dict[str, Any] | None:
        if self._checked:
            return None
        self._checked = True
        try:
            outcome = await self._client.check_reminder_digest()
        except (httpx.HTTPError, NotifyHubError):
            logger.warning("Reminder digest check failed", exc_info=True)
            return None
        logger.info("Reminder digest check finished with status %s", outcome.get("status"))
        return outcome


def _response_detail(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return response.text or None
    if isinstance(payload, dict):
        detail = payload.get("detail")
        return str(detail) if detail is not None else None
    return None


__all__ = ["NotificationsApiClient", "SessionReminderCheck"]
