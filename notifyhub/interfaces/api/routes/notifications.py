"""Polling endpoints and websocket relay for realtime notifications."""

from __future__ import annotations

import logging

import anyio
import anyio.to_thread
from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from notifyhub.domain.entities import EVENT_UNREAD_COUNT, Notification, User
from notifyhub.domain.errors import NotFound, StoreUnavailable
from notifyhub.config import get_settings
from notifyhub.infrastructure.database import SessionLocal, get_db
from notifyhub.infrastructure.push import PushGateway, serialize_notification
from notifyhub.infrastructure.repositories import NotificationRepository
from notifyhub.interfaces.api.dependencies import (
    get_current_active_user,
    get_push_gateway,
    resolve_current_user,
    store_unavailable,
)
from notifyhub.interfaces.api.schemas import (
    NotificationMarkReadRequest,
    NotificationRead,
    ReadStateUpdate,
    UnreadCountRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

_POLICY_VIOLATION = 1008
_INTERNAL_ERROR = 1011
_TRY_AGAIN_LATER = 1013


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or 0,
        recipient_id=notification.recipient_id,
        project_id=notification.project_id,
        category=notification.category,
        title=notification.title,
        body=notification.body,
        link=notification.link,
        is_read=notification.is_read,
        created_at=notification.created_at,
        read_at=notification.read_at,
    )


def _publish_unread_count(gateway: PushGateway, recipient_id: int, count: int) -> None:
    # Keeps the caller's other open sessions in step without waiting for a poll.
    gateway.publish(recipient_id, EVENT_UNREAD_COUNT, {"count": count})


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    limit: int | None = Query(default=None, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[NotificationRead]:
    """Return the most recent notifications for the authenticated user."""

    limit = limit or get_settings().notification_list_limit
    try:
        notifications = NotificationRepository(db).list_for_recipient(
            current_user.id, limit=limit
        )
    except StoreUnavailable as exc:
        raise store_unavailable(exc) from exc
    return [_notification_to_schema(notification) for notification in notifications]


@router.get("/unread-count", response_model=UnreadCountRead)
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> UnreadCountRead:
    """Return how many notifications the caller has not read yet."""

    try:
        count = NotificationRepository(db).unread_count(current_user.id)
    except StoreUnavailable as exc:
        raise store_unavailable(exc) from exc
    return UnreadCountRead(count=count)


@router.post("/mark-read", response_model=ReadStateUpdate)
def mark_notifications_read(
    request: NotificationMarkReadRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    gateway: PushGateway = Depends(get_push_gateway),
) -> ReadStateUpdate:
    """Mark the given notifications as read; foreign or read ids are ignored."""

    repository = NotificationRepository(db)
    try:
        updated = repository.mark_read(current_user.id, request.unique_ids())
        unread = repository.unread_count(current_user.id)
    except StoreUnavailable as exc:
        raise store_unavailable(exc) from exc
    if updated:
        _publish_unread_count(gateway, current_user.id, unread)
    return ReadStateUpdate(updated=updated, unread_count=unread)


@router.post("/mark-all-read", response_model=ReadStateUpdate)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    gateway: PushGateway = Depends(get_push_gateway),
) -> ReadStateUpdate:
    """Mark every unread notification of the caller as read."""

    repository = NotificationRepository(db)
    try:
        updated = repository.mark_all_read(current_user.id)
        unread = repository.unread_count(current_user.id)
    except StoreUnavailable as exc:
        raise store_unavailable(exc) from exc
    if updated:
        _publish_unread_count(gateway, current_user.id, unread)
    return ReadStateUpdate(updated=updated, unread_count=unread)


@router.get("/{notification_id}", response_model=NotificationRead)
def get_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationRead:
    try:
        notification = NotificationRepository(db).get_for_recipient(
            current_user.id, notification_id
        )
    except NotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StoreUnavailable as exc:
        raise store_unavailable(exc) from exc
    return _notification_to_schema(notification)


def _load_unread(user_id: int) -> list[Notification]:
    with SessionLocal() as session:
        return list(NotificationRepository(session).list_unread_for_recipient(user_id))


def _acknowledge(user_id: int, ids: list[int]) -> tuple[int, int]:
    with SessionLocal() as session:
        repository = NotificationRepository(session)
        updated = repository.mark_read(user_id, ids)
        return updated, repository.unread_count(user_id)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams the caller's push channel."""

    token = websocket.query_params.get("token")
    key = websocket.query_params.get("key")
    gateway: PushGateway = websocket.app.state.push_gateway
    if not token:
        await websocket.close(code=_POLICY_VIOLATION)
        return

    session = SessionLocal()
    try:
        user = resolve_current_user(token, session)
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    except HTTPException:
        await websocket.close(code=_POLICY_VIOLATION)
        return
    finally:
        session.close()

    if not gateway.enabled:
        await websocket.close(code=_TRY_AGAIN_LATER)
        return
    if not gateway.accepts_key(key):
        await websocket.close(code=_POLICY_VIOLATION)
        return

    try:
        pending = await anyio.to_thread.run_sync(_load_unread, user.id)
    except StoreUnavailable:
        await websocket.close(code=_INTERNAL_ERROR)
        return

    subscription = gateway.subscribe(user.id)
    await websocket.accept()
    try:
        await websocket.send_json(
            {"type": "init", "data": [serialize_notification(n) for n in pending]}
        )
        async with anyio.create_task_group() as task_group:
            task_group.start_soon(_forward_events, websocket, subscription)
            await _receive_client_frames(websocket, user.id, gateway)
            task_group.cancel_scope.cancel()
    finally:
        await subscription.aclose()


async def _forward_events(websocket: WebSocket, subscription) -> None:
    async for event in subscription:
        try:
            await websocket.send_json({"type": event.event, "data": event.payload})
        except (WebSocketDisconnect, RuntimeError):
            return


async def _receive_client_frames(websocket: WebSocket, user_id: int, gateway: PushGateway) -> None:
    while True:
        try:
            message = await websocket.receive_json()
        except WebSocketDisconnect:
            return
        except ValueError:
            continue

        if not isinstance(message, dict):
            continue

        message_type = message.get("type")
        if message_type == "ping":
            await websocket.send_json({"type": "pong"})
            continue

        if message_type == "ack":
            ids = message.get("ids", [])
            if isinstance(ids, list) and ids:
                try:
                    updated, unread = await anyio.to_thread.run_sync(_acknowledge, user_id, ids)
                except (StoreUnavailable, ValueError, TypeError):
                    logger.warning("Ignoring websocket ack from user %s", user_id)
                    continue
                if updated:
                    _publish_unread_count(gateway, user_id, unread)
            continue
