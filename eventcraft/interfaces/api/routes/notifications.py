"""Endpoints and websocket handler for user notifications."""

from __future__ import annotations

import logging

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from eventcraft.application.use_cases.notifications import (
    NotificationDispatcher,
    NotificationInput,
    NotificationNotFoundError,
    NotificationValidationError,
    notify_event_attendees,
)
from eventcraft.config import get_settings
from eventcraft.domain.entities import ChannelRequest, NotificationAction, User
from eventcraft.infrastructure.database import SessionLocal
from eventcraft.infrastructure.realtime import notification_manager, serialize_notification
from eventcraft.interfaces.api.dependencies import (
    get_current_user,
    get_notification_dispatcher,
    require_admin,
    require_organizer,
    resolve_current_user,
)
from eventcraft.interfaces.api.schemas import (
    BroadcastRequest,
    BroadcastResponse,
    BroadcastSummaryRead,
    MarkAllReadResponse,
    NotificationCreate,
    NotificationPageRead,
    NotificationPreferencesRead,
    NotificationPreferencesUpdate,
    NotificationRead,
    TestNotificationRequest,
    UnreadCountRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _to_input(payload: NotificationCreate) -> NotificationInput:
    channels = payload.channels
    return NotificationInput(
        recipient_id=payload.recipient_id,
        title=payload.title,
        message=payload.message,
        category=payload.type,
        channels=(
            ChannelRequest(in_app=channels.in_app, email=channels.email, sms=channels.sms)
            if channels
            else ChannelRequest()
        ),
        related_event_id=payload.related_event_id or payload.data.get("eventId"),
        related_ticket_id=payload.related_ticket_id or payload.data.get("ticketId"),
        action=(
            NotificationAction(
                text=payload.action.text, url=payload.action.url, type=payload.action.type
            )
            if payload.action
            else None
        ),
        metadata=dict(payload.data),
        priority=payload.priority,
        expires_at=payload.expires_at,
        scheduled_for=payload.scheduled_for,
    )


def _preferences_of(user: User) -> NotificationPreferencesRead:
    return NotificationPreferencesRead(
        email=user.notify_email,
        sms=user.notify_sms,
        event_categories=list(user.event_categories),
    )


@router.get("/", response_model=NotificationPageRead)
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    type: str | None = Query(None),
    is_read: bool | None = Query(None),
    priority: str | None = Query(None),
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> NotificationPageRead:
    """Return a page of the authenticated user's notifications, newest first."""

    result = dispatcher.list_notifications(
        current_user.id,
        page=page,
        limit=limit,
        category=type,
        is_read=is_read,
        priority=priority,
    )
    return NotificationPageRead(
        notifications=[NotificationRead.from_entity(item) for item in result.items],
        total=result.total,
        page=result.page,
        pages=result.pages,
    )


@router.get("/unread-count", response_model=UnreadCountRead)
def unread_count(
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> UnreadCountRead:
    return UnreadCountRead(count=dispatcher.count_unread(current_user.id))


@router.put("/mark-all-read", response_model=MarkAllReadResponse)
def mark_all_read(
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> MarkAllReadResponse:
    return MarkAllReadResponse(modified_count=dispatcher.mark_all_as_read(current_user.id))


@router.get("/preferences", response_model=NotificationPreferencesRead)
def read_preferences(current_user: User = Depends(get_current_user)):
    return _preferences_of(current_user)


@router.put("/preferences", response_model=NotificationPreferencesRead)
def update_preferences(
    payload: NotificationPreferencesUpdate,
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Update the authenticated user's email, SMS and event category preferences."""

    try:
        user = dispatcher.users.update_preferences(
            current_user.id,
            email=payload.email,
            sms=payload.sms,
            event_categories=payload.event_categories,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _preferences_of(user)


@router.post("/", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    current_user: User = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Create a notification for any user (administrators only)."""

    try:
        notification = dispatcher.create_notification(_to_input(payload))
    except NotificationValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    logger.info("User %s created notification %s", current_user.id, notification.id)
    return NotificationRead.from_entity(notification)


@router.post("/test", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
def send_test_notification(
    payload: TestNotificationRequest | None = None,
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Send an in-app notification to the authenticated user."""

    payload = payload or TestNotificationRequest()
    try:
        notification = dispatcher.create_notification(
            NotificationInput(
                recipient_id=current_user.id,
                title=payload.title,
                message=payload.message,
                category="info",
                channels=ChannelRequest(in_app=True),
            )
        )
    except NotificationValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return NotificationRead.from_entity(notification)


@router.post("/send", response_model=BroadcastResponse)
def send_event_notification(
    payload: BroadcastRequest,
    current_user: User = Depends(require_organizer),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Email and/or text the attendees of an event (organizer or admin)."""

    try:
        summary = notify_event_attendees(
            dispatcher,
            event_id=payload.event_id,
            sender=current_user,
            title=payload.title,
            message=payload.message,
            channel=payload.notification_type,
            send_to_all=payload.send_to_all,
        )
    except NotificationValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return BroadcastResponse(
        message="Notifications sent successfully",
        stats=BroadcastSummaryRead(
            email_count=summary.email_count,
            sms_count=summary.sms_count,
            total_recipients=summary.total_recipients,
        ),
    )


@router.put("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    try:
        notification = dispatcher.mark_as_read(notification_id, current_user.id)
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return NotificationRead.from_entity(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> Response:
    if not dispatcher.delete_notification(notification_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    session = SessionLocal()
    try:
        user = resolve_current_user(token, session)
        unread = NotificationDispatcher(session, get_settings()).list_notifications(
            user.id, is_read=False
        )
    except HTTPException:
        await websocket.close(code=1008)
        return
    finally:
        session.close()

    await notification_manager.connect(user.id, websocket)
    try:
        if unread.items:
            await websocket.send_json(
                {"type": "init", "data": [serialize_notification(n) for n in unread.items]}
            )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
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
                    _acknowledge(user.id, ids)
                continue
    except WebSocketDisconnect:
        notification_manager.disconnect(user.id, websocket)
    except Exception:
        notification_manager.disconnect(user.id, websocket)
        raise


def _acknowledge(user_id: int, ids: list) -> None:
    ack_session = SessionLocal()
    try:
        dispatcher = NotificationDispatcher(ack_session, get_settings())
        for notification_id in ids:
            if not isinstance(notification_id, int):
                continue
            try:
                dispatcher.mark_as_read(notification_id, user_id)
            except NotificationNotFoundError:
                logger.debug(
                    "Ignoring ack for unknown notification %s from user %s",
                    notification_id,
                    user_id,
                )
    finally:
        ack_session.close()
