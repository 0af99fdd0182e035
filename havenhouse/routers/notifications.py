import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, status, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session, sessionmaker
from ..core.config import settings
from ..core.database import get_db, get_session_factory
from ..core.events import change_feed
from ..core.security import decode_access_token
from ..models.notification import Notification
from ..models.staff import StaffUser
from ..schemas.notification import NotificationList, NotificationResponse
from ..services.notification_feed import NotificationFeed, SqlNotificationStore
from ..services.notification_service import NotificationService
from ..utils.dependencies import get_current_staff

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationList)
def get_notifications(
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Newest notifications with the unread count"""
    notifications = NotificationService.get_notifications(db, limit=settings.notification_feed_limit)
    return NotificationList(
        notifications=notifications,
        unread_count=sum(1 for n in notifications if not n.is_read)
    )


@router.post("/read-all")
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Mark every unread notification as read"""
    return {"updated": NotificationService.mark_many_as_read(db)}


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Mark a notification as read"""
    notification = NotificationService.mark_as_read(db, notification_id)
    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )
    return notification


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Delete a notification"""
    if not NotificationService.delete_notification(db, notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found"
        )


def _run_command(feed: NotificationFeed, command) -> bool:
    if not isinstance(command, dict):
        raise ValueError("Notification commands must be JSON objects")
    action = command.get("action")
    notification_id = command.get("id")
    if action == "mark_read" and notification_id:
        return feed.mark_as_read(notification_id)
    if action == "mark_all_read":
        return feed.mark_all_as_read()
    if action == "delete" and notification_id:
        return feed.delete(notification_id)
    if action == "refresh":
        return feed.load()
    raise ValueError(f"Unknown notification command: {action!r}")


async def _read_commands(websocket: WebSocket, inbox: asyncio.Queue) -> None:
    try:
        while True:
            inbox.put_nowait(("command", await websocket.receive_json()))
    except WebSocketDisconnect:
        inbox.put_nowait(("closed", None))
    except ValueError:
        logger.warning("Malformed message on notification socket")
        inbox.put_nowait(("closed", None))


@router.websocket("/ws")
async def notification_socket(
    websocket: WebSocket,
    alerts: bool = False,
    session_factory: sessionmaker = Depends(get_session_factory)
):
    """Live notification feed for one staff session.

    Change events and client commands are applied one at a time; a snapshot
    of the feed is pushed after each of them.
    """
    claims = decode_access_token(websocket.cookies.get(settings.staff_cookie_name, ""))
    if not claims or claims.get("kind") != "staff":
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await websocket.accept()

    loop = asyncio.get_running_loop()
    inbox: asyncio.Queue = asyncio.Queue()

    def post(kind: str, payload) -> None:
        loop.call_soon_threadsafe(inbox.put_nowait, (kind, payload))

    feed = NotificationFeed(
        SqlNotificationStore(session_factory),
        limit=settings.notification_feed_limit,
        on_error=lambda error: post("error", str(error)),
        alert=(lambda notification: post("alert", notification)) if alerts else None,
    )
    # Subscribe before loading; inserts seen twice are dropped by the feed
    subscription = change_feed.subscribe(Notification.__tablename__, lambda change: post("change", change))
    reader = None

    try:
        await run_in_threadpool(feed.load)
        reader = asyncio.create_task(_read_commands(websocket, inbox))
        await websocket.send_json({"type": "snapshot", **feed.snapshot().model_dump(mode="json")})
        while True:
            kind, payload = await inbox.get()
            if kind == "closed":
                break
            if kind == "error":
                await websocket.send_json({"type": "error", "message": "Notification update failed"})
                continue
            if kind == "alert":
                await websocket.send_json({"type": "alert", "title": payload.title, "message": payload.message})
                continue
            if kind == "change":
                feed.apply(payload)
            else:
                try:
                    await run_in_threadpool(_run_command, feed, payload)
                except ValueError as exc:
                    await websocket.send_json({"type": "error", "message": str(exc)})
                    continue
            await websocket.send_json({"type": "snapshot", **feed.snapshot().model_dump(mode="json")})
    except WebSocketDisconnect:
        pass
    finally:
        subscription.unsubscribe()
        if reader is not None:
            reader.cancel()
        logger.info("Notification socket closed for staff %s", claims.get("sub"))
