"""Live, capped list of notifications with an unread counter.

A ``NotificationFeed`` belongs to a single consumer (one staff session). It is
filled from a store once, then kept current by change events for the
``notifications`` table, whichever client caused them. The in-memory state
only changes after the store call it depends on has succeeded.
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..core.events import INSERT, UPDATE, ChangeEvent, ChangeFeed, Subscription
from ..models.notification import Notification
from ..schemas.notification import NotificationList, NotificationResponse
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[Exception], None]
AlertHandler = Callable[[NotificationResponse], None]


class NotificationStoreError(Exception):
    """A fetch, update or delete against the notification store failed."""


class SqlNotificationStore:
    """Notification persistence through short-lived SQLAlchemy sessions."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def _session(self):
        db = self.session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            raise NotificationStoreError(str(exc)) from exc
        finally:
            db.close()

    def fetch_recent(self, limit: int) -> List[NotificationResponse]:
        with self._session() as db:
            rows = NotificationService.get_notifications(db, limit=limit)
            return [NotificationResponse.model_validate(row) for row in rows]

    def mark_read(self, notification_ids: Sequence[str]) -> None:
        with self._session() as db:
            NotificationService.mark_many_as_read(db, notification_ids)

    def delete(self, notification_id: str) -> None:
        with self._session() as db:
            NotificationService.delete_notification(db, notification_id)


def _log_error(error: Exception) -> None:
    logger.error("Notification feed error: %s", error)


class NotificationFeed:

    def __init__(
        self,
        store,
        limit: int = 50,
        on_error: Optional[ErrorHandler] = None,
        alert: Optional[AlertHandler] = None,
    ):
        self.store = store
        self.limit = limit
        self.on_error = on_error or _log_error
        self.alert = alert
        self._items: List[NotificationResponse] = []
        self._unread = 0
        self._subscription: Optional[Subscription] = None

    @property
    def notifications(self) -> List[NotificationResponse]:
        return list(self._items)

    @property
    def unread_count(self) -> int:
        return self._unread

    def snapshot(self) -> NotificationList:
        return NotificationList(notifications=self.notifications, unread_count=self._unread)

    def _find(self, notification_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == notification_id:
                return index
        return None

    def _report(self, error: Exception) -> None:
        try:
            self.on_error(error)
        except Exception:
            logger.exception("Notification feed error handler failed")

    # Loading and live updates

    def load(self) -> bool:
        try:
            items = self.store.fetch_recent(self.limit)
        except NotificationStoreError as exc:
            self._report(exc)
            return False
        self._items = list(items)[: self.limit]
        self._unread = sum(1 for item in self._items if not item.is_read)
        return True

    def subscribe(self, change_feed: ChangeFeed) -> Subscription:
        """Apply change events straight from ``change_feed`` on the publishing thread."""
        self.unsubscribe()
        self._subscription = change_feed.subscribe(Notification.__tablename__, self.apply)
        return self._subscription

    def unsubscribe(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def apply(self, change: ChangeEvent) -> None:
        if change.type == INSERT:
            self.handle_insert(change.new)
        elif change.type == UPDATE:
            self.handle_update(change.new)

    def handle_insert(self, record: Dict[str, Any]) -> None:
        notification = NotificationResponse.model_validate(record)
        if self._find(notification.id) is not None:
            return
        self._items.insert(0, notification)
        if not notification.is_read:
            self._unread += 1
        while len(self._items) > self.limit:
            dropped = self._items.pop()
            if not dropped.is_read:
                self._unread = max(0, self._unread - 1)
        if self.alert is not None:
            try:
                self.alert(notification)
            except Exception:
                logger.warning("Could not surface alert for notification %s", notification.id, exc_info=True)

    def handle_update(self, record: Dict[str, Any]) -> None:
        updated = NotificationResponse.model_validate(record)
        index = self._find(updated.id)
        if index is None:
            return
        was_read = self._items[index].is_read
        self._items[index] = updated
        if updated.is_read and not was_read:
            self._unread = max(0, self._unread - 1)
        elif was_read and not updated.is_read:
            self._unread += 1

    # User actions

    def mark_as_read(self, notification_id: str) -> bool:
        index = self._find(notification_id)
        if index is not None and self._items[index].is_read:
            return True
        try:
            self.store.mark_read([notification_id])
        except NotificationStoreError as exc:
            self._report(exc)
            return False
        # Re-find: a change event may have patched the list during the store call
        index = self._find(notification_id)
        if index is not None and not self._items[index].is_read:
            self._items[index] = self._items[index].model_copy(update={"is_read": True})
            self._unread = max(0, self._unread - 1)
        return True

    def mark_all_as_read(self) -> bool:
        unread_ids = [item.id for item in self._items if not item.is_read]
        if not unread_ids:
            return True
        try:
            self.store.mark_read(unread_ids)
        except NotificationStoreError as exc:
            self._report(exc)
            return False
        self._items = [
            item if item.is_read else item.model_copy(update={"is_read": True})
            for item in self._items
        ]
        self._unread = 0
        return True

    def delete(self, notification_id: str) -> bool:
        try:
            self.store.delete(notification_id)
        except NotificationStoreError as exc:
            self._report(exc)
            return False
        index = self._find(notification_id)
        if index is not None:
            removed = self._items.pop(index)
            if not removed.is_read:
                self._unread = max(0, self._unread - 1)
        return True
