"""Publish/subscribe feed of committed row changes.

Subscribers register per table and receive ``ChangeEvent`` objects for rows
inserted, updated or deleted through any SQLAlchemy ``Session``. Changes are
collected when a session flushes and only published once the transaction
commits; a rollback discards them.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"

_PENDING_KEY = "havenhouse.pending_changes"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    type: str
    new: Dict[str, Any] = field(default_factory=dict)
    old: Optional[Dict[str, Any]] = None


Handler = Callable[[ChangeEvent], None]


class Subscription:
    def __init__(self, feed: "ChangeFeed", table: str, handler: Handler):
        self.feed = feed
        self.table = table
        self.handler = handler

    def unsubscribe(self) -> None:
        self.feed._remove(self)


class ChangeFeed:
    """Table-scoped subscriber registry."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, List[Subscription]] = {}

    def subscribe(self, table: str, handler: Handler) -> Subscription:
        subscription = Subscription(self, table, handler)
        with self._lock:
            self._subscriptions.setdefault(table, []).append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscriptions.get(subscription.table, [])
            if subscription in subscribers:
                subscribers.remove(subscription)

    def has_subscribers(self, table: str) -> bool:
        with self._lock:
            return bool(self._subscriptions.get(table))

    def publish(self, change: ChangeEvent) -> None:
        with self._lock:
            subscribers = list(self._subscriptions.get(change.table, []))
        for subscription in subscribers:
            try:
                subscription.handler(change)
            except Exception:
                logger.exception(
                    "Change feed subscriber failed for %s on %s", change.type, change.table
                )


change_feed = ChangeFeed()


def _column_values(obj) -> Dict[str, Any]:
    mapper = inspect(obj).mapper
    return {attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs}


def _previous_values(obj) -> Dict[str, Any]:
    state = inspect(obj)
    old = {}
    for attr in state.mapper.column_attrs:
        history = state.attrs[attr.key].history
        if history.deleted:
            old[attr.key] = history.deleted[0]
    return old


@event.listens_for(Session, "after_flush")
def _collect_changes(session, flush_context):
    pending = session.info.setdefault(_PENDING_KEY, [])
    for change_type, objects in ((INSERT, session.new), (UPDATE, session.dirty), (DELETE, session.deleted)):
        for obj in objects:
            table = getattr(obj, "__tablename__", None)
            if table is None or not change_feed.has_subscribers(table):
                continue
            if change_type == UPDATE:
                if not session.is_modified(obj, include_collections=False):
                    continue
                pending.append(ChangeEvent(table, UPDATE, _column_values(obj), _previous_values(obj)))
            else:
                pending.append(ChangeEvent(table, change_type, _column_values(obj)))


@event.listens_for(Session, "after_commit")
def _publish_changes(session):
    for change in session.info.pop(_PENDING_KEY, []):
        change_feed.publish(change)


@event.listens_for(Session, "after_rollback")
def _discard_changes(session):
    session.info.pop(_PENDING_KEY, None)
