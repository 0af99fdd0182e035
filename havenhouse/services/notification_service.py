import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from ..models.notification import Notification
from ..schemas.notification import NotificationCreate
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)


class NotificationService:

    @staticmethod
    def create_notification(db: Session, notification: NotificationCreate) -> Notification:
        db_notification = Notification(**notification.dict())
        db.add(db_notification)
        db.commit()
        db.refresh(db_notification)
        return db_notification

    @staticmethod
    def get_notification(db: Session, notification_id: str) -> Optional[Notification]:
        return db.query(Notification).filter(Notification.id == notification_id).first()

    @staticmethod
    def get_notifications(db: Session, limit: int = 50) -> List[Notification]:
        return (
            db.query(Notification)
            .order_by(Notification.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def mark_as_read(db: Session, notification_id: str) -> Optional[Notification]:
        db_notification = NotificationService.get_notification(db, notification_id)
        if not db_notification:
            return None
        if not db_notification.is_read:
            db_notification.is_read = True
            db.commit()
            db.refresh(db_notification)
        return db_notification

    @staticmethod
    def mark_many_as_read(db: Session, notification_ids: Optional[Sequence[str]] = None) -> int:
        """Flip the given (or every) unread notification in one commit."""
        query = db.query(Notification).filter(Notification.is_read == False)
        if notification_ids is not None:
            if not notification_ids:
                return 0
            query = query.filter(Notification.id.in_(list(notification_ids)))
        # Row-by-row so the change feed sees each update
        unread = query.all()
        for db_notification in unread:
            db_notification.is_read = True
        if unread:
            db.commit()
        return len(unread)

    @staticmethod
    def delete_notification(db: Session, notification_id: str) -> bool:
        db_notification = NotificationService.get_notification(db, notification_id)
        if not db_notification:
            return False
        db.delete(db_notification)
        db.commit()
        return True

    @staticmethod
    def exists_for(db: Session, notification_type: str, related_id: str) -> bool:
        return db.query(Notification).filter(
            Notification.type == notification_type,
            Notification.related_id == related_id
        ).first() is not None


def notify(
    db: Session,
    title: str,
    message: str,
    notification_type: str = "general",
    related_id: Optional[str] = None,
    related_type: Optional[str] = None,
) -> Optional[Notification]:
    """Insert a notification without letting a failure reach the caller."""
    try:
        return NotificationService.create_notification(db, NotificationCreate(
            title=title,
            message=message,
            type=notification_type,
            related_id=related_id,
            related_type=related_type,
        ))
    except SQLAlchemyError:
        db.rollback()
        logger.warning("Could not record %s notification for %s", notification_type, related_id, exc_info=True)
        return None
