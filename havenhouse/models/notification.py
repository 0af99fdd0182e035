from sqlalchemy import Column, String, Text, DateTime, Boolean
from datetime import datetime
from ..core.database import Base
from .application import _new_id

NOTIFICATION_TYPES = ("payment_overdue", "new_application", "incident", "move_out", "general")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_new_id)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(30), nullable=False, default="general")
    is_read = Column(Boolean, nullable=False, default=False)
    # Weak reference to any other record (id + type tag)
    related_id = Column(String(36), index=True)
    related_type = Column(String(30))
