from pydantic import BaseModel
from datetime import datetime
from typing import List, Literal, Optional

NotificationType = Literal["payment_overdue", "new_application", "incident", "move_out", "general"]


class NotificationBase(BaseModel):
    title: str
    message: str
    type: NotificationType = "general"
    related_id: Optional[str] = None
    related_type: Optional[str] = None


class NotificationCreate(NotificationBase):
    pass


class NotificationResponse(NotificationBase):
    id: str
    created_at: datetime
    is_read: bool = False

    class Config:
        from_attributes = True


class NotificationList(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int
