from datetime import date, datetime
from typing import Optional

from sqlalchemy import Column, String, Text, Date, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from ..core.database import Base
from ..utils.dates import as_date, utcnow
from .application import _new_id

PAYMENT_TYPES = ("rent", "deposit", "fee", "refund")
PAYMENT_STATUSES = ("pending", "paid", "overdue", "partial")
PAYMENT_METHODS = ("cash", "check", "bank_transfer", "online")


def effective_status(status: str, due_date, today: Optional[date] = None) -> str:
    """Status to display: unpaid payments past their due date read as overdue.

    Never persisted; the stored status keeps whatever staff last set.
    """
    if today is None:
        today = utcnow().date()
    due = as_date(due_date)
    if status != "paid" and due is not None and due < as_date(today):
        return "overdue"
    return status


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=_new_id)
    resident_id = Column(String(36), ForeignKey("residents.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    type = Column(String(20), nullable=False, default="rent")
    due_date = Column(Date, nullable=False, index=True)
    paid_date = Column(Date)
    status = Column(String(20), nullable=False, default="pending", index=True)
    payment_method = Column(String(20))
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    resident = relationship("Resident", back_populates="payments")

    @property
    def effective_status(self) -> str:
        return effective_status(self.status, self.due_date)
