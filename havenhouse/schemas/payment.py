from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

PaymentType = Literal["rent", "deposit", "fee", "refund"]
PaymentStatus = Literal["pending", "paid", "overdue", "partial"]
PaymentMethod = Literal["cash", "check", "bank_transfer", "online"]


class PaymentCreate(BaseModel):
    resident_id: str
    amount: Decimal = Field(..., ge=0)
    type: PaymentType = "rent"
    due_date: date
    status: PaymentStatus = "pending"
    paid_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus
    paid_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None


class PaymentResidentInfo(BaseModel):
    first_name: str
    last_name: str
    room_number: Optional[str] = None

    class Config:
        from_attributes = True


class PaymentResponse(BaseModel):
    id: str
    resident_id: str
    amount: Decimal
    type: PaymentType
    due_date: date
    paid_date: Optional[date] = None
    status: PaymentStatus
    effective_status: Optional[PaymentStatus] = None
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = None
    created_at: datetime
    resident: Optional[PaymentResidentInfo] = None

    class Config:
        from_attributes = True


class PaymentSummary(BaseModel):
    total_revenue: Decimal
    pending_amount: Decimal
    overdue_amount: Decimal
    paid_this_month: Decimal


class OverdueSweepResult(BaseModel):
    overdue_payments: int
    notifications_created: int
