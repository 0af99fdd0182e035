from pydantic import BaseModel, EmailStr
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

ResidentStatus = Literal["active", "inactive", "moved_out"]


class ResidentBase(BaseModel):
    first_name: str
    last_name: str
    phone: str
    email: Optional[EmailStr] = None
    sobriety_date: Optional[date] = None
    employment_status: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    room_number: Optional[str] = None
    monthly_rent: Optional[Decimal] = None
    deposit_amount: Optional[Decimal] = None
    notes: Optional[str] = None


class ResidentCreate(ResidentBase):
    move_in_date: Optional[date] = None
    application_id: Optional[str] = None


class ResidentUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    sobriety_date: Optional[date] = None
    employment_status: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    status: Optional[ResidentStatus] = None
    room_number: Optional[str] = None
    monthly_rent: Optional[Decimal] = None
    deposit_amount: Optional[Decimal] = None
    notes: Optional[str] = None


class ResidentResponse(ResidentBase):
    id: str
    email: Optional[str] = None
    move_in_date: date
    move_out_date: Optional[date] = None
    status: ResidentStatus
    application_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
