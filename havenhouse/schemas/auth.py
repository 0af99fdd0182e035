from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class StaffLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class StaffInfo(BaseModel):
    id: str
    email: str
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    role: str

    class Config:
        populate_by_name = True
        from_attributes = True


class StaffLoginResponse(BaseModel):
    success: bool = True
    token: str
    user: StaffInfo


class StaffCreate(BaseModel):
    email: str
    password: str = Field(..., min_length=8)
    first_name: str
    last_name: str
    role: str = "staff"


class StaffResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class PortalLogin(BaseModel):
    phone: str = Field(..., min_length=1)


class LogoutResponse(BaseModel):
    success: bool = True
