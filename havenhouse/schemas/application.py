from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import List, Literal, Optional

ApplicationStatus = Literal["pending", "approved", "rejected", "contacted"]


class ContactRequest(BaseModel):
    """Public application form body, keyed the way the web form posts it."""
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    phone: Optional[str] = None
    email: Optional[str] = None
    sobriety_date: Optional[date] = Field(None, alias="sobrietyDate")
    employment_status: Optional[str] = Field(None, alias="employmentStatus")
    housing_needed: Optional[str] = Field(None, alias="housingNeeded")
    message: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("sobriety_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, value):
        # The form posts an empty string when the date is left blank
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ContactResponse(BaseModel):
    success: bool = True
    message: str
    application_id: str = Field(..., alias="applicationId")

    class Config:
        populate_by_name = True


class ApplicationResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    phone: str
    email: Optional[str] = None
    sobriety_date: Optional[date] = None
    employment_status: Optional[str] = None
    housing_needed: Optional[str] = None
    message: Optional[str] = None
    status: ApplicationStatus
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = None


class BulkApplicationAction(BaseModel):
    action: Literal["approve", "reject", "contact"]
    application_ids: List[str] = Field(..., min_length=1)


class BulkApplicationResult(BaseModel):
    action: str
    updated: int
    missing: List[str] = []
