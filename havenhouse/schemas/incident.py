from pydantic import BaseModel
from datetime import datetime
from typing import Literal, Optional

IncidentSeverity = Literal["minor", "major", "severe"]


class IncidentCreate(BaseModel):
    resident_id: str
    incident_type: str
    description: str
    severity: IncidentSeverity = "minor"
    action_taken: Optional[str] = None
    staff_member: Optional[str] = None


class IncidentResponse(IncidentCreate):
    id: str
    resolved: bool = False
    resolution_notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class DocumentResponse(BaseModel):
    id: str
    resident_id: str
    title: str
    document_type: Optional[str] = None
    url: str
    created_at: datetime

    class Config:
        from_attributes = True
