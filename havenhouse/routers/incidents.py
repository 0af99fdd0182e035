from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from ..core.database import get_db
from ..models.staff import StaffUser
from ..schemas.incident import IncidentCreate, IncidentResponse
from ..services.incident_service import IncidentService
from ..utils.dependencies import get_current_staff
from typing import List, Optional

router = APIRouter(prefix="/incidents", tags=["Incidents"])


@router.post("", response_model=IncidentResponse, status_code=status.HTTP_201_CREATED)
def create_incident(
    incident: IncidentCreate,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Report an incident"""
    if not incident.staff_member:
        incident.staff_member = current_staff.full_name
    return IncidentService.create_incident(db, incident)


@router.get("", response_model=List[IncidentResponse])
def get_incidents(
    resident_id: Optional[str] = None,
    unresolved_only: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Get incidents, newest first"""
    return IncidentService.get_incidents(db, resident_id=resident_id, unresolved_only=unresolved_only, skip=skip, limit=limit)
