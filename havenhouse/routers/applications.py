from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from ..core.database import get_db
from ..models.staff import StaffUser
from ..schemas.application import (
    ApplicationResponse, ApplicationStatus, ApplicationStatusUpdate,
    BulkApplicationAction, BulkApplicationResult
)
from ..schemas.resident import ResidentResponse
from ..services.application_service import ApplicationService
from ..utils.dependencies import get_current_staff
from typing import List, Optional

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("", response_model=List[ApplicationResponse])
def get_applications(
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Get applications, newest first"""
    return ApplicationService.get_applications(db, status_filter=status_filter, search=search, skip=skip, limit=limit)


@router.post("/bulk", response_model=BulkApplicationResult)
def bulk_update_applications(
    bulk: BulkApplicationAction,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Approve, reject or mark contacted several applications at once"""
    updated, missing = ApplicationService.bulk_update(db, bulk.application_ids, bulk.action, current_staff.full_name)
    return BulkApplicationResult(action=bulk.action, updated=updated, missing=missing)


@router.get("/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: str,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Get an application by ID"""
    application = ApplicationService.get_application(db, application_id)
    if not application:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found"
        )
    return application


@router.patch("/{application_id}", response_model=ApplicationResponse)
def update_application_status(
    application_id: str,
    update: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Review an application"""
    application = ApplicationService.update_status(db, application_id, update, current_staff.full_name)
    if not application:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found"
        )
    return application


@router.post("/{application_id}/convert", response_model=ResidentResponse, status_code=status.HTTP_201_CREATED)
def convert_to_resident(
    application_id: str,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Approve an application and move the applicant in"""
    return ApplicationService.convert_to_resident(db, application_id, current_staff.full_name)
