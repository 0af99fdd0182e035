from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from ..core.database import get_db
from ..models.staff import StaffUser
from ..schemas.resident import ResidentCreate, ResidentUpdate, ResidentResponse, ResidentStatus
from ..schemas.payment import PaymentResponse
from ..services.resident_service import ResidentService
from ..utils.dependencies import get_current_staff
from typing import List, Optional

router = APIRouter(prefix="/residents", tags=["Residents"])


def _resident_or_404(db: Session, resident_id: str):
    resident = ResidentService.get_resident(db, resident_id)
    if not resident:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Resident not found"
        )
    return resident


@router.post("", response_model=ResidentResponse, status_code=status.HTTP_201_CREATED)
def create_resident(
    resident: ResidentCreate,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Create a new resident"""
    return ResidentService.create_resident(db, resident)


@router.get("", response_model=List[ResidentResponse])
def get_residents(
    status_filter: Optional[ResidentStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Get residents, newest first"""
    return ResidentService.get_residents(db, status_filter=status_filter, search=search, skip=skip, limit=limit)


@router.get("/{resident_id}", response_model=ResidentResponse)
def get_resident(
    resident_id: str,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Get a resident by ID"""
    return _resident_or_404(db, resident_id)


@router.put("/{resident_id}", response_model=ResidentResponse)
def update_resident(
    resident_id: str,
    resident_update: ResidentUpdate,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Update a resident"""
    resident = ResidentService.update_resident(db, resident_id, resident_update)
    if not resident:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Resident not found"
        )
    return resident


@router.post("/{resident_id}/move-out", response_model=ResidentResponse)
def move_out_resident(
    resident_id: str,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Mark a resident as moved out today"""
    resident = ResidentService.move_out_resident(db, resident_id)
    if not resident:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Resident not found"
        )
    return resident


@router.get("/{resident_id}/payments", response_model=List[PaymentResponse])
def get_resident_payments(
    resident_id: str,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Get all payments for a specific resident"""
    _resident_or_404(db, resident_id)
    return ResidentService.get_payments(db, resident_id)
