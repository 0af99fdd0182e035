from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from ..core.database import get_db
from ..models.staff import StaffUser
from ..schemas.payment import (
    OverdueSweepResult, PaymentCreate, PaymentResponse, PaymentStatus,
    PaymentStatusUpdate, PaymentSummary, PaymentType
)
from ..services.payment_service import PaymentService
from ..utils.dependencies import get_current_staff
from typing import List, Literal, Optional

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(
    payment: PaymentCreate,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Record a charge or payment for a resident"""
    return PaymentService.create_payment(db, payment)


@router.get("", response_model=List[PaymentResponse])
def get_payments(
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    type_filter: Optional[PaymentType] = Query(None, alias="type"),
    tab: Literal["all", "overdue", "this_month", "pending"] = "all",
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Get payments, latest due date first"""
    return PaymentService.get_payments(
        db, status_filter=status_filter, type_filter=type_filter, tab=tab, search=search, skip=skip, limit=limit
    )


@router.get("/summary", response_model=PaymentSummary)
def get_payment_summary(
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Totals shown above the payments table"""
    return PaymentService.get_summary(db)


@router.post("/overdue-sweep", response_model=OverdueSweepResult)
def flag_overdue_payments(
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Raise a notification for every overdue payment not flagged yet"""
    overdue, created = PaymentService.flag_overdue_payments(db)
    return OverdueSweepResult(overdue_payments=overdue, notifications_created=created)


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: str,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Get a payment by ID"""
    payment = PaymentService.get_payment(db, payment_id)
    if not payment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )
    return payment


@router.patch("/{payment_id}", response_model=PaymentResponse)
def update_payment_status(
    payment_id: str,
    update: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Change a payment's status; marking it paid stamps the paid date"""
    payment = PaymentService.update_payment_status(db, payment_id, update)
    if not payment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )
    return payment
