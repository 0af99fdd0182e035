import logging

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session, joinedload
from fastapi import HTTPException, status
from ..models.payment import Payment
from ..models.resident import Resident
from ..schemas.payment import PaymentCreate, PaymentStatusUpdate, PaymentSummary
from ..utils.dates import add_months, utcnow
from .analytics_service import is_overdue, summarize_payments
from .notification_service import NotificationService, notify
from datetime import date
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

PAYMENT_TABS = ("all", "overdue", "this_month", "pending")


class PaymentService:

    @staticmethod
    def create_payment(db: Session, payment: PaymentCreate) -> Payment:
        resident = db.query(Resident).filter(Resident.id == payment.resident_id).first()
        if not resident:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Resident not found"
            )

        db_payment = Payment(**payment.dict())
        if db_payment.status == "paid" and db_payment.paid_date is None:
            db_payment.paid_date = utcnow().date()
        db.add(db_payment)
        db.commit()
        db.refresh(db_payment)
        return db_payment

    @staticmethod
    def get_payment(db: Session, payment_id: str) -> Optional[Payment]:
        return db.query(Payment).options(joinedload(Payment.resident)).filter(Payment.id == payment_id).first()

    @staticmethod
    def get_payments(
        db: Session,
        status_filter: Optional[str] = None,
        type_filter: Optional[str] = None,
        tab: str = "all",
        search: Optional[str] = None,
        today: Optional[date] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Payment]:
        today = today or utcnow().date()
        query = db.query(Payment).options(joinedload(Payment.resident))
        if status_filter:
            query = query.filter(Payment.status == status_filter)
        if type_filter:
            query = query.filter(Payment.type == type_filter)
        if search:
            pattern = f"%{search}%"
            query = query.join(Resident, Payment.resident_id == Resident.id).filter(or_(
                Resident.first_name.ilike(pattern),
                Resident.last_name.ilike(pattern),
                Resident.room_number.ilike(pattern),
                cast(Payment.amount, String).contains(search),
            ))

        if tab == "overdue":
            query = query.filter(Payment.status != "paid", Payment.due_date < today)
        elif tab == "this_month":
            next_year, next_month = add_months(today.year, today.month, 1)
            query = query.filter(
                Payment.due_date >= today.replace(day=1),
                Payment.due_date < date(next_year, next_month, 1)
            )
        elif tab == "pending":
            query = query.filter(Payment.status == "pending")

        return query.order_by(Payment.due_date.desc()).offset(skip).limit(limit).all()

    @staticmethod
    def update_payment_status(db: Session, payment_id: str, update: PaymentStatusUpdate) -> Optional[Payment]:
        db_payment = PaymentService.get_payment(db, payment_id)
        if not db_payment:
            return None

        db_payment.status = update.status
        if update.status == "paid":
            db_payment.paid_date = update.paid_date or utcnow().date()
            if update.payment_method:
                db_payment.payment_method = update.payment_method

        db.commit()
        db.refresh(db_payment)
        return db_payment

    @staticmethod
    def get_summary(db: Session) -> PaymentSummary:
        return summarize_payments(db.query(Payment).all(), utcnow())

    @staticmethod
    def flag_overdue_payments(db: Session, today: Optional[date] = None) -> Tuple[int, int]:
        """Emit one payment_overdue notification per overdue payment not yet flagged."""
        today = today or utcnow().date()
        candidates = db.query(Payment).options(joinedload(Payment.resident)).filter(
            Payment.status != "paid",
            Payment.due_date < today
        ).all()
        overdue = [p for p in candidates if is_overdue(p, today)]

        created = 0
        for payment in overdue:
            if NotificationService.exists_for(db, "payment_overdue", payment.id):
                continue
            resident = payment.resident
            name = resident.full_name if resident else "Unknown resident"
            if notify(
                db,
                title="Payment overdue",
                message=f"{name} has an overdue {payment.type} payment of ${payment.amount} (due {payment.due_date.isoformat()}).",
                notification_type="payment_overdue",
                related_id=payment.id,
                related_type="payment",
            ):
                created += 1
        if created:
            logger.info("Flagged %d overdue payments", created)
        return len(overdue), created
