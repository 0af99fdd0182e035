import logging
import re

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from ..core.config import settings
from ..models.application import Application
from ..models.resident import Resident
from ..schemas.application import ContactRequest, ApplicationStatusUpdate
from ..utils.dates import utcnow
from .notification_service import notify
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_CHARACTERS = re.compile(r"^\+?[\d\s\-().]+$")
BULK_ACTIONS = {
    "approve": ("approved", "Bulk approved"),
    "reject": ("rejected", "Bulk rejected"),
    "contact": ("contacted", "Bulk contacted"),
}
DUPLICATE_PHONE_MESSAGE = (
    "An application with this phone number already exists. "
    "Please contact us if you need to update your information."
)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def is_valid_phone(phone: str) -> bool:
    """Digits with common separators; 7 to 15 digits in total."""
    if not PHONE_CHARACTERS.match(phone):
        return False
    digits = sum(1 for char in phone if char.isdigit())
    return 7 <= digits <= 15


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


class ApplicationService:

    @staticmethod
    def submit_application(db: Session, request: ContactRequest) -> Application:
        first_name = _clean(request.first_name)
        last_name = _clean(request.last_name)
        phone = _clean(request.phone)
        email = _clean(request.email)

        if not first_name or not last_name or not phone:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="First name, last name, and phone are required"
            )
        if not is_valid_phone(phone):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please provide a valid phone number"
            )
        if email and not is_valid_email(email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please provide a valid email address"
            )

        db_application = Application(
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            email=email,
            sobriety_date=request.sobriety_date,
            employment_status=_clean(request.employment_status),
            housing_needed=_clean(request.housing_needed),
            message=_clean(request.message),
            status="pending"
        )
        db.add(db_application)
        try:
            db.commit()
        except IntegrityError:
            # Unique constraint on phone
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=DUPLICATE_PHONE_MESSAGE
            )
        db.refresh(db_application)
        logger.info("New application %s received from %s %s", db_application.id, first_name, last_name)

        notify(
            db,
            title="New application received",
            message=f"{first_name} {last_name} applied for housing. Phone: {phone}",
            notification_type="new_application",
            related_id=db_application.id,
            related_type="application",
        )
        return db_application

    @staticmethod
    def get_application(db: Session, application_id: str) -> Optional[Application]:
        return db.query(Application).filter(Application.id == application_id).first()

    @staticmethod
    def get_applications(
        db: Session,
        status_filter: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Application]:
        query = db.query(Application)
        if status_filter:
            query = query.filter(Application.status == status_filter)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Application.first_name.ilike(pattern),
                Application.last_name.ilike(pattern),
                Application.phone.contains(search),
                Application.email.ilike(pattern),
            ))
        return query.order_by(Application.created_at.desc()).offset(skip).limit(limit).all()

    @staticmethod
    def update_status(
        db: Session,
        application_id: str,
        update: ApplicationStatusUpdate,
        reviewed_by: str,
        commit: bool = True
    ) -> Optional[Application]:
        db_application = ApplicationService.get_application(db, application_id)
        if not db_application:
            return None

        db_application.status = update.status
        db_application.reviewed_at = utcnow()
        db_application.reviewed_by = reviewed_by
        if update.notes:
            db_application.notes = update.notes

        if commit:
            db.commit()
            db.refresh(db_application)
        return db_application

    @staticmethod
    def bulk_update(
        db: Session,
        application_ids: Sequence[str],
        action: str,
        reviewed_by: str
    ) -> Tuple[int, List[str]]:
        new_status, note = BULK_ACTIONS[action]
        update = ApplicationStatusUpdate(status=new_status, notes=note)
        missing = []
        updated = 0
        for application_id in dict.fromkeys(application_ids):
            if ApplicationService.update_status(db, application_id, update, reviewed_by, commit=False):
                updated += 1
            else:
                missing.append(application_id)
        db.commit()
        return updated, missing

    @staticmethod
    def convert_to_resident(db: Session, application_id: str, reviewed_by: str) -> Resident:
        db_application = ApplicationService.get_application(db, application_id)
        if not db_application:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Application not found"
            )
        existing = db.query(Resident).filter(Resident.application_id == application_id).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Application has already been converted to a resident"
            )

        db_resident = Resident(
            first_name=db_application.first_name,
            last_name=db_application.last_name,
            phone=db_application.phone,
            email=db_application.email,
            sobriety_date=db_application.sobriety_date,
            employment_status=db_application.employment_status,
            move_in_date=utcnow().date(),
            status="active",
            monthly_rent=settings.default_monthly_rent,
            application_id=db_application.id
        )
        db.add(db_resident)
        ApplicationService.update_status(
            db,
            application_id,
            ApplicationStatusUpdate(status="approved", notes="Converted to resident"),
            reviewed_by,
            commit=False
        )
        db.commit()
        db.refresh(db_resident)
        logger.info("Application %s converted to resident %s", application_id, db_resident.id)
        return db_resident
