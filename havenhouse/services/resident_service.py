import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from ..models.document import Document
from ..models.payment import Payment
from ..models.resident import Resident
from ..schemas.resident import ResidentCreate, ResidentUpdate
from ..utils.dates import utcnow
from .notification_service import notify
from typing import List, Optional

logger = logging.getLogger(__name__)


class ResidentService:

    @staticmethod
    def create_resident(db: Session, resident: ResidentCreate) -> Resident:
        data = resident.dict()
        if data.get("move_in_date") is None:
            data["move_in_date"] = utcnow().date()
        db_resident = Resident(**data, status="active")
        db.add(db_resident)
        db.commit()
        db.refresh(db_resident)
        return db_resident

    @staticmethod
    def get_resident(db: Session, resident_id: str) -> Optional[Resident]:
        return db.query(Resident).filter(Resident.id == resident_id).first()

    @staticmethod
    def get_residents(
        db: Session,
        status_filter: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Resident]:
        query = db.query(Resident)
        if status_filter:
            query = query.filter(Resident.status == status_filter)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Resident.first_name.ilike(pattern),
                Resident.last_name.ilike(pattern),
                Resident.phone.contains(search),
                Resident.room_number.ilike(pattern),
            ))
        return query.order_by(Resident.created_at.desc()).offset(skip).limit(limit).all()

    @staticmethod
    def get_active_by_phone(db: Session, phone: str) -> Optional[Resident]:
        return db.query(Resident).filter(
            Resident.phone == phone.strip(),
            Resident.status == "active"
        ).first()

    @staticmethod
    def update_resident(db: Session, resident_id: str, resident_update: ResidentUpdate) -> Optional[Resident]:
        db_resident = ResidentService.get_resident(db, resident_id)
        if not db_resident:
            return None

        update_data = resident_update.dict(exclude_unset=True)
        for field, value in update_data.items():
            setattr(db_resident, field, value)

        db.commit()
        db.refresh(db_resident)
        return db_resident

    @staticmethod
    def move_out_resident(db: Session, resident_id: str) -> Optional[Resident]:
        db_resident = ResidentService.get_resident(db, resident_id)
        if not db_resident:
            return None
        if db_resident.status == "moved_out":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Resident has already moved out"
            )

        db_resident.status = "moved_out"
        db_resident.move_out_date = utcnow().date()
        db.commit()
        db.refresh(db_resident)
        logger.info("Resident %s moved out", resident_id)

        room = f" from room {db_resident.room_number}" if db_resident.room_number else ""
        notify(
            db,
            title="Resident moved out",
            message=f"{db_resident.full_name} moved out{room}.",
            notification_type="move_out",
            related_id=db_resident.id,
            related_type="resident",
        )
        return db_resident

    @staticmethod
    def get_payments(db: Session, resident_id: str) -> List[Payment]:
        return db.query(Payment).filter(
            Payment.resident_id == resident_id
        ).order_by(Payment.due_date.desc()).all()

    @staticmethod
    def get_documents(db: Session, resident_id: str) -> List[Document]:
        return db.query(Document).filter(
            Document.resident_id == resident_id
        ).order_by(Document.created_at.desc()).all()
