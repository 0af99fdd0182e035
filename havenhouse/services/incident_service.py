from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from ..models.incident import Incident
from ..models.resident import Resident
from ..schemas.incident import IncidentCreate
from .notification_service import notify
from typing import List, Optional


class IncidentService:

    @staticmethod
    def create_incident(db: Session, incident: IncidentCreate) -> Incident:
        resident = db.query(Resident).filter(Resident.id == incident.resident_id).first()
        if not resident:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Resident not found"
            )

        db_incident = Incident(**incident.dict())
        db.add(db_incident)
        db.commit()
        db.refresh(db_incident)

        notify(
            db,
            title=f"{incident.severity.capitalize()} incident reported",
            message=f"{incident.incident_type} involving {resident.full_name}: {incident.description}",
            notification_type="incident",
            related_id=db_incident.id,
            related_type="incident",
        )
        return db_incident

    @staticmethod
    def get_incidents(
        db: Session,
        resident_id: Optional[str] = None,
        unresolved_only: bool = False,
        skip: int = 0,
        limit: int = 100
    ) -> List[Incident]:
        query = db.query(Incident)
        if resident_id:
            query = query.filter(Incident.resident_id == resident_id)
        if unresolved_only:
            query = query.filter(Incident.resolved == False)
        return query.order_by(Incident.created_at.desc()).offset(skip).limit(limit).all()
