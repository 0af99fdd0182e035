from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from ..core.database import Base
from .application import _new_id

INCIDENT_SEVERITIES = ("minor", "major", "severe")


class Incident(Base):
    __tablename__ = "incidents"

    id = Column(String(36), primary_key=True, default=_new_id)
    resident_id = Column(String(36), ForeignKey("residents.id"), nullable=False, index=True)
    incident_type = Column(String(60), nullable=False)
    description = Column(Text, nullable=False)
    severity = Column(String(20), nullable=False, default="minor")
    action_taken = Column(Text)
    staff_member = Column(String(150))
    resolved = Column(Boolean, default=False)
    resolution_notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    resident = relationship("Resident", back_populates="incidents")
