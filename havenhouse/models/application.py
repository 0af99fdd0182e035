import uuid

from sqlalchemy import Column, String, Text, Date, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from ..core.database import Base

APPLICATION_STATUSES = ("pending", "approved", "rejected", "contacted")


def _new_id() -> str:
    return str(uuid.uuid4())


class Application(Base):
    __tablename__ = "applications"

    id = Column(String(36), primary_key=True, default=_new_id)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    # Unique at the storage layer; duplicate inserts surface as IntegrityError
    phone = Column(String(30), nullable=False, unique=True, index=True)
    email = Column(String(200))
    sobriety_date = Column(Date)
    employment_status = Column(String(100))
    housing_needed = Column(String(100))
    message = Column(Text)
    status = Column(String(20), nullable=False, default="pending", index=True)
    reviewed_at = Column(DateTime)
    reviewed_by = Column(String(150))
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    # Relationships
    residents = relationship("Resident", back_populates="application")
