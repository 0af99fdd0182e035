from sqlalchemy import Column, String, Text, Date, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from ..core.database import Base
from .application import _new_id

RESIDENT_STATUSES = ("active", "inactive", "moved_out")


class Resident(Base):
    __tablename__ = "residents"

    id = Column(String(36), primary_key=True, default=_new_id)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False, index=True)
    email = Column(String(200))
    sobriety_date = Column(Date)
    move_in_date = Column(Date, nullable=False)
    move_out_date = Column(Date)
    employment_status = Column(String(100))
    emergency_contact_name = Column(String(150))
    emergency_contact_phone = Column(String(30))
    status = Column(String(20), nullable=False, default="active", index=True)
    room_number = Column(String(20))
    monthly_rent = Column(Numeric(10, 2))
    deposit_amount = Column(Numeric(10, 2))
    notes = Column(Text)
    # Weak reference: no cascade from the originating application
    application_id = Column(String(36), ForeignKey("applications.id", ondelete="SET NULL"))
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    application = relationship("Application", back_populates="residents")
    payments = relationship("Payment", back_populates="resident")
    documents = relationship("Document", back_populates="resident")
    incidents = relationship("Incident", back_populates="resident")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
