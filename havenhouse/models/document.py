from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from ..core.database import Base
from .application import _new_id


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_new_id)
    resident_id = Column(String(36), ForeignKey("residents.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    document_type = Column(String(60))
    url = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    resident = relationship("Resident", back_populates="documents")
