from pydantic import BaseModel
from decimal import Decimal
from typing import List, Optional

from .incident import DocumentResponse
from .payment import PaymentResponse
from .resident import ResidentResponse


class PortalOverview(BaseModel):
    resident: ResidentResponse
    payments: List[PaymentResponse]
    documents: List[DocumentResponse]
    sobriety_days: Optional[int] = None
    balance_due: Decimal
