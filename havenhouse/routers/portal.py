from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ..core.database import get_db
from ..models.resident import Resident
from ..schemas.incident import DocumentResponse
from ..schemas.portal import PortalOverview
from ..schemas.resident import ResidentResponse
from ..services.analytics_service import payment_view
from ..services.resident_service import ResidentService
from ..utils.dates import utcnow
from ..utils.dependencies import get_current_resident

router = APIRouter(prefix="/portal", tags=["Resident Portal"])


@router.get("/me", response_model=PortalOverview)
def get_portal_overview(
    db: Session = Depends(get_db),
    resident: Resident = Depends(get_current_resident)
):
    """Signed-in resident's profile, payments and documents"""
    today = utcnow().date()
    payments = [payment_view(p, today) for p in ResidentService.get_payments(db, resident.id)]
    sobriety_days = (today - resident.sobriety_date).days if resident.sobriety_date else None
    return PortalOverview(
        resident=ResidentResponse.model_validate(resident),
        payments=payments,
        documents=[DocumentResponse.model_validate(d) for d in ResidentService.get_documents(db, resident.id)],
        sobriety_days=sobriety_days,
        balance_due=sum((p.amount for p in payments if p.status != "paid"), Decimal("0")),
    )
