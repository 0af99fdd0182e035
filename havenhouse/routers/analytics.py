from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ..core.database import get_db
from ..models.staff import StaffUser
from ..schemas.analytics import AnalyticsReport, DashboardOverview, Timeframe
from ..services.analytics_service import AnalyticsService
from ..utils.dependencies import get_current_staff

router = APIRouter(tags=["Analytics"])


@router.get("/analytics", response_model=AnalyticsReport)
def get_analytics(
    timeframe: Timeframe = Timeframe.SIX_MONTHS,
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Revenue, occupancy, application, payment and resident aggregates"""
    return AnalyticsService.get_report(db, timeframe)


@router.get("/dashboard/overview", response_model=DashboardOverview)
def get_dashboard_overview(
    db: Session = Depends(get_db),
    current_staff: StaffUser = Depends(get_current_staff)
):
    """Numbers and recent activity for the staff home page"""
    return AnalyticsService.get_overview(db)
