from enum import Enum
from pydantic import BaseModel
from datetime import date, datetime
from decimal import Decimal
from typing import List

from .application import ApplicationResponse
from .payment import PaymentResponse


class Timeframe(str, Enum):
    ONE_MONTH = "1m"
    THREE_MONTHS = "3m"
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"
    ALL = "all"


class RevenueMonth(BaseModel):
    month: str
    revenue: Decimal
    target: int


class RevenueSection(BaseModel):
    total: Decimal
    this_month: Decimal
    last_month: Decimal
    growth: float
    monthly_data: List[RevenueMonth]


class OccupancyMonth(BaseModel):
    month: str
    residents: int
    occupancy: int


class OccupancySection(BaseModel):
    current: int
    active: int
    capacity: int
    target: int
    last_month: int
    change: int
    trend: List[OccupancyMonth]


class ApplicationMonth(BaseModel):
    month: str
    applications: int
    approved: int
    rejected: int


class ApplicationSection(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    contacted: int
    conversion_rate: int
    this_month: int
    last_month: int
    growth: float
    monthly_data: List[ApplicationMonth]


class PaymentSection(BaseModel):
    collected: Decimal
    outstanding: Decimal
    overdue: Decimal
    on_time_rate: int
    avg_days_late: float
    this_month: Decimal
    last_month: Decimal
    growth: float


class StatusSlice(BaseModel):
    name: str
    status: str
    value: int


class ResidentSection(BaseModel):
    total: int
    active: int
    new_this_month: int
    new_last_month: int
    growth: float
    turnover_rate: int
    avg_stay_months: float
    status_breakdown: List[StatusSlice]


class TopMetric(BaseModel):
    title: str
    value: str
    change: float
    period: str


class AnalyticsReport(BaseModel):
    timeframe: Timeframe
    generated_at: datetime
    start: date
    revenue: RevenueSection
    occupancy: OccupancySection
    applications: ApplicationSection
    payments: PaymentSection
    residents: ResidentSection
    top_metrics: List[TopMetric]


class ApplicationStats(BaseModel):
    total: int
    pending: int
    this_week: int


class ResidentStats(BaseModel):
    total: int
    active: int
    new_this_month: int


class PaymentStats(BaseModel):
    total_collected: Decimal
    outstanding: Decimal
    overdue: Decimal


class OccupancyStats(BaseModel):
    current: int
    capacity: int
    percentage: int


class ActivityItem(BaseModel):
    id: str
    type: str
    title: str
    description: str
    timestamp: datetime
    status: str


class DashboardOverview(BaseModel):
    applications: ApplicationStats
    residents: ResidentStats
    payments: PaymentStats
    occupancy: OccupancyStats
    recent_applications: List[ApplicationResponse]
    recent_payments: List[PaymentResponse]
    recent_activity: List[ActivityItem]
