"""Dashboard aggregates computed from full snapshots of the three core tables.

Everything above ``AnalyticsService`` is a pure function of the records passed
in, the clock value ``now`` and the facility capacity. Records only need to
expose the attributes the ORM models have, so plain objects work as well.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.application import Application
from ..models.payment import Payment, effective_status
from ..models.resident import Resident
from ..schemas.analytics import (
    ActivityItem,
    AnalyticsReport,
    ApplicationMonth,
    ApplicationSection,
    ApplicationStats,
    DashboardOverview,
    OccupancyMonth,
    OccupancySection,
    OccupancyStats,
    PaymentSection,
    PaymentStats,
    ResidentSection,
    ResidentStats,
    RevenueMonth,
    RevenueSection,
    StatusSlice,
    Timeframe,
    TopMetric,
)
from ..schemas.application import ApplicationResponse
from ..schemas.payment import PaymentResponse, PaymentSummary
from ..utils.dates import (
    add_months,
    as_date,
    as_naive_utc,
    each_month,
    month_end,
    month_key,
    month_label,
    subtract_months,
    utcnow,
)

ZERO = Decimal("0")
ALL_TIME_START = date(2023, 1, 1)
TIMEFRAME_MONTHS = {
    Timeframe.ONE_MONTH: 1,
    Timeframe.THREE_MONTHS: 3,
    Timeframe.SIX_MONTHS: 6,
    Timeframe.ONE_YEAR: 12,
}
STATUS_LABELS = (("active", "Active"), ("inactive", "Inactive"), ("moved_out", "Moved Out"))


def timeframe_start(timeframe: Timeframe, now: datetime) -> date:
    timeframe = Timeframe(timeframe)
    if timeframe is Timeframe.ALL:
        return ALL_TIME_START
    return subtract_months(now, TIMEFRAME_MONTHS[timeframe])


def percentage(numerator, denominator) -> int:
    """Integer percentage, rounding halves up."""
    value = Decimal(numerator) * 100 / Decimal(denominator)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def growth_rate(current, previous) -> float:
    """Month-over-month change in percent.

    A zero previous month reads as 100% growth whenever the current month has
    anything at all, and 0% when both months are empty.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return float((Decimal(current) - Decimal(previous)) / Decimal(previous) * 100)


def _sum_amounts(payments: Iterable) -> Decimal:
    return sum((Decimal(p.amount) for p in payments), ZERO)


def _is_paid(payment) -> bool:
    return payment.status == "paid"


def _in_month(value, key: Tuple[int, int]) -> bool:
    return value is not None and month_key(value) == key


def _paid_in_month(payments: Sequence, key: Tuple[int, int]) -> Decimal:
    return _sum_amounts(
        p for p in payments if _is_paid(p) and _in_month(getattr(p, "paid_date", None), key)
    )


def _in_house(resident, point: date) -> bool:
    move_in = as_date(getattr(resident, "move_in_date", None))
    if move_in is None or move_in > point:
        return False
    move_out = as_date(getattr(resident, "move_out_date", None))
    if move_out is not None:
        return move_out > point
    return resident.status == "active"


def is_overdue(payment, today: date) -> bool:
    return effective_status(payment.status, payment.due_date, today) == "overdue"


def summarize_payments(payments: Iterable, now: datetime) -> PaymentSummary:
    payments = list(payments)
    today = as_date(now)
    this_month = month_key(today)
    return PaymentSummary(
        total_revenue=_sum_amounts(p for p in payments if _is_paid(p)),
        pending_amount=_sum_amounts(p for p in payments if p.status == "pending"),
        overdue_amount=_sum_amounts(p for p in payments if is_overdue(p, today)),
        paid_this_month=_paid_in_month(payments, this_month),
    )


def _build_revenue(payments, months, this_month, last_month, target) -> RevenueSection:
    current = _paid_in_month(payments, this_month)
    previous = _paid_in_month(payments, last_month)
    return RevenueSection(
        total=_sum_amounts(p for p in payments if _is_paid(p)),
        this_month=current,
        last_month=previous,
        growth=growth_rate(current, previous),
        monthly_data=[
            RevenueMonth(month=month_label(*key), revenue=_paid_in_month(payments, key), target=target)
            for key in months
        ],
    )


def _build_occupancy(residents, months, today, capacity, target) -> OccupancySection:
    active = sum(1 for r in residents if r.status == "active")
    trend = []
    for key in months:
        point = min(month_end(*key), today)
        present = sum(1 for r in residents if _in_house(r, point))
        trend.append(OccupancyMonth(month=month_label(*key), residents=present, occupancy=percentage(present, capacity)))

    current = percentage(active, capacity)
    last_key = add_months(today.year, today.month, -1)
    last_present = sum(1 for r in residents if _in_house(r, month_end(*last_key)))
    last_month = percentage(last_present, capacity)
    return OccupancySection(
        current=current,
        active=active,
        capacity=capacity,
        target=target,
        last_month=last_month,
        change=current - last_month,
        trend=trend,
    )


def _build_applications(applications, months, this_month, last_month) -> ApplicationSection:
    total = len(applications)
    counts = {status: 0 for status in ("pending", "approved", "rejected", "contacted")}
    for application in applications:
        if application.status in counts:
            counts[application.status] += 1

    monthly = []
    for key in months:
        in_month = [a for a in applications if _in_month(getattr(a, "created_at", None), key)]
        monthly.append(ApplicationMonth(
            month=month_label(*key),
            applications=len(in_month),
            approved=sum(1 for a in in_month if a.status == "approved"),
            rejected=sum(1 for a in in_month if a.status == "rejected"),
        ))

    current = sum(1 for a in applications if _in_month(getattr(a, "created_at", None), this_month))
    previous = sum(1 for a in applications if _in_month(getattr(a, "created_at", None), last_month))
    return ApplicationSection(
        total=total,
        pending=counts["pending"],
        approved=counts["approved"],
        rejected=counts["rejected"],
        contacted=counts["contacted"],
        conversion_rate=percentage(counts["approved"], total) if total else 0,
        this_month=current,
        last_month=previous,
        growth=growth_rate(current, previous),
        monthly_data=monthly,
    )


def _build_payments(payments, today, this_month, last_month) -> PaymentSection:
    paid = [p for p in payments if _is_paid(p)]
    on_time = 0
    late_days = []
    for payment in paid:
        paid_on = as_date(getattr(payment, "paid_date", None))
        due_on = as_date(payment.due_date)
        if paid_on is None or due_on is None:
            continue
        if paid_on <= due_on:
            on_time += 1
        else:
            late_days.append((paid_on - due_on).days)

    current = _paid_in_month(payments, this_month)
    previous = _paid_in_month(payments, last_month)
    return PaymentSection(
        collected=_sum_amounts(paid),
        outstanding=_sum_amounts(p for p in payments if p.status == "pending"),
        overdue=_sum_amounts(p for p in payments if is_overdue(p, today)),
        on_time_rate=percentage(on_time, len(paid)) if paid else 100,
        avg_days_late=round(sum(late_days) / len(late_days), 1) if late_days else 0.0,
        this_month=current,
        last_month=previous,
        growth=growth_rate(current, previous),
    )


def _build_residents(residents, start, today, this_month, last_month) -> ResidentSection:
    total = len(residents)
    current = sum(1 for r in residents if _in_month(getattr(r, "move_in_date", None), this_month))
    previous = sum(1 for r in residents if _in_month(getattr(r, "move_in_date", None), last_month))

    moved_out = 0
    stays = []
    for resident in residents:
        move_in = as_date(getattr(resident, "move_in_date", None))
        move_out = as_date(getattr(resident, "move_out_date", None))
        if move_out is not None and start <= move_out <= today:
            moved_out += 1
        if move_in is not None:
            stay_end = move_out or today
            stays.append(max((stay_end - move_in).days, 0) / 30.44)

    return ResidentSection(
        total=total,
        active=sum(1 for r in residents if r.status == "active"),
        new_this_month=current,
        new_last_month=previous,
        growth=growth_rate(current, previous),
        turnover_rate=percentage(moved_out, total) if total else 0,
        avg_stay_months=round(sum(stays) / len(stays), 1) if stays else 0.0,
        status_breakdown=[
            StatusSlice(name=label, status=status, value=sum(1 for r in residents if r.status == status))
            for status, label in STATUS_LABELS
        ],
    )


def _build_top_metrics(revenue, occupancy, applications, payments, targets) -> List[TopMetric]:
    occupancy_target, conversion_target, on_time_target = targets
    sign = "+" if revenue.growth >= 0 else ""
    return [
        TopMetric(title="Revenue Growth", value=f"{sign}{revenue.growth:.1f}%",
                  change=revenue.growth, period="vs last month"),
        TopMetric(title="Occupancy Rate", value=f"{occupancy.current}%",
                  change=occupancy.current - occupancy_target, period="vs target"),
        TopMetric(title="Application Conversion", value=f"{applications.conversion_rate}%",
                  change=applications.conversion_rate - conversion_target, period="vs target"),
        TopMetric(title="On-Time Payments", value=f"{payments.on_time_rate}%",
                  change=payments.on_time_rate - on_time_target, period="vs target"),
    ]


def build_analytics_report(
    applications: Iterable,
    residents: Iterable,
    payments: Iterable,
    timeframe: Timeframe = Timeframe.SIX_MONTHS,
    now: Optional[datetime] = None,
    capacity: Optional[int] = None,
    revenue_target: Optional[int] = None,
    occupancy_target: Optional[int] = None,
    conversion_target: Optional[int] = None,
    on_time_target: Optional[int] = None,
) -> AnalyticsReport:
    """Aggregate the analytics page report for the trailing ``timeframe``."""
    timeframe = Timeframe(timeframe)
    now = as_naive_utc(now) if now is not None else utcnow()
    capacity = settings.facility_capacity if capacity is None else capacity
    if capacity <= 0:
        raise ValueError("capacity must be a positive number of beds")

    applications = list(applications)
    residents = list(residents)
    payments = list(payments)

    today = now.date()
    start = timeframe_start(timeframe, now)
    months = list(each_month(start, today))
    this_month = month_key(today)
    last_month = add_months(today.year, today.month, -1)

    revenue = _build_revenue(
        payments, months, this_month, last_month,
        settings.monthly_revenue_target if revenue_target is None else revenue_target,
    )
    occupancy = _build_occupancy(
        residents, months, today, capacity,
        settings.occupancy_target if occupancy_target is None else occupancy_target,
    )
    application_section = _build_applications(applications, months, this_month, last_month)
    payment_section = _build_payments(payments, today, this_month, last_month)
    resident_section = _build_residents(residents, start, today, this_month, last_month)
    targets = (
        occupancy.target,
        settings.conversion_target if conversion_target is None else conversion_target,
        settings.on_time_target if on_time_target is None else on_time_target,
    )

    return AnalyticsReport(
        timeframe=timeframe,
        generated_at=now,
        start=start,
        revenue=revenue,
        occupancy=occupancy,
        applications=application_section,
        payments=payment_section,
        residents=resident_section,
        top_metrics=_build_top_metrics(revenue, occupancy, application_section, payment_section, targets),
    )


def payment_view(payment, today: date) -> PaymentResponse:
    view = PaymentResponse.model_validate(payment)
    return view.model_copy(update={"effective_status": effective_status(payment.status, payment.due_date, today)})


def _newest_first(records, attribute: str) -> list:
    return sorted(records, key=lambda r: getattr(r, attribute) or datetime.min, reverse=True)


def build_dashboard_overview(
    applications: Iterable,
    residents: Iterable,
    payments: Iterable,
    now: Optional[datetime] = None,
    capacity: Optional[int] = None,
) -> DashboardOverview:
    """Numbers and recent activity for the staff home page."""
    now = as_naive_utc(now) if now is not None else utcnow()
    capacity = settings.facility_capacity if capacity is None else capacity
    if capacity <= 0:
        raise ValueError("capacity must be a positive number of beds")
    applications = _newest_first(applications, "created_at")
    residents = list(residents)
    payments = _newest_first(payments, "created_at")
    today = now.date()
    week_ago = now - timedelta(days=7)
    month_start = today.replace(day=1)

    active = sum(1 for r in residents if r.status == "active")
    summary = summarize_payments(payments, now)

    activity = [
        ActivityItem(
            id=a.id,
            type="application",
            title=f"New application from {a.first_name} {a.last_name}",
            description=f"Phone: {a.phone}",
            timestamp=a.created_at,
            status=a.status,
        )
        for a in applications[:3]
    ]
    for payment in [p for p in payments if _is_paid(p)][:2]:
        resident = getattr(payment, "resident", None)
        payer = f"{resident.first_name} {resident.last_name}" if resident is not None else "Unknown resident"
        paid_on = as_date(payment.paid_date)
        activity.append(ActivityItem(
            id=payment.id,
            type="payment",
            title=f"Payment received: ${payment.amount}",
            description=f"From {payer}",
            timestamp=datetime.combine(paid_on, time()) if paid_on else payment.created_at,
            status=payment.status,
        ))
    activity.sort(key=lambda item: as_naive_utc(item.timestamp), reverse=True)

    return DashboardOverview(
        applications=ApplicationStats(
            total=len(applications),
            pending=sum(1 for a in applications if a.status == "pending"),
            this_week=sum(1 for a in applications if a.created_at and as_naive_utc(a.created_at) >= week_ago),
        ),
        residents=ResidentStats(
            total=len(residents),
            active=active,
            new_this_month=sum(
                1 for r in residents
                if as_date(getattr(r, "move_in_date", None)) is not None and as_date(r.move_in_date) >= month_start
            ),
        ),
        payments=PaymentStats(
            total_collected=summary.total_revenue,
            outstanding=summary.pending_amount,
            overdue=summary.overdue_amount,
        ),
        occupancy=OccupancyStats(current=active, capacity=capacity, percentage=percentage(active, capacity)),
        recent_applications=[ApplicationResponse.model_validate(a) for a in applications[:5]],
        recent_payments=[payment_view(p, today) for p in payments[:5]],
        recent_activity=activity[:5],
    )


class AnalyticsService:

    @staticmethod
    def _snapshot(db: Session):
        return (
            db.query(Application).all(),
            db.query(Resident).all(),
            db.query(Payment).all(),
        )

    @staticmethod
    def get_report(db: Session, timeframe: Timeframe) -> AnalyticsReport:
        applications, residents, payments = AnalyticsService._snapshot(db)
        return build_analytics_report(applications, residents, payments, timeframe=timeframe)

    @staticmethod
    def get_overview(db: Session) -> DashboardOverview:
        applications, residents, payments = AnalyticsService._snapshot(db)
        return build_dashboard_overview(applications, residents, payments)
