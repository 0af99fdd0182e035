from datetime import date, datetime, timezone
from typing import Iterator, Optional, Tuple, Union

DateLike = Union[date, datetime]


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching what the store returns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_date(value: Optional[DateLike]) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def month_key(value: DateLike) -> Tuple[int, int]:
    value = as_date(value)
    return value.year, value.month


def add_months(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def subtract_months(value: DateLike, months: int) -> date:
    """Same day ``months`` calendar months earlier, clamped to the month's end."""
    value = as_date(value)
    year, month = add_months(value.year, value.month, -months)
    return date(year, month, min(value.day, days_in_month(year, month)))


def days_in_month(year: int, month: int) -> int:
    next_year, next_month = add_months(year, month, 1)
    return (date(next_year, next_month, 1) - date(year, month, 1)).days


def month_end(year: int, month: int) -> date:
    return date(year, month, days_in_month(year, month))


def each_month(start: DateLike, end: DateLike) -> Iterator[Tuple[int, int]]:
    """Yield (year, month) for every calendar month from start to end inclusive."""
    year, month = month_key(start)
    last = month_key(end)
    while (year, month) <= last:
        yield year, month
        year, month = add_months(year, month, 1)


def month_label(year: int, month: int) -> str:
    return date(year, month, 1).strftime("%b %Y")
