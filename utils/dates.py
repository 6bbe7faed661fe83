import calendar
from datetime import date, datetime


def parse_iso_date(raw_date: str) -> date:
    return datetime.strptime(raw_date.strip(), "%Y-%m-%d").date()


def month_key(d: date) -> str:
    """``YYYY-MM`` grouping key for the month containing ``d``."""
    return f"{d.year:04d}-{d.month:02d}"


def parse_month_key(key: str) -> date:
    """First day of the month named by a ``YYYY-MM`` key."""
    return datetime.strptime(key.strip(), "%Y-%m").date()


def start_of_month(d: date) -> date:
    return date(d.year, d.month, 1)


def add_months(d: date, months: int) -> date:
    """First day of the month ``months`` after the month of ``d``."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day(day: int, year: int, month: int) -> int:
    # no rollover into the next month
    return min(max(day, 1), days_in_month(year, month))
