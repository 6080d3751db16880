"""Date manipulation utilities"""

from datetime import date, datetime
from typing import Optional

from dateutil.relativedelta import relativedelta


def add_months(value: date, months: int) -> date:
    """Shift a date by calendar months, clamping to the last day of the target month"""
    return value + relativedelta(months=months)


def months_ago(months: int, today: date | None = None) -> date:
    """Start date of a trailing window of `months` calendar months"""
    if today is None:
        today = date.today()
    return add_months(today, -months)


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative if end is earlier)"""
    return (end - start).days


def parse_iso_date(value: object) -> Optional[date]:
    """Parse 'YYYY-MM-DD' (or an ISO timestamp) into a date, None if malformed"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None
