"""
General helper utilities
"""
import calendar
import uuid
from datetime import date, datetime, timedelta
from typing import List


def new_id() -> str:
    """Generate an opaque record id"""
    return str(uuid.uuid4())


def last_n_days(today: date, n: int = 7) -> List[str]:
    """ISO days ending at today, oldest first"""
    if isinstance(today, datetime):
        today = today.date()
    return [(today - timedelta(days=offset)).isoformat() for offset in range(n - 1, -1, -1)]


def month_days(year: int, month: int) -> List[str]:
    """Every ISO day of a calendar month"""
    _, days_in_month = calendar.monthrange(year, month)
    return [date(year, month, day).isoformat() for day in range(1, days_in_month + 1)]
