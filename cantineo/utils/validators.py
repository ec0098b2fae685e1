"""
Input validation utilities
"""
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Union

from cantineo.exceptions import InvalidArgument

ISO_DAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateInput = Union[str, date, datetime]


def normalize_date(value: DateInput) -> str:
    """Reduce a date, datetime or ISO string to its YYYY-MM-DD day"""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        text = value.strip()
        # "2024-03-05T12:30:00Z" -> "2024-03-05"
        day = text.split("T", 1)[0].split(" ", 1)[0]
        if ISO_DAY_PATTERN.match(day):
            try:
                return date.fromisoformat(day).isoformat()
            except ValueError:
                pass
    raise InvalidArgument(f"Invalid date: {value!r}. Expected YYYY-MM-DD")


def validate_iso_day(value: str) -> str:
    """Validate a value already in YYYY-MM-DD form"""
    if not isinstance(value, str) or not ISO_DAY_PATTERN.match(value):
        raise InvalidArgument(f"Invalid date: {value!r}. Expected YYYY-MM-DD")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise InvalidArgument(f"Invalid date: {value!r}. Expected YYYY-MM-DD")
    return value


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """Convert a numeric input to Decimal without binary float noise"""
    if isinstance(value, bool):
        raise InvalidArgument(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # str() first so 0.1 becomes Decimal("0.1"), not its float expansion
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidArgument(f"Invalid amount: {value!r}")
    if not result.is_finite():
        raise InvalidArgument(f"Invalid amount: {value!r}")
    return result


def validate_meal_price(price: Union[Decimal, int, float, str]) -> Decimal:
    """Validate meal price is positive"""
    value = to_decimal(price)
    if value <= 0:
        raise InvalidArgument("Meal price must be positive")
    return value


def validate_payment_amount(amount: Union[Decimal, int, float, str]) -> Decimal:
    """Validate payment amount is positive"""
    value = to_decimal(amount)
    if value <= 0:
        raise InvalidArgument("Payment amount must be positive")
    return value
