# appointments/services/validation.py
import re
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import BookingValidationError

TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$')


def require_int(name, value, minimum=1):
    """Accept real integers only; booleans and numeric strings are rejected"""
    if value is None:
        raise BookingValidationError(f"{name} is required")
    if isinstance(value, bool) or not isinstance(value, int):
        raise BookingValidationError(f"{name} must be an integer")
    if minimum is not None and value < minimum:
        raise BookingValidationError(f"{name} must be at least {minimum}")
    return value


def require_amount(name, value):
    if value is None:
        raise BookingValidationError(f"{name} is required")
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise BookingValidationError(f"{name} must be a number")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise BookingValidationError(f"{name} must be a number")
    if not amount.is_finite():
        raise BookingValidationError(f"{name} must be a finite number")
    if amount < 0:
        raise BookingValidationError(f"{name} cannot be negative")
    return amount


def require_choice(name, value, choices):
    allowed = [key for key, _label in choices]
    if value not in allowed:
        raise BookingValidationError(
            f"Invalid {name} '{value}'. Must be one of: {', '.join(allowed)}"
        )
    return value


def coerce_date(name, value):
    if value is None or value == '':
        raise BookingValidationError(f"{name} is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_date(value)
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed
    raise BookingValidationError(f"{name} must be a date in YYYY-MM-DD format")


def coerce_time(name, value):
    """Times are HH:MM or HH:MM:SS"""
    if value is None or value == '':
        raise BookingValidationError(f"{name} is required")
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        match = TIME_PATTERN.match(value)
        if match:
            hour, minute, second = match.groups()
            return time(int(hour), int(minute), int(second or 0))
    raise BookingValidationError(f"{name} must be a time in HH:MM or HH:MM:SS format")


def coerce_datetime(name, value):
    """
    Return a naive local datetime. Aware values are converted to the
    configured local timezone first.
    """
    if value is None or value == '':
        raise BookingValidationError(f"{name} is required")
    if isinstance(value, str):
        try:
            parsed = parse_datetime(value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise BookingValidationError(f"{name} must be a valid datetime")
        value = parsed
    if not isinstance(value, datetime):
        raise BookingValidationError(f"{name} must be a valid datetime")
    if timezone.is_aware(value):
        value = timezone.make_naive(value)
    return value


def reject_unknown_fields(fields, allowed):
    unknown = sorted(set(fields) - set(allowed))
    if unknown:
        raise BookingValidationError(
            f"Unknown field(s): {', '.join(unknown)}",
            details={'unknown_fields': unknown}
        )
    if not fields:
        raise BookingValidationError("No fields to update")
