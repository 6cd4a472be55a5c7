"""
Clinic-local date helpers.

Calendar days, follow-up dates and invoice dates are all expressed in the
clinic's timezone (``CLINIC_TIMEZONE``), never in server time.
"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from ..core.config import settings


def clinic_tz() -> ZoneInfo:
    return ZoneInfo(settings.clinic_timezone)


def clinic_now() -> datetime:
    """Current aware datetime in the clinic timezone."""
    return datetime.now(timezone.utc).astimezone(clinic_tz())


def clinic_today() -> date:
    return clinic_now().date()


def clinic_tomorrow() -> date:
    return clinic_today() + timedelta(days=1)


def iso_date(value: date) -> str:
    """YYYY-MM-DD."""
    return value.isoformat()


def iso_timestamp(value: datetime | None = None) -> str:
    """ISO-8601 timestamp with seconds precision (log entries)."""
    return (value or clinic_now()).isoformat(timespec="seconds")


def week_bounds(day: date) -> tuple[date, date]:
    """Sunday..Saturday week containing ``day``."""
    # date.weekday(): Monday=0 .. Sunday=6
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
