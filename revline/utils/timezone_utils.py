"""
Timezone utility functions for the Revline document service.
Order timestamps arrive from the backend either as UTC ISO strings or as naive
local times; documents print them in the shop's display timezone.
"""

from datetime import datetime, timezone
import pytz
from typing import Optional, Union

DEFAULT_DISPLAY_TIMEZONE = "Asia/Kuala_Lumpur"

DATE_FORMATS = [
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M:%S.%f',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M:%S.%f',
    '%d/%m/%Y %H:%M',
    '%d-%m-%Y %H:%M',
    '%Y-%m-%d',
    '%d/%m/%Y',
]


def get_display_timezone(tz_name: Optional[str] = None):
    """Return the pytz timezone for tz_name, defaulting to the shop's timezone."""
    return pytz.timezone(tz_name or DEFAULT_DISPLAY_TIMEZONE)


def convert_utc_to_display(utc_dt: Union[datetime, str], tz_name: Optional[str] = None) -> datetime:
    """
    Convert a UTC datetime to the display timezone.

    Args:
        utc_dt: UTC datetime object or ISO string
        tz_name: Display timezone name

    Returns:
        Datetime object in the display timezone
    """
    if isinstance(utc_dt, str):
        utc_dt = datetime.fromisoformat(utc_dt.replace('Z', '+00:00'))
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=timezone.utc)
    return utc_dt.astimezone(get_display_timezone(tz_name))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime_string(dt_string: Optional[str], tz_name: Optional[str] = None) -> Optional[datetime]:
    """
    Parse a datetime string and return a timezone-aware datetime in UTC.

    Naive values are taken to be in the display timezone, which is what the
    backend emits for its local timestamps.

    Raises:
        ValueError: when no known format matches
    """
    if not dt_string:
        return None

    display_tz = get_display_timezone(tz_name)
    try:
        dt = datetime.fromisoformat(dt_string.replace('Z', '+00:00'))
    except ValueError:
        dt = None
        for fmt in DATE_FORMATS:
            try:
                dt = datetime.strptime(dt_string, fmt)
                break
            except ValueError:
                continue
        if dt is None:
            raise ValueError(f"Unable to parse datetime string: {dt_string}")

    if dt.tzinfo is None:
        dt = display_tz.localize(dt)
    return dt.astimezone(timezone.utc)


def format_datetime_for_display(utc_dt: Optional[datetime], tz_name: Optional[str] = None,
                                fmt: str = "%d/%m/%Y, %H:%M:%S") -> str:
    """Format a UTC datetime for display; None renders as an empty string."""
    if utc_dt is None:
        return ""
    return convert_utc_to_display(utc_dt, tz_name).strftime(fmt)


def current_month(tz_name: Optional[str] = None) -> str:
    """The current year-month (YYYY-MM) in the display timezone."""
    return utc_now().astimezone(get_display_timezone(tz_name)).strftime('%Y-%m')
