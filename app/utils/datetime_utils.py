"""
Datetime utilities.

All platform timestamps are timezone-aware UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (the default service clock)."""
    return datetime.now(UTC)


def start_of_day(moment: datetime) -> datetime:
    """
    Midnight of the UTC day containing `moment`.

    Args:
        moment: Aware datetime

    Returns:
        Aware UTC datetime at 00:00 of that day
    """
    moment = moment.astimezone(UTC)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
