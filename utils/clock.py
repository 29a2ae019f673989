"""
Clock Utility

Timezone-aware timestamps for price observations. Timestamps are stored as
"YYYY-MM-DD HH:MM:SS" in the marketplace's local time.
"""

from datetime import datetime
import pytz

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_in_timezone(timezone="America/Sao_Paulo"):
    """
    Get the current time in the given timezone.

    Args:
        timezone (str): pytz timezone name

    Returns:
        datetime: Current timezone-aware time
    """
    return datetime.now(pytz.timezone(timezone))


def format_timestamp(value):
    """Format a datetime as an observation timestamp; strings pass through."""
    if isinstance(value, datetime):
        return value.strftime(TIMESTAMP_FORMAT)
    return str(value)


def observation_timestamp(timezone="America/Sao_Paulo"):
    return format_timestamp(now_in_timezone(timezone))
