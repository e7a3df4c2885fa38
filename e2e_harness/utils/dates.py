"""
Date helpers.

Formats use the tokens ``YYYY MM DD HH mm ss SSS`` (year, month, day, hour,
minute, second, millisecond).
"""

import math
import re
import time
from datetime import datetime, timedelta
from typing import Optional

from ..core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_FORMAT = "YYYY-MM-DD"
FILE_NAME_FORMAT = "YYYY-MM-DD_HH-mm-ss-SSS"

_TOKENS = re.compile(r"YYYY|SSS|MM|DD|HH|mm|ss")

_STRPTIME = {
    "YYYY": "%Y",
    "MM": "%m",
    "DD": "%d",
    "HH": "%H",
    "mm": "%M",
    "ss": "%S",
    "SSS": "%f",
}


def get_current_date() -> datetime:
    return datetime.now()


def get_current_timestamp() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


def format_date(date: datetime, fmt: str = DEFAULT_FORMAT) -> str:
    values = {
        "YYYY": f"{date.year:04d}",
        "MM": f"{date.month:02d}",
        "DD": f"{date.day:02d}",
        "HH": f"{date.hour:02d}",
        "mm": f"{date.minute:02d}",
        "ss": f"{date.second:02d}",
        "SSS": f"{date.microsecond // 1000:03d}",
    }
    return _TOKENS.sub(lambda m: values[m.group()], fmt)


def parse_date(value: str, fmt: Optional[str] = None) -> datetime:
    """
    Parse ``value`` as ISO 8601, or with a token format when ``fmt`` is given.

    Raises:
        ValueError: if the string does not match
    """
    try:
        if fmt:
            pattern = _TOKENS.sub(lambda m: _STRPTIME[m.group()], fmt)
            return datetime.strptime(value, pattern)
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        logger.error(f"Date parsing failed: {e}")
        raise ValueError(f"Invalid date string: {value}") from e


def add_days(date: datetime, days: int) -> datetime:
    return date + timedelta(days=days)


def add_hours(date: datetime, hours: int) -> datetime:
    return date + timedelta(hours=hours)


def subtract_days(date: datetime, days: int) -> datetime:
    return date - timedelta(days=days)


def get_days_difference(first: datetime, second: datetime) -> int:
    """Absolute difference in days, rounded up."""
    seconds = abs((second - first).total_seconds())
    return math.ceil(seconds / 86400)


def generate_timestamp_for_file_name(date: Optional[datetime] = None) -> str:
    return format_date(date or datetime.now(), FILE_NAME_FORMAT)
