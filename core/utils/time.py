"""
Time Utilities

KuCoin works in milliseconds since epoch everywhere:
- The KC-API-TIMESTAMP header and the signature prehash use it as a decimal string
- Query filters (startAt/endAt) take it as an integer
- Response records (createdAt/updatedAt) carry it as an integer

The helpers here convert between those values and timezone-aware UTC datetimes.
"""

import time
from datetime import datetime, timezone
from typing import Union


def get_timestamp_ms() -> str:
    """
    Current wall-clock time in milliseconds since epoch, as a decimal string.

    This is the exact value sent as KC-API-TIMESTAMP and used as the first
    segment of the signature prehash.

    Example:
        >>> get_timestamp_ms()
        '1700000000000'
    """
    return str(time.time_ns() // 1_000_000)


def to_utc_datetime(timestamp: Union[int, float]) -> datetime:
    """
    Convert a timestamp (seconds or milliseconds) to UTC datetime.

    Detection Logic:
        - If timestamp > 1e12: Assumed to be milliseconds
        - Otherwise: Assumed to be seconds

    Args:
        timestamp: Unix timestamp in seconds or milliseconds

    Returns:
        datetime: Timezone-aware datetime object in UTC

    Raises:
        ValueError: If timestamp is negative or invalid

    Examples:
        >>> to_utc_datetime(1704110400000)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
    """
    if timestamp < 0:
        raise ValueError(f"Timestamp cannot be negative: {timestamp}")

    if timestamp > 1e12:
        timestamp = timestamp / 1000.0

    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OSError, OverflowError, ValueError) as e:
        raise ValueError(f"Invalid timestamp: {timestamp}. Error: {e}")


def datetime_to_timestamp(dt: datetime, milliseconds: bool = False) -> int:
    """
    Convert a datetime object to Unix timestamp.

    Args:
        dt: Datetime object (naive datetimes are treated as UTC)
        milliseconds: If True, return milliseconds; if False, return seconds

    Returns:
        int: Unix timestamp in seconds or milliseconds

    Examples:
        >>> dt = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
        >>> datetime_to_timestamp(dt, milliseconds=True)
        1704110400000
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    if milliseconds:
        return int(dt.timestamp() * 1000)

    return int(dt.timestamp())
