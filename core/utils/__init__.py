"""
Core Utilities Package

Modules:
    - time: Millisecond timestamps and UTC datetime conversion
"""

from core.utils.time import datetime_to_timestamp, get_timestamp_ms, to_utc_datetime

__all__ = ["datetime_to_timestamp", "get_timestamp_ms", "to_utc_datetime"]
