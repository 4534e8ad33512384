"""
Time utilities for funding rate monitoring.
"""

from datetime import datetime, timezone
from typing import Optional
import time


def get_utc_timestamp_ms() -> int:
    """Get current UTC timestamp in milliseconds"""
    return int(time.time() * 1000)


def get_utc_datetime() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds, for durations and expiry"""
    return time.monotonic() * 1000


def format_countdown(timestamp_ms: Optional[int], now_ms: Optional[int] = None) -> str:
    """Human readable time until a future timestamp (e.g. next funding)"""
    if timestamp_ms is None:
        return "-"

    now_ms = get_utc_timestamp_ms() if now_ms is None else now_ms
    remaining = max(0, timestamp_ms - now_ms) // 1000
    hours, remainder = divmod(remaining, 3600)
    minutes = remainder // 60
    return f"{hours}h{minutes:02d}m"
