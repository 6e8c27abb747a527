"""
Timestamp utilities for consistent time handling across the system.
"""

import time
from datetime import datetime
from typing import Optional, Union


def to_datetime(timestamp: Optional[Union[int, float, datetime]] = None) -> datetime:
    """Convert timestamp to datetime object.

    Args:
        timestamp: Unix timestamp in seconds or a datetime (optional, uses current time if None)

    Returns:
        datetime object
    """
    if isinstance(timestamp, datetime):
        return timestamp
    if timestamp is None:
        timestamp = time.time()
    return datetime.fromtimestamp(timestamp)


def to_display_str(timestamp: Optional[Union[int, float, datetime]] = None) -> str:
    """Render a timestamp the way it is shown to the model inside prompts.

    Args:
        timestamp: Unix timestamp in seconds or a datetime (optional, uses current time if None)

    Returns:
        Human readable local time string
    """
    return to_datetime(timestamp).strftime('%Y-%m-%d %H:%M:%S')


def seconds_since(timestamp: Union[int, float, datetime], now: Optional[Union[int, float, datetime]] = None) -> float:
    """Seconds elapsed between timestamp and now (current time if None)."""
    return (to_datetime(now) - to_datetime(timestamp)).total_seconds()
