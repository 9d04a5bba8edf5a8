# PATH: core/time.py
"""
Time utilities for SWAPGUARD.

The engine never reads the clock itself: callers pass current_time in
every request. These helpers are for the service and CLI layers.
"""

import time
from datetime import datetime, timezone
from typing import Optional


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Get current UTC datetime as ISO string."""
    return now_utc().isoformat()


def now_seconds() -> int:
    """Get current Unix timestamp in whole seconds."""
    return int(time.time())


def seconds_to_iso(timestamp: int) -> Optional[str]:
    """Format a Unix timestamp; 0 (never) maps to None."""
    if timestamp <= 0:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def elapsed_since(timestamp: int, current_time: int) -> int:
    """
    Seconds elapsed since timestamp.

    Negative when timestamp lies in the future of current_time.
    """
    return current_time - timestamp
