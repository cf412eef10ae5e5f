"""
Timestamp helper - every stored timestamp goes through utc_now().
"""

from datetime import datetime, timezone


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string (microsecond precision)."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")
