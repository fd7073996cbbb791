"""
DateTime utilities
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)
    """
    return datetime.now(timezone.utc)
