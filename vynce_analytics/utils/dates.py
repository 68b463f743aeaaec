"""Timezone helpers"""
from datetime import datetime, timezone


def as_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC; aware ones are returned unchanged"""
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
