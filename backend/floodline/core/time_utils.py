from datetime import datetime
import pytz

from floodline.core.config import settings

UTC = pytz.utc

def get_utc_now() -> datetime:
    """Get current time in UTC."""
    return datetime.now(UTC)

def local_tz():
    return pytz.timezone(settings.TIMEZONE)

def to_local(dt: datetime) -> datetime:
    """Convert a datetime object to the deployment's local timezone."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        # Assume UTC if naive (SQLite drops tzinfo)
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(local_tz())

def local_day(dt: datetime) -> str:
    """Calendar day of `dt` in local time, as YYYY-MM-DD."""
    return to_local(dt).strftime("%Y-%m-%d")
