from datetime import date, datetime, timezone
from typing import Optional, Union


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """Parse an ISO calendar date; a datetime loses its time-of-day."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip()[:10])
    except (AttributeError, ValueError):
        return None
