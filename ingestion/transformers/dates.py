"""
Date parsing shared by the mappers and validators.

Stored timestamps are naive UTC, matching the ORM defaults.
"""

from datetime import datetime, timezone
from typing import Any, Optional

# Accepted besides ISO 8601
_FALLBACK_FORMATS = ("%Y/%m/%d", "%m/%d/%Y", "%Y/%m/%d %H:%M:%S", "%m/%d/%Y %H:%M")


def parse_datetime(value: Any) -> Optional[datetime]:
    """Safely parse a datetime value, returning None when it cannot be read"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            parsed = None
            for fmt in _FALLBACK_FORMATS:
                try:
                    parsed = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
            if parsed is None:
                return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def one_year_from(moment: datetime) -> datetime:
    """Same calendar date next year (Feb 29 falls back to Feb 28)"""
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        return moment.replace(year=moment.year + 1, day=28)
