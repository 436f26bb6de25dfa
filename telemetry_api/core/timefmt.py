import math
import re
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

RFC3339 = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>Z|[+-]\d{2}:\d{2})?$"
)


def parse_rfc3339(value: str, tz: Optional[ZoneInfo] = None) -> Optional[datetime]:
    """Parse an RFC3339 timestamp, returning None when it does not parse.

    Values without an offset are placed in ``tz``; with no ``tz`` they are
    rejected. Fractional seconds beyond microseconds are truncated.
    """
    if not isinstance(value, str):
        return None
    match = RFC3339.match(value)
    if not match:
        return None

    offset = match.group("offset")
    if offset is None and tz is None:
        return None

    fraction = (match.group("fraction") or "")[:6].ljust(6, "0")
    text = f"{match.group('date')}T{match.group('time')}.{fraction}"
    if offset is not None:
        text += "+00:00" if offset == "Z" else offset
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def format_rfc3339(moment: datetime, fractional: bool = False) -> str:
    utc = moment.astimezone(timezone.utc)
    text = utc.strftime("%Y-%m-%dT%H:%M:%S")
    if fractional and utc.microsecond:
        text += f".{utc.microsecond:06d}".rstrip("0")
    return text + "Z"


def epoch_seconds(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return math.floor(moment.timestamp())
