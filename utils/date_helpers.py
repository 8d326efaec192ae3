"""Pure date/time helpers. Every boundary computation takes an explicit tzinfo."""
from datetime import date, datetime, time, timezone, tzinfo
import calendar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from utils.constants import QUERY_DATE_FORMAT

_STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def get_timezone(name: str | None) -> tzinfo:
    """Resolve an IANA zone name, falling back to UTC on unknown names."""
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _as_local_date(d: date | datetime, tz: tzinfo) -> date:
    if isinstance(d, datetime):
        return ensure_aware(d).astimezone(tz).date()
    return d


def start_of_day(d: date | datetime, tz: tzinfo) -> datetime:
    return datetime.combine(_as_local_date(d, tz), time.min, tzinfo=tz)


def end_of_day(d: date | datetime, tz: tzinfo, second: int | None = None) -> datetime:
    """Last instant of the day containing d, in tz. Pass `second` to cut the
    day off at 23:59:<second> instead."""
    last = time.max if second is None else time(23, 59, second)
    return datetime.combine(_as_local_date(d, tz), last, tzinfo=tz)


def day_range(d: date | datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    return start_of_day(d, tz), end_of_day(d, tz)


def in_range(dt: datetime, start: datetime | None, end: datetime | None) -> bool:
    """Inclusive range check; a missing bound is open."""
    dt = ensure_aware(dt)
    if start is not None and dt < ensure_aware(start):
        return False
    if end is not None and dt > ensure_aware(end):
        return False
    return True


# ── Wire / storage formats ────────────────────────────────────────────────────

def format_iso8601(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond fraction, e.g. '2025-07-14T10:00:00.000Z'."""
    utc = ensure_aware(dt).astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_iso8601(value: str) -> datetime:
    """Parse an ISO-8601 timestamp with or without fractional seconds.
    Raises ValueError on malformed input."""
    if not value:
        raise ValueError("Empty timestamp.")
    return ensure_aware(datetime.fromisoformat(value.strip()))


def to_storage(dt: datetime) -> str:
    """Fixed-width UTC text so that string order equals time order."""
    return ensure_aware(dt).astimezone(timezone.utc).strftime(_STORAGE_FORMAT)


def from_storage(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.strptime(value, _STORAGE_FORMAT).replace(tzinfo=timezone.utc)


def format_query_date(dt: datetime) -> str:
    """yyyy-MM-dd of the bound as seen in its own timezone."""
    return dt.strftime(QUERY_DATE_FORMAT)


# ── Calendar arithmetic ───────────────────────────────────────────────────────

def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    max_day = calendar.monthrange(year, month)[1]
    return min(day, max_day)


def add_months(d: date, n: int) -> date:
    """Add n months to date d, clamping day to month end."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = clamp_day_to_month(year, month, d.day)
    return d.replace(year=year, month=month, day=day)


def default_history_period(today: date, tz: tzinfo, months: int = 1) -> tuple[datetime, datetime]:
    """From the start of the day `months` months ago to 23:59:00 today."""
    return start_of_day(add_months(today, -months), tz), end_of_day(today, tz, second=0)


