import datetime as dt
from typing import Any, Optional


def utc_now() -> dt.datetime:
    """Current time in UTC."""
    return dt.datetime.now(dt.timezone.utc)


def now_iso() -> str:
    """ISO datetime in UTC with millisecond precision and a trailing Z."""
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: Any) -> Optional[dt.datetime]:
    """Parse a stored timestamp; None when missing or malformed."""
    if not isinstance(value, str) or not value:
        return None
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = dt.datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def epoch_ms() -> int:
    """Milliseconds since the Unix epoch."""
    return int(utc_now().timestamp() * 1000)


def normalize_key(text: Any) -> str:
    """Trimmed, lower-cased form used for duplicate detection and filters."""
    return str(text or "").strip().lower()
