"""Common domain types and helpers."""
import re
from datetime import datetime, timezone

# date "T" time, optional fraction, then "Z" or a numeric offset.
_RFC3339 = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware UTC datetime.

    Raises ValueError for anything else, including ISO 8601 forms that are not
    RFC 3339 (basic format, week dates, missing offset).
    """
    if not isinstance(value, str) or not _RFC3339.match(value.strip()):
        raise ValueError("timestamp must be valid RFC 3339")
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).astimezone(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format as RFC 3339 UTC with ``Z``; milliseconds only when non-zero."""
    value = as_utc(value)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    millis = value.microsecond // 1000
    if millis:
        text += f".{millis:03d}"
    return text + "Z"


def truncate_chars(text: str, max_chars: int) -> str:
    """Truncate to at most ``max_chars`` characters.

    Python strings index by code point, so the cut never lands inside a
    multi-byte sequence.
    """
    return text[:max_chars]


def to_naive_utc(value: datetime) -> datetime:
    """Naive UTC for SQLite DateTime columns, so stored values sort chronologically."""
    return as_utc(value).replace(tzinfo=None)


def utc_now_ms() -> datetime:
    """``utc_now`` cut to whole milliseconds, the precision timestamps are rendered with."""
    now = utc_now()
    return now.replace(microsecond=now.microsecond // 1000 * 1000)
