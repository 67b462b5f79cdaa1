from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

# Fixed width so stored timestamps sort and range-filter as plain text.
STORAGE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"
SECONDS_PER_HOUR = 3600


def to_iso(dt: datetime) -> str:
    """Render an aware datetime as fixed-width UTC text for storage."""

    if dt.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware")
    return dt.astimezone(timezone.utc).strftime(STORAGE_FORMAT)


def parse_iso(ts: str | None, tz: str = "UTC") -> datetime | None:
    """Parse an ISO-8601 timestamp string.
    If naive, attach the provided tz. Returns None if ts is falsy.
    """
    if not ts:
        return None
    dt = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo(tz))
    return dt


def elapsed_hours(start: datetime, end: datetime) -> float:
    """Real-valued hours between two aware datetimes (not rounded)."""

    delta = end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
    return delta.total_seconds() / SECONDS_PER_HOUR


def parse_wall_time(value: str) -> time:
    """Parse ``HH:MM`` (or ``HH:MM:SS``) wall-clock text."""

    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError("time is required")
    try:
        parsed = time.fromisoformat(cleaned)
    except ValueError as exc:
        raise ValueError(f"Invalid time of day: {value!r}") from exc
    if parsed.tzinfo is not None:
        raise ValueError("time of day must not carry a timezone")
    return parsed


def resolve_manual_window(
    day: date,
    start_time: time,
    end_time: time,
    tz: ZoneInfo,
) -> tuple[datetime, datetime]:
    """Anchor two wall-clock times on ``day`` in ``tz``.

    An end time earlier than the start time is read as the next calendar day,
    so ``23:00`` to ``01:00`` spans two hours across midnight.
    """

    start = datetime.combine(day, start_time, tzinfo=tz)
    end = datetime.combine(day, end_time, tzinfo=tz)
    if end < start:
        end = datetime.combine(day + timedelta(days=1), end_time, tzinfo=tz)
    return start, end


def local_day(now: datetime, tz: ZoneInfo) -> date:
    return now.astimezone(tz).date()


def format_hours(hours: float | None) -> str:
    """Render hours as ``HHh MMm`` for reports."""

    total_minutes = int(round(max(0.0, hours or 0.0) * 60))
    h, m = divmod(total_minutes, 60)
    return f"{h:02}h {m:02}m"


def format_elapsed(total_seconds: float) -> str:
    """Render a running timer as HH:MM:SS."""

    safe_seconds = max(0, int(total_seconds))
    hours, remainder = divmod(safe_seconds, SECONDS_PER_HOUR)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}"
