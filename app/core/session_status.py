"""Shared session status and report period constants."""

STATUS_RUNNING = "running"
STATUS_COMPLETED = "completed"

STATUS_CHOICES = (
    STATUS_RUNNING,
    STATUS_COMPLETED,
)

PERIOD_DAILY = "daily"
PERIOD_WEEKLY = "weekly"
PERIOD_MONTHLY = "monthly"

PERIOD_CHOICES = (
    PERIOD_DAILY,
    PERIOD_WEEKLY,
    PERIOD_MONTHLY,
)


def normalize_console_name(value: str | None) -> str:
    """Return a trimmed console key (``" ps4 "`` stays ``"ps4"``; case is kept)."""

    return (value or "").strip()


__all__ = [
    "PERIOD_CHOICES",
    "PERIOD_DAILY",
    "PERIOD_MONTHLY",
    "PERIOD_WEEKLY",
    "STATUS_CHOICES",
    "STATUS_COMPLETED",
    "STATUS_RUNNING",
    "normalize_console_name",
]
