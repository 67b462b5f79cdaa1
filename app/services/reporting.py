from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Iterable, Sequence
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ..core.errors import InvalidStateError, SessionValidationError
from ..core.session_status import (
    PERIOD_CHOICES,
    PERIOD_DAILY,
    PERIOD_MONTHLY,
    PERIOD_WEEKLY,
    STATUS_COMPLETED,
    STATUS_RUNNING,
)
from ..crud import sessions as session_store
from ..models.session import ConsoleSession


@dataclass(slots=True)
class ConsoleReport:
    session_count: int = 0
    total_duration: float = 0.0
    total_price: float = 0.0


@dataclass(slots=True)
class SettlementReport:
    period: str
    start: datetime
    end: datetime
    consoles: dict[str, ConsoleReport] = field(default_factory=dict)
    grand_total_count: int = 0
    grand_total_duration: float = 0.0
    grand_total_price: float = 0.0


@dataclass(frozen=True, slots=True)
class SessionStats:
    total: int
    running: int
    completed: int
    total_revenue: float
    total_hours: float


def period_window(period: str, now: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """Local-time boundaries of the day, Monday-based week or month holding ``now``."""

    today = now.astimezone(tz).date()
    if period == PERIOD_DAILY:
        first, last = today, today
    elif period == PERIOD_WEEKLY:
        first = today - timedelta(days=today.weekday())
        last = first + timedelta(days=6)
    elif period == PERIOD_MONTHLY:
        first = today.replace(day=1)
        last = today.replace(day=calendar.monthrange(today.year, today.month)[1])
    else:
        raise SessionValidationError(
            f"Unknown report period: {period}",
            details={"periods": list(PERIOD_CHOICES)},
        )
    return datetime.combine(first, time.min, tzinfo=tz), datetime.combine(last, time.max, tzinfo=tz)


def aggregate(
    sessions: Iterable[ConsoleSession],
    window_start: datetime,
    window_end: datetime,
    period: str = "custom",
) -> SettlementReport:
    """Sum completed sessions created inside ``[window_start, window_end]`` per console."""

    report = SettlementReport(period=period, start=window_start, end=window_end)
    for session in sessions:
        if session.status != STATUS_COMPLETED or not session.console_name:
            continue
        if not window_start <= session.created <= window_end:
            continue
        if session.duration_hours is None or session.price is None:
            raise InvalidStateError(
                f"Completed session {session.id} is missing its duration or price",
                details={"session_id": session.id},
            )

        console = report.consoles.setdefault(session.console_name, ConsoleReport())
        console.session_count += 1
        console.total_duration += session.duration_hours
        console.total_price += session.price

        report.grand_total_count += 1
        report.grand_total_duration += session.duration_hours
        report.grand_total_price += session.price
    return report


def build_settlement_report(
    db: Session,
    period: str,
    *,
    now: datetime,
    tz: ZoneInfo,
) -> SettlementReport:
    start, end = period_window(period, now, tz)
    sessions = session_store.list_sessions_created_between(db, start, end, status=STATUS_COMPLETED)
    return aggregate(sessions, start, end, period=period)


def session_stats(sessions: Iterable[ConsoleSession]) -> SessionStats:
    total = running = completed = 0
    revenue = hours = 0.0
    for session in sessions:
        total += 1
        if session.status == STATUS_RUNNING:
            running += 1
        elif session.status == STATUS_COMPLETED:
            completed += 1
            revenue += session.price or 0.0
            hours += session.duration_hours or 0.0
    return SessionStats(
        total=total,
        running=running,
        completed=completed,
        total_revenue=revenue,
        total_hours=hours,
    )


def group_completed_by_console(
    sessions: Iterable[ConsoleSession],
    console_order: Sequence[str] = (),
) -> list[tuple[str, list[ConsoleSession]]]:
    """Completed sessions per console: known consoles first, the rest by name."""

    groups: dict[str, list[ConsoleSession]] = defaultdict(list)
    for session in sessions:
        if session.status == STATUS_COMPLETED and session.console_name:
            groups[session.console_name].append(session)

    ordered = [name for name in console_order if name in groups]
    ordered.extend(sorted(name for name in groups if name not in console_order))
    return [(name, sorted(groups[name], key=lambda s: s.start_iso)) for name in ordered]


__all__ = [
    "ConsoleReport",
    "SessionStats",
    "SettlementReport",
    "aggregate",
    "build_settlement_report",
    "group_completed_by_console",
    "period_window",
    "session_stats",
]
