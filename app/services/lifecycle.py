"""Session lifecycle: start, stop, manual entry, delete and bulk stop.

A console is idle (no running row), running (one row without end, duration
or price) or has just completed a session. The service keeps no state of its
own between calls; everything is read from and written to the store, and the
current time always comes from the injected clock.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Sequence
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import (
    InvalidStateError,
    NotFoundError,
    SessionValidationError,
    StopAllError,
    StorageUnavailableError,
)
from ..core.session_status import STATUS_RUNNING, normalize_console_name
from ..crud import sessions as session_store
from ..models.session import ConsoleSession
from .clock import Clock
from .pricing import TierTable, price_for_duration
from .timecalc import elapsed_hours, local_day, parse_wall_time, resolve_manual_window

LOGGER = logging.getLogger(__name__)


def _log_transition(event: str, record: ConsoleSession) -> None:
    LOGGER.info(
        event,
        extra={
            "extra_data": {
                "session_id": record.id,
                "console_name": record.console_name,
                "status": record.status,
                "duration_hours": record.duration_hours,
                "price": record.price,
            }
        },
    )


def require_console(console_name: str | None, known_consoles: Sequence[str] | None = None) -> str:
    name = normalize_console_name(console_name)
    if not name:
        raise SessionValidationError("console_name is required")
    known = settings.CONSOLES if known_consoles is None else known_consoles
    if known and name not in known:
        raise SessionValidationError(
            f"Unknown console: {name}",
            details={"known_consoles": list(known)},
        )
    return name


def find_running_session(db: Session, console_name: str) -> ConsoleSession | None:
    """The running session for ``console_name``; more than one is an error state."""

    running = session_store.list_sessions(db, console_name=console_name, status=STATUS_RUNNING)
    if len(running) > 1:
        LOGGER.error(
            "Multiple running sessions for console %s: %s",
            console_name,
            [record.id for record in running],
        )
        raise InvalidStateError(
            f"Console {console_name} has {len(running)} running sessions",
            details={"session_ids": [record.id for record in running]},
        )
    return running[0] if running else None


def start_session(
    db: Session,
    console_name: str,
    *,
    clock: Clock,
    known_consoles: Sequence[str] | None = None,
) -> ConsoleSession:
    name = require_console(console_name, known_consoles)
    existing = find_running_session(db, name)
    if existing is not None:
        raise InvalidStateError(
            f"Console {name} already has a running session",
            details={"console_name": name, "session_id": existing.id},
        )
    record = session_store.insert_running_session(db, name, clock.now())
    _log_transition("session.started", record)
    return record


def _complete(
    db: Session,
    record: ConsoleSession,
    ended_at: datetime,
    table: TierTable | None,
) -> ConsoleSession:
    # A clock that reads earlier than the start still yields end >= start.
    ended_at = max(ended_at, record.started_at)
    duration = elapsed_hours(record.started_at, ended_at)
    return session_store.complete_session(
        db,
        record,
        ended_at=ended_at,
        duration_hours=duration,
        price=price_for_duration(duration, table),
    )


def stop_session(
    db: Session,
    session_id: str,
    *,
    clock: Clock,
    table: TierTable | None = None,
) -> ConsoleSession:
    record = session_store.get_session(db, session_id)
    if record is None or not record.is_running:
        raise NotFoundError(
            f"No running session with id {session_id}",
            details={"session_id": session_id},
        )
    record = _complete(db, record, clock.now(), table)
    _log_transition("session.stopped", record)
    return record


def add_manual_session(
    db: Session,
    console_name: str,
    start_time: time | str | None,
    end_time: time | str | None,
    *,
    clock: Clock,
    day: date | None = None,
    tz: ZoneInfo | None = None,
    table: TierTable | None = None,
    known_consoles: Sequence[str] | None = None,
) -> ConsoleSession:
    """Record a finished session from two same-day wall-clock times."""

    name = require_console(console_name, known_consoles)
    if start_time in (None, "") or end_time in (None, ""):
        raise SessionValidationError("Both start_time and end_time are required")
    try:
        start_wall = start_time if isinstance(start_time, time) else parse_wall_time(start_time)
        end_wall = end_time if isinstance(end_time, time) else parse_wall_time(end_time)
    except ValueError as exc:
        raise SessionValidationError(str(exc)) from exc

    tz = tz or ZoneInfo(settings.TZ)
    now = clock.now()
    started_at, ended_at = resolve_manual_window(day or local_day(now, tz), start_wall, end_wall, tz)
    duration = elapsed_hours(started_at, ended_at)
    if duration <= 0:
        raise SessionValidationError(
            "Session must last longer than zero minutes",
            details={"start_time": start_wall.isoformat(), "end_time": end_wall.isoformat()},
        )

    record = session_store.insert_completed_session(
        db,
        name,
        started_at=started_at,
        ended_at=ended_at,
        duration_hours=duration,
        price=price_for_duration(duration, table),
        created_at=now,
    )
    _log_transition("session.added", record)
    return record


def delete_session(db: Session, session_id: str) -> None:
    record = session_store.get_session(db, session_id)
    if record is None:
        raise NotFoundError(f"Session {session_id} not found", details={"session_id": session_id})
    session_store.delete_session(db, record)
    LOGGER.info("session.deleted", extra={"extra_data": {"session_id": session_id}})


def stop_all_running(
    db: Session,
    *,
    clock: Clock,
    table: TierTable | None = None,
) -> list[ConsoleSession]:
    """Complete every running session with one shared end time.

    Each session is priced and written on its own. A failed write does not
    undo or block the others; once the batch is done the failures are raised
    together as ``StopAllError``.
    """

    now = clock.now()
    completed: list[ConsoleSession] = []
    failures: dict[str, str] = {}
    for record in session_store.list_running_sessions(db):
        session_id = record.id
        try:
            completed.append(_complete(db, record, now, table))
        except StorageUnavailableError as exc:
            failures[session_id] = exc.message
            continue
        _log_transition("session.stopped", completed[-1])

    LOGGER.info(
        "sessions.stop_all",
        extra={"extra_data": {"completed": len(completed), "failed": sorted(failures)}},
    )
    if failures:
        raise StopAllError(failures, [record.id for record in completed])
    return completed


def purge_sessions(db: Session) -> int:
    deleted = session_store.delete_all_sessions(db)
    LOGGER.info("sessions.purged", extra={"extra_data": {"deleted": deleted}})
    return deleted


__all__ = [
    "add_manual_session",
    "delete_session",
    "find_running_session",
    "purge_sessions",
    "require_console",
    "start_session",
    "stop_all_running",
    "stop_session",
]
