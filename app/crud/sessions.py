"""Storage helpers for console sessions.

Every function takes a SQLAlchemy ``Session`` and commits its own unit of
work. Driver and connection failures are rolled back and re-raised as
``StorageUnavailableError`` so callers only ever see the service's own error
types.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.errors import InvalidStateError, StorageUnavailableError
from ..core.session_status import STATUS_COMPLETED, STATUS_RUNNING
from ..models.session import ConsoleSession
from ..services.timecalc import to_iso

LOGGER = logging.getLogger(__name__)


@contextmanager
def _storage_guard(db: Session, action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        LOGGER.exception("Storage failure while trying to %s", action)
        raise StorageUnavailableError(f"Failed to {action}: {exc.__class__.__name__}") from exc


def get_session(db: Session, session_id: str) -> ConsoleSession | None:
    with _storage_guard(db, "load session"):
        return db.get(ConsoleSession, session_id)


def get_running_session(db: Session, console_name: str) -> ConsoleSession | None:
    stmt = select(ConsoleSession).where(
        ConsoleSession.console_name == console_name,
        ConsoleSession.status == STATUS_RUNNING,
    )
    with _storage_guard(db, "load running session"):
        return db.execute(stmt).scalars().first()


def list_sessions(
    db: Session,
    console_name: str | None = None,
    status: str | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> list[ConsoleSession]:
    stmt = select(ConsoleSession)
    if console_name:
        stmt = stmt.where(ConsoleSession.console_name == console_name)
    if status:
        stmt = stmt.where(ConsoleSession.status == status)
    stmt = stmt.order_by(desc(ConsoleSession.created_at), desc(ConsoleSession.start_iso)).offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    with _storage_guard(db, "list sessions"):
        return list(db.execute(stmt).scalars().all())


def list_running_sessions(db: Session) -> list[ConsoleSession]:
    stmt = (
        select(ConsoleSession)
        .where(ConsoleSession.status == STATUS_RUNNING)
        .order_by(ConsoleSession.start_iso, ConsoleSession.id)
    )
    with _storage_guard(db, "list running sessions"):
        return list(db.execute(stmt).scalars().all())


def list_sessions_created_between(
    db: Session,
    start: datetime,
    end: datetime,
    status: str = STATUS_COMPLETED,
) -> list[ConsoleSession]:
    """Sessions with ``status`` whose creation time lies in ``[start, end]``."""

    stmt = (
        select(ConsoleSession)
        .where(
            ConsoleSession.status == status,
            ConsoleSession.created_at >= to_iso(start),
            ConsoleSession.created_at <= to_iso(end),
        )
        .order_by(ConsoleSession.created_at)
    )
    with _storage_guard(db, "list sessions for report"):
        return list(db.execute(stmt).scalars().all())


def insert_running_session(db: Session, console_name: str, started_at: datetime) -> ConsoleSession:
    record = ConsoleSession(
        console_name=console_name,
        start_iso=to_iso(started_at),
        status=STATUS_RUNNING,
        created_at=to_iso(started_at),
    )
    with _storage_guard(db, "start session"):
        try:
            db.add(record)
            db.commit()
        except IntegrityError as exc:
            # The partial unique index rejected a second running row for this console.
            db.rollback()
            raise InvalidStateError(
                f"Console {console_name} already has a running session",
                details={"console_name": console_name},
            ) from exc
        db.refresh(record)
    return record


def insert_completed_session(
    db: Session,
    console_name: str,
    *,
    started_at: datetime,
    ended_at: datetime,
    duration_hours: float,
    price: float,
    created_at: datetime,
) -> ConsoleSession:
    record = ConsoleSession(
        console_name=console_name,
        start_iso=to_iso(started_at),
        end_iso=to_iso(ended_at),
        duration_hours=duration_hours,
        price=price,
        status=STATUS_COMPLETED,
        created_at=to_iso(created_at),
    )
    with _storage_guard(db, "add session"):
        db.add(record)
        db.commit()
        db.refresh(record)
    return record


def complete_session(
    db: Session,
    record: ConsoleSession,
    *,
    ended_at: datetime,
    duration_hours: float,
    price: float,
) -> ConsoleSession:
    with _storage_guard(db, f"stop session {record.id}"):
        record.end_iso = to_iso(ended_at)
        record.duration_hours = duration_hours
        record.price = price
        record.status = STATUS_COMPLETED
        db.commit()
        db.refresh(record)
    return record


def delete_session(db: Session, record: ConsoleSession) -> None:
    with _storage_guard(db, f"delete session {record.id}"):
        db.delete(record)
        db.commit()


def delete_all_sessions(db: Session) -> int:
    with _storage_guard(db, "clear sessions"):
        result = db.execute(delete(ConsoleSession))
        db.commit()
    return int(result.rowcount or 0)


__all__ = [
    "complete_session",
    "delete_all_sessions",
    "delete_session",
    "get_running_session",
    "get_session",
    "insert_completed_session",
    "insert_running_session",
    "list_running_sessions",
    "list_sessions",
    "list_sessions_created_between",
]
