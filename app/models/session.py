"""ORM row for one console rental session.

A row is created either ``running`` (live timer) or directly ``completed``
(manual entry). ``end_iso``, ``duration_hours`` and ``price`` are filled
exactly when the status is ``completed``.
"""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, Float, Index, String, Text, text

from ..core.session_status import STATUS_COMPLETED, STATUS_RUNNING
from ..db.session import Base
from ..services.timecalc import parse_iso

RUNNING_GUARD_INDEX = "uq_sessions_running_console"


def _new_id() -> str:
    return str(uuid4())


class ConsoleSession(Base):
    __tablename__ = "sessions"
    __table_args__ = (
        CheckConstraint(
            f"status IN ('{STATUS_RUNNING}', '{STATUS_COMPLETED}')",
            name="ck_sessions_status",
        ),
        # At most one running session per console, enforced by the store too.
        Index(
            RUNNING_GUARD_INDEX,
            "console_name",
            unique=True,
            sqlite_where=text(f"status = '{STATUS_RUNNING}'"),
            postgresql_where=text(f"status = '{STATUS_RUNNING}'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    console_name = Column(Text, nullable=False, index=True)
    start_iso = Column(Text, nullable=False)
    end_iso = Column(Text, nullable=True)
    duration_hours = Column(Float, nullable=True)
    price = Column(Float, nullable=True)
    status = Column(Text, nullable=False, default=STATUS_RUNNING, index=True)
    created_at = Column(Text, nullable=False, index=True)

    @property
    def is_running(self) -> bool:
        return self.status == STATUS_RUNNING

    @property
    def started_at(self) -> datetime:
        return parse_iso(self.start_iso)

    @property
    def ended_at(self) -> datetime | None:
        return parse_iso(self.end_iso) if self.end_iso else None

    @property
    def created(self) -> datetime:
        return parse_iso(self.created_at)

    def __repr__(self) -> str:
        return f"<ConsoleSession {self.id} {self.console_name} {self.status}>"
