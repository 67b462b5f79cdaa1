from __future__ import annotations

from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import NotFoundError, SessionValidationError
from ..core.session_status import STATUS_CHOICES
from ..crud.sessions import get_session, list_sessions
from ..db.session import get_db
from ..models.session import ConsoleSession
from ..schemas.session import (
    ConsoleStateOut,
    ManualSessionCreate,
    PurgeOut,
    RunningSessionOut,
    SessionOut,
    SessionStart,
)
from ..services.clock import Clock, get_clock
from ..services.lifecycle import (
    add_manual_session,
    delete_session,
    find_running_session,
    purge_sessions,
    require_console,
    start_session,
    stop_all_running,
    stop_session,
)
from ..services.timecalc import format_elapsed

LOCAL_TZ = ZoneInfo(settings.TZ)

router = APIRouter(prefix="/api/v1", tags=["sessions"])


def _running_out(record: ConsoleSession, clock: Clock) -> RunningSessionOut:
    # Display-only: recomputed from the stored start on every read.
    elapsed = max(0.0, (clock.now() - record.started_at).total_seconds())
    payload = SessionOut.model_validate(record, from_attributes=True).model_dump()
    return RunningSessionOut(**payload, elapsed_seconds=elapsed, elapsed_display=format_elapsed(elapsed))


@router.get("/consoles", response_model=list[ConsoleStateOut])
def api_console_states(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    states = []
    for console_name in settings.CONSOLES:
        record = find_running_session(db, console_name)
        states.append(
            ConsoleStateOut(
                console_name=console_name,
                running=_running_out(record, clock) if record else None,
            )
        )
    return states


@router.get("/sessions", response_model=list[SessionOut])
def api_list(
    console_name: str | None = Query(default=None),
    status: str | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    if status and status not in STATUS_CHOICES:
        raise SessionValidationError(f"Unknown status: {status}", details={"statuses": list(STATUS_CHOICES)})
    return list_sessions(db, console_name=console_name, status=status, limit=limit, offset=offset)


@router.get("/sessions/running", response_model=RunningSessionOut)
def api_running(
    console_name: str = Query(...),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    name = require_console(console_name)
    record = find_running_session(db, name)
    if record is None:
        raise NotFoundError(f"No running session for {name}", details={"console_name": name})
    return _running_out(record, clock)


@router.post("/sessions/start", response_model=SessionOut, status_code=201)
def api_start(payload: SessionStart, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return start_session(db, payload.console_name, clock=clock)


@router.post("/sessions/manual", response_model=SessionOut, status_code=201)
def api_manual(payload: ManualSessionCreate, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return add_manual_session(
        db,
        payload.console_name,
        payload.start_time,
        payload.end_time,
        clock=clock,
        day=payload.day,
        tz=LOCAL_TZ,
    )


@router.post("/sessions/stop-all", response_model=list[SessionOut])
def api_stop_all(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return stop_all_running(db, clock=clock)


@router.delete("/sessions", response_model=PurgeOut)
def api_purge(db: Session = Depends(get_db)):
    return PurgeOut(deleted=purge_sessions(db))


@router.get("/sessions/{session_id}", response_model=SessionOut)
def api_get(session_id: str, db: Session = Depends(get_db)):
    record = get_session(db, session_id)
    if record is None:
        raise NotFoundError(f"Session {session_id} not found", details={"session_id": session_id})
    return record


@router.post("/sessions/{session_id}/stop", response_model=SessionOut)
def api_stop(session_id: str, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    return stop_session(db, session_id, clock=clock)


@router.delete("/sessions/{session_id}")
def api_delete(session_id: str, db: Session = Depends(get_db)):
    delete_session(db, session_id)
    return {"status": "deleted"}
