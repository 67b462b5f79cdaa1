from __future__ import annotations

from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import NotFoundError
from ..core.session_status import PERIOD_DAILY, STATUS_COMPLETED
from ..crud.sessions import list_sessions
from ..db.session import get_db
from ..schemas.report import SessionStatsOut, SettlementReportOut, ShiftEndOut, ShiftSettleOut
from ..schemas.session import SessionOut
from ..services.clock import Clock, get_clock
from ..services.report_export import export_filename, render_sessions_pdf
from ..services.reporting import build_settlement_report, session_stats
from ..services.shift import end_shift, settle_shift

LOCAL_TZ = ZoneInfo(settings.TZ)
PERIOD_PATTERN = "^(daily|weekly|monthly)$"

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.get("/settlement", response_model=SettlementReportOut)
def api_settlement(
    period: str = Query(default=PERIOD_DAILY, pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    report = build_settlement_report(db, period, now=clock.now(), tz=LOCAL_TZ)
    return SettlementReportOut.from_report(report, settings.CURRENCY)


@router.post("/shift/settle", response_model=ShiftSettleOut)
def api_shift_settle(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    stopped, report = settle_shift(db, clock=clock, tz=LOCAL_TZ)
    return ShiftSettleOut(
        stopped=[SessionOut.model_validate(record, from_attributes=True) for record in stopped],
        report=SettlementReportOut.from_report(report, settings.CURRENCY),
    )


@router.post("/shift/end", response_model=ShiftEndOut)
def api_shift_end(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    report, deleted = end_shift(db, clock=clock, tz=LOCAL_TZ)
    return ShiftEndOut(deleted=deleted, report=SettlementReportOut.from_report(report, settings.CURRENCY))


@router.get("/stats", response_model=SessionStatsOut)
def api_stats(db: Session = Depends(get_db)):
    return SessionStatsOut.from_stats(session_stats(list_sessions(db)))


@router.get("/sessions.pdf", response_class=Response)
def api_sessions_pdf(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    completed = list_sessions(db, status=STATUS_COMPLETED)
    if not completed:
        raise NotFoundError("No completed sessions to export")
    now = clock.now()
    content = render_sessions_pdf(
        completed,
        tz=LOCAL_TZ,
        currency=settings.CURRENCY,
        console_order=settings.CONSOLES,
        generated_at=now,
    )
    filename = export_filename(now, LOCAL_TZ)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
