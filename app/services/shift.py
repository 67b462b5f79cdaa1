"""End-of-shift settlement: capture running time, report the day, purge."""

from __future__ import annotations

import logging
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ..core.session_status import PERIOD_DAILY
from ..models.session import ConsoleSession
from .clock import Clock
from .lifecycle import purge_sessions, stop_all_running
from .reporting import SettlementReport, build_settlement_report

LOGGER = logging.getLogger(__name__)


def settle_shift(
    db: Session,
    *,
    clock: Clock,
    tz: ZoneInfo,
) -> tuple[list[ConsoleSession], SettlementReport]:
    """Stop every running session, then build today's settlement report."""

    stopped = stop_all_running(db, clock=clock)
    report = build_settlement_report(db, PERIOD_DAILY, now=clock.now(), tz=tz)
    return stopped, report


def end_shift(
    db: Session,
    *,
    clock: Clock,
    tz: ZoneInfo,
) -> tuple[SettlementReport, int]:
    """Settle the shift and delete every session record.

    Nothing is purged when stopping a running session fails.
    """

    _, report = settle_shift(db, clock=clock, tz=tz)
    deleted = purge_sessions(db)
    LOGGER.info(
        "shift.ended",
        extra={
            "extra_data": {
                "sessions": report.grand_total_count,
                "revenue": report.grand_total_price,
                "deleted": deleted,
            }
        },
    )
    return report, deleted
