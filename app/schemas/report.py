from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from ..services.reporting import SessionStats, SettlementReport
from ..services.timecalc import format_hours
from .session import SessionOut


class ConsoleReportOut(BaseModel):
    console_name: str
    session_count: int
    total_duration: float
    total_price: float
    duration_display: str


class SettlementReportOut(BaseModel):
    period: str
    start: datetime
    end: datetime
    currency: str
    consoles: list[ConsoleReportOut]
    grand_total_count: int
    grand_total_duration: float
    grand_total_price: float
    grand_total_duration_display: str

    @classmethod
    def from_report(cls, report: SettlementReport, currency: str) -> "SettlementReportOut":
        return cls(
            period=report.period,
            start=report.start,
            end=report.end,
            currency=currency,
            consoles=[
                ConsoleReportOut(
                    console_name=name,
                    session_count=item.session_count,
                    total_duration=item.total_duration,
                    total_price=item.total_price,
                    duration_display=format_hours(item.total_duration),
                )
                for name, item in sorted(report.consoles.items())
            ],
            grand_total_count=report.grand_total_count,
            grand_total_duration=report.grand_total_duration,
            grand_total_price=report.grand_total_price,
            grand_total_duration_display=format_hours(report.grand_total_duration),
        )


class ShiftSettleOut(BaseModel):
    stopped: list[SessionOut]
    report: SettlementReportOut


class ShiftEndOut(BaseModel):
    deleted: int
    report: SettlementReportOut


class SessionStatsOut(BaseModel):
    total: int
    running: int
    completed: int
    total_revenue: float
    total_hours: float

    @classmethod
    def from_stats(cls, stats: SessionStats) -> "SessionStatsOut":
        return cls(
            total=stats.total,
            running=stats.running,
            completed=stats.completed,
            total_revenue=stats.total_revenue,
            total_hours=stats.total_hours,
        )
