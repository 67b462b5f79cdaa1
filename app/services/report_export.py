"""PDF export of completed sessions grouped by console."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Sequence
from zoneinfo import ZoneInfo

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from ..models.session import ConsoleSession
from .reporting import group_completed_by_console

LOGGER = logging.getLogger(__name__)

PDF_FONT_FAMILY = "Helvetica"
TITLE = "PlayStation Sessions Report"
COLUMNS = ("Date", "Start Time", "End Time", "Duration (H)")
COLUMN_WIDTHS = (0.22, 0.2, 0.2, 0.18, 0.2)
HEADER_FILL = (106, 17, 203)
FOOTER_FILL = (240, 240, 240)


def _latin1(value: str) -> str:
    # Core PDF fonts only cover latin-1.
    return value.encode("latin-1", "replace").decode("latin-1")


def _fmt_time(value: datetime | None, tz: ZoneInfo) -> str:
    return value.astimezone(tz).strftime("%I:%M %p") if value else "N/A"


def _fmt_number(value: float | None) -> str:
    return f"{value:.2f}" if value is not None else "N/A"


def _session_row(session: ConsoleSession, tz: ZoneInfo) -> tuple[str, ...]:
    return (
        session.created.astimezone(tz).strftime("%Y-%m-%d"),
        _fmt_time(session.started_at, tz),
        _fmt_time(session.ended_at, tz),
        _fmt_number(session.duration_hours),
        _fmt_number(session.price),
    )


def _table_row(pdf: FPDF, widths: list[float], cells: Sequence[str], *, fill: bool = False) -> None:
    for width, cell in zip(widths, cells):
        pdf.cell(width, 7, _latin1(cell), border=1, align="C", fill=fill)
    pdf.ln(7)


def render_sessions_pdf(
    sessions: Iterable[ConsoleSession],
    *,
    tz: ZoneInfo,
    currency: str,
    console_order: Sequence[str] = (),
    generated_at: datetime,
) -> bytes:
    """Render completed sessions as a PDF; running sessions are left out."""

    groups = group_completed_by_console(sessions, console_order)

    pdf = FPDF(unit="mm", format="A4")
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.set_title(TITLE)
    pdf.add_page()

    effective_width = pdf.w - pdf.l_margin - pdf.r_margin
    widths = [effective_width * share for share in COLUMN_WIDTHS]
    header = (*COLUMNS, f"Price ({currency})")

    pdf.set_font(PDF_FONT_FAMILY, "B", 20)
    pdf.cell(effective_width, 10, TITLE, align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font(PDF_FONT_FAMILY, "", 10)
    pdf.cell(
        effective_width,
        6,
        f"Report Generated: {generated_at.astimezone(tz).strftime('%Y-%m-%d %I:%M %p')}",
        align="C",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    pdf.ln(6)

    grand_total = 0.0
    for console_name, console_sessions in groups:
        console_total = sum(session.price or 0.0 for session in console_sessions)
        grand_total += console_total

        pdf.set_font(PDF_FONT_FAMILY, "B", 14)
        pdf.cell(
            effective_width, 8, _latin1(f"{console_name} Sessions"), new_x=XPos.LMARGIN, new_y=YPos.NEXT
        )

        pdf.set_font(PDF_FONT_FAMILY, "B", 10)
        pdf.set_fill_color(*HEADER_FILL)
        pdf.set_text_color(255, 255, 255)
        _table_row(pdf, widths, header, fill=True)
        pdf.set_text_color(0, 0, 0)

        pdf.set_font(PDF_FONT_FAMILY, "", 10)
        for session in console_sessions:
            _table_row(pdf, widths, _session_row(session, tz))

        pdf.set_font(PDF_FONT_FAMILY, "B", 10)
        pdf.set_fill_color(*FOOTER_FILL)
        pdf.cell(
            effective_width,
            7,
            _latin1(f"Total Revenue for {console_name}: {console_total:.2f} {currency}"),
            border=1,
            align="R",
            fill=True,
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )
        pdf.ln(8)

    if groups:
        pdf.set_font(PDF_FONT_FAMILY, "B", 16)
        pdf.cell(effective_width, 10, "Overall Summary", align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font(PDF_FONT_FAMILY, "B", 12)
        pdf.cell(effective_width * 0.6, 9, "Grand Total Revenue (All Consoles)", border=1)
        pdf.cell(
            effective_width * 0.4,
            9,
            _latin1(f"{grand_total:.2f} {currency}"),
            border=1,
            align="R",
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )

    LOGGER.info(
        "report.pdf_rendered",
        extra={"extra_data": {"consoles": len(groups), "grand_total": grand_total}},
    )
    return bytes(pdf.output())


def export_filename(generated_at: datetime, tz: ZoneInfo) -> str:
    return f"Game_Time_Report_{generated_at.astimezone(tz).strftime('%Y-%m-%d')}.pdf"
