from __future__ import annotations  # Styled PDF rendering for assessment reports

import textwrap
from datetime import datetime
from typing import Any, List, Sequence, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from assessment.types import DetailedFeedback, Report
from services.reports import category_gaps
from skills.taxonomy import CATEGORY_ORDER, label

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background

RECOMMENDATION_LABELS = {
    "strong_hire": "Strong hire",
    "hire": "Hire",
    "no_hire": "No hire",
    "insufficient_data": "Insufficient data",
}


def _format_duration(seconds: int) -> str:  # Render seconds as minutes and seconds
    minutes, rest = divmod(max(0, seconds), 60)
    return f"{minutes}m {rest:02d}s"


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


class ReportPDF(FPDF):  # PDF with custom header/footer styling
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Excel Skills Assessment"

    @staticmethod
    def _prepare_text(text: Any) -> str:  # Core fonts only cover latin-1
        value = "" if text is None else str(text)
        cleaned = value.replace("•", "-").replace("…", "...")
        return cleaned.encode("latin-1", "ignore").decode("latin-1")

    def cell(self, w=None, h=None, text="", *args, **kwargs):  # Wrap base cell with text sanitisation
        return super().cell(w, h, self._prepare_text(text), *args, **kwargs)

    def multi_cell(self, w, h=None, text="", *args, **kwargs):  # Wrap base multi_cell with text sanitisation
        return super().multi_cell(w, h, self._prepare_text(text), *args, **kwargs)

    def header(self) -> None:  # Render header banner
        usable = _effective_width(self)
        if self.page_no() == 1:
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, 18, style="F")
            self.set_text_color(255, 255, 255)
            self.set_xy(self.l_margin, 5)
            self.set_font("Helvetica", "B", 16)
            self.cell(usable, 8, self.header_title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.set_text_color(*TEXT)
            self.ln(8)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font("Helvetica", "B", 12)
            self.cell(usable, 6, self.header_title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            mark = self.get_y()
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font("Helvetica", "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: ReportPDF, title: str) -> None:  # Render styled section title
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(0, 9, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: ReportPDF, rows: List[Tuple[str, str]]) -> None:  # Draw two-column metadata
    col = _effective_width(pdf) / 2.0
    line = 6
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font("Helvetica", "", 10)
        pdf.cell(col, line, left[0], new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, right[0], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
        pdf.set_font("Helvetica", "B", 11)
        pdf.cell(col, line, left[1], new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, right[1], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _bullets(pdf: ReportPDF, items: Sequence[str], empty: str) -> None:  # Render a bullet list
    pdf.set_x(pdf.l_margin)
    pdf.set_font("Helvetica", "", 11)
    if not items:
        pdf.set_text_color(*MUTED)
        pdf.multi_cell(_effective_width(pdf), 6, empty, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
        pdf.ln(2)
        return
    pdf.set_text_color(*TEXT)
    for item in items:
        pdf.multi_cell(_effective_width(pdf), 6, f"- {item}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _render_skill_table(pdf: ReportPDF, report: Report) -> None:  # Draw per-category scores against baseline
    headers = ["Skill", "Score", "Vs. baseline"]
    width = _effective_width(pdf)
    widths = [width * 0.5, width * 0.25, width * 0.25]
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*ACCENT)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font("Helvetica", "B", 10)
    for idx, title in enumerate(headers):
        last = idx == len(headers) - 1
        pdf.cell(
            widths[idx],
            8,
            title,
            fill=True,
            new_x=XPos.LMARGIN if last else XPos.RIGHT,
            new_y=YPos.NEXT if last else YPos.TOP,
        )
    pdf.set_text_color(*TEXT)
    pdf.set_font("Helvetica", "", 10)
    gaps = category_gaps(report.skill_breakdown, report.role_level)
    for idx, category in enumerate(CATEGORY_ORDER):
        fill = idx % 2 == 0
        if fill:
            pdf.set_fill_color(247, 250, 255)
        pdf.set_x(pdf.l_margin)
        pdf.cell(widths[0], 7, label(category), fill=fill, new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(widths[1], 7, f"{report.skill_breakdown.get(category):.1f}", fill=fill, new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(widths[2], 7, f"{gaps[category]:+.1f}", fill=fill, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _render_feedback(pdf: ReportPDF, entries: Sequence[DetailedFeedback]) -> None:  # Per-question feedback blocks
    width = _effective_width(pdf)
    for index, entry in enumerate(entries, start=1):
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*ACCENT)
        pdf.set_font("Helvetica", "B", 10)
        pdf.cell(width, 6, f"{index}. {entry.question_id}  ({entry.score:.1f}/100)", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(60, 60, 60)
        pdf.set_font("Helvetica", "", 10)
        answer = textwrap.shorten(" ".join(entry.response.split()) or "-", width=380, placeholder="...")
        pdf.multi_cell(width, 5.5, f"A: {answer}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*MUTED)
        pdf.multi_cell(width, 5.5, entry.specific_feedback, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        for line in entry.improvements:
            pdf.multi_cell(width, 5.5, f"- {line}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
        y = pdf.get_y() + 1
        pdf.set_draw_color(*RULE)
        pdf.line(pdf.l_margin, y, pdf.l_margin + width, y)
        pdf.ln(3)


def generate_report_pdf(report: Report, *, generated_at: datetime | None = None) -> bytes:  # Build PDF payload
    pdf = ReportPDF()
    pdf.alias_nb_pages()
    pdf.set_margins(15, 22, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _section_title(pdf, "Session Overview")
    _meta_block(
        pdf,
        [
            ("Session ID", report.session_id),
            ("Candidate ID", report.candidate_id),
            ("Role level", report.role_level.value.title()),
            ("Duration", _format_duration(report.interview_duration)),
            ("Completion", f"{report.completion_rate:.1f}%"),
            ("Generated", (generated_at or datetime.now()).strftime("%d %b %Y, %H:%M")),
        ],
    )

    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, pdf.get_y(), _effective_width(pdf), 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, pdf.get_y() + 4)
    pdf.set_text_color(*MUTED)
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(_effective_width(pdf) / 2, 8, "Overall score", new_x=XPos.RIGHT, new_y=YPos.TOP)
    pdf.set_text_color(*ACCENT)
    pdf.set_font("Helvetica", "B", 14)
    recommendation = RECOMMENDATION_LABELS.get(report.hiring_recommendation, report.hiring_recommendation)
    pdf.cell(
        _effective_width(pdf) / 2 - 12,
        8,
        f"{report.overall_score:.1f}/100  {recommendation}",
        align="R",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    pdf.ln(8)
    pdf.set_text_color(*TEXT)

    _section_title(pdf, "Baseline Comparison")
    _bullets(
        pdf,
        [
            f"Percentile: {report.baseline.percentile}",
            f"Benchmark: {report.baseline.benchmark}",
            report.baseline.recommendation,
        ],
        "",
    )

    _section_title(pdf, "Skill Breakdown")
    _render_skill_table(pdf, report)

    _section_title(pdf, "Strengths")
    _bullets(pdf, report.strengths, "No standout strengths recorded.")

    _section_title(pdf, "Areas for Improvement")
    _bullets(pdf, report.improvement_areas, "No improvement areas recorded.")

    _section_title(pdf, "Question Feedback")
    _render_feedback(pdf, report.detailed_feedback)

    return bytes(pdf.output())


__all__ = ["generate_report_pdf"]
