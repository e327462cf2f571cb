# report.py
# -----------------------------------------------
# PDF mensual de turnos (reportlab)
# -----------------------------------------------
import io
from typing import Sequence

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from config import APP_TITLE
from domain import Settings, ShiftAssignment
from services import ShiftHoursCalculator, month_range
from utils import format_hours, month_title, shifts_to_dataframe

BORDER = colors.HexColor("#C7CCD6")


def dataframe_to_pdf(df: pd.DataFrame, title: str, summary_lines: Sequence[str] = ()) -> bytes:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=landscape(A4), topMargin=24, bottomMargin=24, leftMargin=24, rightMargin=24)
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(name="TitleCentered", parent=styles["Title"], alignment=TA_CENTER)
    summary_style = ParagraphStyle(
        name="Summary", parent=styles["Normal"], alignment=TA_CENTER,
        textColor=colors.black, fontSize=11, leading=13, spaceBefore=2, spaceAfter=2
    )
    story = [Paragraph(title, title_style), Spacer(1, 8)]
    if df.empty:
        story.append(Paragraph("Nessun turno registrato.", styles["Normal"]))
    else:
        data = [list(df.columns)] + df.astype(str).values.tolist()
        table = Table(data, repeatRows=1, hAlign="CENTER")
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#F5F5F7")),
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#E0E0E0")),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.whitesmoke, colors.white]),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        story.append(table)
    if summary_lines:
        story.append(Spacer(1, 12))
        box = Table([[Paragraph(line, summary_style)] for line in summary_lines],
                    colWidths=[min(520, 0.65 * doc.width)], hAlign="CENTER")
        box.setStyle(TableStyle([
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("BOX", (0, 0), (-1, -1), 0.6, BORDER),
            ("INNERPADDING", (0, 0), (-1, -1), 8),
        ]))
        story.append(box)

    def draw_page_border(canvas, doc_obj):
        canvas.saveState()
        w, h = doc_obj.pagesize
        canvas.setStrokeColor(BORDER)
        canvas.setLineWidth(0.8)
        margin = 12
        canvas.rect(margin, margin, w - 2*margin, h - 2*margin)
        canvas.restoreState()

    doc.build(story, onFirstPage=draw_page_border, onLaterPages=draw_page_border)
    return buf.getvalue()


def month_report_pdf(year: int, month: int, shifts: Sequence[ShiftAssignment], settings: Settings) -> bytes:
    start, end = month_range(year, month)
    in_month = [s for s in shifts if start <= s.shift_date <= end]
    calc = ShiftHoursCalculator(settings)
    hours = calc.month_hours(year, month, in_month)
    df = shifts_to_dataframe(in_month, settings.shift_times)
    lines = [
        f"Ore del mese: {format_hours(hours)} · Turni: {len(in_month)}",
        f"Obiettivo settimanale: {settings.weekly_target_hours} h",
    ]
    return dataframe_to_pdf(df, f"{APP_TITLE} · {month_title(year, month)}", lines)
