"""
CSV and PDF renderings of attendance rows.

Both take a sequence of ``ExportRow`` and keep a fixed column order: student
id, student name, date, status (capitalised). An empty row set raises
``NoDataToExport`` instead of producing an empty file.
"""
import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from errors import NoDataToExport

HEADER = ["Student ID", "Student Name", "Date", "Status"]


@dataclass(frozen=True)
class ExportRow:
    id: str
    name: str
    date: date
    status: str


def _cells(row: ExportRow) -> list:
    return [row.id, row.name, row.date.isoformat(), row.status.capitalize()]


def _require_rows(rows: Sequence[ExportRow]) -> None:
    if not rows:
        raise NoDataToExport("No data to export!")


def export_filename(name: str, extension: str) -> str:
    return f"Attendance_{name}.{extension}"


def to_csv(rows: Sequence[ExportRow]) -> str:
    _require_rows(rows)
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(HEADER)
    for row in rows:
        writer.writerow(_cells(row))
    return out.getvalue()


def to_pdf(rows: Sequence[ExportRow], title: str) -> bytes:
    _require_rows(rows)
    buffer = io.BytesIO()
    # invariant=1 drops the timestamp and random file id so output is repeatable
    doc = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=24, rightMargin=24, topMargin=24, bottomMargin=24,
                            title=f"Attendance Report - {title}", invariant=1)
    styles = getSampleStyleSheet()

    table = Table([HEADER] + [_cells(r) for r in rows], repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#7c3aed")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
    ]))

    doc.build([
        Paragraph(escape(f"Attendance Report - {title}"), styles["Heading2"]),
        Spacer(1, 12),
        table,
    ])
    return buffer.getvalue()
