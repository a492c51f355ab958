"""
Table exporters - CSV and PDF downloads of dashboard tables
"""

from typing import Any, Dict, List, Sequence
import csv
import io
import logging
import re

from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.utils.error_handlers import ValidationError
from app.utils.formatters import format_cell, truncate_string

logger = logging.getLogger(__name__)

PDF_CELL_MAX_LENGTH = 60


def export_filename(title: str, extension: str) -> str:
    slug = re.sub(r"[^a-zA-Z0-9]+", "-", title).strip("-").lower() or "export"
    return f"{slug}.{extension}"


def resolve_columns(columns: Sequence[str], rows: List[Dict[str, Any]]) -> List[str]:
    """Requested columns, or every key in first-seen order"""
    if not rows:
        raise ValidationError("There is no data to export")
    if columns:
        return list(columns)

    resolved: List[str] = []
    for row in rows:
        for key in row:
            if key not in resolved:
                resolved.append(key)
    return resolved


def to_csv(columns: Sequence[str], rows: List[Dict[str, Any]]) -> str:
    """Header row plus one line per row; missing values are empty"""
    columns = resolve_columns(columns, rows)
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL)
    writer.writerow(columns)
    for row in rows:
        writer.writerow([format_cell(row.get(column)) for column in columns])
    return output.getvalue()


def to_pdf(title: str, columns: Sequence[str], rows: List[Dict[str, Any]]) -> bytes:
    """
    Render the table on landscape letter pages

    Long cell values are truncated so wide tables stay readable.
    """
    columns = resolve_columns(columns, rows)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(letter),
        rightMargin=36,
        leftMargin=36,
        topMargin=36,
        bottomMargin=36,
        title=title,
    )
    styles = getSampleStyleSheet()

    data = [list(columns)]
    for row in rows:
        data.append([
            truncate_string(format_cell(row.get(column)), PDF_CELL_MAX_LENGTH)
            for column in columns
        ])

    table = Table(data, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f3f4f6")]),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
            ]
        )
    )

    story = [
        Paragraph(title, styles["Heading1"]),
        Spacer(1, 0.2 * inch),
        table,
    ]
    doc.build(story)

    logger.info(f"Exported {len(rows)} rows to PDF")
    return buffer.getvalue()
