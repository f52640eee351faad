from __future__ import annotations

import csv
import io
import logging
from datetime import date
from typing import Iterable, List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .status_classifier import DEFAULT_POLICY, ClassificationPolicy, classify, status_labels

logger = logging.getLogger(__name__)

UTF8_BOM = "\ufeff"

EXPORT_HEADERS = [
    "Designation",
    "Barcode",
    "Lot number",
    "Category",
    "Current stock",
    "Low stock threshold",
    "Expiry date",
    "Status",
]

# Designation gets the widest column.
_PDF_COLUMN_WEIGHTS = [2.4, 1.3, 1.0, 1.1, 0.8, 0.9, 0.9, 1.8]


def export_rows(lots: Iterable, today: date, policy: ClassificationPolicy = DEFAULT_POLICY) -> List[List[str]]:
    rows = []
    for lot in lots:
        rows.append([
            lot.designation or "",
            lot.barcode or "",
            lot.lot_number or "",
            lot.category or "",
            str(lot.current_stock or 0),
            str(lot.low_stock_threshold or 0),
            lot.expiry_display,
            "; ".join(status_labels(classify(lot, today, policy))),
        ])
    return rows


def lots_to_csv(lots: Iterable, today: date, policy: ClassificationPolicy = DEFAULT_POLICY) -> str:
    """CSV text with a leading BOM so spreadsheet tools detect UTF-8."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(EXPORT_HEADERS)
    writer.writerows(export_rows(lots, today, policy))
    return UTF8_BOM + buffer.getvalue()


def lots_to_pdf(
    lots: Iterable,
    today: date,
    title: str = "Pharmacy inventory",
    policy: ClassificationPolicy = DEFAULT_POLICY,
    generated_at: Optional[str] = None,
) -> bytes:
    buffer = io.BytesIO()
    page_size = landscape(A4)
    margin = 12 * mm
    doc = SimpleDocTemplate(
        buffer,
        pagesize=page_size,
        leftMargin=margin,
        rightMargin=margin,
        topMargin=margin,
        bottomMargin=margin,
        title=title,
    )

    styles = getSampleStyleSheet()
    cell_style = ParagraphStyle("Cell", parent=styles["Normal"], fontSize=8, leading=10)
    meta_style = ParagraphStyle("Meta", parent=styles["Normal"], fontSize=8, textColor=colors.grey)

    rows = export_rows(lots, today, policy)
    elements = [
        Paragraph(title, styles["Heading1"]),
        Paragraph(f"As of {generated_at or today.isoformat()} - {len(rows)} lot(s)", meta_style),
        Spacer(1, 6 * mm),
    ]

    available_width = page_size[0] - 2 * margin
    unit = available_width / sum(_PDF_COLUMN_WEIGHTS)
    col_widths = [weight * unit for weight in _PDF_COLUMN_WEIGHTS]

    # Paragraph cells wrap long designations instead of overflowing the column.
    table_data = [EXPORT_HEADERS] + [[Paragraph(_escape(value), cell_style) for value in row] for row in rows]
    table = Table(table_data, colWidths=col_widths, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1f4e79")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 8),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f2f2f2")]),
    ]))
    elements.append(table)

    doc.build(elements)
    pdf = buffer.getvalue()
    logger.debug("Rendered inventory PDF with %s rows (%s bytes)", len(rows), len(pdf))
    return pdf


def _escape(value: str) -> str:
    return value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
