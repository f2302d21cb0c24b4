"""Export a filled report to PDF (reportlab) or XLSX (openpyxl) bytes."""

from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, LETTER, landscape, portrait
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.errors import ReportError
from app.reports.filling import FilledPage, FilledReport

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_PAGE_SIZES = {"A4": A4, "LETTER": LETTER}
# Excel sheet names are capped at 31 characters
_MAX_SHEET_TITLE = 31


@dataclass(frozen=True)
class XlsxExportConfiguration:
    """Spreadsheet export options.

    one_page_per_sheet: every rendered page becomes its own worksheet.
    detect_cell_type: type each cell from its field declaration (numbers stay
    numeric, strings stay text) instead of writing every cell as text.
    """

    one_page_per_sheet: bool = False
    detect_cell_type: bool = False


def _pdf_text(value: Any) -> str:
    return "" if value is None else str(value)


def _pdf_page_flowables(report: FilledReport, page: FilledPage, styles, available_width: float) -> List[Any]:
    flowables: List[Any] = [Paragraph(escape(page.header), styles["Title"])]

    if page.rows:
        total_width = sum(col.width for col in report.columns)
        scale = min(1.0, available_width / total_width)
        data = [[col.header for col in report.columns]]
        data.extend([_pdf_text(v) for v in row] for row in page.rows)
        table = Table(data, colWidths=[col.width * scale for col in report.columns], repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ]
            )
        )
        flowables.append(table)
    else:
        flowables.append(Paragraph(escape(report.no_data_text), styles["Italic"]))

    flowables.append(Spacer(1, 12))
    if page.footer:
        flowables.append(Paragraph(escape(page.footer), styles["Normal"]))
    return flowables


def export_pdf(report: FilledReport) -> bytes:
    """Render each filled page on its own PDF page."""
    page_size = _PAGE_SIZES[report.page_size]
    page_size = landscape(page_size) if report.orientation == "landscape" else portrait(page_size)

    buffer = io.BytesIO()
    try:
        doc = SimpleDocTemplate(
            buffer,
            pagesize=page_size,
            title=report.title,
            author=str(report.parameters.get("createdBy", "")),
        )
        styles = getSampleStyleSheet()
        story: List[Any] = []
        for index, page in enumerate(report.pages):
            if index:
                story.append(PageBreak())
            story.extend(_pdf_page_flowables(report, page, styles, doc.width))
        doc.build(story)
    except Exception as exc:
        raise ReportError(f"PDF export of report {report.name!r} failed: {exc}") from exc

    data = buffer.getvalue()
    logger.info("export_pdf: report=%s pages=%s bytes=%s", report.name, len(report.pages), len(data))
    return data


def _cell_value(value: Any, field_type: str, detect_cell_type: bool) -> Any:
    """Cell value for a bound field.

    With detection on, the declared field type decides the cell type: numeric
    fields stay numeric, boolean fields stay boolean, string fields are always
    text so values like "007" survive unchanged.
    """
    if value is None:
        return None
    if not detect_cell_type:
        return str(value)
    if field_type in ("integer", "number"):
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            return str(value)
        # Excel has no cell for inf/nan
        if isinstance(value, float) and not math.isfinite(value):
            return str(value)
        return value
    if field_type == "boolean" and isinstance(value, bool):
        return value
    return str(value)


def _write_sheet(ws, report: FilledReport, pages: List[FilledPage], config: XlsxExportConfiguration) -> None:
    bold = Font(bold=True)

    ws.append([pages[0].header])
    ws.cell(row=1, column=1).font = Font(bold=True, size=14)
    ws.append([col.header for col in report.columns])
    for cell in ws[2]:
        cell.font = bold

    rows_written = 0
    for page in pages:
        for row in page.rows:
            ws.append(
                [
                    _cell_value(v, col.binding.type, config.detect_cell_type)
                    for col, v in zip(report.columns, row)
                ]
            )
            rows_written += 1
    if not rows_written:
        ws.append([report.no_data_text])

    if pages[-1].footer:
        ws.append([])
        ws.append([pages[-1].footer])

    for index, col in enumerate(report.columns, start=1):
        # Points to character units, roughly
        ws.column_dimensions[get_column_letter(index)].width = max(8, col.width / 6)


def export_xlsx(report: FilledReport, config: XlsxExportConfiguration | None = None) -> bytes:
    """Write the report to an XLSX workbook.

    Raises ReportError when the workbook cannot be built; OSError from writing
    the output buffer propagates unchanged.
    """
    config = config or XlsxExportConfiguration()

    try:
        workbook = Workbook()
        workbook.remove(workbook.active)
        if config.one_page_per_sheet:
            for page in report.pages:
                ws = workbook.create_sheet(title=f"Page {page.number}"[:_MAX_SHEET_TITLE])
                _write_sheet(ws, report, [page], config)
        else:
            ws = workbook.create_sheet(title=report.title[:_MAX_SHEET_TITLE] or "Report")
            _write_sheet(ws, report, list(report.pages), config)
    except Exception as exc:
        raise ReportError(f"XLSX export of report {report.name!r} failed: {exc}") from exc

    buffer = io.BytesIO()
    try:
        workbook.save(buffer)
    except OSError:
        raise
    except Exception as exc:
        raise ReportError(f"XLSX export of report {report.name!r} failed: {exc}") from exc
    finally:
        workbook.close()

    data = buffer.getvalue()
    logger.info(
        "export_xlsx: report=%s sheets=%s bytes=%s",
        report.name,
        len(workbook.sheetnames),
        len(data),
    )
    return data
