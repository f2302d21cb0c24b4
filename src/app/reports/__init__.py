"""Template-based report rendering: load, compile, fill, export."""

from app.reports.exporters import (
    PDF_CONTENT_TYPE,
    XLSX_CONTENT_TYPE,
    XlsxExportConfiguration,
    export_pdf,
    export_xlsx,
)
from app.reports.filling import FilledPage, FilledReport, fill_report
from app.reports.template import CompiledReport, ReportTemplate, compile_template, load_template

__all__ = [
    "PDF_CONTENT_TYPE",
    "XLSX_CONTENT_TYPE",
    "XlsxExportConfiguration",
    "export_pdf",
    "export_xlsx",
    "FilledPage",
    "FilledReport",
    "fill_report",
    "CompiledReport",
    "ReportTemplate",
    "compile_template",
    "load_template",
]
