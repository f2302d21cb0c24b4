"""Fill a compiled report with parameters and a record set."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple

import jinja2

from app.errors import ReportError
from app.reports.template import FIELD_TYPES, CompiledColumn, CompiledReport


@dataclass(frozen=True)
class FilledPage:
    number: int
    header: str
    rows: Tuple[Tuple[Any, ...], ...]
    footer: str


@dataclass(frozen=True)
class FilledReport:
    name: str
    title: str
    columns: Tuple[CompiledColumn, ...]
    pages: Tuple[FilledPage, ...]
    parameters: Dict[str, Any]
    record_count: int
    no_data_text: str
    page_size: str
    orientation: str


def _check_parameters(report: CompiledReport, parameters: Mapping[str, Any]) -> Dict[str, Any]:
    resolved: Dict[str, Any] = {}
    for param in report.parameters:
        value = parameters.get(param.name)
        if value is None:
            if param.required:
                raise ReportError(f"Missing required report parameter {param.name!r}")
            resolved[param.name] = ""
            continue
        if not isinstance(value, FIELD_TYPES[param.type]):
            raise ReportError(
                f"Report parameter {param.name!r} must be {param.type}, got {type(value).__name__}"
            )
        resolved[param.name] = value
    return resolved


def _render(template: jinja2.Template, context: Dict[str, Any]) -> str:
    try:
        return template.render(**context)
    except jinja2.TemplateError as exc:
        raise ReportError(f"Failed to render report band: {exc}") from exc


def fill_report(
    report: CompiledReport,
    parameters: Mapping[str, Any],
    records: Sequence[Any],
) -> FilledReport:
    """Bind each record through the column mappings and split rows into pages.

    An empty record set still yields one page so exports are never empty.
    """
    resolved = _check_parameters(report, parameters)

    rows: List[Tuple[Any, ...]] = []
    for record in records:
        try:
            rows.append(tuple(col.binding.extract(record) for col in report.columns))
        except AttributeError as exc:
            raise ReportError(f"Record does not provide a bound field: {exc}") from exc

    per_page = report.page.rows_per_page
    chunks = [rows[i:i + per_page] for i in range(0, len(rows), per_page)] or [[]]
    page_count = len(chunks)

    pages: List[FilledPage] = []
    for index, chunk in enumerate(chunks, start=1):
        context = {
            **resolved,
            "title": report.title,
            "page_number": index,
            "page_count": page_count,
            "record_count": len(rows),
        }
        pages.append(
            FilledPage(
                number=index,
                header=_render(report.page_header, context),
                rows=tuple(chunk),
                footer=_render(report.page_footer, context),
            )
        )

    return FilledReport(
        name=report.name,
        title=report.title,
        columns=report.columns,
        pages=tuple(pages),
        parameters=resolved,
        record_count=len(rows),
        no_data_text=report.no_data_text,
        page_size=report.page.size,
        orientation=report.page.orientation,
    )
