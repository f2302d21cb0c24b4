"""Report template loading and compilation.

A template is a JSON document bundled with the package. Compiling it:
- checks every declared field exists on the record model with a matching type
- checks every column points at a declared field
- compiles the page header/footer expressions with jinja2 and checks they only
  use declared parameters and the built-in page variables

Errors at any step raise ReportError, so a broken template fails before any
record is read.
"""

from __future__ import annotations

import json
import logging
import typing
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Type

import jinja2
from jinja2 import meta
from pydantic import BaseModel, Field, ValidationError

from app.errors import ReportError

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
DEFAULT_TEMPLATE = TEMPLATES_DIR / "person_report.json"

# Variables available to header/footer expressions besides the parameters
BUILTIN_VARIABLES = frozenset({"title", "page_number", "page_count", "record_count"})

FIELD_TYPES: Dict[str, Tuple[type, ...]] = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float, Decimal),
    "boolean": (bool,),
}

_env = jinja2.Environment(undefined=jinja2.StrictUndefined, autoescape=False)


class PageSetup(BaseModel):
    size: Literal["A4", "LETTER"] = "A4"
    orientation: Literal["portrait", "landscape"] = "portrait"
    rows_per_page: int = Field(30, ge=1, le=500)


class ParameterDef(BaseModel):
    name: str
    type: Literal["string", "integer", "number", "boolean"] = "string"
    required: bool = False


class FieldDef(BaseModel):
    name: str
    type: Literal["string", "integer", "number", "boolean"]


class ColumnDef(BaseModel):
    header: str
    field: str
    width: float = Field(100, gt=0)


class ReportTemplate(BaseModel):
    name: str
    title: str
    page: PageSetup = Field(default_factory=PageSetup)
    parameters: List[ParameterDef] = Field(default_factory=list)
    fields: List[FieldDef]
    columns: List[ColumnDef] = Field(..., min_length=1)
    page_header: str = "{{ title }}"
    page_footer: str = ""
    no_data_text: str = "No data."


@dataclass(frozen=True)
class FieldBinding:
    """Maps a record attribute to a named report field."""

    name: str
    type: str

    def extract(self, record: Any) -> Any:
        return getattr(record, self.name)


@dataclass(frozen=True)
class CompiledColumn:
    header: str
    binding: FieldBinding
    width: float


@dataclass(frozen=True)
class CompiledReport:
    name: str
    title: str
    page: PageSetup
    parameters: Tuple[ParameterDef, ...]
    columns: Tuple[CompiledColumn, ...]
    page_header: jinja2.Template
    page_footer: jinja2.Template
    no_data_text: str
    record_type: Type[BaseModel]


def load_template(path: Optional[Path] = None) -> ReportTemplate:
    """Read and parse a template file (the bundled person report by default)."""
    path = Path(path) if path is not None else DEFAULT_TEMPLATE
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ReportError(f"Cannot read report template {path}: {exc}") from exc

    try:
        return ReportTemplate.model_validate(json.loads(raw))
    except json.JSONDecodeError as exc:
        raise ReportError(f"Report template {path.name} is not valid JSON: {exc}") from exc
    except ValidationError as exc:
        raise ReportError(f"Report template {path.name} is malformed: {exc}") from exc


def _model_field_types(record_type: Type[BaseModel]) -> Dict[str, Tuple[type, ...]]:
    """Concrete python types per model field, with Optional unwrapped."""
    out: Dict[str, Tuple[type, ...]] = {}
    for name, info in record_type.model_fields.items():
        annotation = info.annotation
        args = typing.get_args(annotation)
        if args:
            out[name] = tuple(a for a in args if a is not type(None))
        else:
            out[name] = (annotation,)
    return out


def _compile_expression(source: str, allowed: frozenset, label: str) -> jinja2.Template:
    try:
        ast = _env.parse(source)
    except jinja2.TemplateSyntaxError as exc:
        raise ReportError(f"Invalid {label} expression: {exc}") from exc

    unknown = meta.find_undeclared_variables(ast) - allowed
    if unknown:
        raise ReportError(
            f"{label} expression uses undeclared variables: {', '.join(sorted(unknown))}"
        )
    return _env.from_string(source)


def compile_template(template: ReportTemplate, record_type: Type[BaseModel]) -> CompiledReport:
    """Validate bindings against `record_type` and compile expressions."""
    model_types = _model_field_types(record_type)

    bindings: Dict[str, FieldBinding] = {}
    for field_def in template.fields:
        if field_def.name in bindings:
            raise ReportError(f"Field {field_def.name!r} declared twice")
        if field_def.name not in model_types:
            raise ReportError(
                f"Field {field_def.name!r} does not exist on {record_type.__name__}"
            )
        expected = FIELD_TYPES[field_def.type]
        actual = model_types[field_def.name]
        if not any(issubclass(a, expected) for a in actual if isinstance(a, type)):
            raise ReportError(
                f"Field {field_def.name!r} is declared as {field_def.type} "
                f"but {record_type.__name__}.{field_def.name} is {actual}"
            )
        bindings[field_def.name] = FieldBinding(name=field_def.name, type=field_def.type)

    columns: List[CompiledColumn] = []
    for column in template.columns:
        binding = bindings.get(column.field)
        if binding is None:
            raise ReportError(f"Column {column.header!r} refers to undeclared field {column.field!r}")
        columns.append(CompiledColumn(header=column.header, binding=binding, width=column.width))

    allowed = BUILTIN_VARIABLES | {p.name for p in template.parameters}
    header = _compile_expression(template.page_header, allowed, "page_header")
    footer = _compile_expression(template.page_footer, allowed, "page_footer")

    logger.debug("compiled report template %s (%s columns)", template.name, len(columns))
    return CompiledReport(
        name=template.name,
        title=template.title,
        page=template.page,
        parameters=tuple(template.parameters),
        columns=tuple(columns),
        page_header=header,
        page_footer=footer,
        no_data_text=template.no_data_text,
        record_type=record_type,
    )
