import io
import json

import pytest
from openpyxl import load_workbook

from app.errors import ReportError
from app.reports import (
    XlsxExportConfiguration,
    compile_template,
    export_pdf,
    export_xlsx,
    fill_report,
    load_template,
)
from app.reports.exporters import _cell_value
from app.reports.template import DEFAULT_TEMPLATE
from app.schemas.people import Person
from app.services.people import PersonService


def _write_template(tmp_path, **overrides):
    data = json.loads(DEFAULT_TEMPLATE.read_text(encoding="utf-8"))
    data.update(overrides)
    path = tmp_path / "report.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_pdf_report_with_no_people_is_a_pdf():
    data = PersonService().create_pdf_report()

    assert data.startswith(b"%PDF")
    assert len(data) > 100


def test_pdf_report_with_people_is_a_pdf():
    service = PersonService()
    for i in range(45):
        service.save(Person(name=f"Person {i}", city="Lisbon"))

    data = service.create_pdf_report()

    assert data.startswith(b"%PDF")


def test_xlsx_report_with_no_people_has_one_sheet():
    data = PersonService().create_xls_report()

    assert data.startswith(b"PK")
    wb = load_workbook(io.BytesIO(data))
    assert wb.sheetnames == ["Page 1"]
    ws = wb["Page 1"]
    assert ws.cell(row=2, column=1).value == "ID"
    assert ws.cell(row=3, column=1).value == "No people found."


def test_xlsx_report_puts_each_page_on_its_own_sheet_with_typed_cells():
    service = PersonService()
    for i in range(65):
        service.save(Person(name=f"Person {i}", city="Porto"))

    wb = load_workbook(io.BytesIO(service.create_xls_report()))

    # 30 rows per page in the bundled template
    assert wb.sheetnames == ["Page 1", "Page 2", "Page 3"]
    first = wb["Page 1"]
    assert isinstance(first.cell(row=3, column=1).value, int)
    assert first.cell(row=3, column=2).value == "Person 0"
    footer_values = [row[0] for row in wb["Page 3"].iter_rows(values_only=True) if row[0]]
    assert footer_values[-1].startswith("Created by javacodegeek.com | page 3 of 3")


def test_xlsx_report_keeps_numeric_looking_text_as_stored():
    service = PersonService()
    names = ["007", "12345678901234567890", "1e400"]
    for name in names:
        service.save(Person(name=name, city="00123"))

    ws = load_workbook(io.BytesIO(service.create_xls_report()))["Page 1"]

    rows = [(ws.cell(row=r, column=2).value, ws.cell(row=r, column=3).value) for r in range(3, 6)]
    assert rows == [(name, "00123") for name in names]


def test_xlsx_without_cell_type_detection_writes_text():
    compiled = compile_template(load_template(), Person)
    filled = fill_report(compiled, {"createdBy": "tests"}, [Person(id=7, name="Seven", city=None)])

    wb = load_workbook(io.BytesIO(export_xlsx(filled, XlsxExportConfiguration())))

    assert wb.sheetnames == ["People"]
    ws = wb["People"]
    assert ws.cell(row=3, column=1).value == "7"
    assert ws.cell(row=3, column=3).value is None


@pytest.mark.parametrize(
    "value,field_type,detect,expected",
    [
        (5, "integer", True, 5),
        (3.5, "number", True, 3.5),
        (float("inf"), "number", True, "inf"),
        (True, "boolean", True, True),
        ("12", "string", True, "12"),
        ("007", "string", True, "007"),
        ("1e400", "string", True, "1e400"),
        (5, "integer", False, "5"),
        (None, "string", True, None),
    ],
)
def test_cell_value_follows_declared_field_type(value, field_type, detect, expected):
    assert _cell_value(value, field_type, detect) == expected


def test_fill_always_has_at_least_one_page_and_renders_footer():
    compiled = compile_template(load_template(), Person)

    filled = fill_report(compiled, {"createdBy": "someone"}, [])

    assert len(filled.pages) == 1
    assert filled.pages[0].rows == ()
    assert filled.pages[0].header == "People"
    assert filled.pages[0].footer == "Created by someone | page 1 of 1 | 0 people"


def test_fill_requires_created_by_parameter():
    compiled = compile_template(load_template(), Person)

    with pytest.raises(ReportError):
        fill_report(compiled, {}, [Person(id=1, name="x")])


def test_missing_template_file_raises_report_error(tmp_path):
    service = PersonService(template_path=tmp_path / "missing.json")

    with pytest.raises(ReportError):
        service.create_pdf_report()


def test_invalid_json_template_raises_report_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{ not json", encoding="utf-8")

    with pytest.raises(ReportError):
        load_template(path)


def test_template_field_missing_on_record_fails_at_compile(tmp_path):
    path = _write_template(
        tmp_path,
        fields=[{"name": "id", "type": "integer"}, {"name": "email", "type": "string"}],
        columns=[{"header": "Email", "field": "email"}],
    )

    with pytest.raises(ReportError, match="email"):
        compile_template(load_template(path), Person)


def test_template_field_type_mismatch_fails_at_compile(tmp_path):
    path = _write_template(tmp_path, fields=[{"name": "name", "type": "integer"}], columns=[{"header": "N", "field": "name"}])

    with pytest.raises(ReportError, match="declared as integer"):
        compile_template(load_template(path), Person)


def test_column_on_undeclared_field_fails_at_compile(tmp_path):
    path = _write_template(tmp_path, columns=[{"header": "City", "field": "town"}])

    with pytest.raises(ReportError, match="town"):
        compile_template(load_template(path), Person)


def test_footer_with_unknown_variable_fails_at_compile(tmp_path):
    path = _write_template(tmp_path, page_footer="{{ author }}")

    with pytest.raises(ReportError, match="author"):
        compile_template(load_template(path), Person)


def test_broken_footer_expression_fails_report_generation(tmp_path):
    path = _write_template(tmp_path, page_footer="{{ createdBy ")

    with pytest.raises(ReportError):
        PersonService(template_path=path).create_xls_report()


def test_pdf_export_failure_is_report_error(monkeypatch):
    from app.reports import exporters

    def boom(*args, **kwargs):
        raise RuntimeError("layout exploded")

    monkeypatch.setattr(exporters.SimpleDocTemplate, "build", boom)

    with pytest.raises(ReportError, match="layout exploded"):
        PersonService().create_pdf_report()


def test_xlsx_buffer_failure_propagates_os_error(monkeypatch):
    from app.reports import exporters

    def fail_save(self, filename):
        raise OSError("disk full")

    monkeypatch.setattr(exporters.Workbook, "save", fail_save)

    with pytest.raises(OSError, match="disk full"):
        PersonService().create_xls_report()
