from datetime import date

import pytest

from errors import NoDataToExport
from export import ExportRow, export_filename, to_csv, to_pdf

ROWS = [
    ExportRow(id="231FA04001", name="Student 231FA04001", date=date(2026, 3, 15), status="present"),
    ExportRow(id="Z1", name="Zoe, Jr.", date=date(2026, 3, 15), status="absent"),
]


def test_csv_has_fixed_columns_and_capitalised_status():
    assert to_csv(ROWS) == (
        "Student ID,Student Name,Date,Status\n"
        "231FA04001,Student 231FA04001,2026-03-15,Present\n"
        'Z1,"Zoe, Jr.",2026-03-15,Absent\n'
    )


def test_pdf_is_repeatable():
    first = to_pdf(ROWS, "Section-1-Today")

    assert first.startswith(b"%PDF")
    assert to_pdf(ROWS, "Section-1-Today") == first


@pytest.mark.parametrize("render", [to_csv, lambda rows: to_pdf(rows, "empty")])
def test_empty_rows_produce_nothing(render):
    with pytest.raises(NoDataToExport, match="No data to export!"):
        render([])


def test_export_filename():
    assert export_filename("231FA04001", "pdf") == "Attendance_231FA04001.pdf"
