import io
from datetime import date

from openpyxl import load_workbook

from app.services.export import column_width, export_all_to_excel, export_to_csv, export_to_excel

TODAY = date(2024, 12, 20)


def test_csv_header_comes_from_first_record():
    data = [{"a": 1, "b": "x"}, {"b": "y", "a": 2, "extra": "ignored"}]
    artifact = export_to_csv(data, "contacts", today=TODAY)
    assert artifact.filename == "contacts_2024-12-20.csv"
    assert artifact.content.decode("utf-8") == "a,b\n1,x\n2,y"


def test_csv_quotes_commas_quotes_and_newlines():
    data = [{"name": 'Acme, "Inc"', "note": "line1\nline2", "empty": None, "flag": True}]
    text = export_to_csv(data, "x", today=TODAY).content.decode("utf-8")
    assert text.split("\n", 1)[0] == "name,note,empty,flag"
    assert '"Acme, ""Inc"""' in text
    assert '"line1\nline2"' in text
    assert text.endswith(",,true")


def test_empty_exports_produce_nothing():
    assert export_to_csv([], "x") is None
    assert export_to_excel([], "x") is None
    assert export_all_to_excel({"applications": [], "contacts": []}) is None


def test_column_width_rule():
    assert column_width(["a" * 45]) == 47
    assert column_width(["ab"]) == 12
    assert column_width(["a" * 100]) == 50


def test_excel_single_sheet_and_widths():
    data = [{"name": "a" * 45, "id": 1}, {"name": "b", "id": 2, "late": "x"}]
    artifact = export_to_excel(data, "job_applications", today=TODAY)
    assert artifact.filename == "job_applications_2024-12-20.xlsx"

    wb = load_workbook(io.BytesIO(artifact.content))
    assert wb.sheetnames == ["Data"]
    ws = wb["Data"]
    assert [c.value for c in ws[1]] == ["name", "id", "late"]
    assert ws.column_dimensions["A"].width == 47
    assert ws.column_dimensions["B"].width == 12


def test_all_forms_workbook_skips_empty_sets():
    artifact = export_all_to_excel(
        {
            "applications": [{"full_name": "A"}],
            "contacts": [],
            "newsletter": [{"email": "a@b.c"}],
        },
        today=TODAY,
    )
    assert artifact.filename == "All_Forms_2024-12-20.xlsx"
    wb = load_workbook(io.BytesIO(artifact.content))
    assert wb.sheetnames == ["Job Applications", "Newsletter Subscribers"]
