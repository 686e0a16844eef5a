from decimal import Decimal
from io import BytesIO

import pandas as pd
import pytest

from split_ledger.domain.errors import UnsupportedSourceError
from split_ledger.domain.normalizer import RecordNormalizer
from split_ledger.infrastructure.parsing.api_source import flatten_object, records_from_api_pages
from split_ledger.infrastructure.parsing.csv_source import read_csv_records
from split_ledger.infrastructure.parsing.utils import classify_attachment
from split_ledger.infrastructure.parsing.workbook_source import read_workbook_records
from split_ledger.infrastructure.repositories.attachment_repositories import (
    ApiFeeSource,
    read_attachment_records,
)


def test_csv_rows_are_trimmed_and_blank_lines_skipped():
    data = b"Bill Number , Matter Name,Amount\nB1, Matter X ,100.50\n\nB2,,\n"

    records = read_csv_records(data)

    assert records == [
        {"Bill Number": "B1", "Matter Name": "Matter X", "Amount": "100.50"},
        {"Bill Number": "B2", "Matter Name": "", "Amount": ""},
    ]


def test_empty_csv_yields_no_records():
    assert read_csv_records(b"") == []


def test_workbook_first_sheet_header_row_one():
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        pd.DataFrame(
            {"Invoice Number": ["B1", "B2"], "Matter": ["Matter X", "Matter Y"], "Paid Amount": [7000, 100.5]}
        ).to_excel(writer, sheet_name="Payments", index=False)
        pd.DataFrame({"ignored": [1]}).to_excel(writer, sheet_name="Other", index=False)

    records = read_workbook_records(buf.getvalue(), filename="payments.xlsx")
    batch = RecordNormalizer().normalize_payments(records)

    assert [r.bill_id for r in batch.records] == ["B1", "B2"]
    assert [r.amount_collected for r in batch.records] == [Decimal("7000"), Decimal("100.5")]


def test_unreadable_workbook_is_reported():
    with pytest.raises(UnsupportedSourceError):
        read_workbook_records(b"not a workbook", filename="fees.xlsx")


def test_attachment_parser_chosen_by_extension():
    records = read_attachment_records("fees-july.csv", b"bill,amount\nB1,5\n")

    assert records == [{"bill": "B1", "amount": "5"}]


def test_classify_attachment_by_filename():
    assert classify_attachment("Payments July.csv") == "payments"
    assert classify_attachment("fees.xlsx") == "fees"
    assert classify_attachment("Time Entries.xlsx") == "fees"
    assert classify_attachment("notes.txt") is None


def test_flatten_nested_api_objects():
    flat = flatten_object({"bill": {"number": "B1", "state": "paid"}, "amount": 10, "tags": ["x"]})

    assert flat == {"bill_number": "B1", "bill_state": "paid", "amount": 10}


def test_api_pages_feed_the_normalizer():
    pages = [
        {"data": [{"bill": {"number": "B1"}, "user": {"name": "Jane Smith"}, "originator": "Jane Smith", "amount": 70}]},
        {"data": [{"bill": {"number": "B1"}, "attorney": "John Doe", "originator": "Jane Smith", "amount": "30"}]},
        {"data": []},
    ]

    rows = ApiFeeSource(pages).list_raw_records()
    batch = RecordNormalizer().normalize_fees(rows)

    assert len(rows) == 2
    assert [r.bill_id for r in batch.records] == ["B1", "B1"]
    assert batch.records[1].timekeeper == "John Doe"
    assert batch.records[0].billed_amount == Decimal("70")


def test_api_pages_without_collection_are_skipped():
    assert records_from_api_pages([{"meta": {}}, {"data": "oops"}]) == []
