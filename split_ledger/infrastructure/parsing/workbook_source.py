"""Spreadsheet reader: first worksheet, header on row 1, data from row 2."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pandas as pd

from split_ledger.domain.errors import UnsupportedSourceError
from split_ledger.domain.models import RawRecord
from split_ledger.infrastructure.parsing.utils import ensure_bytes, frame_to_records


def _engine_for(filename: str) -> str:
    return "xlrd" if filename.lower().endswith(".xls") else "openpyxl"


def read_workbook_raw(source: BytesIO | Path | bytes, filename: str = "upload.xlsx") -> pd.DataFrame:
    data = ensure_bytes(source)
    try:
        return pd.read_excel(
            BytesIO(data),
            sheet_name=0,
            engine=_engine_for(filename),
            dtype=str,
            header=0,
            keep_default_na=False,
        )
    except Exception as exc:
        raise UnsupportedSourceError(f"Could not read workbook {filename!r}: {exc}") from exc


def read_workbook_records(source: BytesIO | Path | bytes, filename: str = "upload.xlsx") -> list[RawRecord]:
    return frame_to_records(read_workbook_raw(source, filename=filename))
