"""Shared parsing utilities for attachment ingestion."""
from __future__ import annotations

import hashlib
from io import BytesIO
from pathlib import Path
from typing import Literal

import pandas as pd

from split_ledger.domain.errors import UnsupportedSourceError
from split_ledger.domain.models import RawRecord

WORKBOOK_SUFFIXES = (".xlsx", ".xlsm", ".xls")

AttachmentKind = Literal["payments", "fees"]


def ensure_bytes(source: BytesIO | Path | bytes | str) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, (Path, str)):
        try:
            return Path(source).read_bytes()
        except OSError as exc:
            raise UnsupportedSourceError(f"Cannot read {source}: {exc.strerror or exc}") from exc
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def compute_file_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def frame_to_records(df: pd.DataFrame) -> list[RawRecord]:
    """Convert a string-typed frame to trimmed row dicts, skipping blank rows."""
    columns = [str(col).strip() for col in df.columns]
    records: list[RawRecord] = []
    for values in df.itertuples(index=False, name=None):
        row: dict[str, object] = {}
        for column, value in zip(columns, values):
            if value is None or (isinstance(value, float) and pd.isna(value)):
                value = ""
            row[column] = value.strip() if isinstance(value, str) else value
        if any(v != "" for v in row.values()):
            records.append(row)
    return records


def classify_attachment(name: str) -> AttachmentKind | None:
    lower = (name or "").lower()
    if "payment" in lower:
        return "payments"
    if "fee" in lower or "time" in lower:
        return "fees"
    return None


def is_workbook(name: str) -> bool:
    return (name or "").lower().endswith(WORKBOOK_SUFFIXES)
