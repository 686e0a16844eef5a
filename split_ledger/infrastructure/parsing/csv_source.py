"""CSV reader producing raw records."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pandas as pd

from split_ledger.domain.errors import UnsupportedSourceError
from split_ledger.domain.models import RawRecord
from split_ledger.infrastructure.parsing.utils import ensure_bytes, frame_to_records


def read_csv_raw(source: BytesIO | Path | bytes) -> pd.DataFrame:
    data = ensure_bytes(source)
    if not data.strip():
        return pd.DataFrame()
    try:
        return pd.read_csv(
            BytesIO(data),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise UnsupportedSourceError(f"Could not parse CSV input: {exc}") from exc


def read_csv_records(source: BytesIO | Path | bytes) -> list[RawRecord]:
    return frame_to_records(read_csv_raw(source))
