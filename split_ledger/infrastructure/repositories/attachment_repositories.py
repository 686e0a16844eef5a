"""Attachment- and API-backed sources for raw billing rows."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from split_ledger.domain.models import RawRecord
from split_ledger.domain.repositories import FeeSource, PaymentSource
from split_ledger.infrastructure.parsing.api_source import records_from_api_pages
from split_ledger.infrastructure.parsing.csv_source import read_csv_records
from split_ledger.infrastructure.parsing.utils import ensure_bytes, is_workbook
from split_ledger.infrastructure.parsing.workbook_source import read_workbook_records


def read_attachment_records(name: str, content: bytes) -> list[RawRecord]:
    if is_workbook(name):
        return read_workbook_records(content, filename=name)
    return read_csv_records(content)


class _AttachmentSource:
    def __init__(self, source: BytesIO | Path | bytes, name: str | None = None) -> None:
        if name is None:
            name = source.name if isinstance(source, Path) else "upload.csv"
        self._name = name
        self._content = ensure_bytes(source)

    @property
    def name(self) -> str:
        return self._name

    def list_raw_records(self) -> Sequence[RawRecord]:
        return read_attachment_records(self._name, self._content)


class AttachmentPaymentSource(_AttachmentSource, PaymentSource):
    pass


class AttachmentFeeSource(_AttachmentSource, FeeSource):
    pass


class ApiPaymentSource(PaymentSource):
    def __init__(self, pages: Iterable[Mapping[str, object]], collection: str = "data") -> None:
        self._records = records_from_api_pages(pages, collection)

    def list_raw_records(self) -> Sequence[RawRecord]:
        return self._records


class ApiFeeSource(FeeSource):
    def __init__(self, pages: Iterable[Mapping[str, object]], collection: str = "data") -> None:
        self._records = records_from_api_pages(pages, collection)

    def list_raw_records(self) -> Sequence[RawRecord]:
        return self._records
