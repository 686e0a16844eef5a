"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .models import RawRecord


class PaymentSource(Protocol):
    """Provides raw payment rows from one ingestion source."""

    def list_raw_records(self) -> Sequence[RawRecord]:
        ...


class FeeSource(Protocol):
    """Provides raw fee/time rows from one ingestion source."""

    def list_raw_records(self) -> Sequence[RawRecord]:
        ...


class ReportStore(Protocol):
    def save_latest(self, payload: bytes, *, generated_at: datetime, matters: int) -> str:
        ...

    def load_latest(self) -> bytes:
        ...


class ReportNotifier(Protocol):
    def send_report(self, subject: str, body: str, filename: str, payload: bytes) -> None:
        ...
