"""Application-level DTOs for split runs."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from split_ledger.domain.models import BillAggregate
from split_ledger.domain.results import SplitReportModel


@dataclass(slots=True, frozen=True)
class SplitRequest:
    generated_at: datetime
    firm_id: str = "default"
    originator_label: str | None = None


@dataclass(slots=True, frozen=True)
class SplitResponse:
    report: SplitReportModel
    aggregates: Sequence[BillAggregate]


@dataclass(slots=True, frozen=True)
class Attachment:
    name: str
    content: bytes


@dataclass(slots=True, frozen=True)
class InboundRequest:
    timestamp: str
    token: str
    signature: str
    attachments: Sequence[Attachment] = field(default_factory=tuple)
    received_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class InboundResult:
    payload: bytes
    matters: int
    location: str

    def to_dict(self) -> dict[str, object]:
        return {"ok": True, "ingested": True, "matters": self.matters}


@dataclass(slots=True, frozen=True)
class DispatchResult:
    filename: str
    label: str
    bytes_sent: int
