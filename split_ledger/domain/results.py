"""Domain-level results for the split ledger."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from .attribution import PolicyWarning
from .models import MatterSplit
from .normalizer import NormalizationStats


@dataclass(frozen=True)
class MatterRow:
    matter_id: str
    matter_name: str
    total_collected: Decimal
    originator_id: str
    originator_name: str
    originator_amount: Decimal
    others_total: Decimal
    others_breakdown: tuple[tuple[str, Decimal], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AttorneyTotal:
    attorney_id: str
    name: str
    originator_amount: Decimal
    working_amount: Decimal
    total: Decimal
    matter_count: int


@dataclass(frozen=True)
class WorkingTotal:
    attorney_id: str
    name: str
    amount: Decimal


@dataclass(frozen=True)
class OriginatorGroup:
    originator_id: str
    originator_name: str
    rows: tuple[MatterRow, ...]
    originator_subtotal: Decimal
    others_subtotal: Decimal
    working_totals: tuple[WorkingTotal, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SplitReportModel:
    """Read-only snapshot handed to renderers and exporters."""

    generated_at: datetime
    matters: tuple[MatterSplit, ...]
    matter_rows: tuple[MatterRow, ...]
    attorney_totals: tuple[AttorneyTotal, ...]
    grand_total: Decimal
    originator_groups: tuple[OriginatorGroup, ...]
    firm_id: str = "default"
    normalization: NormalizationStats | None = None
    policy_warnings: tuple[PolicyWarning, ...] = field(default_factory=tuple)

    @property
    def matter_count(self) -> int:
        return len(self.matters)

    def has_warnings(self) -> bool:
        if self.policy_warnings:
            return True
        stats = self.normalization
        return bool(stats and (stats.dropped_missing_bill or stats.malformed_amounts or stats.negative_billed))

