"""Domain models for the attorney split pipeline.

These dataclasses capture the canonical schema for normalized billing rows,
per-bill rollups and the resulting attorney shares.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Mapping

RawRecord = Mapping[str, object]

ZERO = Decimal("0")


@dataclass(frozen=True)
class PaymentRecord:
    """Money collected against a bill. Negative amounts are refunds."""

    bill_id: str
    matter_name: str
    amount_collected: Decimal


@dataclass(frozen=True)
class FeeRecord:
    """Billed time entry recorded against a bill."""

    bill_id: str
    matter_name: str
    timekeeper: str
    originator: str
    billed_amount: Decimal


@dataclass(frozen=True)
class BillAggregate:
    bill_id: str
    matter_name: str
    total_collected: Decimal
    self_billed: Decimal
    others_billed: Decimal


@dataclass(frozen=True)
class AttributionPolicy:
    """Firm split rules. Each percentage is a fraction, nominally within [0, 1]."""

    self_originated_working_pct: Decimal
    self_originated_others_pct: Decimal
    non_originated_working_pct: Decimal

    @classmethod
    def from_values(cls, working: object, others: object, non_originated: object) -> "AttributionPolicy":
        return cls(
            self_originated_working_pct=Decimal(str(working)),
            self_originated_others_pct=Decimal(str(others)),
            non_originated_working_pct=Decimal(str(non_originated)),
        )

    def as_dict(self) -> dict[str, str]:
        return {
            "self_originated_working_pct": str(self.self_originated_working_pct),
            "self_originated_others_pct": str(self.self_originated_others_pct),
            "non_originated_working_pct": str(self.non_originated_working_pct),
        }


class ShareRole(str, Enum):
    ORIGINATOR = "originator"
    WORKING = "working"


@dataclass(frozen=True)
class AttorneyRef:
    attorney_id: str
    name: str


@dataclass(frozen=True)
class AttorneyShare:
    """One attorney's stake in one matter."""

    attorney_id: str
    name: str
    role: ShareRole
    amount: Decimal


@dataclass(frozen=True)
class Attribution:
    """Component breakdown of a single bill's attribution."""

    self_originated_self_billed: Decimal
    self_originated_others_billed: Decimal
    non_originated_self_billed: Decimal
    originator_amount: Decimal
    working_amount: Decimal


@dataclass(frozen=True)
class MatterSplit:
    matter_id: str
    matter_name: str
    total_collected: Decimal
    shares: tuple[AttorneyShare, ...]
    attribution: Attribution | None = None

    def originator_share(self) -> AttorneyShare | None:
        for share in self.shares:
            if share.role is ShareRole.ORIGINATOR:
                return share
        return None

    def other_shares(self) -> tuple[AttorneyShare, ...]:
        return tuple(share for share in self.shares if share.role is not ShareRole.ORIGINATOR)


@dataclass(frozen=True)
class DirectMatterEntry:
    """Manually entered single-matter figures, used outside the batch path.

    ``non_originated_worked`` is the amount ``worker`` personally billed on a
    matter originated by someone else; when positive the non-originated tier
    applies to ``worker``.
    """

    matter_id: str
    matter_name: str
    total_collected: Decimal
    originator: AttorneyRef
    worker: AttorneyRef
    self_billed: Decimal = ZERO
    others_billed: Decimal = ZERO
    non_originated_worked: Decimal = ZERO
