"""Per-bill folding of payment and fee rows."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from .matching import OriginatorMatcher, SubstringOriginatorMatcher
from .models import ZERO, BillAggregate, FeeRecord, PaymentRecord


@dataclass
class _Accumulator:
    matter_name: str = ""
    total_collected: Decimal = ZERO
    self_billed: Decimal = ZERO
    others_billed: Decimal = ZERO

    def take_matter_name(self, name: str) -> None:
        if not self.matter_name and name:
            self.matter_name = name


class BillAggregator:
    """Builds one ``BillAggregate`` per bill id seen in either input set."""

    def __init__(self, matcher: OriginatorMatcher | None = None) -> None:
        self._matcher = matcher or SubstringOriginatorMatcher()

    def aggregate(self, payments: Sequence[PaymentRecord], fees: Sequence[FeeRecord]) -> tuple[BillAggregate, ...]:
        by_bill: dict[str, _Accumulator] = {}

        for payment in payments:
            acc = by_bill.setdefault(payment.bill_id, _Accumulator())
            acc.total_collected += payment.amount_collected
            acc.take_matter_name(payment.matter_name)

        for fee in fees:
            acc = by_bill.setdefault(fee.bill_id, _Accumulator())
            if self._matcher.is_self(fee.timekeeper, fee.originator):
                acc.self_billed += fee.billed_amount
            else:
                acc.others_billed += fee.billed_amount
            acc.take_matter_name(fee.matter_name)

        return tuple(
            BillAggregate(
                bill_id=bill_id,
                matter_name=acc.matter_name,
                total_collected=acc.total_collected,
                self_billed=acc.self_billed,
                others_billed=acc.others_billed,
            )
            for bill_id, acc in by_bill.items()
        )
