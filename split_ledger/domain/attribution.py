"""Tiered percentage attribution of collected revenue."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal

from .models import (
    ZERO,
    Attribution,
    AttributionPolicy,
    AttorneyShare,
    BillAggregate,
    DirectMatterEntry,
    MatterSplit,
    ShareRole,
)

logger = logging.getLogger(__name__)

ORIGINATOR_PLACEHOLDER_ID = "originator"
WORKING_PLACEHOLDER_ID = "working"
ORIGINATOR_PLACEHOLDER_NAME = "Originator"
WORKING_PLACEHOLDER_NAME = "Working Attorneys"

_POLICY_FIELDS = (
    "self_originated_working_pct",
    "self_originated_others_pct",
    "non_originated_working_pct",
)


@dataclass(frozen=True)
class PolicyWarning:
    field: str
    value: Decimal
    message: str


def validate_policy(policy: AttributionPolicy) -> tuple[PolicyWarning, ...]:
    """Report percentages outside [0, 1]. Nothing here is fatal."""
    warnings: list[PolicyWarning] = []
    for name in _POLICY_FIELDS:
        value = getattr(policy, name)
        if value < 0 or value > 1:
            warnings.append(
                PolicyWarning(
                    field=name,
                    value=value,
                    message=f"{name}={value} is outside [0, 1]; shares may exceed billed or collected amounts",
                )
            )
    for warning in warnings:
        logger.warning("Policy check: %s", warning.message)
    return tuple(warnings)


class AttributionEngine:
    """Computes originator and working-attorney amounts for a bill."""

    def __init__(self, quantum: Decimal | None = None, context: Context | None = None) -> None:
        if quantum is None:
            quantum = Decimal("0.01")
        self._quantum = quantum
        self._context = context

    def attribute(
        self,
        aggregate: BillAggregate,
        policy: AttributionPolicy,
        non_originated_worked: Decimal = ZERO,
    ) -> Attribution:
        self_part = policy.self_originated_working_pct * aggregate.self_billed
        others_part = policy.self_originated_others_pct * aggregate.others_billed
        originator_amount = self._round(self_part + others_part)
        working_amount = max(ZERO, aggregate.total_collected - originator_amount)
        return Attribution(
            self_originated_self_billed=self._round(self_part),
            self_originated_others_billed=self._round(others_part),
            non_originated_self_billed=self._round(policy.non_originated_working_pct * non_originated_worked),
            originator_amount=originator_amount,
            working_amount=working_amount,
        )

    def split_matter(
        self,
        aggregate: BillAggregate,
        policy: AttributionPolicy,
        originator_label: str | None = None,
    ) -> MatterSplit:
        attribution = self.attribute(aggregate, policy)
        shares = (
            AttorneyShare(
                attorney_id=ORIGINATOR_PLACEHOLDER_ID,
                name=originator_label or ORIGINATOR_PLACEHOLDER_NAME,
                role=ShareRole.ORIGINATOR,
                amount=attribution.originator_amount,
            ),
            AttorneyShare(
                attorney_id=WORKING_PLACEHOLDER_ID,
                name=WORKING_PLACEHOLDER_NAME,
                role=ShareRole.WORKING,
                amount=attribution.working_amount,
            ),
        )
        return MatterSplit(
            matter_id=aggregate.bill_id,
            matter_name=aggregate.matter_name or aggregate.bill_id,
            total_collected=aggregate.total_collected,
            shares=shares,
            attribution=attribution,
        )

    def split_all(
        self,
        aggregates: tuple[BillAggregate, ...],
        policy: AttributionPolicy,
        originator_label: str | None = None,
    ) -> tuple[MatterSplit, ...]:
        return tuple(self.split_matter(aggregate, policy, originator_label) for aggregate in aggregates)

    def attribute_direct(self, entry: DirectMatterEntry, policy: AttributionPolicy) -> MatterSplit:
        """Attribute a manually entered matter with named attorneys.

        When ``entry.non_originated_worked`` is positive the worker is paid on
        the non-originated tier and the originator receives the remainder.
        """
        aggregate = BillAggregate(
            bill_id=entry.matter_id,
            matter_name=entry.matter_name,
            total_collected=entry.total_collected,
            self_billed=entry.self_billed,
            others_billed=entry.others_billed,
        )
        attribution = self.attribute(aggregate, policy, entry.non_originated_worked)
        if entry.non_originated_worked > 0:
            worker_amount = attribution.non_originated_self_billed
            originator_amount = max(ZERO, entry.total_collected - worker_amount)
        else:
            worker_amount = attribution.working_amount
            originator_amount = attribution.originator_amount

        shares = (
            AttorneyShare(
                attorney_id=entry.originator.attorney_id,
                name=entry.originator.name,
                role=ShareRole.ORIGINATOR,
                amount=originator_amount,
            ),
            AttorneyShare(
                attorney_id=entry.worker.attorney_id,
                name=entry.worker.name,
                role=ShareRole.WORKING,
                amount=worker_amount,
            ),
        )
        return MatterSplit(
            matter_id=entry.matter_id,
            matter_name=entry.matter_name or entry.matter_id,
            total_collected=entry.total_collected,
            shares=shares,
            attribution=attribution,
        )

    def _round(self, value: Decimal) -> Decimal:
        return value.quantize(self._quantum, rounding=ROUND_HALF_UP, context=self._context)
