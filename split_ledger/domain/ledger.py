"""Assembles matter splits into the report model and its derived views."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Sequence

from .attribution import PolicyWarning
from .models import ZERO, MatterSplit, ShareRole
from .normalizer import NormalizationStats
from .results import (
    AttorneyTotal,
    MatterRow,
    OriginatorGroup,
    SplitReportModel,
    WorkingTotal,
)


def _sum(values) -> Decimal:
    return sum(values, ZERO)


def matter_row(matter: MatterSplit) -> MatterRow:
    origin = matter.originator_share()
    others = matter.other_shares()
    return MatterRow(
        matter_id=matter.matter_id,
        matter_name=matter.matter_name,
        total_collected=matter.total_collected,
        originator_id=origin.attorney_id if origin else "",
        originator_name=origin.name if origin else "",
        originator_amount=origin.amount if origin else ZERO,
        others_total=_sum(share.amount for share in others),
        others_breakdown=tuple((share.name, share.amount) for share in others if share.amount != 0),
    )


def attorney_totals(matters: Sequence[MatterSplit]) -> tuple[AttorneyTotal, ...]:
    order: list[str] = []
    names: dict[str, str] = {}
    for matter in matters:
        for share in matter.shares:
            if share.attorney_id not in names:
                order.append(share.attorney_id)
                names[share.attorney_id] = share.name

    totals = []
    for attorney_id in order:
        shares = [
            (matter.matter_id, share)
            for matter in matters
            for share in matter.shares
            if share.attorney_id == attorney_id
        ]
        originated = _sum(share.amount for _, share in shares if share.role is ShareRole.ORIGINATOR)
        worked = _sum(share.amount for _, share in shares if share.role is ShareRole.WORKING)
        totals.append(
            AttorneyTotal(
                attorney_id=attorney_id,
                name=names[attorney_id],
                originator_amount=originated,
                working_amount=worked,
                total=originated + worked,
                matter_count=len({matter_id for matter_id, _ in shares}),
            )
        )
    return tuple(totals)


def _working_totals(matters: Sequence[MatterSplit]) -> tuple[WorkingTotal, ...]:
    order: list[str] = []
    names: dict[str, str] = {}
    for matter in matters:
        for share in matter.other_shares():
            if share.amount != 0 and share.attorney_id not in names:
                order.append(share.attorney_id)
                names[share.attorney_id] = share.name
    return tuple(
        WorkingTotal(
            attorney_id=attorney_id,
            name=names[attorney_id],
            amount=_sum(
                share.amount
                for matter in matters
                for share in matter.other_shares()
                if share.attorney_id == attorney_id
            ),
        )
        for attorney_id in order
    )


def originator_groups(matters: Sequence[MatterSplit]) -> tuple[OriginatorGroup, ...]:
    order: list[str] = []
    grouped: dict[str, list[MatterSplit]] = {}
    names: dict[str, str] = {}
    for matter in matters:
        origin = matter.originator_share()
        if origin is None:
            continue
        if origin.attorney_id not in grouped:
            order.append(origin.attorney_id)
            grouped[origin.attorney_id] = []
        names[origin.attorney_id] = origin.name
        grouped[origin.attorney_id].append(matter)

    groups = []
    for originator_id in order:
        members = grouped[originator_id]
        rows = tuple(matter_row(matter) for matter in members)
        groups.append(
            OriginatorGroup(
                originator_id=originator_id,
                originator_name=names[originator_id],
                rows=rows,
                originator_subtotal=_sum(row.originator_amount for row in rows),
                others_subtotal=_sum(row.others_total for row in rows),
                working_totals=_working_totals(members),
            )
        )
    return tuple(groups)


class SplitLedgerBuilder:
    """Builds a ``SplitReportModel``; every view is a projection of ``matters``."""

    def build(
        self,
        matters: Sequence[MatterSplit],
        generated_at: datetime,
        *,
        firm_id: str = "default",
        normalization: NormalizationStats | None = None,
        policy_warnings: Sequence[PolicyWarning] = (),
    ) -> SplitReportModel:
        snapshot = tuple(matters)
        totals = attorney_totals(snapshot)
        return SplitReportModel(
            generated_at=generated_at,
            matters=snapshot,
            matter_rows=tuple(matter_row(matter) for matter in snapshot),
            attorney_totals=totals,
            grand_total=_sum(total.total for total in totals),
            originator_groups=originator_groups(snapshot),
            firm_id=firm_id,
            normalization=normalization,
            policy_warnings=tuple(policy_warnings),
        )
