"""Application services orchestrating the split ledger workflow."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from split_ledger.application.dto import SplitRequest, SplitResponse
from split_ledger.config import SETTINGS
from split_ledger.domain.aggregation import BillAggregator
from split_ledger.domain.attribution import AttributionEngine, validate_policy
from split_ledger.domain.errors import MissingBatchInputError
from split_ledger.domain.ledger import SplitLedgerBuilder
from split_ledger.domain.models import AttributionPolicy
from split_ledger.domain.normalizer import RecordNormalizer
from split_ledger.domain.repositories import FeeSource, PaymentSource

logger = logging.getLogger(__name__)


def default_engine() -> AttributionEngine:
    return AttributionEngine(quantum=SETTINGS.money_quantum, context=SETTINGS.decimal_context)


@dataclass(slots=True)
class SplitLedgerContext:
    payment_source: PaymentSource
    fee_source: FeeSource
    policy: AttributionPolicy
    normalizer: RecordNormalizer = field(default_factory=RecordNormalizer)
    aggregator: BillAggregator = field(default_factory=BillAggregator)
    engine: AttributionEngine = field(default_factory=default_engine)
    builder: SplitLedgerBuilder = field(default_factory=SplitLedgerBuilder)


class BuildSplitReportUseCase:
    def __init__(self, context: SplitLedgerContext) -> None:
        self._context = context

    def execute(self, request: SplitRequest) -> SplitResponse:
        ctx = self._context
        payment_rows = ctx.payment_source.list_raw_records()
        fee_rows = ctx.fee_source.list_raw_records()
        if not payment_rows:
            raise MissingBatchInputError("No payment rows supplied")
        if not fee_rows:
            raise MissingBatchInputError("No fee rows supplied")

        payments = ctx.normalizer.normalize_payments(payment_rows)
        fees = ctx.normalizer.normalize_fees(fee_rows)
        aggregates = ctx.aggregator.aggregate(payments.records, fees.records)
        if not aggregates:
            raise MissingBatchInputError(
                "No rows with a bill identifier were found in the payment or fee input"
            )

        warnings = validate_policy(ctx.policy)
        matters = ctx.engine.split_all(aggregates, ctx.policy, request.originator_label)
        report = ctx.builder.build(
            matters,
            request.generated_at,
            firm_id=request.firm_id,
            normalization=payments.stats.merge(fees.stats),
            policy_warnings=warnings,
        )
        logger.info(
            "Built split report for firm %s: %d matters, grand total %s",
            request.firm_id,
            report.matter_count,
            report.grand_total,
        )
        return SplitResponse(report=report, aggregates=aggregates)
