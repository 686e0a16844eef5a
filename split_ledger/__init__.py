"""Originator / working-attorney revenue split toolkit."""
from split_ledger.application.use_cases import BuildSplitReportUseCase, SplitLedgerContext
from split_ledger.domain.aggregation import BillAggregator
from split_ledger.domain.attribution import AttributionEngine
from split_ledger.domain.ledger import SplitLedgerBuilder
from split_ledger.domain.normalizer import RecordNormalizer
from split_ledger.infrastructure.repositories.attachment_repositories import (
    AttachmentFeeSource,
    AttachmentPaymentSource,
)

__all__ = [
    "BuildSplitReportUseCase",
    "SplitLedgerContext",
    "RecordNormalizer",
    "BillAggregator",
    "AttributionEngine",
    "SplitLedgerBuilder",
    "AttachmentPaymentSource",
    "AttachmentFeeSource",
]
