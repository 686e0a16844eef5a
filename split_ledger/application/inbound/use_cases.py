"""Inbound attachment ingestion: verify, build, render and store the latest report."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Sequence

from split_ledger.application.dto import Attachment, InboundRequest, InboundResult, SplitRequest
from split_ledger.application.use_cases import BuildSplitReportUseCase, SplitLedgerContext
from split_ledger.domain.errors import MissingBatchInputError
from split_ledger.domain.models import AttributionPolicy
from split_ledger.domain.repositories import ReportStore
from split_ledger.domain.results import SplitReportModel
from split_ledger.infrastructure.auth.signature import verify_signature
from split_ledger.infrastructure.parsing.utils import classify_attachment
from split_ledger.infrastructure.repositories.attachment_repositories import (
    AttachmentFeeSource,
    AttachmentPaymentSource,
)
from split_ledger.presentation.split_workbook import render_workbook

logger = logging.getLogger(__name__)


def split_attachments(attachments: Sequence[Attachment]) -> tuple[list[Attachment], list[Attachment]]:
    payments: list[Attachment] = []
    fees: list[Attachment] = []
    for attachment in attachments:
        kind = classify_attachment(attachment.name)
        if kind == "payments":
            payments.append(attachment)
        elif kind == "fees":
            fees.append(attachment)
        else:
            logger.debug("Ignoring unrecognised attachment %s", attachment.name)
    return payments, fees


@dataclass(slots=True)
class InboundReportUseCase:
    signing_key: str
    policy: AttributionPolicy
    store: ReportStore
    firm_id: str = "default"
    renderer: Callable[[SplitReportModel], bytes] = render_workbook

    def execute(self, request: InboundRequest) -> InboundResult:
        verify_signature(self.signing_key, request.timestamp, request.token, request.signature)

        payments, fees = split_attachments(request.attachments)
        if not payments or not fees:
            raise MissingBatchInputError("Missing CSV/XLSX attachments (payments/fees)")

        payment_attachment, fee_attachment = payments[0], fees[0]
        context = SplitLedgerContext(
            payment_source=AttachmentPaymentSource(payment_attachment.content, name=payment_attachment.name),
            fee_source=AttachmentFeeSource(fee_attachment.content, name=fee_attachment.name),
            policy=self.policy,
        )
        generated_at = request.received_at or datetime.now(timezone.utc)
        response = BuildSplitReportUseCase(context).execute(
            SplitRequest(generated_at=generated_at, firm_id=self.firm_id)
        )
        report = response.report
        payload = self.renderer(report)
        location = self.store.save_latest(payload, generated_at=generated_at, matters=report.matter_count)
        logger.info(
            "Ingested %s and %s: %d matters",
            payment_attachment.name,
            fee_attachment.name,
            report.matter_count,
        )
        return InboundResult(payload=payload, matters=report.matter_count, location=location)
