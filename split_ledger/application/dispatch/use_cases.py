"""Emails the latest stored split workbook for the previous month."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from split_ledger.application.dto import DispatchResult
from split_ledger.domain.repositories import ReportNotifier, ReportStore

logger = logging.getLogger(__name__)


def previous_month_label(today: date) -> str:
    if today.month == 1:
        return f"{today.year - 1}-12"
    return f"{today.year}-{today.month - 1:02d}"


@dataclass(slots=True)
class DispatchLatestReportUseCase:
    store: ReportStore
    notifier: ReportNotifier

    def execute(self, today: date) -> DispatchResult:
        payload = self.store.load_latest()
        label = previous_month_label(today)
        filename = f"attorney-splits-{label}.xlsx"
        self.notifier.send_report(
            f"Attorney Splits {label}",
            f"Attached are the originator splits for {label}.",
            filename,
            payload,
        )
        logger.info("Dispatched %s (%d bytes)", filename, len(payload))
        return DispatchResult(filename=filename, label=label, bytes_sent=len(payload))
