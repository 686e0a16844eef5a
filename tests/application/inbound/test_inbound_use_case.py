from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path

import pytest
from openpyxl import load_workbook

from split_ledger.application.dto import Attachment, InboundRequest
from split_ledger.application.inbound.use_cases import InboundReportUseCase
from split_ledger.config import DEFAULT_POLICY
from split_ledger.domain.errors import MissingBatchInputError, ReportNotFoundError, SignatureVerificationError
from split_ledger.infrastructure.auth.signature import compute_signature
from split_ledger.infrastructure.storage.report_store import FileSystemReportStore

SIGNING_KEY = "test-signing-key"

PAYMENTS_CSV = b"""bill_number,matter_name,amount
B1,Matter One,12000
B2,Matter Two,8000
"""

FEES_CSV = b"""Bill Number,Timekeeper,Originator,Billed Amount
B1,Jane Smith,Jane Smith,7000
B1,John Doe,Jane Smith,5000
B2,Jane Smith,Jane Smith,2000
B2,John Doe,Jane Smith,6000
"""


@pytest.fixture
def store(tmp_path: Path) -> FileSystemReportStore:
    return FileSystemReportStore(tmp_path / "reports")


def make_request(attachments, signature: str | None = None) -> InboundRequest:
    timestamp, token = "1722470400", "tok-123"
    return InboundRequest(
        timestamp=timestamp,
        token=token,
        signature=signature if signature is not None else compute_signature(SIGNING_KEY, timestamp, token),
        attachments=attachments,
        received_at=datetime(2024, 8, 1, tzinfo=timezone.utc),
    )


def test_inbound_builds_and_stores_latest_report(store: FileSystemReportStore) -> None:
    use_case = InboundReportUseCase(signing_key=SIGNING_KEY, policy=DEFAULT_POLICY, store=store)
    request = make_request(
        [
            Attachment(name="payments-july.csv", content=PAYMENTS_CSV),
            Attachment(name="fees-july.csv", content=FEES_CSV),
            Attachment(name="readme.txt", content=b"ignored"),
        ]
    )

    result = use_case.execute(request)

    assert result.matters == 2
    assert result.to_dict() == {"ok": True, "ingested": True, "matters": 2}
    assert store.load_latest() == result.payload
    workbook = load_workbook(BytesIO(result.payload))
    assert workbook.sheetnames[:2] == ["Matters", "Attorneys"]


def test_bad_signature_rejected_before_parsing(store: FileSystemReportStore) -> None:
    use_case = InboundReportUseCase(signing_key=SIGNING_KEY, policy=DEFAULT_POLICY, store=store)
    request = make_request(
        [
            Attachment(name="payments.xlsx", content=b"garbage"),
            Attachment(name="fees.xlsx", content=b"garbage"),
        ],
        signature="0" * 64,
    )

    with pytest.raises(SignatureVerificationError):
        use_case.execute(request)

    with pytest.raises(ReportNotFoundError):
        store.load_latest()


def test_missing_fee_attachment_is_rejected(store: FileSystemReportStore) -> None:
    use_case = InboundReportUseCase(signing_key=SIGNING_KEY, policy=DEFAULT_POLICY, store=store)
    request = make_request([Attachment(name="payments.csv", content=PAYMENTS_CSV)])

    with pytest.raises(MissingBatchInputError) as excinfo:
        use_case.execute(request)

    assert excinfo.value.to_dict() == {
        "ok": False,
        "kind": "missing_input",
        "error": "Missing CSV/XLSX attachments (payments/fees)",
    }
