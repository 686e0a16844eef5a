from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

from split_ledger import cli
from split_ledger.infrastructure.auth.signature import compute_signature
from split_ledger.infrastructure.storage.report_store import FileSystemReportStore

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
def batch_files(tmp_path: Path) -> tuple[str, str]:
    payments = tmp_path / "payments-july.csv"
    fees = tmp_path / "fees-july.csv"
    payments.write_bytes(PAYMENTS_CSV)
    fees.write_bytes(FEES_CSV)
    return str(payments), str(fees)


@pytest.fixture
def no_policy(tmp_path: Path) -> list[str]:
    return ["--policy-file", str(tmp_path / "no-policy.json")]


def test_build_writes_workbook_and_summary(tmp_path: Path, batch_files, no_policy, capsys):
    out = tmp_path / "splits.xlsx"

    code = cli.main(["build", *batch_files, "--out", str(out), "--generated-at", "2024-08-01T00:00:00", *no_policy])

    assert code == 0
    assert out.read_bytes()[:2] == b"PK"
    stdout = capsys.readouterr().out
    assert "Matters: 2" in stdout
    assert "Grand total: 20000.00" in stdout


def test_build_missing_file_exits_with_error(tmp_path: Path, no_policy, capsys):
    code = cli.main(["build", str(tmp_path / "missing.csv"), str(tmp_path / "missing2.csv"), *no_policy])

    assert code == 2
    assert "error [unsupported_source]" in capsys.readouterr().err


def test_build_bad_timestamp_exits_with_error(batch_files, no_policy, capsys):
    code = cli.main(["build", *batch_files, "--generated-at", "last tuesday", *no_policy])

    assert code == 2
    assert "--generated-at" in capsys.readouterr().err


def test_inbound_stores_latest_report(tmp_path: Path, batch_files, no_policy, monkeypatch, capsys):
    monkeypatch.setattr(cli, "SETTINGS", replace(cli.SETTINGS, signing_key="cli-key"))
    reports = tmp_path / "reports"
    signature = compute_signature("cli-key", "1722470400", "tok")

    code = cli.main(
        [
            "inbound",
            *batch_files,
            "--timestamp",
            "1722470400",
            "--token",
            "tok",
            "--signature",
            signature,
            "--reports-dir",
            str(reports),
            *no_policy,
        ]
    )

    assert code == 0
    assert '"matters": 2' in capsys.readouterr().out
    assert FileSystemReportStore(reports).latest_info().matters == 2


def test_inbound_bad_signature_exits_with_error(tmp_path: Path, batch_files, no_policy, monkeypatch, capsys):
    monkeypatch.setattr(cli, "SETTINGS", replace(cli.SETTINGS, signing_key="cli-key"))

    code = cli.main(
        [
            "inbound",
            *batch_files,
            "--timestamp",
            "1",
            "--token",
            "tok",
            "--signature",
            "0" * 64,
            "--reports-dir",
            str(tmp_path / "reports"),
            *no_policy,
        ]
    )

    assert code == 2
    assert "error [unauthorized]" in capsys.readouterr().err


def test_dispatch_sends_latest_report(tmp_path: Path, monkeypatch, capsys):
    sent = []

    class RecordingNotifier:
        def __init__(self, settings) -> None:
            self.settings = settings

        def send_report(self, subject, body, filename, payload) -> None:
            sent.append((subject, filename, payload))

    store = FileSystemReportStore(tmp_path)
    store.save_latest(b"workbook", generated_at=datetime(2024, 7, 31, tzinfo=timezone.utc), matters=1)
    monkeypatch.setattr(cli, "SmtpReportNotifier", RecordingNotifier)

    code = cli.main(["dispatch", "--today", "2024-08-01", "--reports-dir", str(tmp_path)])

    assert code == 0
    assert sent == [("Attorney Splits 2024-07", "attorney-splits-2024-07.xlsx", b"workbook")]
    assert "attorney-splits-2024-07.xlsx" in capsys.readouterr().out


def test_dispatch_without_report_exits_with_error(tmp_path: Path, capsys):
    code = cli.main(["dispatch", "--reports-dir", str(tmp_path)])

    assert code == 2
    assert "error [not_found]" in capsys.readouterr().err


def test_direct_entry_non_originated_tier(no_policy, capsys):
    code = cli.main(
        [
            "direct",
            "--matter-id",
            "M-2",
            "--total",
            "900",
            "--originator",
            "John Doe",
            "--worker",
            "Jane Smith",
            "--non-originated-worked",
            "300",
            *no_policy,
        ]
    )

    assert code == 0
    stdout = capsys.readouterr().out
    assert "John Doe (originator): 810.00" in stdout
    assert "Jane Smith (working): 90.00" in stdout


def test_direct_entry_rejects_bad_amount(no_policy, capsys):
    code = cli.main(
        ["direct", "--matter-id", "M-1", "--total", "lots", "--originator", "A", "--worker", "B", *no_policy]
    )

    assert code == 2
    assert "--total" in capsys.readouterr().err
