"""Command-line entrypoint for building, ingesting and dispatching attorney split reports."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path

from split_ledger.application.dispatch.use_cases import DispatchLatestReportUseCase
from split_ledger.application.dto import Attachment, InboundRequest, SplitRequest
from split_ledger.application.inbound.use_cases import InboundReportUseCase
from split_ledger.application.use_cases import BuildSplitReportUseCase, SplitLedgerContext, default_engine
from split_ledger.config import SETTINGS
from split_ledger.domain.errors import SplitLedgerError, UnsupportedSourceError
from split_ledger.domain.ledger import SplitLedgerBuilder
from split_ledger.domain.models import AttorneyRef, AttributionPolicy, DirectMatterEntry
from split_ledger.domain.normalizer import coerce_decimal
from split_ledger.infrastructure.mail.smtp_notifier import SmtpReportNotifier
from split_ledger.infrastructure.parsing.utils import ensure_bytes
from split_ledger.infrastructure.repositories.attachment_repositories import (
    AttachmentFeeSource,
    AttachmentPaymentSource,
)
from split_ledger.infrastructure.storage.policy_store import load_policy
from split_ledger.infrastructure.storage.report_store import FileSystemReportStore
from split_ledger.presentation.matter_report import format_amount, format_breakdown
from split_ledger.presentation.split_workbook import render_workbook


def _add_policy_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--policy-file", type=str, help="JSON policy override file")
    parser.add_argument("--self-working-pct", type=Decimal, help="Share of self-billed work on self-originated matters")
    parser.add_argument("--self-others-pct", type=Decimal, help="Share of others' work on self-originated matters")
    parser.add_argument("--non-originated-pct", type=Decimal, help="Share of own work on matters originated by others")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute originator / working-attorney splits from payments and fees")
    parser.add_argument("-v", "--verbose", action="store_true")
    commands = parser.add_subparsers(dest="command", required=True)

    build = commands.add_parser("build", help="Build a split report from payments and fees files")
    build.add_argument("payments", type=str, help="Path to payments CSV/XLSX file")
    build.add_argument("fees", type=str, help="Path to fees/time CSV/XLSX file")
    build.add_argument("--out", type=str, help="Write the split workbook to this path")
    build.add_argument("--originator-label", type=str, help="Display name for the originator share")
    build.add_argument("--generated-at", type=str, help="Report timestamp (ISO 8601); defaults to now")
    build.add_argument("--firm-id", type=str, default=SETTINGS.firm_id)
    _add_policy_args(build)

    inbound = commands.add_parser("inbound", help="Verify a signed delivery and store it as the latest report")
    inbound.add_argument("attachments", nargs="+", help="Attachment files; names must mention payments or fees/time")
    inbound.add_argument("--timestamp", required=True)
    inbound.add_argument("--token", required=True)
    inbound.add_argument("--signature", required=True)
    inbound.add_argument("--reports-dir", type=str, help="Report store root; defaults to the configured reports dir")
    _add_policy_args(inbound)

    dispatch = commands.add_parser("dispatch", help="Email the latest stored workbook for the previous month")
    dispatch.add_argument("--today", type=str, help="Run date (YYYY-MM-DD); defaults to today")
    dispatch.add_argument("--reports-dir", type=str, help="Report store root; defaults to the configured reports dir")

    direct = commands.add_parser("direct", help="Split a single manually entered matter between two attorneys")
    direct.add_argument("--matter-id", required=True)
    direct.add_argument("--matter-name", default="")
    direct.add_argument("--total", required=True, help="Amount collected on the matter")
    direct.add_argument("--originator", required=True, help="Originating attorney name")
    direct.add_argument("--worker", required=True, help="Working attorney name")
    direct.add_argument("--self-billed", default="0", help="Originator's own billed amount")
    direct.add_argument("--others-billed", default="0", help="Amount billed by other attorneys")
    direct.add_argument("--non-originated-worked", default="0", help="Worker's billed amount on a matter they did not originate")
    direct.add_argument("--out", type=str, help="Write the split workbook to this path")
    _add_policy_args(direct)

    return parser.parse_args(argv)


def resolve_policy(args: argparse.Namespace) -> AttributionPolicy:
    policy = load_policy(Path(args.policy_file) if args.policy_file else None)
    if args.self_working_pct is not None:
        policy = replace(policy, self_originated_working_pct=args.self_working_pct)
    if args.self_others_pct is not None:
        policy = replace(policy, self_originated_others_pct=args.self_others_pct)
    if args.non_originated_pct is not None:
        policy = replace(policy, non_originated_working_pct=args.non_originated_pct)
    return policy


def _parse_timestamp(raw: str | None) -> datetime:
    if not raw:
        return datetime.now(timezone.utc)
    try:
        return datetime.fromisoformat(raw)
    except ValueError as exc:
        raise UnsupportedSourceError(f"Invalid --generated-at timestamp: {raw!r}") from exc


def _parse_amount(label: str, raw: str) -> Decimal:
    amount, malformed = coerce_decimal(raw)
    if malformed:
        raise UnsupportedSourceError(f"Invalid {label} amount: {raw!r}")
    return amount


def _store(args: argparse.Namespace) -> FileSystemReportStore:
    return FileSystemReportStore(Path(args.reports_dir) if args.reports_dir else SETTINGS.reports_dir)


def print_summary(report) -> None:
    print("Split Summary")
    print("=============")
    print(f"Matters: {report.matter_count}")
    print(f"Grand total: {format_amount(report.grand_total)}")
    if report.normalization is not None:
        stats = report.normalization
        print(f"Rows kept: {stats.rows_kept} of {stats.rows_seen}")
        print(f"Rows dropped (no bill id): {stats.dropped_missing_bill}")
        print(f"Malformed amounts treated as zero: {stats.malformed_amounts}")
    for warning in report.policy_warnings:
        print(f"Warning: {warning.message}")

    print("\nMatters:")
    for row in report.matter_rows:
        line = (
            f"- {row.matter_name}: collected {format_amount(row.total_collected)}, "
            f"originator {format_amount(row.originator_amount)}, others {format_amount(row.others_total)}"
        )
        breakdown = format_breakdown(row.others_breakdown)
        print(f"{line} ({breakdown})" if breakdown else line)


def write_workbook(report, out: str | None) -> None:
    if not out:
        return
    out_path = Path(out)
    try:
        out_path.write_bytes(render_workbook(report))
    except OSError as exc:
        raise UnsupportedSourceError(f"Cannot write {out_path}: {exc.strerror or exc}") from exc
    print(f"\nWorkbook written to {out_path}")


def run_build(args: argparse.Namespace) -> None:
    generated_at = _parse_timestamp(args.generated_at)
    context = SplitLedgerContext(
        payment_source=AttachmentPaymentSource(ensure_bytes(args.payments), name=Path(args.payments).name),
        fee_source=AttachmentFeeSource(ensure_bytes(args.fees), name=Path(args.fees).name),
        policy=resolve_policy(args),
    )
    response = BuildSplitReportUseCase(context).execute(
        SplitRequest(generated_at=generated_at, firm_id=args.firm_id, originator_label=args.originator_label)
    )
    print_summary(response.report)
    write_workbook(response.report, args.out)


def run_inbound(args: argparse.Namespace) -> None:
    attachments = [Attachment(name=Path(path).name, content=ensure_bytes(path)) for path in args.attachments]
    use_case = InboundReportUseCase(
        signing_key=SETTINGS.signing_key,
        policy=resolve_policy(args),
        store=_store(args),
        firm_id=SETTINGS.firm_id,
    )
    result = use_case.execute(
        InboundRequest(
            timestamp=args.timestamp,
            token=args.token,
            signature=args.signature,
            attachments=attachments,
            received_at=datetime.now(timezone.utc),
        )
    )
    print(json.dumps(result.to_dict()))


def run_dispatch(args: argparse.Namespace) -> None:
    try:
        today = date.fromisoformat(args.today) if args.today else date.today()
    except ValueError as exc:
        raise UnsupportedSourceError(f"Invalid --today date: {args.today!r}") from exc
    result = DispatchLatestReportUseCase(store=_store(args), notifier=SmtpReportNotifier(SETTINGS.smtp)).execute(today)
    print(f"Sent {result.filename} ({result.bytes_sent} bytes)")


def run_direct(args: argparse.Namespace) -> None:
    entry = DirectMatterEntry(
        matter_id=args.matter_id,
        matter_name=args.matter_name,
        total_collected=_parse_amount("--total", args.total),
        originator=AttorneyRef(attorney_id=args.originator, name=args.originator),
        worker=AttorneyRef(attorney_id=args.worker, name=args.worker),
        self_billed=_parse_amount("--self-billed", args.self_billed),
        others_billed=_parse_amount("--others-billed", args.others_billed),
        non_originated_worked=_parse_amount("--non-originated-worked", args.non_originated_worked),
    )
    split = default_engine().attribute_direct(entry, resolve_policy(args))
    report = SplitLedgerBuilder().build((split,), datetime.now(timezone.utc), firm_id=SETTINGS.firm_id)
    for share in split.shares:
        print(f"{share.name} ({share.role.value}): {format_amount(share.amount)}")
    write_workbook(report, args.out)


COMMANDS = {
    "build": run_build,
    "inbound": run_inbound,
    "dispatch": run_dispatch,
    "direct": run_direct,
}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        COMMANDS[args.command](args)
    except SplitLedgerError as exc:
        print(f"error [{exc.kind}]: {exc.message}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
