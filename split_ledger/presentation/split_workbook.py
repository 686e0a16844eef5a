"""Excel workbook export for split reports."""
from __future__ import annotations

import re
from io import BytesIO
from typing import Sequence

import pandas as pd

from split_ledger.domain.results import MatterRow, OriginatorGroup, SplitReportModel
from split_ledger.presentation.matter_report import format_breakdown

MATTERS_SHEET = "Matters"
ATTORNEYS_SHEET = "Attorneys"
MAX_SHEET_NAME = 31

MATTER_COLUMNS = [
    "Matter",
    "Total Collected",
    "Originator",
    "Originator Amount",
    "Other Attorneys Total",
    "Other Attorneys (breakdown)",
]
ATTORNEY_COLUMNS = ["Attorney", "Originator Amount", "Working Amount", "Total", "Matters"]
ORIGINATOR_COLUMNS = [
    "Matter",
    "Originator Amount",
    "Other Attorneys Total",
    "Other Attorneys (breakdown)",
    "Matter Total",
]

_ILLEGAL_SHEET_CHARS = re.compile(r"[\\/?*\[\]:]")


def sanitize_sheet_name(name: str) -> str:
    out = _ILLEGAL_SHEET_CHARS.sub(" ", name or "").strip()
    if not out:
        out = "Sheet"
    return out[:MAX_SHEET_NAME]


def unique_sheet_name(name: str, used: set[str]) -> str:
    candidate = sanitize_sheet_name(name)
    counter = 2
    while candidate.lower() in used:
        suffix = f" ({counter})"
        candidate = sanitize_sheet_name(name)[: MAX_SHEET_NAME - len(suffix)] + suffix
        counter += 1
    used.add(candidate.lower())
    return candidate


def matters_frame(rows: Sequence[MatterRow]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Matter": row.matter_name,
                "Total Collected": float(row.total_collected),
                "Originator": row.originator_name,
                "Originator Amount": float(row.originator_amount),
                "Other Attorneys Total": float(row.others_total),
                "Other Attorneys (breakdown)": format_breakdown(row.others_breakdown),
            }
            for row in rows
        ],
        columns=MATTER_COLUMNS,
    )


def attorneys_frame(report: SplitReportModel) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Attorney": total.name or total.attorney_id,
                "Originator Amount": float(total.originator_amount),
                "Working Amount": float(total.working_amount),
                "Total": float(total.total),
                "Matters": total.matter_count,
            }
            for total in report.attorney_totals
        ],
        columns=ATTORNEY_COLUMNS,
    )


def originator_frame(group: OriginatorGroup) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Matter": row.matter_name,
                "Originator Amount": float(row.originator_amount),
                "Other Attorneys Total": float(row.others_total),
                "Other Attorneys (breakdown)": format_breakdown(row.others_breakdown),
                "Matter Total": float(row.total_collected),
            }
            for row in group.rows
        ],
        columns=ORIGINATOR_COLUMNS,
    )


def _write_originator_sheet(writer: pd.ExcelWriter, sheet: str, group: OriginatorGroup, formats: dict) -> None:
    frame = originator_frame(group)
    frame.to_excel(writer, sheet_name=sheet, index=False)
    worksheet = writer.sheets[sheet]
    worksheet.set_column(0, 0, 40)
    worksheet.set_column(1, 2, 20, formats["money"])
    worksheet.set_column(3, 3, 50)
    worksheet.set_column(4, 4, 18, formats["money"])

    # Row 0 is the header; leave one blank row after the matter rows.
    row = len(frame) + 2
    worksheet.write(row, 0, "Originator Total", formats["bold"])
    worksheet.write_number(row, 1, float(group.originator_subtotal), formats["money"])
    row += 1
    worksheet.write(row, 0, "Other Attorneys Total", formats["bold"])
    worksheet.write_number(row, 2, float(group.others_subtotal), formats["money"])

    row += 2
    worksheet.write(row, 0, "Working Attorneys Totals", formats["bold"])
    row += 1
    worksheet.write_row(row, 0, ["Attorney", "Amount"], formats["bold"])
    for working in group.working_totals:
        row += 1
        worksheet.write(row, 0, working.name or working.attorney_id)
        worksheet.write_number(row, 1, float(working.amount), formats["money"])


def render_workbook(report: SplitReportModel) -> bytes:
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        workbook = writer.book
        workbook.set_properties(
            {
                "title": f"Attorney splits ({report.firm_id})",
                "author": "split-ledger",
                "created": report.generated_at.replace(tzinfo=None),
            }
        )
        formats = {
            "money": workbook.add_format({"num_format": "#,##0.00"}),
            "bold": workbook.add_format({"bold": True}),
        }
        used = {MATTERS_SHEET.lower(), ATTORNEYS_SHEET.lower()}

        matters_frame(report.matter_rows).to_excel(writer, sheet_name=MATTERS_SHEET, index=False)
        matters_ws = writer.sheets[MATTERS_SHEET]
        matters_ws.set_column(0, 0, 40)
        matters_ws.set_column(1, 1, 18, formats["money"])
        matters_ws.set_column(2, 2, 28)
        matters_ws.set_column(3, 4, 20, formats["money"])
        matters_ws.set_column(5, 5, 50)

        attorneys = attorneys_frame(report)
        attorneys.to_excel(writer, sheet_name=ATTORNEYS_SHEET, index=False)
        attorneys_ws = writer.sheets[ATTORNEYS_SHEET]
        attorneys_ws.set_column(0, 0, 30)
        attorneys_ws.set_column(1, 3, 18, formats["money"])
        grand_row = len(attorneys) + 2
        attorneys_ws.write(grand_row, 0, "Grand Total", formats["bold"])
        attorneys_ws.write_number(grand_row, 3, float(report.grand_total), formats["money"])

        for group in report.originator_groups:
            sheet = unique_sheet_name(group.originator_name or group.originator_id, used)
            _write_originator_sheet(writer, sheet, group, formats)
    buf.seek(0)
    return buf.getvalue()


def sheet_names_for(report: SplitReportModel) -> list[str]:
    used = {MATTERS_SHEET.lower(), ATTORNEYS_SHEET.lower()}
    names = [MATTERS_SHEET, ATTORNEYS_SHEET]
    for group in report.originator_groups:
        names.append(unique_sheet_name(group.originator_name or group.originator_id, used))
    return names
