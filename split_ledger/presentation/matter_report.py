"""Tabular renderers for the per-matter and per-attorney views."""
from __future__ import annotations

import csv
import html
import io
from decimal import Decimal
from typing import Sequence

from split_ledger.domain.results import AttorneyTotal, MatterRow, SplitReportModel


def format_amount(value: Decimal) -> str:
    return f"{value:.2f}"


def format_breakdown(breakdown: Sequence[tuple[str, Decimal]]) -> str:
    return "; ".join(f"{name}: {format_amount(amount)}" for name, amount in breakdown)


def matter_rows_to_dicts(rows: Sequence[MatterRow]) -> list[dict[str, str]]:
    return [
        {
            "matter_id": row.matter_id,
            "matter": row.matter_name,
            "total_collected": format_amount(row.total_collected),
            "originator": row.originator_name,
            "originator_amount": format_amount(row.originator_amount),
            "others_total": format_amount(row.others_total),
            "others_breakdown": format_breakdown(row.others_breakdown),
        }
        for row in rows
    ]


def attorney_totals_to_dicts(totals: Sequence[AttorneyTotal]) -> list[dict[str, str]]:
    return [
        {
            "attorney_id": total.attorney_id,
            "attorney": total.name,
            "originator_amount": format_amount(total.originator_amount),
            "working_amount": format_amount(total.working_amount),
            "total": format_amount(total.total),
            "matters": str(total.matter_count),
        }
        for total in totals
    ]


def render_csv(rows: Sequence[MatterRow]) -> bytes:
    dict_rows = matter_rows_to_dicts(rows)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(dict_rows[0].keys()) if dict_rows else [])
    if dict_rows:
        writer.writeheader()
        writer.writerows(dict_rows)
    return buffer.getvalue().encode("utf-8")


def render_html(report: SplitReportModel) -> str:
    rows = matter_rows_to_dicts(report.matter_rows)
    if not rows:
        return "<p>No matters in this report.</p>"
    header = "".join(f"<th>{html.escape(col)}</th>" for col in rows[0].keys())
    body_parts = []
    for row in rows:
        body_parts.append("<tr>" + "".join(f"<td>{html.escape(value)}</td>" for value in row.values()) + "</tr>")
    body_html = "".join(body_parts)
    footer = f"<tfoot><tr><td colspan=\"{len(rows[0])}\">Grand total: {format_amount(report.grand_total)}</td></tr></tfoot>"
    return f"<table><thead><tr>{header}</tr></thead><tbody>{body_html}</tbody>{footer}</table>"
