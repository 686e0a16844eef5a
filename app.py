"""Streamlit front-end for the attorney split pipeline."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pandas as pd
import streamlit as st

from split_ledger import (
    AttachmentFeeSource,
    AttachmentPaymentSource,
    BuildSplitReportUseCase,
    SplitLedgerContext,
)
from split_ledger.application.dto import SplitRequest
from split_ledger.application.use_cases import default_engine
from split_ledger.config import SETTINGS
from split_ledger.domain.errors import SplitLedgerError
from split_ledger.domain.models import AttorneyRef, AttributionPolicy, DirectMatterEntry
from split_ledger.domain.results import SplitReportModel
from split_ledger.infrastructure.storage import policy_store
from split_ledger.infrastructure.storage.report_store import FileSystemReportStore
from split_ledger.presentation.matter_report import (
    attorney_totals_to_dicts,
    format_amount,
    matter_rows_to_dicts,
    render_csv,
    render_html,
)
from split_ledger.presentation.split_workbook import render_workbook, sheet_names_for


st.set_page_config(page_title="Attorney Splits", layout="wide")
st.title("Originator / Working Attorney Splits")


def run_split(
    payments_name: str,
    payments_bytes: bytes,
    fees_name: str,
    fees_bytes: bytes,
    policy: AttributionPolicy,
    originator_label: str | None,
) -> SplitReportModel:
    context = SplitLedgerContext(
        payment_source=AttachmentPaymentSource(payments_bytes, name=payments_name),
        fee_source=AttachmentFeeSource(fees_bytes, name=fees_name),
        policy=policy,
    )
    request = SplitRequest(
        generated_at=datetime.now(timezone.utc),
        firm_id=SETTINGS.firm_id,
        originator_label=originator_label or None,
    )
    return BuildSplitReportUseCase(context).execute(request).report


if "view" not in st.session_state:
    st.session_state["view"] = "upload"
if "result" not in st.session_state:
    st.session_state["result"] = None


if st.session_state["view"] == "upload":
    col1, col2 = st.columns(2)
    with col1:
        payments_file = st.file_uploader("Upload payments file", type=["csv", "xlsx", "xls"])
    with col2:
        fees_file = st.file_uploader("Upload fees / time file", type=["csv", "xlsx", "xls"])

    st.subheader("Attribution Policy")
    with st.expander("Split percentages", expanded=True):
        stored = policy_store.load_policy()
        pcol1, pcol2, pcol3 = st.columns(3)
        with pcol1:
            working_pct = st.number_input(
                "Self-originated, self-billed",
                value=float(stored.self_originated_working_pct),
                step=0.01,
                format="%.2f",
            )
        with pcol2:
            others_pct = st.number_input(
                "Self-originated, others-billed",
                value=float(stored.self_originated_others_pct),
                step=0.01,
                format="%.2f",
            )
        with pcol3:
            non_orig_pct = st.number_input(
                "Non-originated, self-billed",
                value=float(stored.non_originated_working_pct),
                step=0.01,
                format="%.2f",
            )
        originator_label = st.text_input("Originator display name (optional)")
        policy = AttributionPolicy.from_values(working_pct, others_pct, non_orig_pct)
        if st.button("Save policy", key="save_policy_btn"):
            policy_store.save_policy(policy)
            st.success("Policy saved")

    run_btn = st.button("Run Split", disabled=not (payments_file and fees_file))
    if run_btn and payments_file and fees_file:
        try:
            with st.spinner("Computing splits..."):
                report = run_split(
                    payments_file.name,
                    payments_file.read(),
                    fees_file.name,
                    fees_file.read(),
                    policy,
                    originator_label,
                )
                workbook = render_workbook(report)
        except SplitLedgerError as exc:
            st.error(f"{exc.kind}: {exc.message}")
        else:
            FileSystemReportStore(SETTINGS.reports_dir).save_latest(
                workbook, generated_at=report.generated_at, matters=report.matter_count
            )
            st.session_state["result"] = {
                "report": report,
                "workbook": workbook,
                "csv": render_csv(report.matter_rows),
                "html": render_html(report),
            }
            st.session_state["view"] = "results"
            st.rerun()

    st.subheader("Single Matter")
    with st.form("direct_entry"):
        dcol1, dcol2 = st.columns(2)
        with dcol1:
            matter_id = st.text_input("Matter ID")
            matter_name = st.text_input("Matter name")
            originator_name = st.text_input("Originating attorney")
            worker_name = st.text_input("Working attorney")
        with dcol2:
            total = st.number_input("Total collected", min_value=0.0, step=100.0, format="%.2f")
            self_billed = st.number_input("Originator billed", min_value=0.0, step=100.0, format="%.2f")
            others_billed = st.number_input("Others billed", min_value=0.0, step=100.0, format="%.2f")
            non_orig_worked = st.number_input(
                "Worker billed on a matter they did not originate", min_value=0.0, step=100.0, format="%.2f"
            )
        submitted = st.form_submit_button("Split matter")
    if submitted:
        if not (matter_id and originator_name and worker_name):
            st.error("Matter ID, originating attorney and working attorney are required")
        else:
            entry = DirectMatterEntry(
                matter_id=matter_id,
                matter_name=matter_name,
                total_collected=Decimal(str(total)),
                originator=AttorneyRef(attorney_id=originator_name, name=originator_name),
                worker=AttorneyRef(attorney_id=worker_name, name=worker_name),
                self_billed=Decimal(str(self_billed)),
                others_billed=Decimal(str(others_billed)),
                non_originated_worked=Decimal(str(non_orig_worked)),
            )
            split = default_engine().attribute_direct(entry, policy)
            st.dataframe(
                pd.DataFrame(
                    [
                        {"attorney": share.name, "role": share.role.value, "amount": format_amount(share.amount)}
                        for share in split.shares
                    ]
                )
            )
else:
    back_clicked = st.button("← Back", key="back_to_upload")
    if back_clicked:
        st.session_state["view"] = "upload"
        st.session_state["result"] = None
        st.rerun()

    result = st.session_state.get("result")
    if not result:
        st.info("No results available. Upload files and run the split first.")
    else:
        report: SplitReportModel = result["report"]

        st.subheader("Summary")
        st.metric("Matters", report.matter_count)
        st.metric("Grand total", format_amount(report.grand_total))
        if report.normalization is not None:
            st.metric("Rows dropped (no bill id)", report.normalization.dropped_missing_bill)
            st.metric("Malformed amounts", report.normalization.malformed_amounts)
        for warning in report.policy_warnings:
            st.warning(warning.message)

        tabs = st.tabs(["Matters", "Attorneys", "Originators"])
        with tabs[0]:
            st.dataframe(pd.DataFrame(matter_rows_to_dicts(report.matter_rows)))
        with tabs[1]:
            st.dataframe(pd.DataFrame(attorney_totals_to_dicts(report.attorney_totals)))
        with tabs[2]:
            for group in report.originator_groups:
                st.markdown(f"**{group.originator_name}**")
                st.dataframe(pd.DataFrame(matter_rows_to_dicts(group.rows)))
                st.caption(
                    f"Originator total {format_amount(group.originator_subtotal)}; "
                    f"other attorneys total {format_amount(group.others_subtotal)}"
                )

        st.caption("Workbook sheets: " + ", ".join(sheet_names_for(report)))
        st.download_button(
            "Download workbook",
            data=result["workbook"],
            file_name=f"attorney-splits-{report.generated_at:%Y-%m}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
        st.download_button(
            "Download matters CSV",
            data=result["csv"],
            file_name="attorney-splits.csv",
            mime="text/csv",
        )
        st.download_button(
            "Download matters HTML",
            data=result["html"].encode("utf-8"),
            file_name="attorney-splits.html",
            mime="text/html",
        )
