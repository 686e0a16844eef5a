from datetime import datetime, timezone
from decimal import Decimal

from split_ledger.config import DEFAULT_POLICY
from split_ledger.domain.attribution import AttributionEngine
from split_ledger.domain.ledger import SplitLedgerBuilder
from split_ledger.domain.models import (
    AttorneyRef,
    AttorneyShare,
    BillAggregate,
    DirectMatterEntry,
    MatterSplit,
    ShareRole,
)

GENERATED_AT = datetime(2024, 7, 31, 12, 0, tzinfo=timezone.utc)

JANE = AttorneyRef("1", "Jane Smith")
JOHN = AttorneyRef("2", "John Doe")


def batch_matters() -> list[MatterSplit]:
    engine = AttributionEngine()
    aggregates = [
        BillAggregate("B1", "Matter One", Decimal("12000"), Decimal("7000"), Decimal("5000")),
        BillAggregate("B2", "Matter Two", Decimal("8000"), Decimal("2000"), Decimal("6000")),
    ]
    return [engine.split_matter(a, DEFAULT_POLICY) for a in aggregates]


def named_matters() -> list[MatterSplit]:
    engine = AttributionEngine()
    return [
        engine.attribute_direct(
            DirectMatterEntry("M-1", "Estate", Decimal("12000"), JANE, JOHN, Decimal("7000"), Decimal("5000")),
            DEFAULT_POLICY,
        ),
        engine.attribute_direct(
            DirectMatterEntry("M-2", "Merger", Decimal("8000"), JANE, JOHN, Decimal("2000"), Decimal("6000")),
            DEFAULT_POLICY,
        ),
        engine.attribute_direct(
            DirectMatterEntry("M-3", "Lease", Decimal("9000"), JOHN, JANE, non_originated_worked=Decimal("3000")),
            DEFAULT_POLICY,
        ),
    ]


def test_grand_total_equals_sum_of_matter_shares():
    matters = batch_matters()

    report = SplitLedgerBuilder().build(matters, GENERATED_AT)

    expected = sum(
        (m.attribution.originator_amount + m.attribution.working_amount for m in matters), Decimal("0")
    )
    assert report.grand_total == expected == Decimal("20000.00")


def test_build_is_idempotent():
    matters = named_matters()
    builder = SplitLedgerBuilder()

    assert builder.build(matters, GENERATED_AT) == builder.build(matters, GENERATED_AT)


def test_matter_rows_view():
    report = SplitLedgerBuilder().build(batch_matters(), GENERATED_AT)

    first = report.matter_rows[0]
    assert first.matter_name == "Matter One"
    assert first.originator_name == "Originator"
    assert first.originator_amount == Decimal("4250.00")
    assert first.others_total == Decimal("7750.00")
    assert first.others_breakdown == (("Working Attorneys", Decimal("7750.00")),)


def test_attorney_totals_view():
    report = SplitLedgerBuilder().build(named_matters(), GENERATED_AT)

    jane, john = report.attorney_totals
    assert jane.name == "Jane Smith"
    assert jane.originator_amount == Decimal("4250.00") + Decimal("1900.00")
    assert jane.working_amount == Decimal("900.00")
    assert jane.matter_count == 3
    assert john.originator_amount == Decimal("8100.00")
    assert john.working_amount == Decimal("7750.00") + Decimal("6100.00")
    assert report.grand_total == Decimal("29000.00")


def test_originator_groups_view():
    report = SplitLedgerBuilder().build(named_matters(), GENERATED_AT)

    jane_group, john_group = report.originator_groups
    assert [row.matter_id for row in jane_group.rows] == ["M-1", "M-2"]
    assert jane_group.originator_subtotal == Decimal("6150.00")
    assert jane_group.others_subtotal == Decimal("13850.00")
    assert [(w.name, w.amount) for w in jane_group.working_totals] == [("John Doe", Decimal("13850.00"))]
    assert [row.matter_id for row in john_group.rows] == ["M-3"]
    assert [(w.name, w.amount) for w in john_group.working_totals] == [("Jane Smith", Decimal("900.00"))]


def test_matter_without_originator_is_not_grouped():
    orphan = MatterSplit(
        matter_id="X1",
        matter_name="Unassigned",
        total_collected=Decimal("100"),
        shares=(AttorneyShare("2", "John Doe", ShareRole.WORKING, Decimal("100")),),
    )

    report = SplitLedgerBuilder().build([orphan], GENERATED_AT)

    assert report.originator_groups == ()
    assert report.matter_rows[0].originator_name == ""
    assert report.attorney_totals[0].working_amount == Decimal("100")
    assert report.grand_total == Decimal("100")


def test_zero_shares_left_out_of_breakdown():
    matter = MatterSplit(
        matter_id="Z1",
        matter_name="Zero",
        total_collected=Decimal("0"),
        shares=(
            AttorneyShare("originator", "Originator", ShareRole.ORIGINATOR, Decimal("0.00")),
            AttorneyShare("working", "Working Attorneys", ShareRole.WORKING, Decimal("0")),
        ),
    )

    report = SplitLedgerBuilder().build([matter], GENERATED_AT)

    assert report.matter_rows[0].others_breakdown == ()
    assert report.originator_groups[0].working_totals == ()
    assert report.attorney_totals[1].matter_count == 1
