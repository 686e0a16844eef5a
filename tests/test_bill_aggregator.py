from decimal import Decimal

from split_ledger.domain.aggregation import BillAggregator
from split_ledger.domain.matching import ExactOriginatorMatcher, SubstringOriginatorMatcher
from split_ledger.domain.models import FeeRecord, PaymentRecord


def make_payment(bill: str, amount: str, matter: str = "") -> PaymentRecord:
    return PaymentRecord(bill_id=bill, matter_name=matter, amount_collected=Decimal(amount))


def make_fee(bill: str, timekeeper: str, originator: str, amount: str, matter: str = "") -> FeeRecord:
    return FeeRecord(
        bill_id=bill,
        matter_name=matter,
        timekeeper=timekeeper,
        originator=originator,
        billed_amount=Decimal(amount),
    )


def test_substring_matcher_classification():
    matcher = SubstringOriginatorMatcher()

    assert matcher.is_self("Jane Smith", "Jane Smith")
    assert matcher.is_self("Jane Smith, Esq.", " jane smith ")
    assert not matcher.is_self("John Doe", "Jane Smith")
    assert not matcher.is_self("", "Jane Smith")
    assert not matcher.is_self("Jane Smith", "")


def test_exact_matcher_rejects_suffixes():
    matcher = ExactOriginatorMatcher()

    assert matcher.is_self("Jane Smith", "jane smith")
    assert not matcher.is_self("Jane Smith, Esq.", "Jane Smith")


def test_every_bill_appears_exactly_once():
    payments = [make_payment("B1", "100"), make_payment("B2", "50"), make_payment("B1", "25")]
    fees = [make_fee("B2", "A", "B", "10"), make_fee("B3", "A", "A", "30")]

    aggregates = BillAggregator().aggregate(payments, fees)

    assert [a.bill_id for a in aggregates] == ["B1", "B2", "B3"]


def test_self_and_others_split_and_refunds_net_out():
    payments = [make_payment("B1", "12500"), make_payment("B1", "-500")]
    fees = [
        make_fee("B1", "Jane Smith", "Jane Smith", "7000"),
        make_fee("B1", "John Doe", "Jane Smith", "5000"),
    ]

    (aggregate,) = BillAggregator().aggregate(payments, fees)

    assert aggregate.total_collected == Decimal("12000")
    assert aggregate.self_billed == Decimal("7000")
    assert aggregate.others_billed == Decimal("5000")


def test_matter_name_taken_from_first_non_empty_source():
    payments = [make_payment("B3", "100", matter="Matter X")]
    fees = [make_fee("B3", "A", "A", "10", matter="")]

    (aggregate,) = BillAggregator().aggregate(payments, fees)

    assert aggregate.matter_name == "Matter X"


def test_later_empty_matter_name_does_not_overwrite():
    payments = [make_payment("B1", "1", matter=""), make_payment("B1", "1", matter="First")]
    fees = [make_fee("B1", "A", "A", "1", matter="")]

    (aggregate,) = BillAggregator().aggregate(payments, fees)

    assert aggregate.matter_name == "First"


def test_payments_only_and_fees_only_bills():
    payments = [make_payment("B4", "500")]
    fees = [make_fee("B5", "John Doe", "Jane Smith", "300")]

    b4, b5 = BillAggregator().aggregate(payments, fees)

    assert (b4.total_collected, b4.self_billed, b4.others_billed) == (Decimal("500"), 0, 0)
    assert b5.total_collected == 0
    assert b5.others_billed == Decimal("300")


def test_custom_matcher_is_used():
    fees = [make_fee("B1", "Jane Smith, Esq.", "Jane Smith", "100")]

    (aggregate,) = BillAggregator(matcher=ExactOriginatorMatcher()).aggregate([], fees)

    assert aggregate.self_billed == 0
    assert aggregate.others_billed == Decimal("100")
