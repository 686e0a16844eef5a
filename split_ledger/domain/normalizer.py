"""Maps arbitrarily named input rows onto canonical payment and fee records."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Generic, Iterable, Mapping, Sequence, TypeVar

from .models import ZERO, FeeRecord, PaymentRecord, RawRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

AliasTable = Mapping[str, Sequence[str]]

MAX_MONEY_EXPONENT = 15

BILL_ID_ALIASES = ("bill_number", "invoice_number", "invoice_no", "bill")
MATTER_NAME_ALIASES = ("matter_name", "matter", "matter_number", "matter_display_number")

PAYMENT_ALIASES: AliasTable = {
    "bill_id": BILL_ID_ALIASES,
    "matter_name": MATTER_NAME_ALIASES,
    "amount_collected": ("amount", "payment_amount", "paid_amount"),
}

FEE_ALIASES: AliasTable = {
    "bill_id": BILL_ID_ALIASES,
    "matter_name": MATTER_NAME_ALIASES,
    "timekeeper": ("timekeeper", "user", "attorney"),
    "originator": ("originator", "originating_attorney"),
    "billed_amount": ("billed_amount", "amount", "fee_amount"),
}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_key(key: object) -> str:
    lowered = str(key).strip().lower()
    return _NON_ALNUM.sub("_", lowered).strip("_")


def resolve_fields(raw: RawRecord, aliases: AliasTable) -> dict[str, object | None]:
    """Pick, per canonical field, the value of the first alias present in ``raw``."""
    normalized: dict[str, object] = {}
    for key, value in raw.items():
        if key is None:
            continue
        norm = normalize_key(key)
        if norm and norm not in normalized:
            normalized[norm] = value

    resolved: dict[str, object | None] = {}
    for canonical, candidates in aliases.items():
        resolved[canonical] = None
        for candidate in candidates:
            candidate_key = normalize_key(candidate)
            if candidate_key in normalized:
                resolved[canonical] = normalized[candidate_key]
                break
    return resolved


def coerce_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if value != value:
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def coerce_decimal(value: object) -> tuple[Decimal, bool]:
    """Parse a money value leniently. Returns ``(amount, malformed)``.

    Amounts of ``10 ** MAX_MONEY_EXPONENT`` or more cannot be quantized to
    cents and count as malformed.
    """
    amount, malformed = _parse_decimal(value)
    if not malformed and amount and amount.adjusted() >= MAX_MONEY_EXPONENT:
        return ZERO, True
    return amount, malformed


def _parse_decimal(value: object) -> tuple[Decimal, bool]:
    if value is None:
        return ZERO, False
    if isinstance(value, bool):
        return ZERO, True
    if isinstance(value, Decimal):
        return (value, False) if value.is_finite() else (ZERO, True)
    if isinstance(value, int):
        return Decimal(value), False
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return ZERO, True
        return Decimal(str(value)), False

    s = str(value).strip()
    if not s:
        return ZERO, False
    negative = False
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]
    for ch in [",", "$", "€", "£", " "]:
        s = s.replace(ch, "")
    try:
        result = Decimal(s)
    except InvalidOperation:
        return ZERO, True
    if not result.is_finite():
        return ZERO, True
    if negative:
        result = -result
    return result, False


@dataclass(frozen=True)
class NormalizationStats:
    rows_seen: int = 0
    rows_kept: int = 0
    dropped_missing_bill: int = 0
    malformed_amounts: int = 0
    negative_billed: int = 0

    def merge(self, other: "NormalizationStats") -> "NormalizationStats":
        return NormalizationStats(
            rows_seen=self.rows_seen + other.rows_seen,
            rows_kept=self.rows_kept + other.rows_kept,
            dropped_missing_bill=self.dropped_missing_bill + other.dropped_missing_bill,
            malformed_amounts=self.malformed_amounts + other.malformed_amounts,
            negative_billed=self.negative_billed + other.negative_billed,
        )


@dataclass(frozen=True)
class NormalizedBatch(Generic[T]):
    records: tuple[T, ...] = field(default_factory=tuple)
    stats: NormalizationStats = field(default_factory=NormalizationStats)


class RecordNormalizer:
    """Resolves raw rows through declarative alias tables."""

    def __init__(
        self,
        payment_aliases: AliasTable | None = None,
        fee_aliases: AliasTable | None = None,
    ) -> None:
        self._payment_aliases = payment_aliases or PAYMENT_ALIASES
        self._fee_aliases = fee_aliases or FEE_ALIASES

    def normalize_payments(self, rows: Iterable[RawRecord]) -> NormalizedBatch[PaymentRecord]:
        records: list[PaymentRecord] = []
        seen = dropped = malformed = 0
        for raw in rows:
            seen += 1
            fields = resolve_fields(raw, self._payment_aliases)
            bill_id = coerce_text(fields["bill_id"])
            if not bill_id:
                dropped += 1
                continue
            amount, bad = coerce_decimal(fields["amount_collected"])
            malformed += bad
            records.append(
                PaymentRecord(
                    bill_id=bill_id,
                    matter_name=coerce_text(fields["matter_name"]),
                    amount_collected=amount,
                )
            )
        stats = NormalizationStats(
            rows_seen=seen,
            rows_kept=len(records),
            dropped_missing_bill=dropped,
            malformed_amounts=malformed,
        )
        self._log_stats("payment", stats)
        return NormalizedBatch(records=tuple(records), stats=stats)

    def normalize_fees(self, rows: Iterable[RawRecord]) -> NormalizedBatch[FeeRecord]:
        records: list[FeeRecord] = []
        seen = dropped = malformed = negative = 0
        for raw in rows:
            seen += 1
            fields = resolve_fields(raw, self._fee_aliases)
            bill_id = coerce_text(fields["bill_id"])
            if not bill_id:
                dropped += 1
                continue
            billed, bad = coerce_decimal(fields["billed_amount"])
            malformed += bad
            if billed < 0:
                negative += 1
                billed = ZERO
            records.append(
                FeeRecord(
                    bill_id=bill_id,
                    matter_name=coerce_text(fields["matter_name"]),
                    timekeeper=coerce_text(fields["timekeeper"]),
                    originator=coerce_text(fields["originator"]),
                    billed_amount=billed,
                )
            )
        stats = NormalizationStats(
            rows_seen=seen,
            rows_kept=len(records),
            dropped_missing_bill=dropped,
            malformed_amounts=malformed,
            negative_billed=negative,
        )
        self._log_stats("fee", stats)
        return NormalizedBatch(records=tuple(records), stats=stats)

    @staticmethod
    def _log_stats(label: str, stats: NormalizationStats) -> None:
        if stats.dropped_missing_bill:
            logger.warning("Dropped %d %s rows without a bill id", stats.dropped_missing_bill, label)
        if stats.malformed_amounts:
            logger.warning("Treated %d malformed %s amounts as zero", stats.malformed_amounts, label)
        if stats.negative_billed:
            logger.warning("Clamped %d negative %s amounts to zero", stats.negative_billed, label)
        logger.debug("Normalized %d of %d %s rows", stats.rows_kept, stats.rows_seen, label)
