"""Flattens already-fetched billing API pages into raw records."""
from __future__ import annotations

from typing import Iterable, Mapping

from split_ledger.domain.models import RawRecord


def flatten_object(obj: Mapping[str, object], prefix: str = "") -> dict[str, object]:
    """``{"bill": {"number": "B1"}}`` becomes ``{"bill_number": "B1"}``. Lists are skipped."""
    flat: dict[str, object] = {}
    for key, value in obj.items():
        name = f"{prefix}_{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten_object(value, name))
        elif isinstance(value, (list, tuple)):
            continue
        else:
            flat[name] = value
    return flat


def records_from_api_pages(pages: Iterable[Mapping[str, object]], collection: str = "data") -> list[RawRecord]:
    records: list[RawRecord] = []
    for page in pages:
        items = page.get(collection) or []
        if not isinstance(items, list):
            continue
        for item in items:
            if isinstance(item, Mapping):
                records.append(flatten_object(item))
    return records
