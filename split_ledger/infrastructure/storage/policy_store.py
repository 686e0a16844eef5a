"""Storage helpers for attribution policy overrides."""
from __future__ import annotations

import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from split_ledger.config import DEFAULT_POLICY, SETTINGS
from split_ledger.domain.models import AttributionPolicy

logger = logging.getLogger(__name__)

_FIELDS = (
    "self_originated_working_pct",
    "self_originated_others_pct",
    "non_originated_working_pct",
)


def _normalize_override(raw: dict[str, Any] | None) -> dict[str, Decimal]:
    normalized: dict[str, Decimal] = {}
    if not isinstance(raw, dict):
        return normalized
    for key in _FIELDS:
        if key not in raw or raw[key] is None:
            continue
        try:
            normalized[key] = Decimal(str(raw[key]).strip())
        except InvalidOperation:
            logger.warning("Ignoring non-numeric policy override %s=%r", key, raw[key])
    return normalized


def load_policy(path: Path | None = None, default: AttributionPolicy = DEFAULT_POLICY) -> AttributionPolicy:
    override_path = path or SETTINGS.policy_path
    if not override_path.exists():
        return default
    try:
        data = json.loads(override_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("Policy override at %s is not valid JSON; using defaults", override_path)
        return default
    values = {key: getattr(default, key) for key in _FIELDS}
    values.update(_normalize_override(data))
    return AttributionPolicy(**values)


def save_policy(policy: AttributionPolicy, path: Path | None = None) -> AttributionPolicy:
    override_path = path or SETTINGS.policy_path
    override_path.parent.mkdir(parents=True, exist_ok=True)
    override_path.write_text(
        json.dumps(policy.as_dict(), indent=2, sort_keys=True),
        encoding="utf-8",
    )
    return policy
