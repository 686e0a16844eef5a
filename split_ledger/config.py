"""Central configuration for the split ledger package."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Context, Decimal
from pathlib import Path
from typing import Mapping

from split_ledger.domain.models import AttributionPolicy

DEFAULT_POLICY = AttributionPolicy(
    self_originated_working_pct=Decimal("0.50"),
    self_originated_others_pct=Decimal("0.15"),
    non_originated_working_pct=Decimal("0.30"),
)

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"
REPORTS_DIR = DATA_DIR / "reports"
POLICY_PATH = DATA_DIR / "policy_override.json"


@dataclass(slots=True, frozen=True)
class SmtpSettings:
    host: str = ""
    port: int = 587
    username: str = ""
    password: str = ""
    sender: str = ""
    recipients: tuple[str, ...] = ()

    def is_complete(self) -> bool:
        return bool(self.host and self.sender and self.recipients)


@dataclass(slots=True, frozen=True)
class Settings:
    decimal_context: Context
    money_quantum: Decimal
    default_policy: AttributionPolicy
    data_dir: Path
    reports_dir: Path
    policy_path: Path
    signing_key: str = ""
    firm_id: str = "default"
    smtp: SmtpSettings = field(default_factory=SmtpSettings)


def _split_recipients(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    data_dir = Path(env.get("SPLIT_LEDGER_DATA_DIR") or DATA_DIR)
    return Settings(
        decimal_context=Context(prec=28),
        money_quantum=Decimal("0.01"),
        default_policy=DEFAULT_POLICY,
        data_dir=data_dir,
        reports_dir=data_dir / "reports",
        policy_path=data_dir / POLICY_PATH.name,
        signing_key=env.get("INBOUND_SIGNING_KEY", ""),
        firm_id=env.get("SPLIT_LEDGER_FIRM_ID") or "default",
        smtp=SmtpSettings(
            host=env.get("SMTP_HOST", ""),
            port=int(env.get("SMTP_PORT") or 587),
            username=env.get("SMTP_USER", ""),
            password=env.get("SMTP_PASSWORD", ""),
            sender=env.get("EMAIL_FROM", ""),
            recipients=_split_recipients(env.get("EMAIL_TO", "")),
        ),
    )


SETTINGS = load_settings()
