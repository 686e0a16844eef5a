"""Typed failures surfaced by the split pipeline and its boundaries."""
from __future__ import annotations


class SplitLedgerError(Exception):
    """Base error carrying a machine-readable ``kind`` and a readable message."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, object]:
        return {"ok": False, "kind": self.kind, "error": self.message}


class MissingBatchInputError(SplitLedgerError):
    kind = "missing_input"


class SignatureVerificationError(SplitLedgerError):
    kind = "unauthorized"


class ConfigurationError(SplitLedgerError):
    kind = "configuration"


class ReportNotFoundError(SplitLedgerError):
    kind = "not_found"


class DeliveryConfigError(SplitLedgerError):
    kind = "delivery_config"


class UnsupportedSourceError(SplitLedgerError):
    kind = "unsupported_source"
