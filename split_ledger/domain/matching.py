"""Strategies deciding whether a fee's timekeeper is the bill's originator."""
from __future__ import annotations

from typing import Protocol


class OriginatorMatcher(Protocol):
    def is_self(self, timekeeper: str, originator: str) -> bool:
        ...


def _clean(value: str | None) -> str:
    return (value or "").strip().lower()


class SubstringOriginatorMatcher:
    """Treats the row as self-billed when the timekeeper contains the originator.

    Tolerates suffixes such as "Jane Smith, Esq." but misclassifies attorneys
    whose names are substrings of each other.
    """

    def is_self(self, timekeeper: str, originator: str) -> bool:
        keeper = _clean(timekeeper)
        origin = _clean(originator)
        if not keeper or not origin:
            return False
        return origin in keeper


class ExactOriginatorMatcher:
    def is_self(self, timekeeper: str, originator: str) -> bool:
        keeper = _clean(timekeeper)
        return bool(keeper) and keeper == _clean(originator)
