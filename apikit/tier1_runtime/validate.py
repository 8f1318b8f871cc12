"""
apikit.tier1_runtime.validate
─────────────────────────────
Field validation for request payloads. A Validator collects one message per
field; pass `v.errors` to failed_validation_response when `v.valid()` is
false so API responses are always shaped the same way.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Hashable, Iterable, TypeVar

T = TypeVar("T")

EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


@dataclass
class Validator:
    """
    Accumulates field → message failures. The first message recorded for a
    field wins.

    Usage:
        v = Validator()
        v.check(payload.title != "", "title", "must be provided")
        v.check(len(payload.title) <= 500, "title", "must not be more than 500 bytes long")
        if not v.valid():
            return failed_validation_response(request, v.errors)
    """

    errors: dict[str, str] = field(default_factory=dict)

    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        if key not in self.errors:
            self.errors[key] = message

    def check(self, ok: bool, key: str, message: str) -> None:
        """Record `message` under `key` when `ok` is false."""
        if not ok:
            self.add_error(key, message)


def permitted_value(value: T, *permitted_values: T) -> bool:
    return value in permitted_values


def matches(value: str, rx: re.Pattern[str]) -> bool:
    """True if `rx` matches anywhere in `value`; anchor the pattern for full matches."""
    return rx.search(value) is not None


def unique(values: Iterable[Hashable]) -> bool:
    items = list(values)
    return len(set(items)) == len(items)


__all__ = ["EMAIL_RX", "Validator", "permitted_value", "matches", "unique"]
