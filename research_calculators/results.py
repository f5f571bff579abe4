"""
Typed outcomes for calculations that cannot produce a value.

Calculators are polled on every keystroke of a half-edited form, so a bad
input is an ordinary outcome rather than an exception. Callers check the
return value with is_result() or isinstance().
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class NoResult:
    """Input outside its valid range; nothing to show yet."""
    reason: str


@dataclass(frozen=True)
class Infeasible:
    """Inputs are valid on their own but cannot be satisfied together."""
    reason: str


@dataclass(frozen=True)
class NotFound:
    """Requested key is absent from a reference table."""
    key: str

    @property
    def reason(self) -> str:
        return f"No reference data for '{self.key}'"


def is_result(value: Any) -> bool:
    """True when value is a real calculation output."""
    return not isinstance(value, (NoResult, Infeasible, NotFound))
