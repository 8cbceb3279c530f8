"""
Shared value objects for the ERP kernel.

``CommandResult`` is what every command service returns: the id of the
aggregate it touched and a human-readable message, the shape an HTTP layer
would serialise.  The money helpers keep every amount in ``Decimal`` at
cent precision.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import UUID

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a successful command."""
    id: UUID
    message: str


def to_decimal(value: Any) -> Decimal:
    """Coerce an amount to Decimal without passing through float."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize_money(value: Any) -> Decimal:
    """Round to cents, half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
