"""Utility helpers for calculator modules."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from takehome.backend.config.year_config import TaxBracket

ZERO = Decimal("0")
CENT = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0001")


@dataclass(frozen=True, slots=True)
class BracketSlice:
    """Portion of an amount that falls inside a single bracket."""

    lower: Decimal
    upper: Decimal | None
    rate: Decimal
    taxable_amount: Decimal
    tax: Decimal


def format_percentage(value: Decimal | float) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = Decimal(str(value)) * 100
    if percentage == percentage.to_integral_value():
        return f"{int(percentage)}%"
    return f"{percentage.normalize():f}%"


def calculate_progressive_tax(amount: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
    """Calculate progressive tax for ``amount`` using ``brackets``.

    Each bracket covers the half-open range ``(previous upper, upper]``; the
    final, open bracket taxes everything above the last finite threshold.
    """

    if amount <= 0:
        return ZERO

    total = ZERO
    lower_bound = ZERO

    for bracket in brackets:
        upper = bracket.upper_bound
        if upper is None or amount <= upper:
            total += (amount - lower_bound) * bracket.rate
            break

        total += (upper - lower_bound) * bracket.rate
        lower_bound = upper

    return total


def progressive_tax_breakdown(
    amount: Decimal, brackets: Sequence[TaxBracket]
) -> list[BracketSlice]:
    """Split ``amount`` into the bracket slices it touches."""

    slices: list[BracketSlice] = []
    if amount <= 0:
        return slices

    lower_bound = ZERO
    for bracket in brackets:
        upper = bracket.upper_bound
        top = amount if upper is None or amount <= upper else upper
        taxed = top - lower_bound
        slices.append(
            BracketSlice(
                lower=lower_bound,
                upper=upper,
                rate=bracket.rate,
                taxable_amount=taxed,
                tax=taxed * bracket.rate,
            )
        )
        if upper is None or amount <= upper:
            break
        lower_bound = upper

    return slices


def marginal_rate(amount: Decimal, brackets: Sequence[TaxBracket]) -> Decimal:
    """Return the rate applied to the next dollar above ``amount``."""

    for bracket in brackets:
        upper = bracket.upper_bound
        if upper is None or amount < upper:
            return bracket.rate
    return brackets[-1].rate if brackets else ZERO


def round_currency(value: Decimal) -> float:
    """Round monetary amounts to two decimals."""

    return float(Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def round_rate(value: Decimal) -> float:
    """Round rate values to four decimals."""

    return float(Decimal(value).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP))
