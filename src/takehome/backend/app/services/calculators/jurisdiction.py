"""State and district income tax helpers."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from typing_extensions import assert_never

from takehome.backend.config.year_config import (
    FlatTax,
    JurisdictionConfig,
    NoTax,
    ProgressiveTax,
)

from .utils import ZERO, calculate_progressive_tax, marginal_rate


@dataclass(frozen=True, slots=True)
class JurisdictionTax:
    taxable_income: Decimal
    tax: Decimal
    local_tax: Decimal
    marginal_rate: Decimal

    @property
    def total(self) -> Decimal:
        return self.tax + self.local_tax


NO_JURISDICTION_TAX = JurisdictionTax(ZERO, ZERO, ZERO, ZERO)


def _taxable(income: Decimal, rule: FlatTax | ProgressiveTax) -> Decimal:
    taxable = income - rule.standard_deduction - rule.personal_exemption
    return taxable if taxable > 0 else ZERO


def calculate_jurisdiction_tax(
    income: Decimal,
    jurisdiction: JurisdictionConfig,
    *,
    include_local: bool = True,
) -> JurisdictionTax:
    """Apply the jurisdiction's income tax rule to ``income``.

    ``income`` is the adjusted gross after pretax contributions; the rule's own
    standard deduction and personal exemption are subtracted here.
    """

    rule = jurisdiction.income_tax

    if isinstance(rule, NoTax):
        return NO_JURISDICTION_TAX

    if isinstance(rule, FlatTax):
        taxable = _taxable(income, rule)
        return JurisdictionTax(
            taxable_income=taxable,
            tax=taxable * rule.rate,
            local_tax=ZERO,
            marginal_rate=rule.rate,
        )

    if isinstance(rule, ProgressiveTax):
        taxable = _taxable(income, rule)
        local_tax = ZERO
        if include_local and rule.local_rate is not None:
            local_tax = taxable * rule.local_rate
        return JurisdictionTax(
            taxable_income=taxable,
            tax=calculate_progressive_tax(taxable, rule.brackets),
            local_tax=local_tax,
            marginal_rate=marginal_rate(taxable, rule.brackets),
        )

    assert_never(rule)
