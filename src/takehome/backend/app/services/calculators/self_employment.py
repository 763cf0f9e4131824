"""Sole-proprietor take-home pay and quarterly estimated tax."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from takehome.backend.app.models import SelfEmploymentInput
from takehome.backend.config.year_config import YearConfiguration

from .payroll import SelfEmploymentTax, calculate_self_employment_tax
from .utils import ZERO, calculate_progressive_tax, marginal_rate

QUARTERS_PER_YEAR = Decimal(4)
SEP_IRA_PROFIT_SHARE = Decimal("0.25")


@dataclass(frozen=True, slots=True)
class SelfEmploymentResult:
    year: int
    net_profit: Decimal
    self_employment_tax: SelfEmploymentTax
    adjusted_gross_income: Decimal
    standard_deduction: Decimal
    taxable_income: Decimal
    federal_tax: Decimal
    retirement_contribution: Decimal
    marginal_tax_rate: Decimal
    sep_ira_limit: Decimal

    @property
    def total_tax(self) -> Decimal:
        return self.federal_tax + self.self_employment_tax.total

    @property
    def take_home_pay(self) -> Decimal:
        return self.net_profit - self.total_tax - self.retirement_contribution

    @property
    def quarterly_estimated_payment(self) -> Decimal:
        return self.total_tax / QUARTERS_PER_YEAR

    @property
    def effective_tax_rate(self) -> Decimal:
        return self.total_tax / self.net_profit if self.net_profit > 0 else ZERO


def calculate_self_employment(
    request: SelfEmploymentInput, config: YearConfiguration
) -> SelfEmploymentResult:
    """Compute SE tax, federal income tax and take-home for a sole proprietor."""

    status = request.filing_status
    profit = request.revenue - request.expenses - request.home_office_deduction
    if profit < 0:
        profit = ZERO

    se_tax = calculate_self_employment_tax(profit, status, config.payroll)

    adjusted = (
        profit
        - se_tax.deductible_portion
        - request.retirement_contribution
        - request.health_insurance
    )
    if adjusted < 0:
        adjusted = ZERO

    standard_deduction = config.federal.standard_deduction_for(status)
    taxable = adjusted - standard_deduction
    if taxable < 0:
        taxable = ZERO
    brackets = config.federal.brackets_for(status)

    sep_ira_limit = (profit - se_tax.deductible_portion) * SEP_IRA_PROFIT_SHARE
    employer_cap = config.limits.retirement_401k.employer
    if employer_cap is not None:
        sep_ira_limit = min(sep_ira_limit, employer_cap)

    return SelfEmploymentResult(
        year=config.year,
        net_profit=profit,
        self_employment_tax=se_tax,
        adjusted_gross_income=adjusted,
        standard_deduction=standard_deduction,
        taxable_income=taxable,
        federal_tax=calculate_progressive_tax(taxable, brackets),
        retirement_contribution=request.retirement_contribution,
        marginal_tax_rate=marginal_rate(taxable, brackets),
        sep_ira_limit=sep_ira_limit if sep_ira_limit > 0 else ZERO,
    )
