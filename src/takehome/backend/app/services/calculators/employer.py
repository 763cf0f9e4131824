"""Total cost of an employee to the employer."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from takehome.backend.app.models import EmployerCostInput
from takehome.backend.config.year_config import UnemploymentRate, YearConfiguration

from .payroll import calculate_employer_payroll_tax

MONTHS_PER_YEAR = Decimal(12)
WORKING_DAYS_PER_YEAR = Decimal(260)


@dataclass(frozen=True, slots=True)
class EmployerCostResult:
    year: int
    jurisdiction_code: str
    gross_salary: Decimal
    social_security: Decimal
    medicare: Decimal
    federal_unemployment: Decimal
    state_unemployment: Decimal
    retirement_match: Decimal

    @property
    def employer_taxes(self) -> Decimal:
        return (
            self.social_security
            + self.medicare
            + self.federal_unemployment
            + self.state_unemployment
        )

    @property
    def total_cost(self) -> Decimal:
        return self.gross_salary + self.employer_taxes + self.retirement_match

    @property
    def cost_per_month(self) -> Decimal:
        return self.total_cost / MONTHS_PER_YEAR

    @property
    def cost_per_day(self) -> Decimal:
        return self.total_cost / WORKING_DAYS_PER_YEAR


def _unemployment(wages: Decimal, rule: UnemploymentRate) -> Decimal:
    return min(wages, rule.wage_base) * rule.rate


def calculate_employer_cost(
    request: EmployerCostInput, config: YearConfiguration
) -> EmployerCostResult:
    """Add employer payroll taxes, unemployment insurance and match to gross."""

    jurisdiction = config.jurisdiction(request.jurisdiction_code)
    gross = request.gross_annual_amount

    payroll = calculate_employer_payroll_tax(gross, config.payroll)
    state_rule = jurisdiction.unemployment or config.unemployment.state_default

    return EmployerCostResult(
        year=config.year,
        jurisdiction_code=request.jurisdiction_code,
        gross_salary=gross,
        social_security=payroll.social_security,
        medicare=payroll.medicare,
        federal_unemployment=_unemployment(gross, config.unemployment.federal),
        state_unemployment=_unemployment(gross, state_rule),
        retirement_match=gross * request.retirement_match_percent / 100,
    )
