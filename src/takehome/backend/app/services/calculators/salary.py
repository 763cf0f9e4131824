"""Composite take-home pay calculation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from decimal import Decimal
from types import MappingProxyType

from takehome.backend.app.models import SalaryInput
from takehome.backend.config.year_config import FilingStatus, YearConfiguration

from .jurisdiction import calculate_jurisdiction_tax
from .payroll import PayrollTax, calculate_payroll_tax
from .utils import (
    ZERO,
    BracketSlice,
    calculate_progressive_tax,
    marginal_rate,
    progressive_tax_breakdown,
)

PERIODS: Mapping[str, int] = MappingProxyType(
    {
        "monthly": 12,
        "biweekly": 26,
        "weekly": 52,
        "daily": 260,
        "hourly": 2080,
    }
)


@dataclass(frozen=True, slots=True)
class PeriodBreakdown:
    """Income, deductions and taxes over a single pay period."""

    gross_income: Decimal
    retirement_contribution: Decimal
    hsa_contribution: Decimal
    adjusted_gross_income: Decimal
    standard_deduction: Decimal
    federal_taxable_income: Decimal
    jurisdiction_taxable_income: Decimal
    federal_tax: Decimal
    jurisdiction_tax: Decimal
    local_tax: Decimal
    social_security: Decimal
    medicare: Decimal
    additional_medicare: Decimal
    total_tax: Decimal
    take_home_pay: Decimal

    @property
    def pretax_contributions(self) -> Decimal:
        return self.retirement_contribution + self.hsa_contribution

    @property
    def payroll_tax(self) -> Decimal:
        return self.social_security + self.medicare

    def scaled(self, divisor: int) -> PeriodBreakdown:
        """Return this breakdown divided evenly across ``divisor`` periods."""

        factor = Decimal(divisor)
        return PeriodBreakdown(
            **{field.name: getattr(self, field.name) / factor for field in fields(self)}
        )


@dataclass(frozen=True, slots=True)
class SalaryResult:
    year: int
    filing_status: FilingStatus
    jurisdiction_code: str
    jurisdiction_name: str
    yearly: PeriodBreakdown
    periods: Mapping[str, PeriodBreakdown]
    effective_tax_rate: Decimal
    marginal_tax_rate: Decimal
    jurisdiction_marginal_rate: Decimal
    payroll: PayrollTax
    federal_brackets: tuple[BracketSlice, ...]
    notices: tuple[str, ...] = ()

    @property
    def take_home_pay(self) -> Decimal:
        return self.yearly.take_home_pay

    @property
    def monthly(self) -> PeriodBreakdown:
        return self.periods["monthly"]

    @property
    def biweekly(self) -> PeriodBreakdown:
        return self.periods["biweekly"]

    @property
    def weekly(self) -> PeriodBreakdown:
        return self.periods["weekly"]

    @property
    def daily(self) -> PeriodBreakdown:
        return self.periods["daily"]

    @property
    def hourly(self) -> PeriodBreakdown:
        return self.periods["hourly"]


def _format_limit(amount: Decimal) -> str:
    return f"${amount:,.0f}"


def _contribution_notices(request: SalaryInput, config: YearConfiguration) -> tuple[str, ...]:
    limits = config.limits
    notices: list[str] = []

    retirement_limit = limits.retirement_401k.employee
    if request.pretax_retirement_contribution > retirement_limit:
        notices.append(
            f"Retirement contribution exceeds the {config.year} 401(k) employee limit "
            f"of {_format_limit(retirement_limit)} (catch-up of "
            f"{_format_limit(limits.retirement_401k.catch_up)} available from age 50)"
        )

    hsa = request.pretax_hsa_contribution
    if hsa > limits.hsa.family:
        notices.append(
            f"HSA contribution exceeds the {config.year} family coverage limit "
            f"of {_format_limit(limits.hsa.family)}"
        )
    elif hsa > limits.hsa.self_only:
        notices.append(
            f"HSA contribution exceeds the {config.year} self-only limit of "
            f"{_format_limit(limits.hsa.self_only)}; only family coverage allows it"
        )

    return tuple(notices)


def calculate_salary(request: SalaryInput, config: YearConfiguration) -> SalaryResult:
    """Compute taxes and take-home pay for ``request`` under ``config``."""

    jurisdiction = config.jurisdiction(request.jurisdiction_code)
    status = request.filing_status

    gross = request.total_gross
    retirement = request.pretax_retirement_contribution
    hsa = request.pretax_hsa_contribution

    adjusted = gross - retirement - hsa
    if adjusted < 0:
        adjusted = ZERO

    standard_deduction = config.federal.standard_deduction_for(status)
    federal_taxable = adjusted - standard_deduction
    if federal_taxable < 0:
        federal_taxable = ZERO
    brackets = config.federal.brackets_for(status)
    federal_tax = calculate_progressive_tax(federal_taxable, brackets)

    state = calculate_jurisdiction_tax(
        adjusted, jurisdiction, include_local=request.include_local_tax
    )

    # Retirement deferrals stay in the FICA base; HSA payroll deductions do not.
    payroll = calculate_payroll_tax(gross - hsa, status, config.payroll)

    total_tax = federal_tax + state.tax + state.local_tax + payroll.employee_total
    take_home = gross - retirement - hsa - total_tax

    yearly = PeriodBreakdown(
        gross_income=gross,
        retirement_contribution=retirement,
        hsa_contribution=hsa,
        adjusted_gross_income=adjusted,
        standard_deduction=standard_deduction,
        federal_taxable_income=federal_taxable,
        jurisdiction_taxable_income=state.taxable_income,
        federal_tax=federal_tax,
        jurisdiction_tax=state.tax,
        local_tax=state.local_tax,
        social_security=payroll.employee_social_security,
        medicare=payroll.employee_medicare,
        additional_medicare=payroll.additional_medicare,
        total_tax=total_tax,
        take_home_pay=take_home,
    )

    periods = MappingProxyType(
        {name: yearly.scaled(divisor) for name, divisor in PERIODS.items()}
    )

    return SalaryResult(
        year=config.year,
        filing_status=status,
        jurisdiction_code=request.jurisdiction_code,
        jurisdiction_name=jurisdiction.name,
        yearly=yearly,
        periods=periods,
        effective_tax_rate=total_tax / gross if gross > 0 else ZERO,
        marginal_tax_rate=marginal_rate(federal_taxable, brackets),
        jurisdiction_marginal_rate=state.marginal_rate,
        payroll=payroll,
        federal_brackets=tuple(progressive_tax_breakdown(federal_taxable, brackets)),
        notices=_contribution_notices(request, config),
    )
