"""Derived metrics built on top of the salary calculator."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from takehome.backend.app.models import InvalidInput, SalaryInput, build_input
from takehome.backend.config.year_config import FilingStatus, YearConfiguration

from .salary import SalaryResult, calculate_salary
from .utils import CENT, ZERO

WEEKS_PER_YEAR = Decimal(52)
MONTHS_PER_YEAR = Decimal(12)

NET_TO_GROSS_TOLERANCE = Decimal("1")
NET_TO_GROSS_MAX_ITERATIONS = 100
_MAX_EXPANSIONS = 64


@dataclass(frozen=True, slots=True)
class RaiseDelta:
    baseline: SalaryResult
    raised: SalaryResult

    @property
    def gross_delta(self) -> Decimal:
        return self.raised.yearly.gross_income - self.baseline.yearly.gross_income

    @property
    def net_delta(self) -> Decimal:
        return self.raised.take_home_pay - self.baseline.take_home_pay

    @property
    def monthly_net_delta(self) -> Decimal:
        return self.net_delta / MONTHS_PER_YEAR

    @property
    def federal_tax_delta(self) -> Decimal:
        return self.raised.yearly.federal_tax - self.baseline.yearly.federal_tax

    @property
    def jurisdiction_tax_delta(self) -> Decimal:
        before = self.baseline.yearly
        after = self.raised.yearly
        return (after.jurisdiction_tax + after.local_tax) - (
            before.jurisdiction_tax + before.local_tax
        )

    @property
    def payroll_tax_delta(self) -> Decimal:
        return self.raised.yearly.payroll_tax - self.baseline.yearly.payroll_tax

    @property
    def effective_retention_rate(self) -> Decimal:
        """Share of the gross increase that reaches take-home pay.

        Defined as zero when the gross amount does not change.
        """

        gross_delta = self.gross_delta
        if gross_delta == 0:
            return ZERO
        return self.net_delta / gross_delta


@dataclass(frozen=True, slots=True)
class NetToGrossResult:
    target_net: Decimal
    gross_annual_amount: Decimal
    salary: SalaryResult
    iterations: int

    @property
    def difference(self) -> Decimal:
        return self.salary.take_home_pay - self.target_net


@dataclass(frozen=True, slots=True)
class MinimumWageEarnings:
    hourly_wage: Decimal
    tipped_wage: Decimal | None
    uses_federal_minimum: bool
    hours_per_week: Decimal
    salary: SalaryResult

    @property
    def annual_gross(self) -> Decimal:
        return self.salary.yearly.gross_income

    @property
    def take_home_per_month(self) -> Decimal:
        return self.salary.take_home_pay / MONTHS_PER_YEAR

    @property
    def take_home_per_week(self) -> Decimal:
        return self.salary.take_home_pay / WEEKS_PER_YEAR

    @property
    def take_home_per_hour(self) -> Decimal:
        hours = self.hours_per_week * WEEKS_PER_YEAR
        return self.salary.take_home_pay / hours if hours > 0 else ZERO


def delta_on_raise(
    baseline: SalaryInput, new_gross: Decimal, config: YearConfiguration
) -> RaiseDelta:
    """Compare take-home pay at the baseline gross and at ``new_gross``."""

    payload = baseline.model_dump()
    payload["gross_annual_amount"] = new_gross
    raised_request = build_input(SalaryInput, payload)

    return RaiseDelta(
        baseline=calculate_salary(baseline, config),
        raised=calculate_salary(raised_request, config),
    )


def _salary_at(
    gross: Decimal,
    status: FilingStatus,
    jurisdiction_code: str,
    config: YearConfiguration,
) -> SalaryResult:
    request = build_input(
        SalaryInput,
        {
            "gross_annual_amount": gross,
            "filing_status": status,
            "jurisdiction_code": jurisdiction_code,
        },
    )
    return calculate_salary(request, config)


def gross_for_net(
    target_net: Decimal,
    status: FilingStatus,
    jurisdiction_code: str,
    config: YearConfiguration,
    *,
    tolerance: Decimal = NET_TO_GROSS_TOLERANCE,
    max_iterations: int = NET_TO_GROSS_MAX_ITERATIONS,
) -> NetToGrossResult:
    """Find the gross salary whose take-home pay matches ``target_net``.

    Take-home pay is non-decreasing in gross, so a bisection over whole cents
    converges; the search stops once the take-home is within ``tolerance``.
    """

    if target_net < 0:
        raise InvalidInput("Target take-home pay cannot be negative")

    if target_net == 0:
        return NetToGrossResult(
            target_net=target_net,
            gross_annual_amount=ZERO,
            salary=_salary_at(ZERO, status, jurisdiction_code, config),
            iterations=0,
        )

    low = ZERO
    high = target_net * 2
    for _ in range(_MAX_EXPANSIONS):
        if _salary_at(high, status, jurisdiction_code, config).take_home_pay >= target_net:
            break
        low = high
        high *= 2

    best = _salary_at(high, status, jurisdiction_code, config)
    iterations = 0
    while iterations < max_iterations:
        iterations += 1
        mid = ((low + high) / 2).quantize(CENT, rounding=ROUND_HALF_UP)
        current = _salary_at(mid, status, jurisdiction_code, config)
        difference = current.take_home_pay - target_net

        if abs(difference) < abs(best.take_home_pay - target_net):
            best = current
        if abs(difference) <= tolerance or mid in (low, high):
            break
        if difference < 0:
            low = mid
        else:
            high = mid

    return NetToGrossResult(
        target_net=target_net,
        gross_annual_amount=best.yearly.gross_income,
        salary=best,
        iterations=iterations,
    )


def minimum_wage_earnings(
    jurisdiction_code: str,
    hours_per_week: Decimal,
    status: FilingStatus,
    config: YearConfiguration,
) -> MinimumWageEarnings:
    """Annual pay and take-home for a full year at the jurisdiction's minimum wage."""

    if hours_per_week <= 0:
        raise InvalidInput("Hours per week must be positive")

    jurisdiction = config.jurisdiction(jurisdiction_code)
    wage = jurisdiction.minimum_wage
    hourly = wage.hourly if wage is not None else config.federal.minimum_wage
    tipped = wage.tipped if wage is not None else None

    annual_gross = hourly * hours_per_week * WEEKS_PER_YEAR
    salary = _salary_at(annual_gross, status, jurisdiction_code, config)

    return MinimumWageEarnings(
        hourly_wage=hourly,
        tipped_wage=tipped,
        uses_federal_minimum=wage is None,
        hours_per_week=hours_per_week,
        salary=salary,
    )
