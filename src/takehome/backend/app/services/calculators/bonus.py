"""Withholding versus actual tax on a supplemental bonus payment."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from takehome.backend.app.models import BonusInput, SalaryInput
from takehome.backend.config.year_config import YearConfiguration

from .salary import SalaryResult, calculate_salary
from .utils import ZERO


@dataclass(frozen=True, slots=True)
class BonusWithholding:
    federal: Decimal
    jurisdiction: Decimal
    social_security: Decimal
    medicare: Decimal

    @property
    def total(self) -> Decimal:
        return self.federal + self.jurisdiction + self.social_security + self.medicare


@dataclass(frozen=True, slots=True)
class BonusTaxResult:
    """Flat-rate withholding on a bonus compared with the tax it really adds.

    ``actual`` reuses :class:`BonusWithholding` to hold the increase in each
    tax between the salary with and without the bonus.
    """

    bonus: Decimal
    withholding: BonusWithholding
    actual: BonusWithholding
    without_bonus: SalaryResult
    with_bonus: SalaryResult

    @property
    def net_bonus_withheld(self) -> Decimal:
        return self.bonus - self.withholding.total

    @property
    def net_bonus_actual(self) -> Decimal:
        return self.bonus - self.actual.total

    @property
    def withholding_difference(self) -> Decimal:
        """Positive when more was withheld than owed (a refund at filing)."""

        return self.withholding.total - self.actual.total

    @property
    def effective_bonus_tax_rate(self) -> Decimal:
        return self.actual.total / self.bonus if self.bonus > 0 else ZERO

    @property
    def marginal_tax_rate(self) -> Decimal:
        return self.with_bonus.marginal_tax_rate


def _federal_supplemental_withholding(bonus: Decimal, config: YearConfiguration) -> Decimal:
    rules = config.supplemental_withholding
    regular = min(bonus, rules.high_threshold)
    excess = bonus - rules.high_threshold if bonus > rules.high_threshold else ZERO
    return regular * rules.rate + excess * rules.high_rate


def calculate_bonus_tax(request: BonusInput, config: YearConfiguration) -> BonusTaxResult:
    """Compare supplemental withholding on ``request.bonus`` with the real cost."""

    base_request = SalaryInput(
        gross_annual_amount=request.base_salary,
        filing_status=request.filing_status,
        jurisdiction_code=request.jurisdiction_code,
        pretax_retirement_contribution=request.pretax_retirement_contribution,
    )
    without_bonus = calculate_salary(base_request, config)
    with_bonus = calculate_salary(
        base_request.model_copy(update={"bonus": request.bonus}), config
    )

    before = without_bonus.yearly
    after = with_bonus.yearly
    actual = BonusWithholding(
        federal=after.federal_tax - before.federal_tax,
        jurisdiction=(after.jurisdiction_tax + after.local_tax)
        - (before.jurisdiction_tax + before.local_tax),
        social_security=after.social_security - before.social_security,
        medicare=after.medicare - before.medicare,
    )

    social_security = config.payroll.social_security
    remaining_wage_base = social_security.wage_base - request.base_salary
    if remaining_wage_base < 0:
        remaining_wage_base = ZERO

    # Jurisdictions have no uniform supplemental rate, so the real delta is used.
    withholding = BonusWithholding(
        federal=_federal_supplemental_withholding(request.bonus, config),
        jurisdiction=actual.jurisdiction,
        social_security=min(request.bonus, remaining_wage_base) * social_security.rate,
        medicare=request.bonus * config.payroll.medicare.rate,
    )

    return BonusTaxResult(
        bonus=request.bonus,
        withholding=withholding,
        actual=actual,
        without_bonus=without_bonus,
        with_bonus=with_bonus,
    )
