"""Tax engine facade binding every calculator to one tax year.

A :class:`TaxEngine` wraps an immutable :class:`YearConfiguration`. Engines for
different years can be used side by side; nothing here reads module-level
state beyond the cached configuration loader used by :meth:`TaxEngine.for_year`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from typing_extensions import Self, assert_never

from takehome.backend.app.models import (
    BonusInput,
    EmployerCostInput,
    InvalidInput,
    MultipleJobsInput,
    SalaryInput,
    SelfEmploymentInput,
    build_input,
)
from takehome.backend.config.year_config import (
    FilingStatus,
    FlatTax,
    JurisdictionConfig,
    MinimumWage,
    NoTax,
    ProgressiveTax,
    TaxBracket,
    YearConfiguration,
    load_year_configuration,
    to_decimal,
)

from .calculators import (
    BonusTaxResult,
    EmployerCostResult,
    MinimumWageEarnings,
    MultipleJobsResult,
    NetToGrossResult,
    RaiseDelta,
    SalaryResult,
    SelfEmploymentResult,
    calculate_bonus_tax,
    calculate_employer_cost,
    calculate_multiple_jobs,
    calculate_salary,
    calculate_self_employment,
    delta_on_raise,
    gross_for_net,
    minimum_wage_earnings,
)


def _coerce_request(model: Any, request: Any) -> Any:
    if isinstance(request, model):
        return request
    return build_input(model, request)


def _filing_status(value: FilingStatus | str) -> FilingStatus:
    try:
        return FilingStatus(value)
    except ValueError as exc:
        raise InvalidInput(f"Unknown filing status '{value}'") from exc


class TaxEngine:
    """Run salary, employer and self-employment calculations for one year."""

    def __init__(self, config: YearConfiguration) -> None:
        self._config = config

    @classmethod
    def for_year(cls, year: int) -> Self:
        return cls(load_year_configuration(year))

    @property
    def config(self) -> YearConfiguration:
        return self._config

    @property
    def year(self) -> int:
        return self._config.year

    def __repr__(self) -> str:
        return f"{type(self).__name__}(year={self.year})"

    # Calculations -----------------------------------------------------

    def calculate(self, request: SalaryInput | Mapping[str, Any]) -> SalaryResult:
        return calculate_salary(_coerce_request(SalaryInput, request), self._config)

    def employer_cost(
        self,
        gross_annual_amount: Decimal | float,
        jurisdiction_code: str,
        retirement_match_percent: Decimal | float = 0,
    ) -> EmployerCostResult:
        request = build_input(
            EmployerCostInput,
            {
                "gross_annual_amount": gross_annual_amount,
                "jurisdiction_code": jurisdiction_code,
                "retirement_match_percent": retirement_match_percent,
            },
        )
        return calculate_employer_cost(request, self._config)

    def bonus_tax(self, request: BonusInput | Mapping[str, Any]) -> BonusTaxResult:
        return calculate_bonus_tax(_coerce_request(BonusInput, request), self._config)

    def self_employment(
        self, request: SelfEmploymentInput | Mapping[str, Any]
    ) -> SelfEmploymentResult:
        return calculate_self_employment(
            _coerce_request(SelfEmploymentInput, request), self._config
        )

    def delta_on_raise(
        self,
        old_gross: Decimal | float,
        new_gross: Decimal | float,
        filing_status: FilingStatus | str,
        jurisdiction_code: str,
        *,
        pretax_retirement_contribution: Decimal | float = 0,
        pretax_hsa_contribution: Decimal | float = 0,
    ) -> RaiseDelta:
        baseline = build_input(
            SalaryInput,
            {
                "gross_annual_amount": old_gross,
                "filing_status": filing_status,
                "jurisdiction_code": jurisdiction_code,
                "pretax_retirement_contribution": pretax_retirement_contribution,
                "pretax_hsa_contribution": pretax_hsa_contribution,
            },
        )
        return delta_on_raise(baseline, to_decimal(new_gross), self._config)

    def gross_for_net(
        self,
        target_net: Decimal | float,
        filing_status: FilingStatus | str,
        jurisdiction_code: str,
    ) -> NetToGrossResult:
        return gross_for_net(
            to_decimal(target_net),
            _filing_status(filing_status),
            jurisdiction_code,
            self._config,
        )

    def minimum_wage_earnings(
        self,
        jurisdiction_code: str,
        hours_per_week: Decimal | float = 40,
        filing_status: FilingStatus | str = FilingStatus.SINGLE,
    ) -> MinimumWageEarnings:
        return minimum_wage_earnings(
            jurisdiction_code,
            to_decimal(hours_per_week),
            _filing_status(filing_status),
            self._config,
        )

    def multiple_jobs(
        self, request: MultipleJobsInput | Mapping[str, Any]
    ) -> MultipleJobsResult:
        return calculate_multiple_jobs(
            _coerce_request(MultipleJobsInput, request), self._config
        )

    # Rule-table metadata ----------------------------------------------

    def jurisdiction_codes(self) -> tuple[str, ...]:
        return self._config.jurisdiction_codes

    def jurisdiction(self, code: str) -> JurisdictionConfig:
        return self._config.jurisdiction(code)

    def has_income_tax(self, code: str) -> bool:
        return self.jurisdiction(code).has_income_tax

    def jurisdiction_brackets(self, code: str) -> tuple[TaxBracket, ...]:
        """Return the jurisdiction's rate table in bracket form.

        A flat rate is reported as a single open bracket and a jurisdiction
        without income tax as an empty table.
        """

        rule = self.jurisdiction(code).income_tax
        if isinstance(rule, NoTax):
            return ()
        if isinstance(rule, FlatTax):
            return (TaxBracket(rate=rule.rate),)
        if isinstance(rule, ProgressiveTax):
            return tuple(rule.brackets)
        assert_never(rule)

    def minimum_wage(self, code: str) -> MinimumWage:
        """Return the jurisdiction minimum wage, or the federal floor."""

        wage = self.jurisdiction(code).minimum_wage
        if wage is not None:
            return wage
        return MinimumWage(hourly=self._config.federal.minimum_wage)

    def federal_brackets(
        self, filing_status: FilingStatus | str = FilingStatus.SINGLE
    ) -> Sequence[TaxBracket]:
        return self._config.federal.brackets_for(_filing_status(filing_status))

    def no_income_tax_codes(self) -> tuple[str, ...]:
        return self._codes_where(lambda rule: isinstance(rule, NoTax))

    def flat_tax_codes(self) -> tuple[str, ...]:
        return self._codes_where(lambda rule: isinstance(rule, FlatTax))

    def progressive_tax_codes(self) -> tuple[str, ...]:
        return self._codes_where(lambda rule: isinstance(rule, ProgressiveTax))

    def _codes_where(self, predicate: Any) -> tuple[str, ...]:
        return tuple(
            code
            for code in self._config.jurisdiction_codes
            if predicate(self._config.jurisdictions[code].income_tax)
        )


__all__ = ["TaxEngine"]
