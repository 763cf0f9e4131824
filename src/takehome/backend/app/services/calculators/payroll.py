"""Social Security, Medicare and self-employment tax helpers."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from takehome.backend.config.year_config import FilingStatus, PayrollTaxConfig

from .utils import ZERO


@dataclass(frozen=True, slots=True)
class EmployerPayrollTax:
    social_security: Decimal
    medicare: Decimal

    @property
    def total(self) -> Decimal:
        return self.social_security + self.medicare


@dataclass(frozen=True, slots=True)
class PayrollTax:
    """FICA withheld from the employee and matched by the employer.

    ``employee_medicare`` already includes ``additional_medicare``; the
    surtax is reported separately for display only.
    """

    employee_social_security: Decimal
    employee_medicare: Decimal
    additional_medicare: Decimal
    employer_social_security: Decimal
    employer_medicare: Decimal

    @property
    def employee_total(self) -> Decimal:
        return self.employee_social_security + self.employee_medicare

    @property
    def employer_total(self) -> Decimal:
        return self.employer_social_security + self.employer_medicare


@dataclass(frozen=True, slots=True)
class SelfEmploymentTax:
    net_earnings: Decimal
    taxable_base: Decimal
    social_security: Decimal
    medicare: Decimal
    additional_medicare: Decimal
    deductible_portion: Decimal

    @property
    def total(self) -> Decimal:
        return self.social_security + self.medicare


def _positive(value: Decimal) -> Decimal:
    return value if value > 0 else ZERO


def _additional_medicare(
    wages: Decimal, status: FilingStatus, config: PayrollTaxConfig
) -> Decimal:
    threshold = config.medicare.threshold_for(status)
    return _positive(wages - threshold) * config.medicare.additional_rate


def calculate_employer_payroll_tax(
    wages: Decimal, config: PayrollTaxConfig
) -> EmployerPayrollTax:
    """Return the employer's share of FICA for ``wages``."""

    wages = _positive(wages)
    social_security = config.social_security
    return EmployerPayrollTax(
        social_security=min(wages, social_security.wage_base) * social_security.rate,
        medicare=wages * config.medicare.rate,
    )


def calculate_payroll_tax(
    wages: Decimal, status: FilingStatus, config: PayrollTaxConfig
) -> PayrollTax:
    """Compute employee and employer FICA on ``wages``."""

    wages = _positive(wages)
    employer = calculate_employer_payroll_tax(wages, config)
    additional = _additional_medicare(wages, status, config)

    return PayrollTax(
        employee_social_security=employer.social_security,
        employee_medicare=employer.medicare + additional,
        additional_medicare=additional,
        employer_social_security=employer.social_security,
        employer_medicare=employer.medicare,
    )


def calculate_self_employment_tax(
    net_earnings: Decimal, status: FilingStatus, config: PayrollTaxConfig
) -> SelfEmploymentTax:
    """Compute self-employment tax on ``net_earnings``."""

    rules = config.self_employment
    net_earnings = _positive(net_earnings)
    base = net_earnings * rules.earnings_factor

    social_security = min(base, config.social_security.wage_base) * rules.social_security_rate
    additional = _additional_medicare(base, status, config)
    medicare = base * rules.medicare_rate + additional
    deductible = (social_security + medicare) * rules.deductible_portion

    return SelfEmploymentTax(
        net_earnings=net_earnings,
        taxable_base=base,
        social_security=social_security,
        medicare=medicare,
        additional_medicare=additional,
        deductible_portion=deductible,
    )
