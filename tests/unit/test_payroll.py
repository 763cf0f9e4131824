"""Unit tests for FICA and self-employment tax helpers."""

from __future__ import annotations

from decimal import Decimal

from takehome.backend.app.services.calculators import (
    calculate_employer_payroll_tax,
    calculate_payroll_tax,
    calculate_self_employment_tax,
)
from takehome.backend.config.year_config import FilingStatus, YearConfiguration


def test_payroll_tax_below_wage_base(config_2025: YearConfiguration) -> None:
    payroll = calculate_payroll_tax(Decimal("50000"), FilingStatus.SINGLE, config_2025.payroll)

    assert payroll.employee_social_security == Decimal("3100")
    assert payroll.employee_medicare == Decimal("725")
    assert payroll.additional_medicare == 0
    assert payroll.employee_total == payroll.employer_total == Decimal("3825")


def test_social_security_is_capped_at_wage_base(config_2025: YearConfiguration) -> None:
    payroll = calculate_payroll_tax(
        Decimal("250000"), FilingStatus.SINGLE, config_2025.payroll
    )

    assert payroll.employee_social_security == Decimal("10918.2")
    assert payroll.additional_medicare == Decimal("450")
    assert payroll.employee_medicare == Decimal("4075")
    # The employer never pays the additional Medicare surtax.
    assert payroll.employer_medicare == Decimal("3625")


def test_additional_medicare_threshold_depends_on_filing_status(
    config_2025: YearConfiguration,
) -> None:
    wages = Decimal("240000")
    single = calculate_payroll_tax(wages, FilingStatus.SINGLE, config_2025.payroll)
    joint = calculate_payroll_tax(wages, FilingStatus.MARRIED_JOINTLY, config_2025.payroll)
    separate = calculate_payroll_tax(
        wages, FilingStatus.MARRIED_SEPARATELY, config_2025.payroll
    )

    assert single.additional_medicare == Decimal("360")
    assert joint.additional_medicare == 0
    assert separate.additional_medicare == Decimal("1035")


def test_negative_wages_produce_no_payroll_tax(config_2025: YearConfiguration) -> None:
    payroll = calculate_payroll_tax(Decimal("-10"), FilingStatus.SINGLE, config_2025.payroll)

    assert payroll.employee_total == 0
    assert payroll.employer_total == 0


def test_employer_payroll_tax(config_2025: YearConfiguration) -> None:
    employer = calculate_employer_payroll_tax(Decimal("60000"), config_2025.payroll)

    assert employer.social_security == Decimal("3720")
    assert employer.medicare == Decimal("870")
    assert employer.total == Decimal("4590")


def test_self_employment_tax(config_2025: YearConfiguration) -> None:
    se_tax = calculate_self_employment_tax(
        Decimal("100000"), FilingStatus.SINGLE, config_2025.payroll
    )

    assert se_tax.taxable_base == Decimal("92350")
    assert se_tax.social_security == Decimal("11451.4")
    assert se_tax.medicare == Decimal("2678.15")
    assert se_tax.total == Decimal("14129.55")
    assert se_tax.deductible_portion == Decimal("7064.775")


def test_self_employment_social_security_caps_at_wage_base(
    config_2025: YearConfiguration,
) -> None:
    se_tax = calculate_self_employment_tax(
        Decimal("300000"), FilingStatus.SINGLE, config_2025.payroll
    )

    assert se_tax.social_security == Decimal("176100") * Decimal("0.124")
    assert se_tax.additional_medicare == (se_tax.taxable_base - 200000) * Decimal("0.009")
