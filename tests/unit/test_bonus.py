"""Unit tests for supplemental bonus withholding."""

from __future__ import annotations

from decimal import Decimal

import pytest

from takehome.backend.app.models import BonusInput, InvalidInput, build_input
from takehome.backend.app.services.calculators import calculate_bonus_tax
from takehome.backend.config.year_config import YearConfiguration


def _bonus(config: YearConfiguration, **overrides):
    payload = {"base_salary": 75_000, "bonus": 10_000, "jurisdiction_code": "TX"}
    payload.update(overrides)
    return calculate_bonus_tax(build_input(BonusInput, payload), config)


def test_flat_withholding_matches_actual_in_22_percent_bracket(
    config_2025: YearConfiguration,
) -> None:
    result = _bonus(config_2025)

    assert result.withholding.federal == Decimal("2200")
    assert result.withholding.social_security == Decimal("620")
    assert result.withholding.medicare == Decimal("145")
    assert result.without_bonus.yearly.federal_tax == Decimal("8114")
    assert result.with_bonus.yearly.federal_tax == Decimal("10314")
    assert result.actual.federal == Decimal("2200")
    assert result.withholding_difference == 0
    assert result.net_bonus_withheld == Decimal("7035")
    assert result.effective_bonus_tax_rate == Decimal("0.2965")
    assert result.marginal_tax_rate == Decimal("0.22")


def test_withholding_exceeds_actual_in_lower_bracket(config_2025: YearConfiguration) -> None:
    result = _bonus(config_2025, base_salary=30_000, bonus=5_000)

    assert result.actual.federal == Decimal("600")
    assert result.withholding.federal == Decimal("1100")
    assert result.withholding_difference == Decimal("500")
    assert result.net_bonus_actual > result.net_bonus_withheld


def test_social_security_withholding_respects_remaining_wage_base(
    config_2025: YearConfiguration,
) -> None:
    result = _bonus(config_2025, base_salary=176_100, bonus=20_000)

    assert result.withholding.social_security == 0
    assert result.actual.social_security == 0


def test_high_threshold_applies_mandatory_rate(config_2025: YearConfiguration) -> None:
    result = _bonus(config_2025, base_salary=500_000, bonus=1_500_000)

    expected = Decimal("1000000") * Decimal("0.22") + Decimal("500000") * Decimal("0.37")
    assert result.withholding.federal == expected


def test_jurisdiction_withholding_uses_actual_delta(config_2025: YearConfiguration) -> None:
    result = _bonus(config_2025, jurisdiction_code="IL")

    assert result.actual.jurisdiction == Decimal("495")
    assert result.withholding.jurisdiction == result.actual.jurisdiction


def test_zero_bonus_has_zero_effective_rate(config_2025: YearConfiguration) -> None:
    result = _bonus(config_2025, bonus=0)

    assert result.effective_bonus_tax_rate == 0
    assert result.withholding.total == 0


def test_bonus_contribution_cannot_exceed_base_salary() -> None:
    with pytest.raises(InvalidInput, match="base salary"):
        build_input(
            BonusInput,
            {
                "base_salary": 1_000,
                "bonus": 500,
                "jurisdiction_code": "TX",
                "pretax_retirement_contribution": 2_000,
            },
        )
