"""Unit tests for the calculation service."""
from __future__ import annotations

import logging

import pytest

from takehome.backend.app.models import InvalidInput
from takehome.backend.app.services import calculation_service
from takehome.backend.app.services.calculation_service import (
    _profile_section,
    _profiling_enabled,
    _resolve_engine,
    calculate_bonus,
    calculate_employer_cost,
    calculate_gross_for_net,
    calculate_minimum_wage,
    calculate_multiple_jobs,
    calculate_raise,
    calculate_salary,
    calculate_self_employment,
)


def test_calculate_salary_serialises_rounded_figures() -> None:
    result = calculate_salary(
        {"year": 2025, "gross_annual_amount": 50_000, "jurisdiction_code": "TX"}
    )

    assert result["year"] == 2025
    assert result["filing_status"] == "single"
    assert result["jurisdiction"] == {"code": "TX", "name": "Texas"}
    assert result["yearly"]["take_home_pay"] == 42213.5
    assert result["yearly"]["federal_tax"] == 3961.5
    assert result["periods"]["monthly"]["take_home_pay"] == 3517.79
    assert result["rates"] == {
        "effective_tax_rate": 0.1557,
        "marginal_tax_rate": 0.12,
        "jurisdiction_marginal_rate": 0.0,
    }
    assert result["payroll"]["employee_total"] == 3825.0
    assert result["federal_brackets"][0] == {
        "lower": 0.0,
        "upper": 11925.0,
        "rate": 0.1,
        "taxable_amount": 11925.0,
        "tax": 1192.5,
    }
    assert result["notices"] == []


def test_missing_year_uses_default_year() -> None:
    result = calculate_salary({"gross_annual_amount": 50_000, "jurisdiction_code": "TX"})

    assert result["year"] == 2025


def test_string_year_is_accepted() -> None:
    result = calculate_salary(
        {"year": "2024", "gross_annual_amount": 50_000, "jurisdiction_code": "TX"}
    )

    assert result["year"] == 2024


@pytest.mark.parametrize("year", [True, 2025.5, "next", 1999])
def test_invalid_year_is_rejected(year: object) -> None:
    with pytest.raises(InvalidInput):
        _resolve_engine({"year": year})


def test_resolve_engine_strips_year() -> None:
    engine, data = _resolve_engine({"year": 2024, "gross_annual_amount": 1})

    assert engine.year == 2024
    assert data == {"gross_annual_amount": 1}


def test_unknown_fields_are_rejected() -> None:
    with pytest.raises(InvalidInput, match="salary"):
        calculate_salary(
            {"gross_annual_amount": 50_000, "jurisdiction_code": "TX", "salary": 1}
        )


def test_calculate_employer_cost() -> None:
    result = calculate_employer_cost(
        {
            "gross_annual_amount": 60_000,
            "jurisdiction_code": "TX",
            "retirement_match_percent": 4,
        }
    )

    assert result["total_cost"] == 67302.0
    assert result["employer_taxes"] == 4902.0
    assert result["cost_per_month"] == 5608.5
    assert result["cost_per_day"] == 258.85


def test_calculate_bonus() -> None:
    result = calculate_bonus(
        {"base_salary": 75_000, "bonus": 10_000, "jurisdiction_code": "TX"}
    )

    assert result["withholding"]["total"] == 2965.0
    assert result["actual"]["federal"] == 2200.0
    assert result["withholding_difference"] == 0.0
    assert result["effective_bonus_tax_rate"] == 0.2965


def test_calculate_self_employment() -> None:
    result = calculate_self_employment({"revenue": 120_000, "expenses": 20_000})

    assert result["self_employment_tax"]["total"] == 14129.55
    assert result["self_employment_tax"]["deductible_portion"] == 7064.78
    assert result["federal_tax"] == 12059.75
    assert result["take_home_pay"] == 73810.70
    assert result["quarterly_estimated_payment"] == 6547.32


def test_calculate_raise() -> None:
    result = calculate_raise(
        {"current_gross": 60_000, "new_gross": 70_000, "jurisdiction_code": "TX"}
    )

    assert result["net_delta"] == 7382.5
    assert result["effective_retention_rate"] == 0.7383
    assert result["current"]["yearly"]["gross_income"] == 60_000.0
    assert result["new"]["yearly"]["gross_income"] == 70_000.0


def test_calculate_gross_for_net() -> None:
    result = calculate_gross_for_net(
        {"target_net_annual": 42_213.5, "jurisdiction_code": "TX"}
    )

    assert abs(result["difference"]) <= 1
    assert abs(result["gross_annual_amount"] - 50_000) <= 2
    assert result["salary"]["yearly"]["gross_income"] == result["gross_annual_amount"]


def test_calculate_minimum_wage() -> None:
    result = calculate_minimum_wage({"jurisdiction_code": "SD", "hours_per_week": 30})

    assert result["hourly_wage"] == 11.5
    assert result["tipped_wage"] == 5.75
    assert result["uses_federal_minimum"] is False
    assert result["annual_gross"] == 17_940.0


def test_calculate_multiple_jobs() -> None:
    result = calculate_multiple_jobs(
        {
            "year": 2025,
            "jobs": [
                {"name": "Day job", "salary": 150_000},
                {"name": "Evenings", "salary": 50_000},
            ],
            "jurisdiction_code": "TX",
        }
    )

    assert result["year"] == 2025
    assert [job["name"] for job in result["jobs"]] == ["Day job", "Evenings"]
    assert result["highest_paying_job"] == "Day job"
    assert result["withheld"]["federal"] == 29_208.5
    assert result["owed"]["federal"] == 37_247.0
    assert result["federal_underpayment"] == 8_038.5
    assert result["excess_social_security"] == 1_481.8
    assert result["combined"]["yearly"]["gross_income"] == 200_000.0


def test_profiling_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TAKEHOME_PROFILE_CALCULATIONS", raising=False)
    assert _profiling_enabled() is False

    monkeypatch.setenv("TAKEHOME_PROFILE_CALCULATIONS", "yes")
    assert _profiling_enabled() is True


def test_profile_section_records_duration() -> None:
    timings: dict[str, float] = {}

    with _profile_section("work", timings):
        pass
    with _profile_section("skipped", None):
        pass

    assert set(timings) == {"work"}
    assert timings["work"] >= 0


def test_profiling_logs_timings(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("TAKEHOME_PROFILE_CALCULATIONS", "1")

    with caplog.at_level(logging.DEBUG, logger=calculation_service.__name__):
        calculate_salary({"gross_annual_amount": 50_000, "jurisdiction_code": "TX"})

    assert "calculate_salary timings (ms)" in caplog.text
