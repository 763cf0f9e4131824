"""Unit tests for withholding across several concurrent jobs."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest

from takehome.backend.app.models import InvalidInput, MultipleJobsInput, build_input
from takehome.backend.app.services.calculators import calculate_multiple_jobs
from takehome.backend.config.year_config import UnknownJurisdiction, YearConfiguration


def _jobs(config: YearConfiguration, *salaries: int, **overrides: Any):
    payload: dict[str, Any] = {
        "jobs": [
            {"name": f"Employer {index}", "salary": salary}
            for index, salary in enumerate(salaries, 1)
        ],
        "jurisdiction_code": "TX",
    }
    payload.update(overrides)
    return calculate_multiple_jobs(build_input(MultipleJobsInput, payload), config)


def test_second_job_causes_federal_underpayment(config_2025: YearConfiguration) -> None:
    result = _jobs(config_2025, 50_000, 20_000)

    first, second = result.jobs
    assert first.federal == Decimal("3961.5")
    assert first.take_home_pay == Decimal("42213.5")
    assert second.federal == Decimal("500")
    assert second.payroll == Decimal("1530")

    assert result.total_income == Decimal("70000")
    assert result.federal_withheld == Decimal("4461.5")
    assert result.federal_owed == Decimal("7014")
    assert result.federal_underpayment == Decimal("2552.5")
    assert result.jurisdiction_underpayment == 0
    assert result.payroll_withheld == result.payroll_owed == Decimal("5355")
    assert result.excess_social_security == 0
    assert result.highest_paying_job.name == "Employer 1"


def test_combined_wages_above_wage_base_refund_social_security(
    config_2025: YearConfiguration,
) -> None:
    result = _jobs(config_2025, 150_000, 50_000)

    assert result.social_security_withheld == Decimal("12400")
    assert result.combined.yearly.social_security == Decimal("10918.2")
    assert result.excess_social_security == Decimal("1481.8")
    assert result.combined.yearly.medicare == Decimal("2900")
    assert result.combined.yearly.additional_medicare == 0

    assert result.federal_withheld == Decimal("29208.5")
    assert result.federal_owed == Decimal("37247")
    assert result.federal_underpayment == Decimal("8038.5")


def test_each_job_alone_stays_below_wage_base(config_2025: YearConfiguration) -> None:
    wage_base = config_2025.payroll.social_security.wage_base
    result = _jobs(config_2025, 120_000, 100_000)

    assert all(job.salary < wage_base for job in result.jobs)
    assert result.total_income > wage_base
    assert result.social_security_withheld == Decimal("13640")
    assert result.excess_social_security == Decimal("2721.8")


def test_single_job_matches_salary_calculation(config_2025: YearConfiguration) -> None:
    result = _jobs(config_2025, 80_000, jurisdiction_code="CA")

    (job,) = result.jobs
    yearly = result.combined.yearly
    assert job.federal == yearly.federal_tax
    assert job.jurisdiction == yearly.jurisdiction_tax + yearly.local_tax
    assert result.federal_underpayment == 0
    assert result.jurisdiction_underpayment == 0
    assert result.take_home_pay == result.combined.take_home_pay


def test_progressive_jurisdiction_is_underwithheld(config_2025: YearConfiguration) -> None:
    result = _jobs(config_2025, 90_000, 60_000, jurisdiction_code="CA")

    assert result.jurisdiction_underpayment > 0
    assert result.jurisdiction_underpayment == (
        result.jurisdiction_owed - result.jurisdiction_withheld
    )


def test_unnamed_jobs_are_numbered(config_2025: YearConfiguration) -> None:
    payload = {
        "jobs": [{"salary": 30_000}, {"name": "Weekend shifts", "salary": 10_000}],
        "jurisdiction_code": "tx",
    }

    result = calculate_multiple_jobs(build_input(MultipleJobsInput, payload), config_2025)

    assert [job.name for job in result.jobs] == ["Job 1", "Weekend shifts"]


@pytest.mark.parametrize(
    "jobs",
    [[], [{"salary": -1}], [{"salary": 1_000, "employer": "x"}]],
)
def test_invalid_job_lists_are_rejected(jobs: list[dict[str, Any]]) -> None:
    with pytest.raises(InvalidInput):
        build_input(MultipleJobsInput, {"jobs": jobs, "jurisdiction_code": "TX"})


def test_unknown_jurisdiction_is_rejected(config_2025: YearConfiguration) -> None:
    with pytest.raises(UnknownJurisdiction):
        _jobs(config_2025, 50_000, 20_000, jurisdiction_code="NYC")
