"""Orchestrate request validation, year resolution, and tax calculations.

The calculation service turns JSON-style payloads into validated request
models, picks the :class:`TaxEngine` for the requested tax year and serialises
the resulting dataclasses. Decimal results are rounded only here, on their way
out. Profiling hooks live here as well so that routes can stay thin.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from contextlib import contextmanager
from dataclasses import fields
from time import perf_counter
from typing import Any, TypeVar

from pydantic import BaseModel

from takehome.backend.app.models import (
    BonusInput,
    EmployerCostInput,
    InvalidInput,
    MinimumWageInput,
    MultipleJobsInput,
    NetToGrossInput,
    RaiseInput,
    SalaryInput,
    SelfEmploymentInput,
    build_input,
)
from takehome.backend.config.year_config import available_years, default_year

from .calculators import (
    BonusTaxResult,
    BonusWithholding,
    EmployerCostResult,
    JobWithholding,
    MinimumWageEarnings,
    MultipleJobsResult,
    NetToGrossResult,
    PeriodBreakdown,
    RaiseDelta,
    SalaryResult,
    SelfEmploymentResult,
    round_currency,
    round_rate,
)
from .engine import TaxEngine

_LOGGER = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
ResultT = TypeVar("ResultT")


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("TAKEHOME_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _resolve_engine(payload: Mapping[str, Any]) -> tuple[TaxEngine, dict[str, Any]]:
    """Split the optional ``year`` off ``payload`` and load its engine."""

    if not isinstance(payload, Mapping):
        raise InvalidInput("Payload must be a mapping")

    data = dict(payload)
    year = data.pop("year", None)
    if year is None:
        return TaxEngine.for_year(default_year()), data

    if isinstance(year, bool) or not isinstance(year, (int, str)):
        raise InvalidInput("Field 'year' must be an integer")
    try:
        year = int(year)
    except ValueError as exc:
        raise InvalidInput("Field 'year' must be an integer") from exc

    if year not in available_years():
        supported = ", ".join(str(entry) for entry in available_years())
        raise InvalidInput(f"Unsupported tax year {year} (supported: {supported})")

    return TaxEngine.for_year(year), data


def _run(
    name: str,
    payload: Mapping[str, Any],
    model: type[ModelT],
    compute: Callable[[TaxEngine, ModelT], ResultT],
    serialise: Callable[[ResultT], dict[str, Any]],
) -> dict[str, Any]:
    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    with _profile_section("resolve_year", timings):
        engine, data = _resolve_engine(payload)
    with _profile_section("validate", timings):
        request = build_input(model, data)
    with _profile_section("calculate", timings):
        result = compute(engine, request)
    with _profile_section("serialise", timings):
        response = serialise(result)

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "%s timings (ms): %s",
            name,
            {section: round(duration * 1000, 3) for section, duration in timings.items()},
        )

    return response


def _serialise_period(period: PeriodBreakdown) -> dict[str, float]:
    return {field.name: round_currency(getattr(period, field.name)) for field in fields(period)}


def serialise_salary_result(result: SalaryResult) -> dict[str, Any]:
    payroll = result.payroll
    return {
        "year": result.year,
        "filing_status": result.filing_status.value,
        "jurisdiction": {
            "code": result.jurisdiction_code,
            "name": result.jurisdiction_name,
        },
        "yearly": _serialise_period(result.yearly),
        "periods": {
            name: _serialise_period(period) for name, period in result.periods.items()
        },
        "rates": {
            "effective_tax_rate": round_rate(result.effective_tax_rate),
            "marginal_tax_rate": round_rate(result.marginal_tax_rate),
            "jurisdiction_marginal_rate": round_rate(result.jurisdiction_marginal_rate),
        },
        "payroll": {
            "employee_social_security": round_currency(payroll.employee_social_security),
            "employee_medicare": round_currency(payroll.employee_medicare),
            "additional_medicare": round_currency(payroll.additional_medicare),
            "employee_total": round_currency(payroll.employee_total),
            "employer_social_security": round_currency(payroll.employer_social_security),
            "employer_medicare": round_currency(payroll.employer_medicare),
            "employer_total": round_currency(payroll.employer_total),
        },
        "federal_brackets": [
            {
                "lower": round_currency(entry.lower),
                "upper": round_currency(entry.upper) if entry.upper is not None else None,
                "rate": round_rate(entry.rate),
                "taxable_amount": round_currency(entry.taxable_amount),
                "tax": round_currency(entry.tax),
            }
            for entry in result.federal_brackets
        ],
        "notices": list(result.notices),
    }


def serialise_employer_cost(result: EmployerCostResult) -> dict[str, Any]:
    return {
        "year": result.year,
        "jurisdiction_code": result.jurisdiction_code,
        "gross_salary": round_currency(result.gross_salary),
        "social_security": round_currency(result.social_security),
        "medicare": round_currency(result.medicare),
        "federal_unemployment": round_currency(result.federal_unemployment),
        "state_unemployment": round_currency(result.state_unemployment),
        "retirement_match": round_currency(result.retirement_match),
        "employer_taxes": round_currency(result.employer_taxes),
        "total_cost": round_currency(result.total_cost),
        "cost_per_month": round_currency(result.cost_per_month),
        "cost_per_day": round_currency(result.cost_per_day),
    }


def _serialise_withholding(entry: BonusWithholding) -> dict[str, float]:
    return {
        "federal": round_currency(entry.federal),
        "jurisdiction": round_currency(entry.jurisdiction),
        "social_security": round_currency(entry.social_security),
        "medicare": round_currency(entry.medicare),
        "total": round_currency(entry.total),
    }


def serialise_bonus_result(result: BonusTaxResult) -> dict[str, Any]:
    return {
        "year": result.with_bonus.year,
        "bonus": round_currency(result.bonus),
        "withholding": _serialise_withholding(result.withholding),
        "actual": _serialise_withholding(result.actual),
        "net_bonus_withheld": round_currency(result.net_bonus_withheld),
        "net_bonus_actual": round_currency(result.net_bonus_actual),
        "withholding_difference": round_currency(result.withholding_difference),
        "effective_bonus_tax_rate": round_rate(result.effective_bonus_tax_rate),
        "marginal_tax_rate": round_rate(result.marginal_tax_rate),
        "take_home_without_bonus": round_currency(result.without_bonus.take_home_pay),
        "take_home_with_bonus": round_currency(result.with_bonus.take_home_pay),
    }


def serialise_self_employment_result(result: SelfEmploymentResult) -> dict[str, Any]:
    se_tax = result.self_employment_tax
    return {
        "year": result.year,
        "net_profit": round_currency(result.net_profit),
        "self_employment_tax": {
            "taxable_base": round_currency(se_tax.taxable_base),
            "social_security": round_currency(se_tax.social_security),
            "medicare": round_currency(se_tax.medicare),
            "additional_medicare": round_currency(se_tax.additional_medicare),
            "total": round_currency(se_tax.total),
            "deductible_portion": round_currency(se_tax.deductible_portion),
        },
        "adjusted_gross_income": round_currency(result.adjusted_gross_income),
        "standard_deduction": round_currency(result.standard_deduction),
        "taxable_income": round_currency(result.taxable_income),
        "federal_tax": round_currency(result.federal_tax),
        "total_tax": round_currency(result.total_tax),
        "retirement_contribution": round_currency(result.retirement_contribution),
        "take_home_pay": round_currency(result.take_home_pay),
        "quarterly_estimated_payment": round_currency(result.quarterly_estimated_payment),
        "effective_tax_rate": round_rate(result.effective_tax_rate),
        "marginal_tax_rate": round_rate(result.marginal_tax_rate),
        "sep_ira_limit": round_currency(result.sep_ira_limit),
    }


def serialise_raise_delta(result: RaiseDelta) -> dict[str, Any]:
    return {
        "year": result.raised.year,
        "gross_delta": round_currency(result.gross_delta),
        "net_delta": round_currency(result.net_delta),
        "monthly_net_delta": round_currency(result.monthly_net_delta),
        "federal_tax_delta": round_currency(result.federal_tax_delta),
        "jurisdiction_tax_delta": round_currency(result.jurisdiction_tax_delta),
        "payroll_tax_delta": round_currency(result.payroll_tax_delta),
        "effective_retention_rate": round_rate(result.effective_retention_rate),
        "current": serialise_salary_result(result.baseline),
        "new": serialise_salary_result(result.raised),
    }


def serialise_net_to_gross(result: NetToGrossResult) -> dict[str, Any]:
    return {
        "year": result.salary.year,
        "target_net_annual": round_currency(result.target_net),
        "gross_annual_amount": round_currency(result.gross_annual_amount),
        "difference": round_currency(result.difference),
        "iterations": result.iterations,
        "salary": serialise_salary_result(result.salary),
    }


def serialise_minimum_wage(result: MinimumWageEarnings) -> dict[str, Any]:
    return {
        "year": result.salary.year,
        "jurisdiction_code": result.salary.jurisdiction_code,
        "hourly_wage": round_currency(result.hourly_wage),
        "tipped_wage": (
            round_currency(result.tipped_wage) if result.tipped_wage is not None else None
        ),
        "uses_federal_minimum": result.uses_federal_minimum,
        "hours_per_week": round_currency(result.hours_per_week),
        "annual_gross": round_currency(result.annual_gross),
        "take_home_per_month": round_currency(result.take_home_per_month),
        "take_home_per_week": round_currency(result.take_home_per_week),
        "take_home_per_hour": round_currency(result.take_home_per_hour),
        "salary": serialise_salary_result(result.salary),
    }


def _serialise_job(job: JobWithholding) -> dict[str, Any]:
    return {
        "name": job.name,
        "salary": round_currency(job.salary),
        "federal": round_currency(job.federal),
        "jurisdiction": round_currency(job.jurisdiction),
        "social_security": round_currency(job.social_security),
        "medicare": round_currency(job.medicare),
        "total_withheld": round_currency(job.total),
        "take_home_pay": round_currency(job.take_home_pay),
    }


def serialise_multiple_jobs(result: MultipleJobsResult) -> dict[str, Any]:
    return {
        "year": result.combined.year,
        "jobs": [_serialise_job(job) for job in result.jobs],
        "highest_paying_job": result.highest_paying_job.name,
        "total_income": round_currency(result.total_income),
        "withheld": {
            "federal": round_currency(result.federal_withheld),
            "jurisdiction": round_currency(result.jurisdiction_withheld),
            "payroll": round_currency(result.payroll_withheld),
            "total": round_currency(result.total_withheld),
        },
        "owed": {
            "federal": round_currency(result.federal_owed),
            "jurisdiction": round_currency(result.jurisdiction_owed),
            "payroll": round_currency(result.payroll_owed),
        },
        "federal_underpayment": round_currency(result.federal_underpayment),
        "jurisdiction_underpayment": round_currency(result.jurisdiction_underpayment),
        "excess_social_security": round_currency(result.excess_social_security),
        "take_home_pay": round_currency(result.take_home_pay),
        "combined": serialise_salary_result(result.combined),
    }

def calculate_salary(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Compute take-home pay for the provided payload."""

    return _run(
        "calculate_salary",
        payload,
        SalaryInput,
        lambda engine, request: engine.calculate(request),
        serialise_salary_result,
    )


def calculate_employer_cost(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Compute the total employer cost for the provided payload."""

    return _run(
        "calculate_employer_cost",
        payload,
        EmployerCostInput,
        lambda engine, request: engine.employer_cost(
            request.gross_annual_amount,
            request.jurisdiction_code,
            request.retirement_match_percent,
        ),
        serialise_employer_cost,
    )


def calculate_bonus(payload: Mapping[str, Any]) -> dict[str, Any]:
    return _run(
        "calculate_bonus",
        payload,
        BonusInput,
        lambda engine, request: engine.bonus_tax(request),
        serialise_bonus_result,
    )


def calculate_self_employment(payload: Mapping[str, Any]) -> dict[str, Any]:
    return _run(
        "calculate_self_employment",
        payload,
        SelfEmploymentInput,
        lambda engine, request: engine.self_employment(request),
        serialise_self_employment_result,
    )


def calculate_raise(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Compare take-home pay before and after a raise."""

    return _run(
        "calculate_raise",
        payload,
        RaiseInput,
        lambda engine, request: engine.delta_on_raise(
            request.current_gross,
            request.new_gross,
            request.filing_status,
            request.jurisdiction_code,
            pretax_retirement_contribution=request.pretax_retirement_contribution,
            pretax_hsa_contribution=request.pretax_hsa_contribution,
        ),
        serialise_raise_delta,
    )


def calculate_gross_for_net(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Find the gross salary that yields the requested take-home pay."""

    return _run(
        "calculate_gross_for_net",
        payload,
        NetToGrossInput,
        lambda engine, request: engine.gross_for_net(
            request.target_net_annual,
            request.filing_status,
            request.jurisdiction_code,
        ),
        serialise_net_to_gross,
    )


def calculate_minimum_wage(payload: Mapping[str, Any]) -> dict[str, Any]:
    return _run(
        "calculate_minimum_wage",
        payload,
        MinimumWageInput,
        lambda engine, request: engine.minimum_wage_earnings(
            request.jurisdiction_code,
            request.hours_per_week,
            request.filing_status,
        ),
        serialise_minimum_wage,
    )



def calculate_multiple_jobs(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Compare per-job withholding with the tax due on the combined wages."""

    return _run(
        "calculate_multiple_jobs",
        payload,
        MultipleJobsInput,
        lambda engine, request: engine.multiple_jobs(request),
        serialise_multiple_jobs,
    )

__all__ = [
    "calculate_bonus",
    "calculate_employer_cost",
    "calculate_gross_for_net",
    "calculate_minimum_wage",
    "calculate_multiple_jobs",
    "calculate_raise",
    "calculate_salary",
    "calculate_self_employment",
    "serialise_salary_result",
]
