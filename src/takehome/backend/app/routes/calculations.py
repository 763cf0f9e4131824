"""REST endpoints for tax calculations."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from flask import Blueprint, request

from takehome.backend.app.services import calculation_service
from takehome.backend.services.request_parser import parse_calculation_payload
from takehome.backend.services.response_builder import build_calculation_response

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")

Calculator = Callable[[Mapping[str, Any]], dict[str, Any]]


def _respond(calculator: Calculator) -> tuple[Any, int]:
    payload = parse_calculation_payload(request)
    return build_calculation_response(calculator(payload))


@blueprint.post("/calculations")
@blueprint.post("/calculations/salary")
def create_salary_calculation() -> tuple[Any, int]:
    """Calculate take-home pay using the submitted JSON payload."""

    return _respond(calculation_service.calculate_salary)


@blueprint.post("/calculations/employer-cost")
def create_employer_cost_calculation() -> tuple[Any, int]:
    """Calculate the total annual cost of an employee."""

    return _respond(calculation_service.calculate_employer_cost)


@blueprint.post("/calculations/bonus")
def create_bonus_calculation() -> tuple[Any, int]:
    return _respond(calculation_service.calculate_bonus)


@blueprint.post("/calculations/self-employment")
def create_self_employment_calculation() -> tuple[Any, int]:
    return _respond(calculation_service.calculate_self_employment)


@blueprint.post("/calculations/raise")
def create_raise_calculation() -> tuple[Any, int]:
    return _respond(calculation_service.calculate_raise)


@blueprint.post("/calculations/net-to-gross")
def create_net_to_gross_calculation() -> tuple[Any, int]:
    """Search for the gross salary matching a take-home target."""

    return _respond(calculation_service.calculate_gross_for_net)


@blueprint.post("/calculations/minimum-wage")
def create_minimum_wage_calculation() -> tuple[Any, int]:
    return _respond(calculation_service.calculate_minimum_wage)


@blueprint.post("/calculations/multiple-jobs")
def create_multiple_jobs_calculation() -> tuple[Any, int]:
    """Compare per-job withholding with the tax due on combined wages."""

    return _respond(calculation_service.calculate_multiple_jobs)
