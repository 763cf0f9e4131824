"""Service-layer helpers for the takehome backend."""

from takehome.backend.app.services.calculation_service import (
    calculate_bonus,
    calculate_employer_cost,
    calculate_gross_for_net,
    calculate_minimum_wage,
    calculate_multiple_jobs,
    calculate_raise,
    calculate_salary,
    calculate_self_employment,
)

from .request_parser import parse_calculation_payload
from .response_builder import build_calculation_response

__all__ = [
    "build_calculation_response",
    "calculate_bonus",
    "calculate_employer_cost",
    "calculate_gross_for_net",
    "calculate_minimum_wage",
    "calculate_multiple_jobs",
    "calculate_raise",
    "calculate_salary",
    "calculate_self_employment",
    "parse_calculation_payload",
]
