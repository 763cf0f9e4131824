"""Typed request models shared across the calculation services.

Requests are validated into frozen Pydantic models before any arithmetic runs
so that routes, the engine facade and tests share one normalisation path.
Results are plain dataclasses defined next to the calculators that build them.
"""

from .api import (
    BonusInput,
    EmployerCostInput,
    InvalidInput,
    JobInput,
    MinimumWageInput,
    MultipleJobsInput,
    NetToGrossInput,
    RaiseInput,
    SalaryInput,
    SelfEmploymentInput,
    build_input,
    format_validation_error,
)

__all__ = [
    "BonusInput",
    "EmployerCostInput",
    "InvalidInput",
    "JobInput",
    "MinimumWageInput",
    "MultipleJobsInput",
    "NetToGrossInput",
    "RaiseInput",
    "SalaryInput",
    "SelfEmploymentInput",
    "build_input",
    "format_validation_error",
]
