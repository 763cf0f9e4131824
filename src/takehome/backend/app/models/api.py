"""Pydantic models describing the public API surface."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from takehome.backend.config.year_config import Amount, FilingStatus

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


class InvalidInput(ValueError):
    """Raised when a calculation request is rejected before computation."""


class _RequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class _Located(_RequestModel):
    jurisdiction_code: str = Field(min_length=1)

    @field_validator("jurisdiction_code", mode="before")
    @classmethod
    def _normalise_code(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class _JurisdictionScoped(_Located):
    """Fields shared by every request tied to a filer and a jurisdiction."""

    filing_status: FilingStatus = FilingStatus.SINGLE


class SalaryInput(_JurisdictionScoped):
    """Gross pay and pretax elections for a take-home calculation."""

    gross_annual_amount: Amount = Field(ge=0)
    bonus: Amount = Field(default=Decimal("0"), ge=0)
    pretax_retirement_contribution: Amount = Field(default=Decimal("0"), ge=0)
    pretax_hsa_contribution: Amount = Field(default=Decimal("0"), ge=0)
    include_local_tax: bool = True

    @property
    def total_gross(self) -> Decimal:
        return self.gross_annual_amount + self.bonus

    @property
    def pretax_contributions(self) -> Decimal:
        return self.pretax_retirement_contribution + self.pretax_hsa_contribution

    @model_validator(mode="after")
    def _contributions_within_gross(self) -> "SalaryInput":
        if self.pretax_contributions > self.total_gross:
            raise ValueError("pretax contributions cannot exceed gross income")
        return self


class EmployerCostInput(_Located):
    gross_annual_amount: Amount = Field(ge=0)
    retirement_match_percent: Amount = Field(default=Decimal("0"), ge=0, le=100)


class BonusInput(_JurisdictionScoped):
    """Base salary plus a one-off supplemental payment."""

    base_salary: Amount = Field(ge=0)
    bonus: Amount = Field(ge=0)
    pretax_retirement_contribution: Amount = Field(default=Decimal("0"), ge=0)

    @model_validator(mode="after")
    def _contribution_within_salary(self) -> "BonusInput":
        if self.pretax_retirement_contribution > self.base_salary:
            raise ValueError("pretax contributions cannot exceed the base salary")
        return self


class SelfEmploymentInput(_RequestModel):
    """Business revenue and above-the-line deductions of a sole proprietor."""

    revenue: Amount = Field(ge=0)
    expenses: Amount = Field(default=Decimal("0"), ge=0)
    home_office_deduction: Amount = Field(default=Decimal("0"), ge=0)
    filing_status: FilingStatus = FilingStatus.SINGLE
    retirement_contribution: Amount = Field(default=Decimal("0"), ge=0)
    health_insurance: Amount = Field(default=Decimal("0"), ge=0)


class RaiseInput(_JurisdictionScoped):
    current_gross: Amount = Field(ge=0)
    new_gross: Amount = Field(ge=0)
    pretax_retirement_contribution: Amount = Field(default=Decimal("0"), ge=0)
    pretax_hsa_contribution: Amount = Field(default=Decimal("0"), ge=0)

    def baseline(self) -> SalaryInput:
        """Return the salary request describing the current pay."""

        return build_input(
            SalaryInput,
            {
                "gross_annual_amount": self.current_gross,
                "filing_status": self.filing_status,
                "jurisdiction_code": self.jurisdiction_code,
                "pretax_retirement_contribution": self.pretax_retirement_contribution,
                "pretax_hsa_contribution": self.pretax_hsa_contribution,
            },
        )


class NetToGrossInput(_JurisdictionScoped):
    target_net_annual: Amount = Field(ge=0)


class MinimumWageInput(_JurisdictionScoped):
    hours_per_week: Amount = Field(default=Decimal("40"), gt=0, le=168)


class JobInput(_RequestModel):
    name: str = ""
    salary: Amount = Field(ge=0)


class MultipleJobsInput(_JurisdictionScoped):
    """Concurrent jobs held by one filer, each withholding as if it were the only one."""

    jobs: tuple[JobInput, ...] = Field(min_length=1, max_length=10)
    include_local_tax: bool = True

    @property
    def total_salary(self) -> Decimal:
        return sum((job.salary for job in self.jobs), Decimal("0"))


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"


ModelT = TypeVar("ModelT", bound=BaseModel)


def build_input(model: type[ModelT], payload: Mapping[str, Any]) -> ModelT:
    """Validate ``payload`` against ``model`` raising :class:`InvalidInput`."""

    if not isinstance(payload, Mapping):
        raise InvalidInput("Payload must be a mapping")
    try:
        return model.model_validate(dict(payload))
    except ValidationError as exc:
        raise InvalidInput(format_validation_error(exc)) from exc
