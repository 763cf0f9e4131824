"""Domain-specific calculation helpers."""

from .bonus import BonusTaxResult, BonusWithholding, calculate_bonus_tax
from .employer import EmployerCostResult, calculate_employer_cost
from .jurisdiction import JurisdictionTax, calculate_jurisdiction_tax
from .metrics import (
    MinimumWageEarnings,
    NetToGrossResult,
    RaiseDelta,
    delta_on_raise,
    gross_for_net,
    minimum_wage_earnings,
)
from .multiple_jobs import (
    JobWithholding,
    MultipleJobsResult,
    calculate_multiple_jobs,
)
from .payroll import (
    EmployerPayrollTax,
    PayrollTax,
    SelfEmploymentTax,
    calculate_employer_payroll_tax,
    calculate_payroll_tax,
    calculate_self_employment_tax,
)
from .salary import PERIODS, PeriodBreakdown, SalaryResult, calculate_salary
from .self_employment import SelfEmploymentResult, calculate_self_employment
from .utils import (
    BracketSlice,
    calculate_progressive_tax,
    format_percentage,
    marginal_rate,
    progressive_tax_breakdown,
    round_currency,
    round_rate,
)

__all__ = [
    "PERIODS",
    "BonusTaxResult",
    "BonusWithholding",
    "BracketSlice",
    "EmployerCostResult",
    "EmployerPayrollTax",
    "JobWithholding",
    "JurisdictionTax",
    "MinimumWageEarnings",
    "MultipleJobsResult",
    "NetToGrossResult",
    "PayrollTax",
    "PeriodBreakdown",
    "RaiseDelta",
    "SalaryResult",
    "SelfEmploymentResult",
    "SelfEmploymentTax",
    "calculate_bonus_tax",
    "calculate_employer_cost",
    "calculate_employer_payroll_tax",
    "calculate_jurisdiction_tax",
    "calculate_multiple_jobs",
    "calculate_payroll_tax",
    "calculate_progressive_tax",
    "calculate_salary",
    "calculate_self_employment",
    "calculate_self_employment_tax",
    "delta_on_raise",
    "format_percentage",
    "gross_for_net",
    "marginal_rate",
    "minimum_wage_earnings",
    "progressive_tax_breakdown",
    "round_currency",
    "round_rate",
]
