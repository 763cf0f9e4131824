"""Withholding shortfalls for filers holding more than one job.

Each employer withholds as if its job were the filer's only income, applying
the full standard deduction and the lowest brackets again. The combined
liability is a single salary calculation on the summed wages; the difference
is what the filer owes (or, for Social Security, gets back) at filing time.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from takehome.backend.app.models import (
    JobInput,
    MultipleJobsInput,
    SalaryInput,
    build_input,
)
from takehome.backend.config.year_config import YearConfiguration

from .payroll import calculate_employer_payroll_tax
from .salary import SalaryResult, calculate_salary
from .utils import ZERO


@dataclass(frozen=True, slots=True)
class JobWithholding:
    name: str
    salary: Decimal
    federal: Decimal
    jurisdiction: Decimal
    social_security: Decimal
    medicare: Decimal

    @property
    def payroll(self) -> Decimal:
        return self.social_security + self.medicare

    @property
    def total(self) -> Decimal:
        return self.federal + self.jurisdiction + self.payroll

    @property
    def take_home_pay(self) -> Decimal:
        return self.salary - self.total


@dataclass(frozen=True, slots=True)
class MultipleJobsResult:
    jobs: tuple[JobWithholding, ...]
    combined: SalaryResult

    @property
    def total_income(self) -> Decimal:
        return sum((job.salary for job in self.jobs), ZERO)

    @property
    def federal_withheld(self) -> Decimal:
        return sum((job.federal for job in self.jobs), ZERO)

    @property
    def jurisdiction_withheld(self) -> Decimal:
        return sum((job.jurisdiction for job in self.jobs), ZERO)

    @property
    def social_security_withheld(self) -> Decimal:
        return sum((job.social_security for job in self.jobs), ZERO)

    @property
    def payroll_withheld(self) -> Decimal:
        return sum((job.payroll for job in self.jobs), ZERO)

    @property
    def total_withheld(self) -> Decimal:
        return sum((job.total for job in self.jobs), ZERO)

    @property
    def federal_owed(self) -> Decimal:
        return self.combined.yearly.federal_tax

    @property
    def jurisdiction_owed(self) -> Decimal:
        yearly = self.combined.yearly
        return yearly.jurisdiction_tax + yearly.local_tax

    @property
    def payroll_owed(self) -> Decimal:
        return self.combined.yearly.payroll_tax

    @property
    def federal_underpayment(self) -> Decimal:
        return self.federal_owed - self.federal_withheld

    @property
    def jurisdiction_underpayment(self) -> Decimal:
        return self.jurisdiction_owed - self.jurisdiction_withheld

    @property
    def excess_social_security(self) -> Decimal:
        """Social Security withheld above the wage-base cap, refundable as a credit."""

        excess = self.social_security_withheld - self.combined.yearly.social_security
        return excess if excess > 0 else ZERO

    @property
    def take_home_pay(self) -> Decimal:
        return self.combined.take_home_pay

    @property
    def highest_paying_job(self) -> JobWithholding:
        return max(self.jobs, key=lambda job: job.salary)


def _single_job_request(
    salary: Decimal, request: MultipleJobsInput
) -> SalaryInput:
    return build_input(
        SalaryInput,
        {
            "gross_annual_amount": salary,
            "filing_status": request.filing_status,
            "jurisdiction_code": request.jurisdiction_code,
            "include_local_tax": request.include_local_tax,
        },
    )


def _job_withholding(
    job: JobInput, index: int, request: MultipleJobsInput, config: YearConfiguration
) -> JobWithholding:
    alone = calculate_salary(_single_job_request(job.salary, request), config).yearly
    payroll = calculate_employer_payroll_tax(job.salary, config.payroll)

    return JobWithholding(
        name=job.name or f"Job {index}",
        salary=job.salary,
        federal=alone.federal_tax,
        jurisdiction=alone.jurisdiction_tax + alone.local_tax,
        social_security=payroll.social_security,
        medicare=payroll.medicare,
    )


def calculate_multiple_jobs(
    request: MultipleJobsInput, config: YearConfiguration
) -> MultipleJobsResult:
    """Compare per-job withholding with the liability on the combined wages."""

    jobs = tuple(
        _job_withholding(job, index, request, config)
        for index, job in enumerate(request.jobs, start=1)
    )
    combined = calculate_salary(
        _single_job_request(request.total_salary, request), config
    )

    return MultipleJobsResult(jobs=jobs, combined=combined)
