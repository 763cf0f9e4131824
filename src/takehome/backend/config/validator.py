"""Utilities for validating year configuration data and surfacing issues.

Schema violations already fail at load time with :class:`ConfigurationError`.
The checks here catch tables that load fine but are almost certainly wrong,
such as a state minimum wage below the federal floor.
"""

from __future__ import annotations

import argparse
import re
from collections import Counter
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from .year_config import (
    ConfigurationError,
    ContributionLimits,
    FederalConfig,
    FilingStatus,
    FlatTax,
    JurisdictionConfig,
    NoTax,
    PayrollTaxConfig,
    ProgressiveTax,
    YearConfiguration,
    YearWarning,
    available_years,
    load_year_configuration,
)

_CODE_PATTERN = re.compile(r"^[A-Z]{2}$")


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_federal(federal: FederalConfig) -> list[str]:
    errors: list[str] = []

    single = federal.standard_deduction_for(FilingStatus.SINGLE)
    joint = federal.standard_deduction_for(FilingStatus.MARRIED_JOINTLY)
    if joint < single:
        errors.append(
            _format_scope(
                "federal.standard_deduction",
                "married_jointly deduction should not be below the single deduction",
            )
        )

    top_rates = {
        status.value: federal.brackets_for(status)[-1].rate for status in FilingStatus
    }
    if len(set(top_rates.values())) > 1:
        errors.append(
            _format_scope(
                "federal.brackets",
                f"top marginal rates differ between filing statuses: {top_rates}",
            )
        )

    if federal.minimum_wage <= 0:
        errors.append(_format_scope("federal.minimum_wage", "must be positive"))

    return errors


def _validate_payroll(payroll: PayrollTaxConfig) -> list[str]:
    errors: list[str] = []
    scope = "payroll.self_employment"
    self_employment = payroll.self_employment

    if self_employment.social_security_rate != payroll.social_security.rate * 2:
        errors.append(
            _format_scope(
                scope,
                "social_security_rate should equal the combined employee and employer rate",
            )
        )
    if self_employment.medicare_rate != payroll.medicare.rate * 2:
        errors.append(
            _format_scope(
                scope,
                "medicare_rate should equal the combined employee and employer rate",
            )
        )

    medicare = payroll.medicare
    separate = medicare.threshold_for(FilingStatus.MARRIED_SEPARATELY)
    single = medicare.threshold_for(FilingStatus.SINGLE)
    joint = medicare.threshold_for(FilingStatus.MARRIED_JOINTLY)
    if not separate <= single <= joint:
        errors.append(
            _format_scope(
                "payroll.medicare.additional_threshold",
                "expected married_separately <= single <= married_jointly",
            )
        )

    if payroll.social_security.wage_base <= 0:
        errors.append(
            _format_scope("payroll.social_security", "wage base must be positive")
        )

    return errors


def _validate_limits(limits: ContributionLimits) -> list[str]:
    errors: list[str] = []

    employer = limits.retirement_401k.employer
    if employer is not None and employer < limits.retirement_401k.employee:
        errors.append(
            _format_scope(
                "limits.retirement_401k",
                "combined employer limit cannot be below the employee limit",
            )
        )

    if limits.hsa.family < limits.hsa.self_only:
        errors.append(
            _format_scope("limits.hsa", "family limit cannot be below the self-only limit")
        )

    return errors


def _validate_jurisdiction(
    code: str, jurisdiction: JurisdictionConfig, federal_minimum: Decimal
) -> list[str]:
    errors: list[str] = []
    scope = f"jurisdictions.{code}"

    if not _CODE_PATTERN.match(code):
        errors.append(_format_scope(scope, "codes must be two upper-case letters"))

    rule = jurisdiction.income_tax
    if isinstance(rule, FlatTax) and rule.rate == 0:
        errors.append(
            _format_scope(scope, "flat rate of zero; configure the jurisdiction as 'none'")
        )
    if isinstance(rule, ProgressiveTax):
        if all(bracket.rate == 0 for bracket in rule.brackets):
            errors.append(
                _format_scope(scope, "all bracket rates are zero; use kind 'none'")
            )
    if isinstance(rule, NoTax) and jurisdiction.unemployment is not None:
        if jurisdiction.unemployment.rate == 0:
            errors.append(_format_scope(scope, "unemployment override has a zero rate"))

    wage = jurisdiction.minimum_wage
    if wage is not None:
        if wage.hourly < federal_minimum:
            errors.append(
                _format_scope(
                    scope,
                    f"minimum wage {wage.hourly} is below the federal minimum {federal_minimum}",
                )
            )
        if wage.tipped is not None and wage.tipped > wage.hourly:
            errors.append(
                _format_scope(scope, "tipped minimum wage exceeds the regular minimum wage")
            )

    return errors


def _validate_jurisdictions(config: YearConfiguration) -> list[str]:
    errors: list[str] = []

    names = Counter(entry.name for entry in config.jurisdictions.values())
    duplicates = sorted(name for name, count in names.items() if count > 1)
    if duplicates:
        errors.append(
            _format_scope("jurisdictions", f"duplicate jurisdiction names detected: {duplicates}")
        )

    for code, jurisdiction in config.jurisdictions.items():
        errors.extend(
            _validate_jurisdiction(code, jurisdiction, config.federal.minimum_wage)
        )

    return errors


def _validate_warnings(
    warnings: Iterable[YearWarning], known_targets: Mapping[str, object]
) -> list[str]:
    errors: list[str] = []
    seen_ids: set[str] = set()

    for warning in warnings:
        if warning.id in seen_ids:
            errors.append(
                _format_scope(
                    "warnings",
                    f"duplicate warning identifier '{warning.id}' detected",
                )
            )
        else:
            seen_ids.add(warning.id)

        for target in warning.applies_to:
            if not target.strip():
                errors.append(
                    _format_scope(
                        f"warnings.{warning.id}",
                        "applies_to entries must be non-empty strings",
                    )
                )
            elif target.isupper() and target not in known_targets:
                errors.append(
                    _format_scope(
                        f"warnings.{warning.id}",
                        f"applies_to references unknown jurisdiction '{target}'",
                    )
                )

        if warning.documentation_url and not warning.documentation_url.startswith(
            ("http://", "https://")
        ):
            errors.append(
                _format_scope(
                    f"warnings.{warning.id}",
                    "documentation URL must be absolute",
                )
            )

    return errors


def validate_year_configuration(config: YearConfiguration) -> list[str]:
    """Return a list of validation issues for the provided configuration."""

    errors: list[str] = []

    errors.extend(_validate_federal(config.federal))
    errors.extend(_validate_payroll(config.payroll))
    errors.extend(_validate_limits(config.limits))
    errors.extend(_validate_jurisdictions(config))
    errors.extend(_validate_warnings(config.warnings, config.jurisdictions))

    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        config = load_year_configuration(year)
        results[int(year)] = validate_year_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Validate configured tax years and report issues helpful to contributors."
        )
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            config = load_year_configuration(year)
        except (FileNotFoundError, ConfigurationError) as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
