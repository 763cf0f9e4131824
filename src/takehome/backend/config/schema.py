"""Pydantic models describing the tax year configuration schema."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Literal, Mapping, Sequence, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class UnknownJurisdiction(LookupError):
    """Raised when a jurisdiction code is missing from the rule table."""

    def __init__(self, code: str, year: int | None = None) -> None:
        self.code = code
        self.year = year
        suffix = f" for tax year {year}" if year is not None else ""
        super().__init__(f"Unknown jurisdiction '{code}'{suffix}")


class FilingStatus(str, Enum):
    """Federal filing statuses supported by the rule tables."""

    SINGLE = "single"
    MARRIED_JOINTLY = "married_jointly"
    MARRIED_SEPARATELY = "married_separately"
    HEAD_OF_HOUSEHOLD = "head_of_household"


def to_decimal(value: Any) -> Decimal:
    """Coerce ``value`` into a finite :class:`~decimal.Decimal`.

    Floats are converted through their shortest ``repr`` so that ``0.062`` in a
    YAML file becomes ``Decimal("0.062")`` rather than its binary expansion.
    """

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError("Boolean values are not valid amounts")
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(repr(value) if isinstance(value, float) else str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"Expected a numeric amount, got {value!r}") from exc
    else:
        raise ValueError(f"Expected a numeric amount, got {value!r}")

    if not result.is_finite():
        raise ValueError("Amounts must be finite numbers")
    return result


Amount = Annotated[Decimal, BeforeValidator(to_decimal)]

ZERO = Decimal("0")


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _freeze(value: Mapping[Any, Any]) -> Mapping[Any, Any]:
    """Return a read-only view of ``value`` with list entries turned into tuples."""

    return MappingProxyType(
        {key: tuple(entry) if isinstance(entry, list) else entry for key, entry in value.items()}
    )


def _require_rate(value: Decimal, label: str) -> None:
    if value < 0 or value > 1:
        raise ConfigurationError(f"{label} must be between 0 and 1")


def _require_non_negative(value: Decimal, label: str) -> None:
    if value < 0:
        raise ConfigurationError(f"{label} must be non-negative")


def _require_all_statuses(table: Mapping[FilingStatus, Any], label: str) -> None:
    missing = [status.value for status in FilingStatus if status not in table]
    if missing:
        raise ConfigurationError(f"{label} is missing filing statuses: {', '.join(missing)}")


class TaxBracket(ImmutableModel):
    """Represents a single progressive tax bracket."""

    upper_bound: Amount | None = Field(default=None, alias="upper")
    rate: Amount

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        _require_rate(self.rate, "Tax rates")
        if self.upper_bound is not None and self.upper_bound <= 0:
            raise ConfigurationError("Upper bounds must be positive values")
        return self


def validate_bracket_sequence(brackets: Sequence[TaxBracket], scope: str) -> None:
    """Reject bracket tables that are empty, unordered or regressive."""

    if not brackets:
        raise ConfigurationError(f"{scope}: at least one tax bracket must be defined")

    last_upper: Decimal | None = None
    last_rate: Decimal | None = None
    for index, bracket in enumerate(brackets):
        upper = bracket.upper_bound
        is_last = index == len(brackets) - 1
        if upper is None and not is_last:
            raise ConfigurationError(f"{scope}: only the final bracket may be open-ended")
        if last_upper is not None and upper is not None and upper <= last_upper:
            raise ConfigurationError(f"{scope}: tax brackets must be in ascending order")
        if last_rate is not None and bracket.rate < last_rate:
            raise ConfigurationError(f"{scope}: bracket rates must not decrease")
        last_upper = upper
        last_rate = bracket.rate

    if brackets[-1].upper_bound is not None:
        raise ConfigurationError(f"{scope}: final tax bracket must have an open upper bound")


class FederalConfig(ImmutableModel):
    """Federal income tax tables keyed by filing status."""

    standard_deduction: Mapping[FilingStatus, Amount]
    brackets: Mapping[FilingStatus, Sequence[TaxBracket]]
    minimum_wage: Amount

    @field_validator("standard_deduction", "brackets")
    @classmethod
    def _freeze_tables(cls, value: Mapping[FilingStatus, Any]) -> Mapping[FilingStatus, Any]:
        return _freeze(value)

    @model_validator(mode="after")
    def _validate_tables(self) -> FederalConfig:
        _require_all_statuses(self.standard_deduction, "federal.standard_deduction")
        _require_all_statuses(self.brackets, "federal.brackets")
        for status, amount in self.standard_deduction.items():
            _require_non_negative(amount, f"federal.standard_deduction.{status.value}")
        for status, brackets in self.brackets.items():
            validate_bracket_sequence(brackets, f"federal.brackets.{status.value}")
        _require_non_negative(self.minimum_wage, "federal.minimum_wage")
        return self

    def brackets_for(self, status: FilingStatus) -> Sequence[TaxBracket]:
        return self.brackets[status]

    def standard_deduction_for(self, status: FilingStatus) -> Decimal:
        return self.standard_deduction[status]


class SocialSecurityConfig(ImmutableModel):
    """Social Security rate and annual wage base."""

    rate: Amount
    wage_base: Amount

    @model_validator(mode="after")
    def _validate_values(self) -> SocialSecurityConfig:
        _require_rate(self.rate, "Social Security rate")
        _require_non_negative(self.wage_base, "Social Security wage base")
        return self


class MedicareConfig(ImmutableModel):
    """Medicare base rate and the employee-only additional surtax."""

    rate: Amount
    additional_rate: Amount
    additional_threshold: Mapping[FilingStatus, Amount]

    @field_validator("additional_threshold")
    @classmethod
    def _freeze_thresholds(
        cls, value: Mapping[FilingStatus, Decimal]
    ) -> Mapping[FilingStatus, Decimal]:
        return _freeze(value)

    @model_validator(mode="after")
    def _validate_values(self) -> MedicareConfig:
        _require_rate(self.rate, "Medicare rate")
        _require_rate(self.additional_rate, "Additional Medicare rate")
        _require_all_statuses(self.additional_threshold, "payroll.medicare.additional_threshold")
        return self

    def threshold_for(self, status: FilingStatus) -> Decimal:
        return self.additional_threshold[status]


class SelfEmploymentConfig(ImmutableModel):
    """Combined employer/employee rates applied to self-employment earnings."""

    social_security_rate: Amount
    medicare_rate: Amount
    deductible_portion: Amount = Decimal("0.5")
    earnings_factor: Amount = Decimal("0.9235")

    @model_validator(mode="after")
    def _validate_values(self) -> SelfEmploymentConfig:
        _require_rate(self.social_security_rate, "Self-employment Social Security rate")
        _require_rate(self.medicare_rate, "Self-employment Medicare rate")
        _require_rate(self.deductible_portion, "Self-employment deductible portion")
        _require_rate(self.earnings_factor, "Self-employment earnings factor")
        return self


class PayrollTaxConfig(ImmutableModel):
    """FICA configuration for the tax year."""

    social_security: SocialSecurityConfig
    medicare: MedicareConfig
    self_employment: SelfEmploymentConfig


class UnemploymentRate(ImmutableModel):
    """Employer unemployment-insurance rate applied to a capped wage base."""

    rate: Amount
    wage_base: Amount

    @model_validator(mode="after")
    def _validate_values(self) -> UnemploymentRate:
        _require_rate(self.rate, "Unemployment rate")
        _require_non_negative(self.wage_base, "Unemployment wage base")
        return self


class UnemploymentConfig(ImmutableModel):
    """Federal (FUTA) and fallback state (SUTA) unemployment rates."""

    federal: UnemploymentRate
    state_default: UnemploymentRate


class SupplementalWithholdingConfig(ImmutableModel):
    """Flat federal withholding rates for supplemental wages such as bonuses."""

    rate: Amount
    high_rate: Amount
    high_threshold: Amount

    @model_validator(mode="after")
    def _validate_values(self) -> SupplementalWithholdingConfig:
        _require_rate(self.rate, "Supplemental withholding rate")
        _require_rate(self.high_rate, "Supplemental withholding high rate")
        _require_non_negative(self.high_threshold, "Supplemental withholding threshold")
        return self


class RetirementLimits(ImmutableModel):
    employee: Amount
    catch_up: Amount = ZERO
    employer: Amount | None = None


class IraLimits(ImmutableModel):
    traditional: Amount
    roth: Amount
    catch_up: Amount = ZERO


class HsaLimits(ImmutableModel):
    self_only: Amount
    family: Amount
    catch_up: Amount = ZERO


class ContributionLimits(ImmutableModel):
    """Annual contribution limits surfaced as notices, never enforced."""

    retirement_401k: RetirementLimits
    ira: IraLimits
    hsa: HsaLimits


class NoTax(ImmutableModel):
    """Jurisdiction without a wage income tax."""

    kind: Literal["none"] = "none"


class FlatTax(ImmutableModel):
    """Single rate applied to income after the jurisdiction's allowances."""

    kind: Literal["flat"] = "flat"
    rate: Amount
    standard_deduction: Amount = ZERO
    personal_exemption: Amount = ZERO

    @model_validator(mode="after")
    def _validate_values(self) -> FlatTax:
        _require_rate(self.rate, "Flat tax rate")
        _require_non_negative(self.standard_deduction, "Standard deduction")
        _require_non_negative(self.personal_exemption, "Personal exemption")
        return self


class ProgressiveTax(ImmutableModel):
    """Bracketed jurisdiction tax with an optional flat local add-on."""

    kind: Literal["progressive"] = "progressive"
    brackets: Sequence[TaxBracket]
    standard_deduction: Amount = ZERO
    personal_exemption: Amount = ZERO
    local_rate: Amount | None = None

    @field_validator("brackets")
    @classmethod
    def _freeze_brackets(cls, value: Sequence[TaxBracket]) -> tuple[TaxBracket, ...]:
        return tuple(value)

    @model_validator(mode="after")
    def _validate_values(self) -> ProgressiveTax:
        validate_bracket_sequence(self.brackets, "progressive jurisdiction")
        _require_non_negative(self.standard_deduction, "Standard deduction")
        _require_non_negative(self.personal_exemption, "Personal exemption")
        if self.local_rate is not None:
            _require_rate(self.local_rate, "Local tax rate")
        return self


JurisdictionRule = Annotated[Union[NoTax, FlatTax, ProgressiveTax], Field(discriminator="kind")]


class MinimumWage(ImmutableModel):
    """Hourly minimum wage, with the cash wage for tipped employees if lower."""

    hourly: Amount
    tipped: Amount | None = None

    @model_validator(mode="after")
    def _validate_values(self) -> MinimumWage:
        _require_non_negative(self.hourly, "Minimum wage")
        if self.tipped is not None:
            _require_non_negative(self.tipped, "Tipped minimum wage")
        return self


class JurisdictionConfig(ImmutableModel):
    """Rules for a single state or district."""

    name: str
    income_tax: JurisdictionRule
    minimum_wage: MinimumWage | None = None
    unemployment: UnemploymentRate | None = None

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ConfigurationError("Jurisdiction names must be non-empty")
        return value.strip()

    @computed_field
    @property
    def has_income_tax(self) -> bool:
        return not isinstance(self.income_tax, NoTax)


class YearWarning(ImmutableModel):
    """Structured warning surfaced for a configured tax year."""

    id: str
    message: str
    severity: str = "info"
    applies_to: Sequence[str] = Field(default_factory=tuple)
    documentation_url: str | None = None

    @field_validator("applies_to", mode="before")
    @classmethod
    def _coerce_applies_to(cls, value: Any) -> Sequence[str]:
        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(str(entry) for entry in value)
        raise ConfigurationError("Warning 'applies_to' must be a list when provided")

    @model_validator(mode="after")
    def _validate_severity(self) -> Self:
        if self.severity not in {"info", "warning", "error"}:
            raise ConfigurationError("Warning 'severity' must be one of: info, warning, error")
        return self


class YearConfiguration(ImmutableModel):
    """Structured representation of a tax year configuration."""

    year: int
    meta: Mapping[str, Any] = Field(default_factory=dict)
    federal: FederalConfig
    payroll: PayrollTaxConfig
    unemployment: UnemploymentConfig
    supplemental_withholding: SupplementalWithholdingConfig
    limits: ContributionLimits
    jurisdictions: Mapping[str, JurisdictionConfig]
    warnings: Sequence[YearWarning] = Field(default_factory=tuple)

    @field_validator("meta", "jurisdictions")
    @classmethod
    def _freeze_sections(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return _freeze(value)

    @field_validator("warnings")
    @classmethod
    def _freeze_warnings(cls, value: Sequence[YearWarning]) -> tuple[YearWarning, ...]:
        return tuple(value)

    @model_validator(mode="before")
    @classmethod
    def _normalise_sections(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        jurisdictions = prepared.get("jurisdictions")
        if not isinstance(jurisdictions, Mapping) or not jurisdictions:
            raise ConfigurationError("Configuration must include a 'jurisdictions' mapping")
        prepared["jurisdictions"] = {
            str(code).strip().upper(): payload for code, payload in jurisdictions.items()
        }

        if prepared.get("warnings") is None:
            prepared["warnings"] = []

        return prepared

    def jurisdiction(self, code: str) -> JurisdictionConfig:
        """Return the rule for ``code`` or raise :class:`UnknownJurisdiction`."""

        normalised = code.strip().upper()
        try:
            return self.jurisdictions[normalised]
        except KeyError:
            raise UnknownJurisdiction(code, self.year) from None

    @property
    def jurisdiction_codes(self) -> tuple[str, ...]:
        return tuple(sorted(self.jurisdictions))


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported tax year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available tax year configuration files."""

    years: Sequence[TaxYearManifestEntry]

    @field_validator("years")
    @classmethod
    def _freeze_years(
        cls, value: Sequence[TaxYearManifestEntry]
    ) -> tuple[TaxYearManifestEntry, ...]:
        return tuple(value)

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "Amount",
    "ConfigurationError",
    "ContributionLimits",
    "FederalConfig",
    "FilingStatus",
    "FlatTax",
    "HsaLimits",
    "ImmutableModel",
    "IraLimits",
    "JurisdictionConfig",
    "JurisdictionRule",
    "MedicareConfig",
    "MinimumWage",
    "NoTax",
    "PayrollTaxConfig",
    "ProgressiveTax",
    "RetirementLimits",
    "SelfEmploymentConfig",
    "SocialSecurityConfig",
    "SupplementalWithholdingConfig",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "UnemploymentConfig",
    "UnemploymentRate",
    "UnknownJurisdiction",
    "ValidationError",
    "YearConfiguration",
    "YearWarning",
    "ZERO",
    "to_decimal",
    "validate_bracket_sequence",
]
