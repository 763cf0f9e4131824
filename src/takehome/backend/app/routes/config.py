"""Expose rule-table metadata consumed by the presentation layer.

These endpoints read the same :class:`TaxEngine` the calculators use, so the
informational tables rendered by the front-end always agree with the numbers
the calculation endpoints return.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from flask import Blueprint, jsonify, request
from typing_extensions import assert_never

from takehome.backend.app.http import ProblemResponse, problem_response
from takehome.backend.app.services.calculators import (
    format_percentage,
    round_currency,
    round_rate,
)
from takehome.backend.app.services.engine import TaxEngine
from takehome.backend.config.year_config import (
    FilingStatus,
    FlatTax,
    JurisdictionConfig,
    NoTax,
    ProgressiveTax,
    TaxBracket,
    UnemploymentRate,
    YearWarning,
    load_manifest,
    load_year_configuration,
)
from takehome.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def _build_engine(year: int) -> TaxEngine | ProblemResponse:
    """Resolve the engine for ``year`` or a 404 problem payload."""

    try:
        return TaxEngine(load_year_configuration(year))
    except FileNotFoundError as exc:
        return problem_response("not_found", status=404, message=str(exc))


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    manifest = load_manifest()
    supported_years = list(manifest.supported_years)
    default_year = supported_years[-1] if supported_years else None
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": default_year,
    }


def _serialise_brackets(brackets: Sequence[TaxBracket]) -> list[dict[str, Any]]:
    return [
        {
            "upper": (
                round_currency(bracket.upper_bound)
                if bracket.upper_bound is not None
                else None
            ),
            "rate": round_rate(bracket.rate),
            "label": format_percentage(bracket.rate),
        }
        for bracket in brackets
    ]


def _serialise_unemployment(rule: UnemploymentRate) -> dict[str, float]:
    return {"rate": round_rate(rule.rate), "wage_base": round_currency(rule.wage_base)}


def _serialise_warning(warning: YearWarning) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": warning.id,
        "message": warning.message,
        "severity": warning.severity,
        "applies_to": list(warning.applies_to),
    }
    if warning.documentation_url:
        payload["documentation_url"] = warning.documentation_url
    return payload


def _serialise_jurisdiction_summary(code: str, jurisdiction: JurisdictionConfig) -> dict[str, Any]:
    wage = jurisdiction.minimum_wage
    return {
        "code": code,
        "name": jurisdiction.name,
        "kind": jurisdiction.income_tax.kind,
        "has_income_tax": jurisdiction.has_income_tax,
        "minimum_wage": round_currency(wage.hourly) if wage is not None else None,
    }


def _serialise_income_tax(engine: TaxEngine, code: str) -> dict[str, Any]:
    rule = engine.jurisdiction(code).income_tax
    payload: dict[str, Any] = {
        "kind": rule.kind,
        "brackets": _serialise_brackets(engine.jurisdiction_brackets(code)),
    }
    if isinstance(rule, NoTax):
        return payload
    if isinstance(rule, FlatTax):
        payload["rate"] = round_rate(rule.rate)
    elif isinstance(rule, ProgressiveTax):
        payload["local_rate"] = (
            round_rate(rule.local_rate) if rule.local_rate is not None else None
        )
    else:
        assert_never(rule)
    payload["standard_deduction"] = round_currency(rule.standard_deduction)
    payload["personal_exemption"] = round_currency(rule.personal_exemption)
    return payload


def _serialise_year(year: int) -> dict[str, Any]:
    manifest_entry = load_manifest().get_entry(year)
    config = load_year_configuration(year)
    return {
        "year": year,
        "status": manifest_entry.status,
        "notes_url": manifest_entry.notes_url,
        "meta": dict(config.meta),
        "jurisdiction_count": len(config.jurisdictions),
        "warnings": [_serialise_warning(entry) for entry in config.warnings],
    }


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    payload = get_configuration_metadata()
    return jsonify(payload), 200


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return all configured years with lightweight metadata."""

    metadata = get_configuration_metadata()
    payload = {
        "years": [_serialise_year(year) for year in metadata["supported_years"]],
        "default_year": metadata["default_year"],
        "supported_years": metadata["supported_years"],
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/jurisdictions")
def list_jurisdictions(year: int) -> tuple[Any, int]:
    """List every configured jurisdiction with its rule kind and minimum wage."""

    engine = _build_engine(year)
    if isinstance(engine, ProblemResponse):
        return engine.to_response()

    jurisdictions = [
        _serialise_jurisdiction_summary(code, engine.jurisdiction(code))
        for code in engine.jurisdiction_codes()
    ]
    payload = {
        "year": engine.year,
        "jurisdictions": jurisdictions,
        "no_income_tax": list(engine.no_income_tax_codes()),
        "flat_tax": list(engine.flat_tax_codes()),
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/jurisdictions/<code>")
def get_jurisdiction(year: int, code: str) -> tuple[Any, int]:
    """Expose the full rule for a single jurisdiction."""

    engine = _build_engine(year)
    if isinstance(engine, ProblemResponse):
        return engine.to_response()

    jurisdiction = engine.jurisdiction(code)
    normalised = code.strip().upper()
    wage = engine.minimum_wage(normalised)
    unemployment = jurisdiction.unemployment or engine.config.unemployment.state_default

    payload = {
        "year": engine.year,
        "code": normalised,
        "name": jurisdiction.name,
        "has_income_tax": jurisdiction.has_income_tax,
        "income_tax": _serialise_income_tax(engine, normalised),
        "minimum_wage": {
            "hourly": round_currency(wage.hourly),
            "tipped": round_currency(wage.tipped) if wage.tipped is not None else None,
            "uses_federal_minimum": jurisdiction.minimum_wage is None,
        },
        "unemployment": _serialise_unemployment(unemployment),
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/federal")
def get_federal_rules(year: int) -> tuple[Any, int]:
    """Expose federal brackets, payroll taxes and limits for a filing status."""

    engine = _build_engine(year)
    if isinstance(engine, ProblemResponse):
        return engine.to_response()

    status_hint = request.args.get("filing_status", FilingStatus.SINGLE.value)
    brackets = engine.federal_brackets(status_hint)
    status = FilingStatus(status_hint)

    config = engine.config
    payroll = config.payroll
    limits = config.limits
    supplemental = config.supplemental_withholding

    payload = {
        "year": engine.year,
        "filing_status": status.value,
        "standard_deduction": round_currency(config.federal.standard_deduction_for(status)),
        "brackets": _serialise_brackets(brackets),
        "minimum_wage": round_currency(config.federal.minimum_wage),
        "payroll": {
            "social_security": {
                "rate": round_rate(payroll.social_security.rate),
                "wage_base": round_currency(payroll.social_security.wage_base),
            },
            "medicare": {
                "rate": round_rate(payroll.medicare.rate),
                "additional_rate": round_rate(payroll.medicare.additional_rate),
                "additional_threshold": round_currency(payroll.medicare.threshold_for(status)),
            },
            "self_employment": {
                "social_security_rate": round_rate(payroll.self_employment.social_security_rate),
                "medicare_rate": round_rate(payroll.self_employment.medicare_rate),
                "earnings_factor": round_rate(payroll.self_employment.earnings_factor),
            },
        },
        "unemployment": {
            "federal": _serialise_unemployment(config.unemployment.federal),
            "state_default": _serialise_unemployment(config.unemployment.state_default),
        },
        "supplemental_withholding": {
            "rate": round_rate(supplemental.rate),
            "high_rate": round_rate(supplemental.high_rate),
            "high_threshold": round_currency(supplemental.high_threshold),
        },
        "limits": {
            "retirement_401k": {
                "employee": round_currency(limits.retirement_401k.employee),
                "catch_up": round_currency(limits.retirement_401k.catch_up),
                "employer": (
                    round_currency(limits.retirement_401k.employer)
                    if limits.retirement_401k.employer is not None
                    else None
                ),
            },
            "ira": {
                "traditional": round_currency(limits.ira.traditional),
                "roth": round_currency(limits.ira.roth),
                "catch_up": round_currency(limits.ira.catch_up),
            },
            "hsa": {
                "self_only": round_currency(limits.hsa.self_only),
                "family": round_currency(limits.hsa.family),
                "catch_up": round_currency(limits.hsa.catch_up),
            },
        },
    }
    return jsonify(payload), 200
