"""Unit tests for calculation request parsing helpers."""

from __future__ import annotations

import pytest
from flask import Flask, request
from werkzeug.exceptions import BadRequest

from takehome.backend.services.request_parser import parse_calculation_payload


def test_parse_payload_uses_year_query_parameter(app: Flask) -> None:
    """The ``?year=`` query parameter should supply the year when absent."""

    with app.test_request_context(
        "/api/v1/calculations?year=2024",
        method="POST",
        json={"gross_annual_amount": 50_000, "jurisdiction_code": "TX"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["year"] == "2024"


def test_parse_payload_preserves_explicit_year(app: Flask) -> None:
    """A year in the body wins over the query string."""

    with app.test_request_context(
        "/api/v1/calculations?year=2024",
        method="POST",
        json={"year": 2025, "gross_annual_amount": 50_000},
    ):
        payload = parse_calculation_payload(request)

    assert payload["year"] == 2025


def test_parse_payload_rejects_non_object(app: Flask) -> None:
    """Non-object JSON payloads should trigger BadRequest responses."""

    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        json=["not", "an", "object"],
    ):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)


def test_parse_payload_rejects_invalid_json(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        data="{not json",
        content_type="application/json",
    ):
        with pytest.raises(BadRequest, match="valid JSON"):
            parse_calculation_payload(request)
