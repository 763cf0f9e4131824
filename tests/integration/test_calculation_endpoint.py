"""Integration tests for the tax calculation REST endpoints."""

from __future__ import annotations

from http import HTTPStatus

import pytest
from flask.testing import FlaskClient


@pytest.mark.parametrize("path", ["/api/v1/calculations", "/api/v1/calculations/salary"])
def test_salary_endpoint(client: FlaskClient, path: str) -> None:
    response = client.post(
        path,
        json={
            "year": 2025,
            "gross_annual_amount": 50_000,
            "filing_status": "single",
            "jurisdiction_code": "IL",
        },
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["jurisdiction"] == {"code": "IL", "name": "Illinois"}
    assert payload["yearly"]["jurisdiction_tax"] == 2475.0
    assert payload["yearly"]["take_home_pay"] == 39738.5


def test_salary_endpoint_reads_year_from_query_string(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations?year=2024",
        json={"gross_annual_amount": 250_000, "jurisdiction_code": "TX"},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["year"] == 2024
    assert payload["yearly"]["social_security"] == 10453.2


def test_calculation_endpoint_returns_validation_error(client: FlaskClient) -> None:
    """Invalid payloads should return a structured 400 response."""

    response = client.post(
        "/api/v1/calculations",
        json={"gross_annual_amount": -5, "jurisdiction_code": "TX"},
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert payload["status"] == 400
    assert "gross_annual_amount: value cannot be negative" in payload["message"]


def test_calculation_endpoint_rejects_non_json(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations", data="gross=1", content_type="text/plain"
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "bad_request"


def test_calculation_endpoint_rejects_unsupported_year(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={"year": 1999, "gross_annual_amount": 1, "jurisdiction_code": "TX"},
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert "Unsupported tax year 1999" in response.get_json()["message"]


def test_unknown_jurisdiction_returns_not_found(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={"gross_annual_amount": 50_000, "jurisdiction_code": "ZZ"},
    )

    assert response.status_code == HTTPStatus.NOT_FOUND
    payload = response.get_json()
    assert payload == {
        "error": "not_found",
        "status": 404,
        "message": "Unknown jurisdiction 'ZZ' for tax year 2025",
        "jurisdiction_code": "ZZ",
        "year": 2025,
    }



@pytest.mark.parametrize("code", ["NYC", "X"])
def test_codes_of_any_length_reach_the_rule_table(client: FlaskClient, code: str) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={"gross_annual_amount": 50_000, "jurisdiction_code": code.lower()},
    )

    assert response.status_code == HTTPStatus.NOT_FOUND
    payload = response.get_json()
    assert payload["error"] == "not_found"
    assert payload["jurisdiction_code"] == code


def test_employer_cost_endpoint(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations/employer-cost",
        json={
            "gross_annual_amount": 60_000,
            "jurisdiction_code": "TX",
            "retirement_match_percent": 4,
        },
    )

    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["total_cost"] == 67302.0


def test_bonus_endpoint(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations/bonus",
        json={"base_salary": 75_000, "bonus": 10_000, "jurisdiction_code": "TX"},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["withholding"]["federal"] == 2200.0
    assert payload["take_home_with_bonus"] - payload["take_home_without_bonus"] == (
        pytest.approx(payload["net_bonus_actual"], abs=0.02)
    )


def test_self_employment_endpoint(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations/self-employment",
        json={"revenue": 120_000, "expenses": 20_000},
    )

    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["total_tax"] == 26189.3


def test_raise_endpoint(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations/raise",
        json={"current_gross": 60_000, "new_gross": 70_000, "jurisdiction_code": "TX"},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["federal_tax_delta"] == 1852.5
    assert payload["payroll_tax_delta"] == 765.0


def test_net_to_gross_endpoint(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations/net-to-gross",
        json={"target_net_annual": 60_000, "jurisdiction_code": "CA"},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert abs(payload["salary"]["yearly"]["take_home_pay"] - 60_000) <= 1


def test_minimum_wage_endpoint(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations/minimum-wage",
        json={"jurisdiction_code": "TX"},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["annual_gross"] == 15_080.0
    assert payload["hours_per_week"] == 40.0


def test_multiple_jobs_endpoint(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations/multiple-jobs",
        json={
            "year": 2025,
            "jobs": [{"salary": 50_000}, {"salary": 20_000}],
            "jurisdiction_code": "TX",
        },
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["total_income"] == 70_000.0
    assert payload["federal_underpayment"] == 2_552.5
    assert payload["excess_social_security"] == 0.0
    assert payload["jobs"][1]["name"] == "Job 2"


def test_multiple_jobs_endpoint_requires_a_job(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations/multiple-jobs",
        json={"jobs": [], "jurisdiction_code": "TX"},
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "validation_error"
