"""Integration tests for the tax calculation REST endpoint."""

from __future__ import annotations

import json
from http import HTTPStatus
from pathlib import Path
from typing import Dict, Iterable

import pytest
from flask.testing import FlaskClient

DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"


def _load_scenarios() -> Iterable[Dict[str, object]]:
    with DATA_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@pytest.mark.parametrize("scenario", _load_scenarios(), ids=lambda item: item["name"])
def test_calculation_endpoint_matches_regression_scenarios(
    client: FlaskClient, scenario: Dict[str, object]
) -> None:
    """Each regression scenario should remain stable over time."""

    response = client.post("/api/v1/calculations", json=scenario["payload"])
    assert response.status_code == HTTPStatus.OK

    result = response.get_json()
    expected = scenario["expectations"]

    summary = result["summary"]
    for key, value in expected["summary"].items():
        assert summary[key] == pytest.approx(value)

    taxes = [line["tax"] for line in result["breakdown"]]
    assert taxes == pytest.approx(expected["breakdown_taxes"])


def test_calculation_endpoint_is_not_cached(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={"year": 2026, "income": {"amount": 3_000_000}},
    )

    assert response.status_code == HTTPStatus.OK
    assert response.headers["Cache-Control"] == "no-store"
    assert response.get_json()["summary"]["tax_total"] == pytest.approx(330_000)


def test_calculation_endpoint_accepts_wizard_payload(client: FlaskClient) -> None:
    """Wizard field names and currency strings are accepted."""

    response = client.post(
        "/api/v1/calculations",
        json={
            "taxYear": "2024",
            "userType": "crypto",
            "cryptoTaxMethod": "cgt",
            "selectedState": "lagos",
            "incomeAmount": "₦5,000,000",
            "incomeType": "yearly",
        },
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["meta"]["year"] == 2025
    assert payload["meta"]["regime"] == "legacy"
    assert payload["summary"]["tax_total"] == pytest.approx(500_000)
    assert payload["meta"]["state"] == "Lagos"
    assert payload["meta"]["crypto_method"] == "capital_gains"


def test_wizard_reform_year_uses_reform_schedule(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={
            "taxYear": "2025",
            "userType": "salary",
            "incomeAmount": "250,000",
            "incomeType": "monthly",
        },
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["meta"]["year"] == 2026
    assert payload["meta"]["regime"] == "reform"
    assert payload["summary"]["tax_total"] == pytest.approx(330_000)


def test_calculation_endpoint_rejects_scalar_income_with_wizard_fields(
    client: FlaskClient,
) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={"year": 2026, "income": 5, "incomeAmount": "100"},
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "bad_request"
    assert payload["message"] == "Field 'income' must be an object"


def test_calculation_endpoint_uses_accept_language_header(client: FlaskClient) -> None:
    """Unsupported browser languages fall back to English labels."""

    response = client.post(
        "/api/v1/calculations",
        json={"year": 2025, "income": {"amount": 1_000_000}},
        headers={"Accept-Language": "yo-NG,yo;q=0.9"},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["meta"]["locale"] == "en"
    assert payload["summary"]["labels"]["income_total"] == "Gross annual income"


def test_calculation_endpoint_returns_validation_error(client: FlaskClient) -> None:
    """Invalid payloads should return a structured 400 response."""

    response = client.post(
        "/api/v1/calculations",
        json={"year": 2025, "income": {"amount": -1}},
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert "cannot be negative" in payload["message"]


def test_calculation_endpoint_reports_unsupported_year(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={"year": 2024, "income": {"amount": 1_000_000}},
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "unsupported_regime"
    assert "2024" in payload["message"]


def test_calculation_endpoint_reports_unknown_crypto_method(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={
            "year": 2025,
            "filer_category": "crypto",
            "crypto_method": "barter",
            "income": {"amount": 1_000},
        },
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "validation_error"


def test_calculation_endpoint_rejects_non_json_body(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        data="income=1000",
        content_type="application/x-www-form-urlencoded",
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "bad_request"
    assert payload["message"] == "Request body must be valid JSON"
