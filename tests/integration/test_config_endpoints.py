"""Integration coverage for configuration metadata endpoints."""

from http import HTTPStatus

import pytest
from flask.testing import FlaskClient

from naijatax.backend.config import year_config
from naijatax.backend.version import get_project_version


def test_meta_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/meta")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload == {
        "version": get_project_version(),
        "supported_years": [2025, 2026],
        "default_year": 2026,
    }


def test_list_years_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/years")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["default_year"] == 2026
    assert payload["supported_years"] == list(year_config.available_years())

    years = {entry["year"]: entry for entry in payload["years"]}
    legacy_year = years[2025]
    reform_year = years[2026]

    assert legacy_year["regime"] == "legacy"
    assert legacy_year["status"] == "archived"
    legacy_bands = legacy_year["personal_income"]["bands"]
    assert legacy_bands[0] == {"lower": 0, "upper": 300_000, "width": 300_000, "rate": 0.07}
    assert legacy_bands[-1]["upper"] is None
    assert legacy_bands[-1]["lower"] == 3_200_000
    assert legacy_year["personal_income"]["relief"]["minimum_amount"] == 200_000
    assert "threshold" not in legacy_year["personal_income"]
    assert legacy_year["capital_gains"] == {"method": "flat", "flat_rate": 0.1}

    assert reform_year["regime"] == "reform"
    reform_income = reform_year["personal_income"]
    assert reform_income["threshold"] == 800_000
    assert reform_income["rent_relief"] == {"rate": 0.2, "cap": 500_000}
    assert [band["rate"] for band in reform_income["bands"]] == pytest.approx(
        [0.15, 0.18, 0.21, 0.23, 0.25]
    )
    assert reform_income["bands"][1]["upper"] == 11_200_000
    assert reform_year["capital_gains"] == {"method": "progressive"}
    assert reform_year["expenses"]["eligible_filers"] == ["freelancer", "both"]
    assert [warning["id"] for warning in reform_year["warnings"]] == [
        "reform_threshold_rent_relief"
    ]


def test_expense_categories_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/2026/expense-categories?locale=en-NG")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["year"] == 2026
    assert payload["locale"] == "en"
    assert payload["eligible_filers"] == ["freelancer", "both"]
    assert payload["categories"][0] == {"id": "internet", "label": "Internet & data"}
    assert [entry["id"] for entry in payload["categories"]] == [
        "internet",
        "tools",
        "rent",
        "others",
    ]


def test_expense_categories_unknown_year(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/2031/expense-categories")

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json()["error"] == "not_found"


def test_states_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/states")

    assert response.status_code == HTTPStatus.OK
    states = response.get_json()["states"]
    assert len(states) == 37
    assert {"Lagos", "Kano", "Rivers", "FCT"}.issubset(states)
