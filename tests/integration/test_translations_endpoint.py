"""Integration tests for the translations API."""

from __future__ import annotations

import json
from pathlib import Path

from flask.testing import FlaskClient

TRANSLATIONS_ROOT = Path(__file__).resolve().parents[2] / "src" / "naijatax" / "translations"


def _load_backend_value(locale: str, key: str) -> str:
    payload = json.loads(TRANSLATIONS_ROOT.joinpath(f"{locale}.json").read_text(encoding="utf-8"))
    return str(payload["backend"][key])


def test_translations_endpoint_returns_default_catalogue(client: FlaskClient) -> None:
    response = client.get("/api/v1/translations/")
    assert response.status_code == 200
    payload = response.get_json()

    assert payload["locale"] == "en"
    assert payload["available_locales"] == ["en"]
    assert payload["backend"]["summary.tax_total"] == _load_backend_value("en", "summary.tax_total")
    assert payload["frontend"]["crypto_methods"]["capital_gains"] == "Capital Gains Tax"


def test_translations_endpoint_honours_accept_language(client: FlaskClient) -> None:
    response = client.get("/api/v1/translations/", headers={"Accept-Language": "en-GB,en;q=0.8"})

    assert response.status_code == 200
    assert response.get_json()["locale"] == "en"


def test_translations_endpoint_falls_back_for_unknown_locale(client: FlaskClient) -> None:
    response = client.get("/api/v1/translations/ig")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["locale"] == "en"
    assert payload["fallback"]["backend"]["notices.expenses_not_eligible"] == _load_backend_value(
        "en", "notices.expenses_not_eligible"
    )
