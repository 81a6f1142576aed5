"""Helpers for normalising incoming calculation requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest

from naijatax.backend.app.localization import normalise_locale

# Field names and codes sent by the step-by-step calculator wizard.
_WIZARD_FIELDS = {
    "userType": "filer_category",
    "cryptoTaxMethod": "crypto_method",
    "selectedState": "state",
}
_WIZARD_METHOD_CODES = {"cgt": "capital_gains", "pit": "personal_income"}
# The wizard labels schedules by the year before they take effect.
_WIZARD_YEARS = {"2024": 2025, "2025": 2026}


def _resolve_locale(req: Request, payload: dict[str, Any]) -> None:
    """Populate the locale field in ``payload`` based on hints in ``req``."""

    locale = payload.get("locale")
    if isinstance(locale, str) and locale.strip():
        payload["locale"] = normalise_locale(locale)
        return

    locale_param = req.args.get("locale")
    if locale_param:
        payload["locale"] = normalise_locale(locale_param)
        return

    accept_language = req.headers.get("Accept-Language")
    if accept_language:
        primary = accept_language.split(",")[0].split(";")[0].strip()
        if primary:
            payload["locale"] = normalise_locale(primary)


def _promote_wizard_fields(payload: dict[str, Any]) -> None:
    """Rename wizard-style keys to the API field names in place.

    Explicit API fields win when both spellings are present.
    """

    if "taxYear" in payload:
        wizard_year = payload.pop("taxYear")
        year = _WIZARD_YEARS.get(str(wizard_year).strip(), wizard_year)
        payload.setdefault("year", year)

    for wizard_key, field_name in _WIZARD_FIELDS.items():
        if wizard_key in payload:
            value = payload.pop(wizard_key)
            payload.setdefault(field_name, value)

    if "incomeAmount" in payload or "incomeType" in payload:
        existing = payload.get("income")
        if existing is not None and not isinstance(existing, Mapping):
            raise BadRequest("Field 'income' must be an object")
        income = dict(existing or {})
        if "incomeAmount" in payload:
            income.setdefault("amount", payload.pop("incomeAmount"))
        if "incomeType" in payload:
            income.setdefault("period", payload.pop("incomeType"))
        payload["income"] = income

    method = payload.get("crypto_method")
    if isinstance(method, str) and method.strip().lower() in _WIZARD_METHOD_CODES:
        payload["crypto_method"] = _WIZARD_METHOD_CODES[method.strip().lower()]

    year = payload.get("year")
    if isinstance(year, str) and year.strip().isdigit():
        payload["year"] = int(year.strip())


def parse_calculation_payload(req: Request) -> dict[str, Any]:
    """Extract and validate a JSON payload from ``req``."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    payload = dict(data)
    _promote_wizard_fields(payload)
    _resolve_locale(req, payload)

    return payload
