"""Expose configuration metadata consumed by the decoupled front-end.

These endpoints bridge the YAML-backed year configuration and the calculator
wizard so that forms can list tax years, band tables, expense fields and
states of residence without duplicating tax rules in the browser.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flask import Blueprint, jsonify, request

from naijatax.backend.app.http import ProblemResponse, problem_response
from naijatax.backend.app.localization import (
    Translator,
    get_translator,
    normalise_locale,
)
from naijatax.backend.config.year_config import (
    PersonalIncomeConfig,
    YearConfiguration,
    available_years,
    load_manifest,
    load_year_configuration,
    supported_states,
)
from naijatax.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


@dataclass(frozen=True)
class YearRouteContext:
    """Common context shared by year-scoped configuration endpoints."""

    year: int
    locale: str
    translator: Translator
    configuration: YearConfiguration


def _build_year_context(year: int, locale_hint: str | None) -> YearRouteContext | ProblemResponse:
    """Resolve configuration and localisation helpers for a given year."""

    try:
        configuration = load_year_configuration(year)
    except FileNotFoundError as exc:
        return problem_response("not_found", status=404, message=str(exc))

    locale = normalise_locale(locale_hint)
    translator = get_translator(locale)
    return YearRouteContext(
        year=year,
        locale=translator.locale,
        translator=translator,
        configuration=configuration,
    )


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


def _serialise_bands(personal_income: PersonalIncomeConfig) -> list[dict[str, Any]]:
    serialised: list[dict[str, Any]] = []
    lower = 0.0
    for band, upper in zip(personal_income.bands, personal_income.ceilings):
        serialised.append(
            {
                "lower": lower,
                "upper": upper,
                "width": band.width,
                "rate": band.rate,
            }
        )
        if upper is not None:
            lower = upper
    return serialised


def _serialise_personal_income(personal_income: PersonalIncomeConfig) -> dict[str, Any]:
    payload: dict[str, Any] = {"bands": _serialise_bands(personal_income)}
    if personal_income.relief is not None:
        payload["relief"] = personal_income.relief.model_dump(mode="json")
    if personal_income.threshold is not None:
        payload["threshold"] = personal_income.threshold
    if personal_income.rent_relief is not None:
        payload["rent_relief"] = personal_income.rent_relief.model_dump(mode="json")
    return payload


def _serialise_year(year: int) -> dict[str, Any]:
    config = load_year_configuration(year)
    manifest_entry = load_manifest().get_entry(year)

    return {
        "year": year,
        "regime": config.regime.value,
        "status": manifest_entry.status,
        "meta": dict(config.meta),
        "personal_income": _serialise_personal_income(config.personal_income),
        "capital_gains": config.capital_gains.model_dump(mode="json", exclude_none=True),
        "expenses": {
            "categories": list(config.expenses.category_ids),
            "eligible_filers": [filer.value for filer in config.expenses.eligible_filers],
        },
        "warnings": [warning.model_dump(mode="json") for warning in config.warnings],
    }


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    payload = get_configuration_metadata()
    return jsonify(payload), 200


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return all configured years with their band tables and reliefs."""

    years = [_serialise_year(year) for year in available_years()]
    metadata = get_configuration_metadata()
    payload = {
        "years": years,
        "default_year": metadata["default_year"],
        "supported_years": metadata["supported_years"],
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/expense-categories")
def get_expense_categories(year: int) -> tuple[Any, int]:
    """Expose deductible expense fields with locale-aware labels."""

    locale_hint = request.args.get("locale")
    context = _build_year_context(year, locale_hint)
    if isinstance(context, ProblemResponse):
        return context.to_response()

    expenses = context.configuration.expenses
    categories = [
        {"id": category.id, "label": context.translator(category.label_key)}
        for category in expenses.categories
    ]

    payload = {
        "year": context.year,
        "locale": context.locale,
        "eligible_filers": [filer.value for filer in expenses.eligible_filers],
        "categories": categories,
    }
    return jsonify(payload), 200


@blueprint.get("/states")
def list_states() -> tuple[Any, int]:
    """Return the states of residence accepted by the calculator."""

    return jsonify({"states": list(supported_states())}), 200
