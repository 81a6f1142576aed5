"""Orchestrate request validation, normalisation, and tax calculations.

The calculation service is the only caller of the tax engine. It validates the
raw payload, annualises income, applies business expenses for eligible filers,
resolves the regime from the year configuration and turns the engine's result
into the localised response consumed by the front-end.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from decimal import Decimal
from time import perf_counter
from types import MappingProxyType
from typing import Any, Sequence

from pydantic import ValidationError

from naijatax.backend.app.localization import Translator, get_translator
from naijatax.backend.app.models import (
    CalculationInput,
    CalculationRequest,
    CalculationResponse,
    format_validation_error,
)
from naijatax.backend.config.year_config import (
    YearConfiguration,
    load_year_configuration,
    supported_states,
)
from naijatax.backend.enums import CryptoMethod, FilerCategory

from .calculators import (
    TaxComputationResult,
    TaxOptions,
    UnsupportedRegimeError,
    compute_tax,
    format_naira,
    format_percentage,
    round_currency,
    round_rate,
)
from .calculators.engine import LINE_BAND, LINE_FLAT, METHOD_FLAT

_LOGGER = logging.getLogger(__name__)

RENT_RELIEF_SCOPE = "rent_relief"
EXPENSES_NOT_ELIGIBLE = "expenses_not_eligible"


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("NAIJATAX_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _resolve_state(state: str | None, states: Sequence[str]) -> str | None:
    if state is None:
        return None

    lookup = {entry.lower(): entry for entry in states}
    canonical = lookup.get(state.lower())
    if canonical is None:
        raise ValueError(f"Unknown state of residence: '{state}'")
    return canonical


def _resolve_crypto_method(request: CalculationRequest) -> CryptoMethod | None:
    if request.filer_category is FilerCategory.CRYPTO:
        return request.crypto_method or CryptoMethod.CAPITAL_GAINS
    if request.crypto_method is not None:
        raise ValueError("Field 'crypto_method' only applies to crypto filers")
    return None


def _normalise_payload(
    request: CalculationRequest, config: YearConfiguration
) -> CalculationInput:
    known_categories = set(config.expenses.category_ids)
    unknown = sorted(key for key in request.expenses if key not in known_categories)
    if unknown:
        raise ValueError(f"Unknown expense categories: {', '.join(unknown)}")

    expenses = MappingProxyType(
        {key: amount for key, amount in request.expenses.items() if amount > 0}
    )

    period = request.income.period
    declared_income = request.income.amount
    gross_income = declared_income * period.periods_per_year

    expenses_applied = Decimal("0")
    if config.expenses.allows(request.filer_category):
        expenses_applied = sum(expenses.values(), Decimal("0"))

    return CalculationInput(
        year=request.year,
        locale=request.locale,
        regime=config.regime,
        filer_category=request.filer_category,
        crypto_method=_resolve_crypto_method(request),
        income_period=period,
        declared_income=declared_income,
        gross_income=gross_income,
        expenses=expenses,
        expenses_applied=expenses_applied,
        annual_rent=request.annual_rent,
        state=_resolve_state(request.state, supported_states()),
    )


def _build_breakdown(
    result: TaxComputationResult, translator: Translator
) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    position = 0
    for line in result.breakdown:
        rate_label = format_percentage(line.rate)
        if line.kind == LINE_BAND:
            position += 1
            label = translator("breakdown.band", position=position, rate=rate_label)
        elif line.kind == LINE_FLAT:
            label = translator("breakdown.flat", rate=rate_label)
        else:
            label = translator(
                "breakdown.threshold", threshold=format_naira(result.threshold)
            )

        entries.append(
            {
                "kind": line.kind,
                "label": label,
                "amount": round_currency(line.amount),
                "rate": round_rate(float(line.rate)),
                "tax": round_currency(line.tax),
                "description": line.description,
            }
        )
    return entries


def _collect_notices(
    normalised: CalculationInput,
    config: YearConfiguration,
    translator: Translator,
) -> list[dict[str, Any]]:
    notices: list[dict[str, Any]] = []

    if normalised.annual_rent > 0:
        for warning in config.warnings:
            if RENT_RELIEF_SCOPE in warning.applies_to:
                notices.append(
                    {
                        "id": warning.id,
                        "severity": warning.severity,
                        "message": translator(warning.message_key),
                    }
                )

    if normalised.expenses_entered > 0 and normalised.expenses_applied <= 0:
        notices.append(
            {
                "id": EXPENSES_NOT_ELIGIBLE,
                "severity": "info",
                "message": translator("notices.expenses_not_eligible"),
            }
        )

    return notices


def _method_label(
    result: TaxComputationResult, config: YearConfiguration, translator: Translator
) -> str:
    if result.method == METHOD_FLAT:
        rate = config.capital_gains.flat_rate or 0.0
        return translator("method.flat", rate=format_percentage(rate))
    return translator("method.progressive")


def calculate_tax(
    payload: Mapping[str, Any] | CalculationRequest,
) -> dict[str, Any]:
    """Compute the tax summary for the provided payload."""

    if isinstance(payload, CalculationRequest):
        try:
            request_model = CalculationRequest.model_validate(
                payload.model_dump(mode="python")
            )
        except ValidationError as exc:
            raise ValueError(format_validation_error(exc)) from exc
    else:
        if not isinstance(payload, Mapping):
            raise ValueError("Payload must be a mapping")
        if "year" not in payload:
            raise ValueError("Payload must include a tax year")
        try:
            request_model = CalculationRequest.model_validate(payload)
        except ValidationError as exc:
            raise ValueError(format_validation_error(exc)) from exc

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    year = request_model.year
    try:
        config = load_year_configuration(year)
    except FileNotFoundError as exc:
        raise UnsupportedRegimeError(f"Tax year {year} is not supported") from exc

    with _profile_section("normalise_payload", timings):
        normalised = _normalise_payload(request_model, config)

    translator = get_translator(normalised.locale)

    with _profile_section("compute_tax", timings):
        result = compute_tax(
            normalised.assessable_income,
            normalised.regime,
            TaxOptions(
                crypto_method=normalised.crypto_method,
                rent_annual=normalised.annual_rent,
            ),
            config=config,
        )

    income_total = normalised.gross_income
    tax_total = result.tax
    net_income = income_total - tax_total
    effective_tax_rate = float(tax_total / income_total) if income_total > 0 else 0.0

    with _profile_section("build_response", timings):
        summary: dict[str, Any] = {
            "income_total": round_currency(income_total),
            "expenses_applied": round_currency(normalised.expenses_applied),
            "assessable_income": round_currency(normalised.assessable_income),
            "relief_applied": round_currency(result.relief_applied),
            "rent_relief": round_currency(result.rent_relief),
            "taxable_income": round_currency(result.taxable_income),
            "tax_total": round_currency(tax_total),
            "monthly_tax": round_currency(tax_total / 12),
            "net_income": round_currency(net_income),
            "net_monthly_income": round_currency(net_income / 12),
            "effective_tax_rate": round_rate(effective_tax_rate),
            "labels": {
                "income_total": translator("summary.income_total"),
                "expenses_applied": translator("summary.expenses_applied"),
                "assessable_income": translator("summary.assessable_income"),
                "relief_applied": translator("summary.relief_applied"),
                "rent_relief": translator("summary.rent_relief"),
                "taxable_income": translator("summary.taxable_income"),
                "tax_total": translator("summary.tax_total"),
                "monthly_tax": translator("summary.monthly_tax"),
                "net_income": translator("summary.net_income"),
                "net_monthly_income": translator("summary.net_monthly_income"),
                "effective_tax_rate": translator("summary.effective_tax_rate"),
            },
        }

        meta_payload: dict[str, Any] = {
            "year": normalised.year,
            "regime": normalised.regime.value,
            "locale": translator.locale,
            "filer_category": normalised.filer_category.value,
            "tax_method": result.method,
            "tax_method_label": _method_label(result, config, translator),
            "below_threshold": result.below_threshold,
        }
        if normalised.crypto_method is not None:
            meta_payload["crypto_method"] = normalised.crypto_method.value
        if normalised.state is not None:
            meta_payload["state"] = normalised.state

        notices = _collect_notices(normalised, config, translator)
        if notices:
            meta_payload["notices"] = notices

        response_model = CalculationResponse.model_validate(
            {
                "summary": summary,
                "breakdown": _build_breakdown(result, translator),
                "meta": meta_payload,
            }
        )

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_tax timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    return response_model.model_dump(mode="json", exclude_none=True)


__all__ = ["calculate_tax"]
