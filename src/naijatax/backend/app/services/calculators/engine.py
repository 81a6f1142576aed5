"""Personal income and crypto tax engine.

``compute_tax`` maps an annual income figure (already net of any business
expenses the caller chose to deduct) to a liability for one of the two
supported regimes:

* **legacy**: Consolidated Relief Allowance followed by six PAYE bands, or a
  flat capital gains rate for crypto filers choosing that method;
* **reform**: a tax-free threshold, optional rent relief and five bands shared
  by personal income and crypto gains.

Rate tables and relief parameters come from the YAML year configuration so
that each regime's schedule is defined in exactly one place. Arithmetic runs
on :class:`~decimal.Decimal` values and every band's tax is rounded half-up to
the kobo, which keeps the breakdown summing exactly to the reported total.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from numbers import Rational, Real
from typing import Callable, Sequence

from naijatax.backend.config.year_config import (
    TaxBand,
    YearConfiguration,
    configuration_for_regime,
)
from naijatax.backend.enums import CryptoMethod, Regime

from .utils import format_naira, format_percentage, quantize_currency

_LOGGER = logging.getLogger(__name__)

ZERO = Decimal("0")

METHOD_PROGRESSIVE = "progressive"
METHOD_FLAT = "flat"

LINE_BAND = "band"
LINE_FLAT = "flat"
LINE_THRESHOLD = "threshold"


class InvalidInputError(ValueError):
    """Raised for negative, non-finite or non-numeric monetary inputs."""


class UnsupportedRegimeError(ValueError):
    """Raised when the requested regime is unknown or mismatches the configuration."""


class UnsupportedMethodError(ValueError):
    """Raised when the requested crypto method is unknown."""


@dataclass(frozen=True)
class TaxOptions:
    """Optional modifiers for a computation."""

    crypto_method: CryptoMethod | str | None = None
    rent_annual: Decimal | float | int | str | None = None


@dataclass(frozen=True)
class BandLine:
    """One line of the breakdown: the slice taxed, its rate and the tax due."""

    kind: str
    amount: Decimal
    rate: Decimal
    tax: Decimal
    description: str


@dataclass(frozen=True)
class TaxComputationResult:
    """Outcome of a single :func:`compute_tax` call."""

    regime: Regime
    method: str
    income: Decimal
    tax: Decimal
    relief_applied: Decimal
    rent_relief: Decimal
    threshold: Decimal
    taxable_income: Decimal
    below_threshold: bool = False
    breakdown: tuple[BandLine, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class _TaxableBase:
    relief: Decimal
    rent_relief: Decimal
    threshold: Decimal
    taxable: Decimal
    below_threshold: bool = False


def to_money(value: object, field_name: str) -> Decimal:
    """Convert ``value`` into a non-negative, finite ``Decimal``."""

    if isinstance(value, bool):
        raise InvalidInputError(f"Field '{field_name}' must be numeric")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, Rational):
        amount = Decimal(value.numerator) / Decimal(value.denominator)
    elif isinstance(value, Real):
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidInputError(f"Field '{field_name}' must be a finite number")
        try:
            amount = Decimal(str(value))
        except InvalidOperation as exc:
            raise InvalidInputError(f"Field '{field_name}' must be numeric") from exc
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation as exc:
            raise InvalidInputError(f"Field '{field_name}' must be numeric") from exc
    else:
        raise InvalidInputError(f"Field '{field_name}' must be numeric")

    if not amount.is_finite():
        raise InvalidInputError(f"Field '{field_name}' must be a finite number")
    if amount < 0:
        raise InvalidInputError(f"Field '{field_name}' cannot be negative")
    return amount


def _resolve_regime(regime: Regime | str) -> Regime:
    if isinstance(regime, Regime):
        return regime
    try:
        return Regime(str(regime).strip().lower())
    except ValueError as exc:
        raise UnsupportedRegimeError(f"Unsupported tax regime: {regime!r}") from exc


def _resolve_method(method: CryptoMethod | str | None) -> CryptoMethod | None:
    if method is None or isinstance(method, CryptoMethod):
        return method
    try:
        return CryptoMethod(str(method).strip().lower())
    except ValueError as exc:
        raise UnsupportedMethodError(f"Unsupported crypto tax method: {method!r}") from exc


def _to_decimal(value: float) -> Decimal:
    return Decimal(str(value))


def _describe_band(amount: Decimal, rate: Decimal, tax: Decimal) -> str:
    return f"{format_naira(amount)} @ {format_percentage(rate)} = {format_naira(tax)}"


def _apply_bands(
    taxable: Decimal, bands: Sequence[TaxBand]
) -> tuple[Decimal, tuple[BandLine, ...]]:
    """Consume ``taxable`` band by band and return the total and its lines."""

    remaining = taxable
    total = ZERO
    lines: list[BandLine] = []

    for band in bands:
        if remaining <= 0:
            break

        rate = _to_decimal(band.rate)
        if band.width is None:
            consumed = remaining
        else:
            consumed = min(remaining, _to_decimal(band.width))

        band_tax = quantize_currency(consumed * rate)
        total += band_tax
        remaining -= consumed
        lines.append(
            BandLine(
                kind=LINE_BAND,
                amount=consumed,
                rate=rate,
                tax=band_tax,
                description=_describe_band(consumed, rate, band_tax),
            )
        )

    return total, tuple(lines)


def _legacy_base(
    income: Decimal, rent_annual: Decimal, config: YearConfiguration
) -> _TaxableBase:
    relief_rule = config.personal_income.relief
    if relief_rule is None:
        raise UnsupportedRegimeError(
            f"Configuration for {config.year} does not define a relief allowance"
        )

    minimum = max(
        _to_decimal(relief_rule.minimum_amount),
        income * _to_decimal(relief_rule.minimum_rate),
    )
    relief = quantize_currency(minimum + income * _to_decimal(relief_rule.gross_income_rate))
    taxable = income - relief
    return _TaxableBase(
        relief=relief,
        rent_relief=ZERO,
        threshold=ZERO,
        taxable=taxable if taxable > 0 else ZERO,
    )


def _reform_base(
    income: Decimal, rent_annual: Decimal, config: YearConfiguration
) -> _TaxableBase:
    personal_income = config.personal_income
    if personal_income.threshold is None:
        raise UnsupportedRegimeError(
            f"Configuration for {config.year} does not define a tax-free threshold"
        )

    threshold = _to_decimal(personal_income.threshold)
    # The threshold test looks at gross income; rent relief only shrinks the
    # base that is banded afterwards.
    if income <= threshold:
        return _TaxableBase(
            relief=ZERO,
            rent_relief=ZERO,
            threshold=threshold,
            taxable=ZERO,
            below_threshold=True,
        )

    rent_relief = ZERO
    rule = personal_income.rent_relief
    if rule is not None and rent_annual > 0:
        rent_relief = quantize_currency(
            min(rent_annual * _to_decimal(rule.rate), _to_decimal(rule.cap))
        )

    after_rent = income - rent_relief
    if after_rent < 0:
        after_rent = ZERO
    taxable = after_rent - threshold
    return _TaxableBase(
        relief=ZERO,
        rent_relief=rent_relief,
        threshold=threshold,
        taxable=taxable if taxable > 0 else ZERO,
    )


_BASE_BUILDERS: dict[
    Regime, Callable[[Decimal, Decimal, YearConfiguration], _TaxableBase]
] = {
    Regime.LEGACY: _legacy_base,
    Regime.REFORM: _reform_base,
}


def _flat_capital_gains(
    income: Decimal, regime: Regime, config: YearConfiguration
) -> TaxComputationResult:
    rate = _to_decimal(config.capital_gains.flat_rate or 0.0)
    tax = quantize_currency(income * rate)
    line = BandLine(
        kind=LINE_FLAT,
        amount=income,
        rate=rate,
        tax=tax,
        description=_describe_band(income, rate, tax),
    )
    return TaxComputationResult(
        regime=regime,
        method=METHOD_FLAT,
        income=income,
        tax=tax,
        relief_applied=ZERO,
        rent_relief=ZERO,
        threshold=ZERO,
        taxable_income=income,
        breakdown=(line,),
    )


def compute_tax(
    income: Decimal | float | int | str,
    regime: Regime | str,
    options: TaxOptions | None = None,
    *,
    config: YearConfiguration | None = None,
) -> TaxComputationResult:
    """Compute the tax due on ``income`` under ``regime``.

    Parameters
    ----------
    income:
        Annual income, non-negative and already net of deductible business
        expenses.
    regime:
        :class:`Regime` member or its string value.
    options:
        Crypto method and annual rent. ``crypto_method`` switches legacy
        computations to the flat capital gains rate; ``rent_annual`` feeds the
        reform rent relief and is ignored by the legacy schedule.
    config:
        Year configuration to use instead of the one the manifest registers for
        ``regime``.

    Raises
    ------
    InvalidInputError
        If ``income`` or ``rent_annual`` is negative, non-finite or not numeric.
    UnsupportedRegimeError
        If ``regime`` is unknown or does not match ``config``.
    UnsupportedMethodError
        If ``crypto_method`` is unknown.
    """

    resolved_regime = _resolve_regime(regime)
    options = options or TaxOptions()
    method = _resolve_method(options.crypto_method)
    amount = to_money(income, "income")
    rent_annual = ZERO
    if options.rent_annual is not None:
        rent_annual = to_money(options.rent_annual, "rent_annual")

    if config is None:
        config = configuration_for_regime(resolved_regime)
    elif config.regime is not resolved_regime:
        raise UnsupportedRegimeError(
            f"Configuration for {config.year} uses the '{config.regime.value}' regime, "
            f"not '{resolved_regime.value}'"
        )

    if method is CryptoMethod.CAPITAL_GAINS and config.capital_gains.method == METHOD_FLAT:
        result = _flat_capital_gains(amount, resolved_regime, config)
    else:
        builder = _BASE_BUILDERS.get(resolved_regime)
        if builder is None:  # pragma: no cover - every Regime member is mapped
            raise UnsupportedRegimeError(f"Unsupported tax regime: {resolved_regime!r}")

        base = builder(amount, rent_annual, config)
        if base.below_threshold:
            tax = ZERO
            lines: tuple[BandLine, ...] = (
                BandLine(
                    kind=LINE_THRESHOLD,
                    amount=amount,
                    rate=ZERO,
                    tax=ZERO,
                    description=(
                        f"{format_naira(amount)} is within the "
                        f"{format_naira(base.threshold)} tax-free threshold"
                    ),
                ),
            )
        else:
            tax, lines = _apply_bands(base.taxable, config.personal_income.bands)

        result = TaxComputationResult(
            regime=resolved_regime,
            method=METHOD_PROGRESSIVE,
            income=amount,
            tax=tax,
            relief_applied=base.relief,
            rent_relief=base.rent_relief,
            threshold=base.threshold,
            taxable_income=base.taxable,
            below_threshold=base.below_threshold,
            breakdown=lines,
        )

    _LOGGER.debug(
        "compute_tax regime=%s method=%s income=%s taxable=%s tax=%s",
        result.regime.value,
        result.method,
        result.income,
        result.taxable_income,
        result.tax,
    )
    return result


__all__ = [
    "BandLine",
    "InvalidInputError",
    "LINE_BAND",
    "LINE_FLAT",
    "LINE_THRESHOLD",
    "METHOD_FLAT",
    "METHOD_PROGRESSIVE",
    "TaxComputationResult",
    "TaxOptions",
    "UnsupportedMethodError",
    "UnsupportedRegimeError",
    "compute_tax",
    "to_money",
]
