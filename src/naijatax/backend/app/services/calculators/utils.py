"""Utility helpers for calculator modules."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

KOBO = Decimal("0.01")


def format_percentage(value: float | Decimal) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = Decimal(str(value)) * 100
    if percentage == percentage.to_integral_value():
        return f"{int(percentage)}%"
    return f"{percentage:.2f}%"


def format_naira(amount: Decimal) -> str:
    """Render ``amount`` with thousands separators and the naira sign."""

    quantized = quantize_currency(amount)
    if quantized == quantized.to_integral_value():
        return f"₦{int(quantized):,}"
    return f"₦{quantized:,.2f}"


def quantize_currency(value: Decimal) -> Decimal:
    """Round a monetary ``Decimal`` half-up to the nearest kobo."""

    return value.quantize(KOBO, rounding=ROUND_HALF_UP)


def round_currency(value: float | Decimal) -> float:
    """Round monetary amounts to two decimals."""

    if isinstance(value, Decimal):
        return float(quantize_currency(value))
    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)
