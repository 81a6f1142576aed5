"""Pydantic models describing the public API surface."""

from __future__ import annotations

import re
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from naijatax.backend.enums import CryptoMethod, FilerCategory, IncomePeriod

__all__ = [
    "IncomeInput",
    "CalculationRequest",
    "BreakdownLine",
    "Notice",
    "SummaryLabels",
    "Summary",
    "ResponseMeta",
    "CalculationResponse",
    "format_validation_error",
    "parse_amount",
]


_AMOUNT_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")
_AMOUNT_NOISE = ("₦", "NGN", "ngn", ",", "_", " ", "\u00a0")


def parse_amount(value: Any) -> Any:
    """Strip currency decoration from free-text amounts.

    ``"₦1,200,000"`` and ``"NGN 1 200 000"`` both become ``"1200000"``. Blank
    strings count as zero. Floats are converted through their shortest repr so
    ``0.1`` becomes ``Decimal("0.1")``; field constraints still reject
    negatives and non-finite values.
    """

    if isinstance(value, bool):
        raise ValueError("amount must be a number")
    if isinstance(value, float):
        return repr(value)
    if not isinstance(value, str):
        return value

    text = value.strip()
    for token in _AMOUNT_NOISE:
        text = text.replace(token, "")
    if not text:
        return "0"
    if not _AMOUNT_PATTERN.fullmatch(text):
        raise ValueError(f"'{value}' is not a valid amount")
    return text


class IncomeInput(BaseModel):
    """Income figure as entered and the period it covers."""

    model_config = ConfigDict(extra="forbid")

    amount: Decimal = Field(default=Decimal("0"), ge=0, allow_inf_nan=False)
    period: IncomePeriod = IncomePeriod.YEARLY

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, value: Any) -> Any:
        return parse_amount(value)

    @field_validator("period", mode="before")
    @classmethod
    def _normalise_period(cls, value: Any) -> Any:
        if value is None:
            return IncomePeriod.YEARLY
        if isinstance(value, str):
            return value.strip().lower()
        return value


class CalculationRequest(BaseModel):
    """Complete payload accepted by the calculation endpoint."""

    model_config = ConfigDict(extra="forbid")

    year: int = Field(..., ge=0)
    locale: str = Field(default="en")
    filer_category: FilerCategory = FilerCategory.SALARY
    crypto_method: CryptoMethod | None = None
    income: IncomeInput = Field(default_factory=IncomeInput)
    expenses: dict[str, Decimal] = Field(default_factory=dict)
    annual_rent: Decimal = Field(default=Decimal("0"), ge=0, allow_inf_nan=False)
    state: str | None = None

    @field_validator("locale", mode="before")
    @classmethod
    def _normalise_locale(cls, value: Any) -> str:
        if value is None:
            return "en"
        text = str(value).strip()
        return text or "en"

    @field_validator("filer_category", "crypto_method", mode="before")
    @classmethod
    def _normalise_choice(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("annual_rent", mode="before")
    @classmethod
    def _parse_rent(cls, value: Any) -> Any:
        if value is None:
            return "0"
        return parse_amount(value)

    @field_validator("state", mode="before")
    @classmethod
    def _normalise_state(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("expenses", mode="before")
    @classmethod
    def _normalise_expenses_input(cls, value: Any) -> Mapping[str, Any]:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            amounts: dict[str, Any] = {}
            for key, raw in value.items():
                try:
                    amounts[str(key)] = parse_amount(raw)
                except ValueError as exc:
                    raise ValueError(
                        f"Expense amount for category '{key}' must be numeric"
                    ) from exc
            return amounts
        raise TypeError("Expenses section must be an object mapping categories to amounts")

    @field_validator("expenses", mode="after")
    @classmethod
    def _validate_expense_amounts(cls, value: Mapping[str, Decimal]) -> dict[str, Decimal]:
        amounts: dict[str, Decimal] = {}
        for key, amount in value.items():
            if not amount.is_finite():
                raise ValueError(f"Expense amount for category '{key}' must be finite")
            if amount < 0:
                raise ValueError(f"Expense amount for category '{key}' cannot be negative")
            amounts[key] = amount
        return amounts


class BreakdownLine(BaseModel):
    """Single band, flat-rate or threshold line of the computation."""

    model_config = ConfigDict(extra="forbid")

    kind: str
    label: str
    amount: float
    rate: float
    tax: float
    description: str


class Notice(BaseModel):
    """Informational note attached to a calculation."""

    model_config = ConfigDict(extra="forbid")

    id: str
    severity: str
    message: str


class SummaryLabels(BaseModel):
    """Localized labels for summary fields."""

    model_config = ConfigDict(extra="forbid")

    income_total: str
    expenses_applied: str
    assessable_income: str
    relief_applied: str
    rent_relief: str
    taxable_income: str
    tax_total: str
    monthly_tax: str
    net_income: str
    net_monthly_income: str
    effective_tax_rate: str


class Summary(BaseModel):
    """Aggregated calculation results."""

    model_config = ConfigDict(extra="forbid")

    income_total: float
    expenses_applied: float
    assessable_income: float
    relief_applied: float
    rent_relief: float
    taxable_income: float
    tax_total: float
    monthly_tax: float
    net_income: float
    net_monthly_income: float
    effective_tax_rate: float
    labels: SummaryLabels


class ResponseMeta(BaseModel):
    """Metadata returned alongside the calculation output."""

    model_config = ConfigDict(extra="forbid")

    year: int
    regime: str
    locale: str
    filer_category: str
    tax_method: str
    tax_method_label: str
    crypto_method: str | None = None
    state: str | None = None
    below_threshold: bool = False
    notices: list[Notice] | None = None


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    summary: Summary
    breakdown: list[BreakdownLine]
    meta: ResponseMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
