"""Typed request/response models shared across the calculation services.

Raw payloads are validated by the Pydantic request models in :mod:`.api` and
then reduced to a frozen :class:`CalculationInput` holding annualised figures,
so the tax engine only ever sees a single normalised income amount.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from naijatax.backend.enums import CryptoMethod, FilerCategory, IncomePeriod, Regime

from .api import (
    BreakdownLine,
    CalculationRequest,
    CalculationResponse,
    IncomeInput,
    Notice,
    ResponseMeta,
    Summary,
    SummaryLabels,
    format_validation_error,
    parse_amount,
)

__all__ = [
    "CalculationInput",
    "CalculationRequest",
    "CalculationResponse",
    "IncomeInput",
    "BreakdownLine",
    "Notice",
    "SummaryLabels",
    "Summary",
    "ResponseMeta",
    "format_validation_error",
    "parse_amount",
]


class CalculationInput(BaseModel):
    """Validated and normalised user input for tax calculations."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    year: int
    locale: str
    regime: Regime
    filer_category: FilerCategory
    crypto_method: CryptoMethod | None = None
    income_period: IncomePeriod
    declared_income: Decimal
    gross_income: Decimal
    expenses: Mapping[str, Decimal] = Field(default_factory=dict)
    expenses_applied: Decimal = Decimal("0")
    annual_rent: Decimal = Decimal("0")
    state: str | None = None

    @property
    def expenses_entered(self) -> Decimal:
        return sum(self.expenses.values(), Decimal("0"))

    @property
    def assessable_income(self) -> Decimal:
        """Annual income left after deductible business expenses."""

        assessable = self.gross_income - self.expenses_applied
        return assessable if assessable > 0 else Decimal("0")
