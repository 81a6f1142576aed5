"""Pydantic models describing the tax year configuration schema."""

from __future__ import annotations

from typing import Any, Iterable, Literal, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self

from naijatax.backend.enums import FilerCategory, Regime


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class TaxBand(ImmutableModel):
    """A slice of taxable income charged at a single rate.

    ``width`` is the amount of income the band absorbs; ``None`` marks the
    open-ended final band.
    """

    width: float | None = None
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBand:
        if self.rate <= 0 or self.rate > 1:
            raise ConfigurationError("Band rates must lie in the interval (0, 1]")
        if self.width is not None and self.width <= 0:
            raise ConfigurationError("Band widths must be positive values")
        return self


class ConsolidatedReliefConfig(ImmutableModel):
    """Consolidated Relief Allowance applied before banding."""

    minimum_amount: float
    minimum_rate: float
    gross_income_rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> ConsolidatedReliefConfig:
        if self.minimum_amount < 0:
            raise ConfigurationError("Relief minimum amount must be non-negative")
        for rate in (self.minimum_rate, self.gross_income_rate):
            if rate < 0 or rate > 1:
                raise ConfigurationError("Relief rates must be between 0 and 1")
        return self


class RentReliefConfig(ImmutableModel):
    """Share of annual rent deductible before the tax-free threshold."""

    rate: float
    cap: float

    @model_validator(mode="after")
    def _validate_values(self) -> RentReliefConfig:
        if self.rate < 0 or self.rate > 1:
            raise ConfigurationError("Rent relief rate must be between 0 and 1")
        if self.cap < 0:
            raise ConfigurationError("Rent relief cap must be non-negative")
        return self


class PersonalIncomeConfig(ImmutableModel):
    """Progressive schedule and reliefs for personal income."""

    bands: Sequence[TaxBand]
    relief: ConsolidatedReliefConfig | None = None
    threshold: float | None = None
    rent_relief: RentReliefConfig | None = None

    @field_validator("bands", mode="before")
    @classmethod
    def _coerce_bands(cls, value: Any) -> Sequence[Any]:
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
            return tuple(value)
        raise ConfigurationError("Personal income 'bands' must be a list")

    @model_validator(mode="after")
    def _validate_schedule(self) -> PersonalIncomeConfig:
        if not self.bands:
            raise ConfigurationError("At least one tax band must be defined")
        if self.bands[-1].width is not None:
            raise ConfigurationError("Final tax band must have an open width")
        if any(band.width is None for band in self.bands[:-1]):
            raise ConfigurationError("Only the final tax band may be open-ended")
        if self.threshold is not None and self.threshold < 0:
            raise ConfigurationError("Tax-free threshold must be non-negative")
        return self

    @property
    def ceilings(self) -> tuple[float | None, ...]:
        """Cumulative upper bounds of each band on the taxable base."""

        running = 0.0
        ceilings: list[float | None] = []
        for band in self.bands:
            if band.width is None:
                ceilings.append(None)
                continue
            running += band.width
            ceilings.append(running)
        return tuple(ceilings)


class CapitalGainsConfig(ImmutableModel):
    """Treatment of crypto gains filed under the capital gains method."""

    method: Literal["flat", "progressive"]
    flat_rate: float | None = None

    @model_validator(mode="after")
    def _validate_rate(self) -> CapitalGainsConfig:
        if self.method == "flat":
            if self.flat_rate is None:
                raise ConfigurationError("Flat capital gains treatment requires 'flat_rate'")
            if self.flat_rate <= 0 or self.flat_rate > 1:
                raise ConfigurationError("Capital gains rate must lie in the interval (0, 1]")
        elif self.flat_rate is not None:
            raise ConfigurationError("'flat_rate' is only valid for flat capital gains")
        return self


class ExpenseCategory(ImmutableModel):
    """Deductible business expense field offered to eligible filers."""

    id: str
    label_key: str


class ExpenseConfig(ImmutableModel):
    """Business expense categories and the filers allowed to deduct them."""

    categories: Sequence[ExpenseCategory] = Field(default_factory=tuple)
    eligible_filers: Sequence[FilerCategory] = Field(default_factory=tuple)

    @field_validator("categories", "eligible_filers", mode="before")
    @classmethod
    def _coerce_sequence(cls, value: Any) -> Sequence[Any]:
        if value is None:
            return ()
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
            return tuple(value)
        raise ConfigurationError("Expense configuration entries must be lists")

    def allows(self, filer: FilerCategory) -> bool:
        return filer in self.eligible_filers

    @property
    def category_ids(self) -> tuple[str, ...]:
        return tuple(category.id for category in self.categories)


class YearWarning(ImmutableModel):
    """Configuration-level notice surfaced alongside calculations."""

    id: str
    message_key: str
    severity: str = "info"
    applies_to: Sequence[str] = Field(default_factory=tuple)

    @field_validator("applies_to", mode="before")
    @classmethod
    def _coerce_applies_to(cls, value: Any) -> Sequence[str]:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        if isinstance(value, Iterable):
            return tuple(str(entry) for entry in value)
        raise ConfigurationError("Warning 'applies_to' must be a string or list")

    @model_validator(mode="after")
    def _validate_severity(self) -> Self:
        if self.severity not in {"info", "warning", "error"}:
            raise ConfigurationError(f"Unsupported warning severity '{self.severity}'")
        return self


class YearConfiguration(ImmutableModel):
    """Structured representation of a tax year configuration."""

    year: int
    regime: Regime
    meta: dict[str, Any] = Field(default_factory=dict)
    personal_income: PersonalIncomeConfig
    capital_gains: CapitalGainsConfig
    expenses: ExpenseConfig = Field(default_factory=ExpenseConfig)
    warnings: Sequence[YearWarning] = Field(default_factory=tuple)

    @model_validator(mode="before")
    @classmethod
    def _prepare_sections(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, dict):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        if "warnings" not in prepared or prepared["warnings"] is None:
            prepared["warnings"] = []

        return prepared

    @model_validator(mode="after")
    def _validate_regime_rules(self) -> YearConfiguration:
        income = self.personal_income
        if self.regime is Regime.LEGACY:
            if income.relief is None:
                raise ConfigurationError("Legacy years require a consolidated relief rule")
            if income.threshold is not None or income.rent_relief is not None:
                raise ConfigurationError(
                    "Legacy years cannot define a tax-free threshold or rent relief"
                )
        else:
            if income.threshold is None:
                raise ConfigurationError("Reform years require a tax-free threshold")
            if income.relief is not None:
                raise ConfigurationError("Reform years cannot define consolidated relief")
        return self


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported tax year in the manifest."""

    year: int
    regime: Regime
    filename: str | None = None
    status: str = "active"

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available years and supported jurisdictions."""

    years: Sequence[TaxYearManifestEntry]
    states: Sequence[str] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        regimes: set[Regime] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            if entry.regime in regimes:
                raise ConfigurationError(
                    f"Regime '{entry.regime.value}' is declared for more than one year"
                )
            seen.add(entry.year)
            regimes.add(entry.regime)

        lowered = [state.strip().lower() for state in self.states]
        if len(set(lowered)) != len(lowered):
            raise ConfigurationError("Duplicate state declared in the configuration manifest")
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    def entry_for_regime(self, regime: Regime) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.regime is regime:
                return entry
        raise KeyError(regime)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "CapitalGainsConfig",
    "ConfigurationError",
    "ConsolidatedReliefConfig",
    "ExpenseCategory",
    "ExpenseConfig",
    "ImmutableModel",
    "PersonalIncomeConfig",
    "RentReliefConfig",
    "TaxBand",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "ValidationError",
    "YearConfiguration",
    "YearWarning",
]
