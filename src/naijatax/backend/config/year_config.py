"""Configuration loader wrapping the shared schema models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from naijatax.backend.enums import Regime

from .schema import (
    CapitalGainsConfig,
    ConfigurationError,
    ConsolidatedReliefConfig,
    ExpenseCategory,
    ExpenseConfig,
    PersonalIncomeConfig,
    RentReliefConfig,
    TaxBand,
    TaxYearManifest,
    TaxYearManifestEntry,
    YearConfiguration,
    YearWarning,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_manifest() -> TaxYearManifest:
    """Load and cache the configuration manifest."""

    if not MANIFEST_FILE.exists():
        raise FileNotFoundError("Configuration manifest not found")

    raw_manifest = _load_yaml(MANIFEST_FILE)

    try:
        return TaxYearManifest.model_validate(raw_manifest)
    except ValidationError as error:
        raise ConfigurationError(f"Manifest validation failed: {error}") from error


def manifest_entries() -> Sequence[TaxYearManifestEntry]:
    """Expose the configured manifest entries."""

    return load_manifest().years


@lru_cache(maxsize=8)
def load_year_configuration(year: int) -> YearConfiguration:
    """Load configuration for the specified tax year from disk."""

    try:
        manifest_entry = load_manifest().get_entry(year)
    except KeyError as exc:
        raise FileNotFoundError(f"Configuration for year {year} not declared in manifest") from exc

    config_file = CONFIG_DIRECTORY / manifest_entry.resolved_filename
    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file for year {year} missing: {config_file.name}"
        )

    raw_config = _load_yaml(config_file)
    raw_config.setdefault("year", year)
    raw_config.setdefault("regime", manifest_entry.regime.value)

    try:
        configuration = YearConfiguration.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(f"Configuration validation failed for {year}: {error}") from error

    if configuration.year != year:
        raise ConfigurationError(
            f"Configuration year mismatch: expected {year}, found {configuration.year}"
        )
    if configuration.regime is not manifest_entry.regime:
        raise ConfigurationError(
            f"Configuration regime mismatch for {year}: manifest declares "
            f"'{manifest_entry.regime.value}', file declares '{configuration.regime.value}'"
        )

    return configuration


def configuration_for_regime(regime: Regime) -> YearConfiguration:
    """Return the configuration of the year that introduced ``regime``."""

    try:
        entry = load_manifest().entry_for_regime(regime)
    except KeyError as exc:
        raise FileNotFoundError(
            f"No configured tax year uses the '{regime.value}' regime"
        ) from exc
    return load_year_configuration(entry.year)


def available_years() -> Sequence[int]:
    """Return the tax years declared in the manifest."""

    return load_manifest().supported_years


def supported_states() -> Sequence[str]:
    """Return the states of residence accepted by the calculator."""

    return tuple(load_manifest().states)


__all__ = [
    "CapitalGainsConfig",
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "ConsolidatedReliefConfig",
    "ExpenseCategory",
    "ExpenseConfig",
    "MANIFEST_FILE",
    "PersonalIncomeConfig",
    "RentReliefConfig",
    "TaxBand",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "YearConfiguration",
    "YearWarning",
    "available_years",
    "configuration_for_regime",
    "load_manifest",
    "load_year_configuration",
    "manifest_entries",
    "supported_states",
]
