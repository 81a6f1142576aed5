"""Utilities for validating year configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from collections import Counter
from typing import Iterable, Sequence

from .year_config import (
    CapitalGainsConfig,
    ExpenseConfig,
    PersonalIncomeConfig,
    YearConfiguration,
    YearWarning,
    available_years,
    load_year_configuration,
)


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_bands(scope: str, personal_income: PersonalIncomeConfig) -> list[str]:
    errors: list[str] = []
    rates = [band.rate for band in personal_income.bands]

    for index, band in enumerate(personal_income.bands):
        if band.rate <= 0 or band.rate > 1:
            errors.append(
                _format_scope(scope, f"band {index + 1} rate must be between 0 and 1")
            )
        if band.width is not None and band.width <= 0:
            errors.append(
                _format_scope(scope, f"band {index + 1} width must be positive")
            )

    if rates != sorted(rates):
        errors.append(
            _format_scope(scope, "band rates should not decrease from one band to the next")
        )

    if personal_income.bands and personal_income.bands[-1].width is not None:
        errors.append(_format_scope(scope, "final band must be open-ended"))

    return errors


def _validate_reliefs(scope: str, personal_income: PersonalIncomeConfig) -> list[str]:
    errors: list[str] = []

    relief = personal_income.relief
    if relief is not None:
        if relief.minimum_amount < 0:
            errors.append(_format_scope(scope, "relief minimum amount cannot be negative"))
        for label, value in {
            "minimum_rate": relief.minimum_rate,
            "gross_income_rate": relief.gross_income_rate,
        }.items():
            if value < 0 or value > 1:
                errors.append(
                    _format_scope(scope, f"relief {label} must be between 0 and 1")
                )

    if personal_income.threshold is not None and personal_income.threshold < 0:
        errors.append(_format_scope(scope, "tax-free threshold cannot be negative"))

    rent_relief = personal_income.rent_relief
    if rent_relief is not None:
        if rent_relief.rate < 0 or rent_relief.rate > 1:
            errors.append(_format_scope(scope, "rent relief rate must be between 0 and 1"))
        if rent_relief.cap < 0:
            errors.append(_format_scope(scope, "rent relief cap cannot be negative"))

    return errors


def _validate_capital_gains(capital_gains: CapitalGainsConfig) -> list[str]:
    errors: list[str] = []
    scope = "capital_gains"

    if capital_gains.method == "flat":
        rate = capital_gains.flat_rate
        if rate is None or rate <= 0 or rate > 1:
            errors.append(_format_scope(scope, "flat rate must be between 0 and 1"))
    elif capital_gains.flat_rate is not None:
        errors.append(
            _format_scope(scope, "flat rate is ignored for progressive treatment")
        )

    return errors


def _validate_expenses(expenses: ExpenseConfig) -> list[str]:
    errors: list[str] = []
    scope = "expenses"

    identifiers = [category.id for category in expenses.categories]
    duplicates = [value for value, count in Counter(identifiers).items() if count > 1]
    if duplicates:
        errors.append(
            _format_scope(scope, f"duplicate expense categories detected: {sorted(duplicates)}")
        )

    for category in expenses.categories:
        if not category.id.strip():
            errors.append(_format_scope(scope, "expense category ids cannot be blank"))
        if not category.label_key.strip():
            errors.append(
                _format_scope(scope, f"category '{category.id}' is missing a label key")
            )

    if expenses.categories and not expenses.eligible_filers:
        errors.append(
            _format_scope(scope, "categories are defined but no filer may deduct them")
        )

    return errors


def _validate_warnings(warnings: Iterable[YearWarning]) -> list[str]:
    errors: list[str] = []
    identifiers = [warning.id for warning in warnings]
    duplicates = [value for value, count in Counter(identifiers).items() if count > 1]
    if duplicates:
        errors.append(
            _format_scope("warnings", f"duplicate warning ids detected: {sorted(duplicates)}")
        )
    return errors


def validate_year_configuration(config: YearConfiguration) -> list[str]:
    """Return human-readable issues detected in ``config``."""

    errors: list[str] = []

    errors.extend(_validate_bands("personal_income.bands", config.personal_income))
    errors.extend(_validate_reliefs("personal_income", config.personal_income))
    errors.extend(_validate_capital_gains(config.capital_gains))
    errors.extend(_validate_expenses(config.expenses))
    errors.extend(_validate_warnings(config.warnings))

    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        config = load_year_configuration(year)
        results[int(year)] = validate_year_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Validate configured tax years and report issues helpful to contributors."
        )
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            config = load_year_configuration(year)
        except FileNotFoundError as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
