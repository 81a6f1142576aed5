"""Enumerations shared by the configuration layer, the engine and the API."""

from __future__ import annotations

from enum import Enum


class Regime(str, Enum):
    """Tax regimes in chronological order."""

    LEGACY = "legacy"
    REFORM = "reform"


class FilerCategory(str, Enum):
    """Kind of earner submitting a calculation."""

    SALARY = "salary"
    FREELANCER = "freelancer"
    BOTH = "both"
    CRYPTO = "crypto"


class CryptoMethod(str, Enum):
    """How crypto trading gains are taxed."""

    CAPITAL_GAINS = "capital_gains"
    PERSONAL_INCOME = "personal_income"


class IncomePeriod(str, Enum):
    """Period the entered income amount covers."""

    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def periods_per_year(self) -> int:
        return 12 if self is IncomePeriod.MONTHLY else 1


__all__ = ["CryptoMethod", "FilerCategory", "IncomePeriod", "Regime"]
