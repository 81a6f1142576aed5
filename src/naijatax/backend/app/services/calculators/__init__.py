"""Domain-specific calculation helpers."""

from .engine import (
    BandLine,
    InvalidInputError,
    TaxComputationResult,
    TaxOptions,
    UnsupportedMethodError,
    UnsupportedRegimeError,
    compute_tax,
)
from .utils import format_naira, format_percentage, round_currency, round_rate

__all__ = [
    "BandLine",
    "InvalidInputError",
    "TaxComputationResult",
    "TaxOptions",
    "UnsupportedMethodError",
    "UnsupportedRegimeError",
    "compute_tax",
    "format_naira",
    "format_percentage",
    "round_currency",
    "round_rate",
]
