#!/usr/bin/env python3
"""Collect baseline timings for the engine and the calculation service."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter
from typing import Callable

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from naijatax.backend.app.services.calculation_service import calculate_tax  # noqa: E402
from naijatax.backend.app.services.calculators import compute_tax  # noqa: E402

SAMPLE_PAYLOADS = {
    "legacy_freelancer": {
        "year": 2025,
        "filer_category": "freelancer",
        "income": {"amount": "450,000", "period": "monthly"},
        "expenses": {"internet": 120000, "tools": 80000},
        "state": "Lagos",
    },
    "reform_salary_with_rent": {
        "year": 2026,
        "filer_category": "salary",
        "income": {"amount": 12000000},
        "annual_rent": 1800000,
    },
    "legacy_crypto_capital_gains": {
        "year": 2025,
        "filer_category": "crypto",
        "crypto_method": "capital_gains",
        "income": {"amount": 5000000},
    },
}


def _time(callback: Callable[[], object], iterations: int) -> dict[str, float]:
    callback()  # Warm configuration caches
    start = perf_counter()
    for _ in range(iterations):
        callback()
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def measure_engine(iterations: int) -> dict[str, dict[str, float]]:
    """Return timing statistics for direct engine calls per regime."""

    return {
        regime: _time(lambda regime=regime: compute_tax(25_000_000, regime), iterations)
        for regime in ("legacy", "reform")
    }


def measure_service(iterations: int) -> dict[str, dict[str, float]]:
    """Return timing statistics for full payload calculations."""

    return {
        name: _time(lambda payload=payload: calculate_tax(dict(payload)), iterations)
        for name, payload in SAMPLE_PAYLOADS.items()
    }


def main() -> None:
    iterations = int(os.getenv("NAIJATAX_PROFILE_ITERATIONS", "200"))
    report = {
        "engine": measure_engine(iterations),
        "service": measure_service(iterations),
    }
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
