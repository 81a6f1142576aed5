"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from flask import jsonify

from naijatax.backend.app.services.calculators import (
    InvalidInputError,
    UnsupportedMethodError,
    UnsupportedRegimeError,
)

_ERROR_CODES: tuple[tuple[type[ValueError], str], ...] = (
    (InvalidInputError, "invalid_input"),
    (UnsupportedRegimeError, "unsupported_regime"),
    (UnsupportedMethodError, "unsupported_method"),
)


@dataclass(frozen=True)
class ProblemResponse:
    """Lightweight representation of an RFC 7807-style error payload."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return the serialisable payload for this problem response."""

        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        """Convert the problem payload into a Flask response tuple."""

        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Convenience factory mirroring Flask's ``jsonify`` interface."""

    additional: Mapping[str, Any] | None = extra or None
    return ProblemResponse(error=error, status=status, message=message, extra=additional)


def problem_for_error(error: ValueError) -> ProblemResponse:
    """Map a domain ``ValueError`` onto a 400 problem response.

    Engine errors keep their specific codes; any other ``ValueError`` is a
    generic ``validation_error``.
    """

    code = "validation_error"
    for error_type, error_code in _ERROR_CODES:
        if isinstance(error, error_type):
            code = error_code
            break
    return problem_response(code, status=400, message=str(error))


__all__ = ["ProblemResponse", "problem_for_error", "problem_response"]
