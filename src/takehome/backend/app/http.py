"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from flask import jsonify

from takehome.backend.config.year_config import ConfigurationError, UnknownJurisdiction


@dataclass(frozen=True)
class ProblemResponse:
    """Lightweight representation of an RFC 7807-style error payload."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error, "status": self.status}
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


def problem_from_exception(error: UnknownJurisdiction | ValueError) -> ProblemResponse:
    """Map a domain exception onto its problem payload.

    Order matters: :class:`ConfigurationError` is a ``ValueError`` subclass.
    Any other ``ValueError``, including ``InvalidInput``, is a client error.
    """

    if isinstance(error, UnknownJurisdiction):
        extra: dict[str, Any] = {"jurisdiction_code": error.code}
        if error.year is not None:
            extra["year"] = error.year
        return problem_response(
            "not_found", status=404, message=str(error), **extra
        )
    if isinstance(error, ConfigurationError):
        return problem_response(
            "configuration_error",
            status=500,
            message=str(error),
        )
    return problem_response("validation_error", status=400, message=str(error))


__all__ = ["ProblemResponse", "problem_from_exception", "problem_response"]
