"""Error types raised by the lottery engine."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class ConfigurationError(ValueError):
    """Raised before any computation when a lottery configuration is invalid."""

    def __init__(self, message: str, *, code: str, details: Optional[Mapping[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class EmptyPoolError(RuntimeError):
    """No weighted team may legally take the current pick."""

    def __init__(self, pick: int):
        super().__init__(f"No eligible weighted team for pick {pick}")
        self.pick = pick


class InvalidTrialError(RuntimeError):
    """A single Monte Carlo trial could not produce a constraint-valid order."""
