"""Exception hierarchy shared by the interpretation engine."""

from __future__ import annotations

from typing import Any

__all__ = ["AstroGuideError", "ChartDataError", "RulesetValidationError"]


class AstroGuideError(Exception):
    """Base class for errors raised by :mod:`astroguide`."""


class ChartDataError(AstroGuideError, ValueError):
    """Raised when a birth chart violates the structural input contract."""

    def __init__(self, message: str, *, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []


class RulesetValidationError(AstroGuideError):
    """Raised when rules-table parsing or validation fails."""

    def __init__(self, message: str, *, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []
