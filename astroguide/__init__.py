"""AstroGuide: rule-based natal chart interpretation."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version as _get_version

from .errors import AstroGuideError, ChartDataError, RulesetValidationError
from .interpret import (
    BirthChart,
    Interpretation,
    InterpretationResult,
    extract_key_themes,
    format_interpretation_for_ai,
    generate_chart_interpretation,
    interpret_chart,
)

LOG = logging.getLogger(__name__)

try:
    __version__ = _get_version("astroguide")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.0.0"


def get_version() -> str:
    """Return the resolved AstroGuide package version."""

    return __version__


__all__ = [
    "AstroGuideError",
    "BirthChart",
    "ChartDataError",
    "Interpretation",
    "InterpretationResult",
    "RulesetValidationError",
    "__version__",
    "extract_key_themes",
    "format_interpretation_for_ai",
    "generate_chart_interpretation",
    "get_version",
    "interpret_chart",
]
