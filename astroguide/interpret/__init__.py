"""Natal chart interpretation runtime components."""

from .classify import chart_ruler, elemental_balance, modal_balance, planet_aspect_polarity
from .engine import (
    InterpretationResult,
    extract_key_themes,
    generate_chart_interpretation,
    interpret_chart,
)
from .loader import Meaning, Ruleset, load_ruleset
from .models import BirthChart, Body, ChartAspect, Interpretation, coerce_chart
from .patterns import find_aspect_patterns, find_stelliums
from .report import format_interpretation_for_ai
from .rules import RulesTable, get_rules_table
from .scoring import ScoringContext, planet_significance, significance_tier
from .synthesis import build_core_synthesis
from .templates import render_aspect, replace_placeholders
from .themes import group_aspects_by_theme

__all__ = [
    "BirthChart",
    "Body",
    "ChartAspect",
    "Interpretation",
    "InterpretationResult",
    "Meaning",
    "Ruleset",
    "RulesTable",
    "ScoringContext",
    "build_core_synthesis",
    "chart_ruler",
    "coerce_chart",
    "elemental_balance",
    "extract_key_themes",
    "find_aspect_patterns",
    "find_stelliums",
    "format_interpretation_for_ai",
    "generate_chart_interpretation",
    "get_rules_table",
    "group_aspects_by_theme",
    "interpret_chart",
    "load_ruleset",
    "modal_balance",
    "planet_aspect_polarity",
    "planet_significance",
    "render_aspect",
    "replace_placeholders",
    "significance_tier",
]
