"""Placeholder templates for combined aspect readings."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from .models import BirthChart, ChartAspect, display_name
from .rules import RulesTable, get_rules_table

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

# Placeholders: {planet1Name} {planet2Name} {planet1Sign} {planet2Sign}
# {planet1Core} {planet2Core} {planet1SignCore} {planet2SignCore}
# {planet1Keyword} {planet2Keyword}
ASPECT_TEMPLATES: Mapping[str, str] = {
    "merged": (
        "Your {planet1Name} in {planet1Sign} and {planet2Name} in {planet2Sign} are merged "
        "through a conjunction. This creates a unified expression where {planet1Core} and "
        "{planet2Core} work together as one force. The {planet1Sign} expression of "
        "{planet1Name} blends with the {planet2Sign} expression of {planet2Name}, creating a "
        "combined energy that is both {planet1SignCore} and {planet2SignCore}."
    ),
    "polarized": (
        "Your {planet1Name} in {planet1Sign} and {planet2Name} in {planet2Sign} are in "
        "opposition, creating a polarized dynamic. Your {planet1Core} expressed through "
        "{planet1Sign} seeks {planet1SignCore}, while your {planet2Core} expressed through "
        "{planet2Sign} needs {planet2SignCore}. This creates tension where you may feel pulled "
        "between {planet1Keyword} and {planet2Keyword}, requiring you to find balance between "
        "these opposing forces."
    ),
    "friction": (
        "Your {planet1Name} in {planet1Sign} and {planet2Name} in {planet2Sign} form a square, "
        "creating friction and challenge. Your {planet1Core} wants {planet1SignCore}, while your "
        "{planet2Core} needs {planet2SignCore}. This square creates internal conflict where you "
        "may vacillate between {planet1Keyword} and {planet2Keyword}, pushing you to grow "
        "through the tension between these competing needs."
    ),
    "flowing": (
        "Your {planet1Name} in {planet1Sign} and {planet2Name} in {planet2Sign} form a trine, "
        "creating flowing harmony. Your {planet1Core} expressed through {planet1Sign} naturally "
        "supports your {planet2Core} expressed through {planet2Sign}. This creates ease where "
        "{planet1Keyword} and {planet2Keyword} work together seamlessly, allowing you to express "
        "both energies with natural grace."
    ),
    "cooperative": (
        "Your {planet1Name} in {planet1Sign} and {planet2Name} in {planet2Sign} form a sextile, "
        "creating cooperative energy. Your {planet1Core} and {planet2Core} can work together "
        "harmoniously, with {planet1Sign} expression supporting {planet2Sign} expression. This "
        "creates opportunities where you can integrate {planet1Keyword} with {planet2Keyword} "
        "through conscious effort and awareness."
    ),
}
FALLBACK_TEMPLATE = "cooperative"


def replace_placeholders(template: str, values: Mapping[str, Any]) -> str:
    """Substitute every ``{name}`` token in ``template``.

    Tokens without a value (or with a falsy one) resolve to an empty string.
    """

    def _value(match: re.Match[str]) -> str:
        value = values.get(match.group(1))
        return str(value) if value else ""

    return _PLACEHOLDER.sub(_value, template)


def aspect_template(style_polarity: str) -> str:
    """Return the template for an aspect style, defaulting to the cooperative one."""

    return ASPECT_TEMPLATES.get(style_polarity, ASPECT_TEMPLATES[FALLBACK_TEMPLATE])


def render_aspect(aspect: ChartAspect, chart: BirthChart, rules: RulesTable | None = None) -> str:
    """Return the combined prose reading of ``aspect``, or ``""`` if a body is unknown."""

    table = rules or get_rules_table()
    first = chart.placement(aspect.planet1)
    second = chart.placement(aspect.planet2)
    if first is None or second is None:
        return ""

    first_sign = table.sign_meaning(first.sign, "positive")
    second_sign = table.sign_meaning(second.sign, "positive")
    first_planet = table.planet_meaning(aspect.planet1, "positive")
    second_planet = table.planet_meaning(aspect.planet2, "positive")
    style = table.aspect_style(aspect.aspect)

    values = {
        "planet1Name": display_name(aspect.planet1),
        "planet2Name": display_name(aspect.planet2),
        "planet1Sign": first.sign,
        "planet2Sign": second.sign,
        "planet1Core": first_planet.core or "the planet's energy",
        "planet2Core": second_planet.core or "the other planet's energy",
        "planet1SignCore": first_sign.core,
        "planet2SignCore": second_sign.core,
        "planet1Keyword": first_sign.keywords[0] if first_sign.keywords else "one quality",
        "planet2Keyword": second_sign.keywords[0] if second_sign.keywords else "another quality",
    }
    return replace_placeholders(aspect_template(style.polarity), values)


__all__ = [
    "ASPECT_TEMPLATES",
    "FALLBACK_TEMPLATE",
    "aspect_template",
    "render_aspect",
    "replace_placeholders",
]
