"""Jinja2 rendering of the interpretation report handed to a language model."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from jinja2 import Environment, StrictUndefined

from ..config.settings import Settings, get_settings
from .models import BirthChart, ChartAspect, CoreSynthesis, Interpretation, coerce_chart
from .rules import RulesTable, get_rules_table
from .scoring import rank_by_significance, significance_tier
from .templates import render_aspect, replace_placeholders
from .themes import theme_groups

RULE = "=" * 63
THIN_RULE = "-" * 63

CORE_SYNTHESIS_TITLE = "CORE PERSONALITY SYNTHESIS (Luminaries + Chart Ruler)"
SUN_MOON_LABEL = "IDENTITY & EMOTIONS (Sun-Moon {aspect}):"
SUN_MOON_NO_ASPECT_LABEL = "IDENTITY & EMOTIONS (Sun-Moon):"
SUN_RULER_LABEL = "IDENTITY & EXPRESSION (Sun-{ruler} {aspect}):"
MOON_RULER_LABEL = "EMOTIONS & EXPRESSION (Moon-{ruler} {aspect}):"

NO_ASPECT_SUN_MOON = (
    "Your {sunSign} Sun makes you {sunPositive}, while your {moonSign} Moon needs "
    "{moonPositive}. Without a major aspect between them, these energies operate somewhat "
    "independently, creating a dynamic where your identity and emotional needs may not "
    "always align."
)
STRESS_RESPONSE = (
    "When under stress, your {ascendantSign} Ascendant may show {ascendantNegative}, while "
    "your {moonSign} Moon reacts with {moonNegative}. {rulerInfluence}"
)
RULER_INFLUENCE = "Your chart ruler {rulerPlanet} in {rulerSign} influences how you {rulerNegative}."

REPORT_TEMPLATE = """\
BIRTH CHART INTERPRETATION TEMPLATE
=====================================

CRITICAL INSTRUCTIONS FOR HOLISTIC INTERPRETATION:

NEVER DO THIS (PLANET-BY-PLANET BREAKDOWN):
- "Your Sun in Gemini... [paragraph about Sun]"
- "Your Moon in Virgo... [paragraph about Moon]"
- "Your Mercury... [paragraph about Mercury]"
This creates a fragmented, checklist-style response. DO NOT structure your response this way.

INSTEAD DO THIS (UNIFIED SYNTHESIS):
- Weave multiple placements together in each paragraph
- Show how Sun, Moon, Mercury, Venus, etc. all interconnect
- Create a unified narrative, not separate paragraphs for each planet
- Each paragraph should integrate 2-3+ chart elements

{% for instruction in instructions %}
{{ loop.index }}. {{ instruction }}
{% endfor %}

CHART INFORMATION:
Date: {{ chart.date }}
Time: {{ chart.time }}
Location: {{ chart.latitude }}°N, {{ chart.longitude }}°E

{% if synthesis %}
{{ rule }}
{{ synthesis.title }}
{{ rule }}

FOUNDATION:
{% for line in synthesis.foundation %}
- {{ line }}
{% endfor %}

{% for section in synthesis.sections %}
{{ section.label }}
{% if section.style %}
{{ section.style }}
{% endif %}
{{ section.text }}

{% endfor %}
STRESS RESPONSE:
{{ synthesis.stress }}

{% endif %}
{{ rule }}
ASPECT-DRIVEN INTERPRETATIONS (Grouped by Theme)
{{ rule }}

{% for group in groups %}
{{ group.header }}
{{ thin_rule }}
{% for item in group.aspects %}

{{ item.heading }}:
{{ item.text }}
{% endfor %}

{% endfor %}
{{ rule }}
PLANET SIGNIFICANCE SCORES (Higher = More Important)
{{ rule }}
{% for entry in significance %}
{{ entry.planet }}: {{ entry.score }} ({{ entry.tier }} significance)
{% endfor %}

{{ rule }}
PLACEMENT DETAILS (Technical Reference)
{{ rule }}

{% for placement in placements %}
{{ placement.heading }}
  Planet Energy: {{ placement.planet_core }}
  Sign Expression: {{ placement.sign_core }}
  House Context: {{ placement.house_core }}
{% if placement.aspects %}
  Aspects: {{ placement.aspects }}
{% endif %}

{% endfor %}
ELEMENTAL BALANCE:
Dominant Element: {{ elemental.dominant }}
Lacking Element: {{ elemental.lacking }}

MODAL BALANCE:
Dominant Modality: {{ modal.dominant }}
"""


@dataclass(slots=True)
class ReportRenderer:
    """Render report templates through a shared Jinja2 environment."""

    environment_factory: Callable[[], Environment]

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        env = self.environment_factory()
        return env.from_string(template).render(**context)


@lru_cache(maxsize=1)
def _create_environment() -> Environment:
    return Environment(
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def get_renderer() -> ReportRenderer:
    """Return a renderer bound to the shared report environment."""

    return ReportRenderer(environment_factory=_create_environment)


def _house_suffix(house: int | None) -> str:
    return f" (House {house})" if house else ""


def _aspect_heading(aspect: ChartAspect) -> str:
    return f"{aspect.planet1.upper()} {aspect.aspect.upper()} {aspect.planet2.upper()}"


def _synthesis_context(
    synth: CoreSynthesis, chart: BirthChart, rules: RulesTable
) -> dict[str, Any]:
    foundation = [
        f"Sun in {synth.sun.sign}{_house_suffix(synth.sun.house)}: Core identity expression",
        f"Moon in {synth.moon.sign}{_house_suffix(synth.moon.house)}: Emotional nature",
        f"Ascendant in {synth.ascendant.sign}: Outer personality and first impressions",
    ]
    ruler = synth.chart_ruler
    if ruler is not None:
        foundation.append(
            f"Chart Ruler: {ruler.planet.upper()} in {ruler.sign}{_house_suffix(ruler.house)}: "
            "How identity is expressed"
        )
    else:
        foundation.append("Chart Ruler: Not available")

    sections: list[dict[str, str]] = []
    if synth.sun_moon_aspect is not None:
        aspect = synth.sun_moon_aspect
        style = rules.aspect_style(aspect.aspect)
        sections.append(
            {
                "label": replace_placeholders(SUN_MOON_LABEL, {"aspect": aspect.aspect.upper()}),
                "style": (
                    f"Aspect Style: {style.polarity}, Tension: {style.tension}, "
                    f"Strength: {style.strength}"
                ),
                "text": render_aspect(aspect, chart, rules),
            }
        )
    else:
        sections.append(
            {
                "label": SUN_MOON_NO_ASPECT_LABEL,
                "style": "",
                "text": replace_placeholders(
                    NO_ASPECT_SUN_MOON,
                    {
                        "sunSign": synth.sun.sign,
                        "sunPositive": rules.sign_meaning(synth.sun.sign, "positive").core,
                        "moonSign": synth.moon.sign,
                        "moonPositive": rules.sign_meaning(synth.moon.sign, "positive").core,
                    },
                ),
            }
        )
    if ruler is not None:
        for label, aspect in (
            (SUN_RULER_LABEL, synth.sun_ruler_aspect),
            (MOON_RULER_LABEL, synth.moon_ruler_aspect),
        ):
            if aspect is None:
                continue
            sections.append(
                {
                    "label": replace_placeholders(
                        label, {"ruler": ruler.planet.upper(), "aspect": aspect.aspect.upper()}
                    ),
                    "style": "",
                    "text": render_aspect(aspect, chart, rules),
                }
            )

    ruler_influence = ""
    if ruler is not None:
        ruler_influence = replace_placeholders(
            RULER_INFLUENCE,
            {
                "rulerPlanet": ruler.planet.upper(),
                "rulerSign": ruler.sign,
                "rulerNegative": rules.planet_meaning(ruler.planet, "negative").core
                or "respond to challenges",
            },
        )
    stress = replace_placeholders(
        STRESS_RESPONSE,
        {
            "ascendantSign": synth.ascendant.sign,
            "ascendantNegative": rules.sign_meaning(synth.ascendant.sign, "negative").core
            or "defensive patterns",
            "moonSign": synth.moon.sign,
            "moonNegative": rules.sign_meaning(synth.moon.sign, "negative").core
            or "emotional patterns",
            "rulerInfluence": ruler_influence,
        },
    ).rstrip()

    return {
        "title": CORE_SYNTHESIS_TITLE,
        "foundation": foundation,
        "sections": sections,
        "stress": stress,
    }


def build_report_context(
    interpretation: Interpretation,
    chart: BirthChart,
    *,
    rules: RulesTable | None = None,
    config: Settings | None = None,
) -> dict[str, Any]:
    """Flatten an interpretation into the values the report template reads."""

    table = rules or get_rules_table()
    settings = config or get_settings()
    thresholds = settings.significance.thresholds
    location = interpretation.chart_info.location

    groups_cfg = theme_groups(interpretation.angles.ascendant.ruler, settings)
    groups: list[dict[str, Any]] = []
    for key, aspects in interpretation.aspect_groups.items():
        if not aspects:
            continue
        group = groups_cfg[key]
        groups.append(
            {
                "header": f"{group.label} ({group.description}):",
                "aspects": [
                    {"heading": _aspect_heading(aspect), "text": render_aspect(aspect, chart, table)}
                    for aspect in aspects
                ],
            }
        )

    ranked = rank_by_significance(interpretation.planet_significance)
    significance = [
        {
            "planet": planet.upper(),
            "score": f"{score:.2f}",
            "tier": significance_tier(score, thresholds),
        }
        for planet, score in ranked[: settings.report.top_planets]
    ]

    scores = interpretation.planet_significance
    ordered = sorted(
        interpretation.planets.items(), key=lambda item: scores.get(item[0], 0.0), reverse=True
    )
    placements: list[dict[str, str]] = []
    for key, planet in ordered:
        heading = f"{planet.name} in {planet.sign}{_house_suffix(planet.house)}"
        if planet.is_retrograde:
            heading += " [Retrograde]"
        heading += f" [Significance: {scores.get(key, 0.0):.2f}]"
        placements.append(
            {
                "heading": heading,
                "planet_core": planet.positive.planet_core,
                "sign_core": planet.positive.sign_core,
                "house_core": planet.positive.house_core,
                "aspects": ", ".join(
                    f"{aspect.planet2 if aspect.planet1 == key else aspect.planet1} "
                    f"{aspect.aspect} ({aspect.polarity})"
                    for aspect in planet.aspects
                ),
            }
        )

    synthesis = interpretation.core_synthesis
    return {
        "rule": RULE,
        "thin_rule": THIN_RULE,
        "instructions": list(settings.report.holistic_instructions),
        "chart": {
            "date": interpretation.chart_info.date,
            "time": interpretation.chart_info.time,
            "latitude": location.latitude,
            "longitude": location.longitude,
        },
        "synthesis": _synthesis_context(synthesis, chart, table) if synthesis else None,
        "groups": groups,
        "significance": significance,
        "placements": placements,
        "elemental": {
            "dominant": interpretation.elemental_balance.dominant,
            "lacking": interpretation.elemental_balance.lacking,
        },
        "modal": {"dominant": interpretation.modal_balance.dominant},
    }


def format_interpretation_for_ai(
    interpretation: Interpretation,
    chart: BirthChart | Mapping[str, Any],
    *,
    rules: RulesTable | None = None,
    config: Settings | None = None,
) -> str:
    """Render ``interpretation`` as the text block embedded in an LLM prompt."""

    birth_chart = coerce_chart(chart)
    context = build_report_context(interpretation, birth_chart, rules=rules, config=config)
    return get_renderer().render(REPORT_TEMPLATE, context)


__all__ = [
    "REPORT_TEMPLATE",
    "ReportRenderer",
    "build_report_context",
    "format_interpretation_for_ai",
    "get_renderer",
]
