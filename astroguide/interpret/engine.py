"""Top-level entry points that turn a birth chart into an interpretation."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..config.settings import Settings, get_settings
from .classify import (
    aspects_touching,
    chart_ruler,
    elemental_balance,
    modal_balance,
    planet_aspect_polarity,
)
from .models import (
    AngleReadings,
    AnnotatedAspect,
    AscendantReading,
    BirthChart,
    ChartInfo,
    Interpretation,
    MidheavenReading,
    PlanetInterpretation,
    PlanetPlacement,
    QualitySet,
    coerce_chart,
    display_name,
)
from .report import format_interpretation_for_ai
from .rules import RulesTable, get_rules_table
from .scoring import ScoringContext, planet_significance, rank_by_significance
from .synthesis import build_core_synthesis
from .themes import group_aspects_by_theme

LOG = logging.getLogger(__name__)

KEY_PLANET_THEMES = 3


def _angle_readings(chart: BirthChart, rules: RulesTable) -> AngleReadings:
    asc = chart.angles.ascendant
    mc = chart.angles.midheaven
    return AngleReadings(
        ascendant=AscendantReading(
            sign=asc.sign,
            element=asc.element,
            degree=asc.degree,
            ruler=chart_ruler(asc.sign),
            positive=rules.sign_meaning(asc.sign, "positive").core,
            negative=rules.sign_meaning(asc.sign, "negative").core,
        ),
        midheaven=MidheavenReading(
            sign=mc.sign,
            element=mc.element,
            degree=mc.degree,
            positive=rules.sign_meaning(mc.sign, "positive").core,
            negative=rules.sign_meaning(mc.sign, "negative").core,
        ),
    )


def _quality_set(name: str, placement: PlanetPlacement, polarity: str, rules: RulesTable) -> QualitySet:
    planet = rules.planet_meaning(name, polarity)
    sign = rules.sign_meaning(placement.sign, polarity)
    house = rules.house_meaning(placement.house, polarity)
    return QualitySet(
        planet_core=planet.core,
        planet_themes=planet.themes,
        planet_keywords=planet.keywords,
        sign_core=sign.core,
        sign_themes=sign.themes,
        sign_keywords=sign.keywords,
        house_core=house.core,
        house_themes=house.themes,
        house_keywords=house.keywords,
        interpretation=rules.planet_sign_interpretation(name, placement.sign, polarity),
    )


def _planet_interpretation(
    name: str, placement: PlanetPlacement, chart: BirthChart, rules: RulesTable
) -> PlanetInterpretation:
    touching = aspects_touching(name, chart.aspects)
    return PlanetInterpretation(
        name=display_name(name),
        sign=placement.sign,
        element=placement.element,
        house=placement.house,
        degree=placement.degree,
        is_retrograde=placement.is_retrograde,
        positive=_quality_set(name, placement, "positive", rules),
        negative=_quality_set(name, placement, "negative", rules),
        aspect_polarity=planet_aspect_polarity(name, touching),
        aspects=tuple(
            AnnotatedAspect(
                planet1=aspect.planet1,
                planet2=aspect.planet2,
                aspect=aspect.aspect,
                orb=aspect.orb,
                polarity=rules.aspect_polarity(aspect.aspect),
            )
            for aspect in touching
        ),
    )


def extract_key_themes(interpretation: Interpretation) -> list[str]:
    """Summarise the dominant element and modality plus the loudest planets."""

    themes: list[str] = []
    if interpretation.elemental_balance.dominant:
        themes.append(f"Strong {interpretation.elemental_balance.dominant} element influence")
    if interpretation.modal_balance.dominant:
        themes.append(f"Dominant {interpretation.modal_balance.dominant} modality")

    picked = 0
    for key, _ in rank_by_significance(interpretation.planet_significance):
        if picked >= KEY_PLANET_THEMES:
            break
        planet = interpretation.planets.get(key)
        if planet is None or not planet.positive.planet_themes:
            continue
        themes.append(f"{planet.name} themes: {', '.join(planet.positive.planet_themes)}")
        picked += 1
    return themes


def generate_chart_interpretation(
    chart: BirthChart | Mapping[str, Any],
    *,
    rules: RulesTable | None = None,
    config: Settings | None = None,
) -> Interpretation:
    """Build the structured :class:`Interpretation` for ``chart``.

    The function is pure: it reads the chart and the cached rules table and
    returns a new immutable object, so repeated calls give equal results.
    Raises :class:`~astroguide.errors.ChartDataError` when the chart is
    structurally invalid.
    """

    birth_chart = coerce_chart(chart)
    table = rules or get_rules_table()
    settings = config or get_settings()

    angles = _angle_readings(birth_chart, table)
    ruler = angles.ascendant.ruler
    context = ScoringContext(ruler=ruler, planets=birth_chart.planets)
    significance = {
        name: planet_significance(
            name, birth_chart.aspects, context, config=settings.significance
        )
        for name in birth_chart.planets
    }

    interpretation = Interpretation(
        chart_info=ChartInfo(
            date=birth_chart.birth_data.date,
            time=birth_chart.birth_data.time,
            location=birth_chart.birth_data.location,
        ),
        angles=angles,
        planets={
            name: _planet_interpretation(name, placement, birth_chart, table)
            for name, placement in birth_chart.planets.items()
        },
        planet_significance=significance,
        aspect_groups=group_aspects_by_theme(birth_chart.aspects, ruler, config=settings),
        core_synthesis=build_core_synthesis(birth_chart, ruler),
        elemental_balance=elemental_balance(birth_chart),
        modal_balance=modal_balance(birth_chart),
    )
    LOG.debug(
        "interpreted chart with %d planets and %d aspects",
        len(birth_chart.planets),
        len(birth_chart.aspects),
    )
    return interpretation.model_copy(update={"key_themes": tuple(extract_key_themes(interpretation))})


@dataclass(frozen=True, slots=True)
class InterpretationResult:
    """Structured interpretation together with its rendered report."""

    interpretation: Interpretation
    text: str


def interpret_chart(
    chart: BirthChart | Mapping[str, Any],
    *,
    rules: RulesTable | None = None,
    config: Settings | None = None,
) -> InterpretationResult:
    birth_chart = coerce_chart(chart)
    interpretation = generate_chart_interpretation(birth_chart, rules=rules, config=config)
    text = format_interpretation_for_ai(interpretation, birth_chart, rules=rules, config=config)
    return InterpretationResult(interpretation=interpretation, text=text)


__all__ = [
    "InterpretationResult",
    "extract_key_themes",
    "generate_chart_interpretation",
    "interpret_chart",
]
