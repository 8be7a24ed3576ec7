"""Core personality synthesis from the Sun, Moon and chart ruler."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import (
    BirthChart,
    Body,
    ChartAspect,
    CoreSynthesis,
    RulerPoint,
    SynthesisPoint,
)

LOG = logging.getLogger(__name__)


def _first_between(aspects: Iterable[ChartAspect], first: str, second: str) -> ChartAspect | None:
    return next((aspect for aspect in aspects if aspect.connects(first, second)), None)


def build_core_synthesis(chart: BirthChart, chart_ruler: str) -> CoreSynthesis | None:
    """Return the Sun/Moon/ruler triad, or ``None`` when a luminary is missing."""

    sun = chart.planets.get(Body.SUN.value)
    moon = chart.planets.get(Body.MOON.value)
    if sun is None or moon is None:
        LOG.debug("core synthesis skipped: sun or moon missing from chart")
        return None

    ruler_name = chart_ruler.lower()
    ruler = chart.planets.get(ruler_name)
    if ruler is None:
        LOG.warning("chart ruler %s not found in planets", ruler_name)

    aspects = chart.aspects
    key_names = {Body.SUN.value, Body.MOON.value, ruler_name}
    key_aspects = tuple(
        aspect for aspect in aspects if aspect.planet1 in key_names or aspect.planet2 in key_names
    )

    sun_ruler = moon_ruler = None
    if ruler is not None:
        sun_ruler = _first_between(aspects, Body.SUN.value, ruler_name)
        moon_ruler = _first_between(aspects, Body.MOON.value, ruler_name)

    ascendant = chart.angles.ascendant
    return CoreSynthesis(
        sun=SynthesisPoint(sign=sun.sign, element=sun.element, house=sun.house),
        moon=SynthesisPoint(sign=moon.sign, element=moon.element, house=moon.house),
        ascendant=SynthesisPoint(sign=ascendant.sign, element=ascendant.element),
        chart_ruler=(
            RulerPoint(planet=ruler_name, sign=ruler.sign, element=ruler.element, house=ruler.house)
            if ruler is not None
            else None
        ),
        key_aspects=key_aspects,
        sun_moon_aspect=_first_between(aspects, Body.SUN.value, Body.MOON.value),
        sun_ruler_aspect=sun_ruler,
        moon_ruler_aspect=moon_ruler,
    )


__all__ = ["build_core_synthesis"]
