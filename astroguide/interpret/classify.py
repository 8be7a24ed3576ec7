"""Elemental, modal and aspect-polarity classification of a birth chart."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from .models import (
    AspectPolarity,
    BirthChart,
    Body,
    ChartAspect,
    ElementalBalance,
    ElementCount,
    ModalBalance,
    ModalityCount,
)

LOG = logging.getLogger(__name__)

ELEMENTS: tuple[str, str, str, str] = ("Fire", "Earth", "Air", "Water")
MODALITIES: tuple[str, str, str] = ("Cardinal", "Fixed", "Mutable")

SIGN_ELEMENTS: Mapping[str, str] = {
    "Aries": "Fire",
    "Taurus": "Earth",
    "Gemini": "Air",
    "Cancer": "Water",
    "Leo": "Fire",
    "Virgo": "Earth",
    "Libra": "Air",
    "Scorpio": "Water",
    "Sagittarius": "Fire",
    "Capricorn": "Earth",
    "Aquarius": "Air",
    "Pisces": "Water",
}

SIGN_MODALITIES: Mapping[str, str] = {
    "Aries": "Cardinal",
    "Cancer": "Cardinal",
    "Libra": "Cardinal",
    "Capricorn": "Cardinal",
    "Taurus": "Fixed",
    "Leo": "Fixed",
    "Scorpio": "Fixed",
    "Aquarius": "Fixed",
    "Gemini": "Mutable",
    "Virgo": "Mutable",
    "Sagittarius": "Mutable",
    "Pisces": "Mutable",
}

# Traditional rulerships: Scorpio, Aquarius and Pisces keep Mars, Saturn and
# Jupiter rather than the modern outer planets.
TRADITIONAL_RULERS: Mapping[str, Body] = {
    "Aries": Body.MARS,
    "Taurus": Body.VENUS,
    "Gemini": Body.MERCURY,
    "Cancer": Body.MOON,
    "Leo": Body.SUN,
    "Virgo": Body.MERCURY,
    "Libra": Body.VENUS,
    "Scorpio": Body.MARS,
    "Sagittarius": Body.JUPITER,
    "Capricorn": Body.SATURN,
    "Aquarius": Body.SATURN,
    "Pisces": Body.JUPITER,
}
DEFAULT_RULER = Body.SUN

CHALLENGING_ASPECTS: frozenset[str] = frozenset({"square", "opposition"})
HARMONIOUS_ASPECTS: frozenset[str] = frozenset({"trine", "sextile"})


def _normalise_sign(sign: str) -> str:
    return sign.strip().capitalize() if sign else ""


def _element_for(sign: str, declared: str) -> str | None:
    element = SIGN_ELEMENTS.get(_normalise_sign(sign))
    if element:
        return element
    declared = declared.strip().capitalize() if declared else ""
    return declared if declared in ELEMENTS else None


def _rank(counts: dict[str, int]) -> list[tuple[str, int]]:
    # sorted() is stable, so ties keep the enumeration order of the table.
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def _chart_signs(chart: BirthChart) -> Iterable[tuple[str, str, str]]:
    for name, planet in chart.planets.items():
        yield f"planet {name}", planet.sign, planet.element
    for house in chart.houses:
        yield f"house {house.number}", house.sign, house.element


def elemental_balance(chart: BirthChart) -> ElementalBalance:
    """Tally planets and house cusps by element."""

    counts = {element: 0 for element in ELEMENTS}
    for label, sign, declared in _chart_signs(chart):
        element = _element_for(sign, declared)
        if element is None:
            LOG.warning("cannot classify element for %s (sign=%r)", label, sign)
            continue
        counts[element] += 1
    ranked = _rank(counts)
    return ElementalBalance(
        distribution=counts,
        dominant=ranked[0][0],
        lacking=ranked[-1][0],
        balance=tuple(ElementCount(element=element, count=count) for element, count in ranked),
    )


def modal_balance(chart: BirthChart) -> ModalBalance:
    """Tally planets and house cusps by modality."""

    counts = {modality: 0 for modality in MODALITIES}
    for label, sign, _ in _chart_signs(chart):
        modality = SIGN_MODALITIES.get(_normalise_sign(sign))
        if modality is None:
            LOG.warning("cannot classify modality for %s (sign=%r)", label, sign)
            continue
        counts[modality] += 1
    ranked = _rank(counts)
    return ModalBalance(
        distribution=counts,
        dominant=ranked[0][0],
        balance=tuple(ModalityCount(modality=modality, count=count) for modality, count in ranked),
    )


def chart_ruler(ascendant_sign: str) -> str:
    """Return the traditional ruler of ``ascendant_sign`` (``"sun"`` if unknown)."""

    return TRADITIONAL_RULERS.get(_normalise_sign(ascendant_sign), DEFAULT_RULER).value


def aspects_touching(planet: str, aspects: Iterable[ChartAspect]) -> list[ChartAspect]:
    return [aspect for aspect in aspects if aspect.involves(planet)]


def planet_aspect_polarity(planet: str, aspects: Iterable[ChartAspect]) -> AspectPolarity:
    """Classify the aspects touching ``planet`` as positive, negative or mixed.

    A planet without any square, opposition, trine or sextile is reported as
    ``"positive"``.
    """

    touching = aspects_touching(planet, aspects)
    challenging = any(aspect.aspect in CHALLENGING_ASPECTS for aspect in touching)
    harmonious = any(aspect.aspect in HARMONIOUS_ASPECTS for aspect in touching)
    if challenging and harmonious:
        return "mixed"
    if challenging:
        return "negative"
    return "positive"


__all__ = [
    "CHALLENGING_ASPECTS",
    "DEFAULT_RULER",
    "ELEMENTS",
    "HARMONIOUS_ASPECTS",
    "MODALITIES",
    "SIGN_ELEMENTS",
    "SIGN_MODALITIES",
    "TRADITIONAL_RULERS",
    "aspects_touching",
    "chart_ruler",
    "elemental_balance",
    "modal_balance",
    "planet_aspect_polarity",
]
