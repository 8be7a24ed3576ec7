"""Deterministic answers to factual questions about a birth chart.

Questions such as "what planets are in house 5?" or "is Mercury retrograde?"
have exact answers in the chart data, so they are answered by field lookup
instead of being sent to a language model.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from ..interpret.classify import SIGN_ELEMENTS
from ..interpret.models import PLANETS, BirthChart, Body, coerce_chart

_PLANET = "|".join(body.value for body in PLANETS)
_SIGN = "|".join(sign.lower() for sign in SIGN_ELEMENTS)

FACTUAL_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"how many (planets|planets are|planets are in)",
        r"what (sign|house|element|modality) (is|are|does)",
        r"which (sign|house|planet|planets)",
        rf"({_PLANET}) (is|in|sign|house)",
        r"\b(ascendant|midheaven|asc|mc) (is|in|sign)",
        r"what (planets|planet) (are|is) (in|in the)",
        r"(house \d+|1st|2nd|3rd|4th|5th|6th|7th|8th|9th|10th|11th|12th) (has|contains|planets)",
        r"what (aspects|aspect) (does|do|has|have)",
        r"(conjunction|square|trine|opposition|sextile) (with|to|between)",
        r"is (retrograde|direct)",
        rf"is (the |my )?({_PLANET}) (retrograde|direct)",
        r"what (degree|degrees) (is|are)",
    )
)

_HOUSE_NUMBER = re.compile(r"house (\d+)", re.IGNORECASE)
_PLANET_NAME = re.compile(rf"\b({_PLANET})\b", re.IGNORECASE)
_SIGN_NAME = re.compile(rf"\b({_SIGN})\b", re.IGNORECASE)


def is_factual_question(message: str) -> bool:
    """Return ``True`` when ``message`` looks answerable from chart data alone."""

    text = message.strip().lower()
    return any(pattern.search(text) for pattern in FACTUAL_PATTERNS)


def _plural(count: int, noun: str = "planet") -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def _join_and(names: list[str]) -> str:
    if len(names) < 2:
        return "".join(names)
    return f"{', '.join(names[:-1])}, and {names[-1]}"


def _planet_name(key: str) -> str:
    body = Body.lookup(key)
    return body.display if body is not None else key


def _planet_in(message: str) -> Body | None:
    match = _PLANET_NAME.search(message)
    return Body.lookup(match.group(1)) if match else None


def _house_in(message: str) -> int | None:
    match = _HOUSE_NUMBER.search(message)
    return int(match.group(1)) if match else None


def _invalid_house(number: int) -> str:
    return f"House numbers must be between 1 and 12. You asked about House {number}."


# -------------------- handlers --------------------


def _count_in_house(message: str, chart: BirthChart) -> str | None:
    number = _house_in(message)
    if number is None:
        return None
    if not 1 <= number <= 12:
        return _invalid_house(number)
    names = [_planet_name(key) for key, planet in chart.planets.items() if planet.house == number]
    if not names:
        return f"There are no planets in House {number}."
    if len(names) == 1:
        return f"There is 1 planet in House {number}: {names[0]}."
    return f"There are {len(names)} planets in House {number}: {_join_and(names)}."


def _planets_in_house(message: str, chart: BirthChart) -> str | None:
    number = _house_in(message)
    if number is None:
        return None
    if not 1 <= number <= 12:
        return _invalid_house(number)
    placed = [
        f"{_planet_name(key)} in {planet.sign}"
        for key, planet in chart.planets.items()
        if planet.house == number
    ]
    if not placed:
        return f"There are no planets in House {number}."
    return f"The planets in House {number} are: {', '.join(placed)}."


def _planet_house(message: str, chart: BirthChart) -> str | None:
    body = _planet_in(message)
    planet = chart.planets.get(body.value) if body else None
    if planet is None:
        return None
    if planet.house is None:
        return f"Your {body.display} has no house recorded in this chart."
    return f"Your {body.display} is in House {planet.house}."


def _planet_sign(message: str, chart: BirthChart) -> str | None:
    body = _planet_in(message)
    planet = chart.planets.get(body.value) if body else None
    if planet is None:
        return None
    return f"Your {body.display} is in {planet.sign}."


def _ascendant(message: str, chart: BirthChart) -> str | None:
    asc = chart.angles.ascendant
    return f"Your Ascendant is in {asc.sign} at {asc.degree:.2f}°."


def _midheaven(message: str, chart: BirthChart) -> str | None:
    mc = chart.angles.midheaven
    return f"Your Midheaven is in {mc.sign} at {mc.degree:.2f}°."


def _planets_in_sign(message: str, chart: BirthChart) -> str | None:
    match = _SIGN_NAME.search(message)
    if match is None:
        return None
    sign = match.group(1).capitalize()
    names = [_planet_name(key) for key, planet in chart.planets.items() if planet.sign == sign]
    if not names:
        return f"There are no planets in {sign} in your chart."
    return f"The planets in {sign} are: {', '.join(names)}."


def _extreme(labels: list[str], message: str) -> str:
    counts: dict[str, int] = {}
    for label in labels:
        counts[label] = counts.get(label, 0) + 1
    if not counts:
        return "I couldn't find any planets in your chart."

    most = "most" in message.lower()
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=most)
    top = ranked[0][1]
    winners = [label for label, count in ranked if count == top]
    word = "most" if most else "fewest"
    if len(winners) == 1:
        return f"{winners[0]} has the {word} planets with {_plural(top)}."
    every = "all " if len(winners) > 2 else ""
    return f"{' and '.join(winners)} {every}have the {word} planets with {_plural(top)} each."


def _house_extreme(message: str, chart: BirthChart) -> str | None:
    labels = [f"House {p.house}" for p in chart.planets.values() if p.house is not None]
    return _extreme(labels, message)


def _sign_extreme(message: str, chart: BirthChart) -> str | None:
    return _extreme([p.sign for p in chart.planets.values() if p.sign], message)


def _planet_aspects(message: str, chart: BirthChart) -> str | None:
    body = _planet_in(message)
    if body is None:
        return None
    touching = [aspect for aspect in chart.aspects if aspect.involves(body.value)]
    if not touching:
        return f"Your {body.display} has no major aspects."
    listed = ", ".join(
        f"{_planet_name(aspect.other(body.value))} {aspect.aspect} ({aspect.orb:.1f}° orb)"
        for aspect in touching
    )
    return f"Your {body.display} has {_plural(len(touching), 'aspect')}: {listed}."


def _retrograde(message: str, chart: BirthChart) -> str | None:
    body = _planet_in(message)
    planet = chart.planets.get(body.value) if body else None
    if planet is None:
        return None
    if planet.is_retrograde:
        return f"Yes, your {body.display} is retrograde."
    return f"No, your {body.display} is direct (not retrograde)."


Handler = Callable[[str, BirthChart], str | None]

# Checked in order; the first handler that returns text wins. Planet-house
# must precede planet-sign ("which house is Mars in").
HANDLERS: tuple[tuple[re.Pattern[str], Handler], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), handler)
    for pattern, handler in (
        (r"how many (planets|planets are) (in|in the) (house|the) (\d+)", _count_in_house),
        (r"what (planets|planet) (are|is) (in|in the) (house|the) (\d+)", _planets_in_house),
        (
            rf"({_PLANET}) (house|in which house)|(which|what) house (is|are) (the |my )?({_PLANET})",
            _planet_house,
        ),
        (rf"({_PLANET}) (is|in|sign)", _planet_sign),
        (r"\b(ascendant|asc) (is|in|sign)", _ascendant),
        (r"\b(midheaven|mc) (is|in|sign)", _midheaven),
        (r"what (planets|planet) (are|is) (in|in the) (sign|sign of) (\w+)", _planets_in_sign),
        (r"which (house|houses) (has|have) (the )?(most|least|fewest) (planets|planet)", _house_extreme),
        (r"which (sign|signs) (has|have) (the )?(most|least|fewest) (planets|planet)", _sign_extreme),
        (rf"what (aspects|aspect) (does|do|has|have) (the )?({_PLANET})", _planet_aspects),
        (rf"is (the )?({_PLANET}) (retrograde|direct)", _retrograde),
    )
)


def answer_factual_question(
    message: str, chart: BirthChart | Mapping[str, Any]
) -> str | None:
    """Answer ``message`` from ``chart`` fields, or return ``None`` if no rule applies."""

    birth_chart = coerce_chart(chart)
    for pattern, handler in HANDLERS:
        if not pattern.search(message):
            continue
        answer = handler(message, birth_chart)
        if answer is not None:
            return answer
    return None


__all__ = ["FACTUAL_PATTERNS", "answer_factual_question", "is_factual_question"]
