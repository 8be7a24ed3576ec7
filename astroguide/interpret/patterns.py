"""Detection of stelliums and multi-aspect configurations."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from .models import BirthChart, ChartAspect

STELLIUM_MIN_PLANETS = 3


@dataclass(frozen=True, slots=True)
class Stellium:
    """Three or more planets sharing a sign or a house."""

    kind: Literal["sign", "house"]
    key: str
    planets: tuple[str, ...]

    @property
    def count(self) -> int:
        return len(self.planets)

    def describe(self) -> str:
        label = f"House {self.key}" if self.kind == "house" else self.key
        return f"{label}: {self.count} planets"


@dataclass(frozen=True, slots=True)
class AspectPattern:
    """A base aspect together with the aspects that complete the figure."""

    name: Literal["T-square", "Yod"]
    base: ChartAspect
    supporting: tuple[ChartAspect, ...]

    def describe(self) -> str:
        if self.name == "T-square":
            return f"T-square involving {self.base.planet1}-{self.base.planet2} opposition"
        return f"Yod pattern involving {self.base.planet1}-{self.base.planet2} sextile"


def find_stelliums(chart: BirthChart, *, minimum: int = STELLIUM_MIN_PLANETS) -> list[Stellium]:
    """Return sign stelliums followed by house stelliums, in first-seen order."""

    by_sign: dict[str, list[str]] = {}
    by_house: dict[str, list[str]] = {}
    for name, placement in chart.planets.items():
        if placement.sign:
            by_sign.setdefault(placement.sign, []).append(name)
        if placement.house is not None:
            by_house.setdefault(str(placement.house), []).append(name)

    found = [
        Stellium(kind="sign", key=sign, planets=tuple(names))
        for sign, names in by_sign.items()
        if len(names) >= minimum
    ]
    found.extend(
        Stellium(kind="house", key=house, planets=tuple(names))
        for house, names in by_house.items()
        if len(names) >= minimum
    )
    return found


def _sharing_body(base: ChartAspect, aspects: Iterable[ChartAspect], kind: str) -> tuple[ChartAspect, ...]:
    return tuple(
        aspect
        for aspect in aspects
        if aspect.aspect == kind
        and (aspect.involves(base.planet1) or aspect.involves(base.planet2))
    )


def find_aspect_patterns(chart: BirthChart) -> list[AspectPattern]:
    """Find T-squares and Yods.

    A T-square is an opposition with at least one square touching either of
    its ends; a Yod is a sextile with at least one quincunx touching either
    end.
    """

    patterns: list[AspectPattern] = []
    for base_kind, support_kind, name in (
        ("opposition", "square", "T-square"),
        ("sextile", "quincunx", "Yod"),
    ):
        for base in chart.aspects:
            if base.aspect != base_kind:
                continue
            supporting = _sharing_body(base, chart.aspects, support_kind)
            if supporting:
                patterns.append(AspectPattern(name=name, base=base, supporting=supporting))
    return patterns


__all__ = [
    "AspectPattern",
    "STELLIUM_MIN_PLANETS",
    "Stellium",
    "find_aspect_patterns",
    "find_stelliums",
]
