"""Planet significance scoring."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal

from ..config.settings import SignificanceCfg, SignificanceThresholdsCfg, get_settings
from .models import ChartAspect, PlanetPlacement

SignificanceTier = Literal["HIGH", "MEDIUM", "LOW"]


@dataclass(frozen=True, slots=True)
class ScoringContext:
    """Chart facts the score depends on beyond the aspect list."""

    ruler: str | None = None
    planets: Mapping[str, PlanetPlacement] = field(default_factory=dict)


def _orb_factor(orb: float, orb_cap: float) -> float:
    # 1.0 for an exact aspect, falling linearly to 0.5 at the orb cap.
    closeness = max(0.0, 1.0 - max(0.0, orb) / orb_cap)
    return 0.5 + 0.5 * closeness


def aspect_contribution(aspect: ChartAspect, cfg: SignificanceCfg) -> float:
    return cfg.weight_for(aspect.aspect) * _orb_factor(aspect.orb, cfg.orb_cap)


def planet_significance(
    planet: str,
    aspects: Iterable[ChartAspect],
    context: ScoringContext,
    *,
    config: SignificanceCfg | None = None,
) -> float:
    """Return the significance score of ``planet``.

    The score sums a weighted, orb-scaled contribution for every aspect that
    touches the planet and adds flat bonuses for an angular house and for
    being the chart ruler. Adding an aspect or tightening an orb never lowers
    the score.
    """

    cfg = config or get_settings().significance
    key = planet.lower()
    total = sum(aspect_contribution(aspect, cfg) for aspect in aspects if aspect.involves(key))
    score = total / cfg.aspect_scale

    placement = context.planets.get(key)
    if placement is not None and placement.house in cfg.angular_houses:
        score += cfg.angular_bonus
    if context.ruler and context.ruler.lower() == key:
        score += cfg.ruler_bonus
    return score


def significance_tier(
    score: float, thresholds: SignificanceThresholdsCfg | None = None
) -> SignificanceTier:
    limits = thresholds or get_settings().significance.thresholds
    if score >= limits.high:
        return "HIGH"
    if score >= limits.medium:
        return "MEDIUM"
    return "LOW"


def rank_by_significance(scores: Mapping[str, float]) -> list[tuple[str, float]]:
    """Return ``(planet, score)`` pairs, highest first; ties keep input order."""

    return sorted(scores.items(), key=lambda item: item[1], reverse=True)


__all__ = [
    "ScoringContext",
    "SignificanceTier",
    "aspect_contribution",
    "planet_significance",
    "rank_by_significance",
    "significance_tier",
]
