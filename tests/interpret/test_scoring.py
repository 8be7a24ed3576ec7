from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from astroguide.config.settings import SignificanceCfg
from astroguide.interpret.models import ChartAspect, PlanetPlacement
from astroguide.interpret.scoring import (
    ScoringContext,
    planet_significance,
    rank_by_significance,
    significance_tier,
)

CFG = SignificanceCfg()
KINDS = ["conjunction", "opposition", "square", "trine", "sextile", "quincunx", "semisextile"]
PARTNERS = ["moon", "mercury", "venus", "mars", "jupiter", "saturn"]


def _aspect(kind: str, orb: float, partner: str = "moon") -> ChartAspect:
    return ChartAspect(planet1="sun", planet2=partner, aspect=kind, orb=orb)


def test_ruler_and_angular_bonuses(chart) -> None:
    context = ScoringContext(ruler="mars", planets=chart.planets)
    score = planet_significance("mars", chart.aspects, context, config=CFG)
    opposition = 0.9 * (0.5 + 0.5 * (1 - 0.1 / 10))
    square = 0.9 * (0.5 + 0.5 * (1 - 5.6 / 10))
    assert score == pytest.approx((opposition + square) / 5 + 0.2 + 0.2)
    assert significance_tier(score, CFG.thresholds) == "HIGH"


def test_unaspected_cadent_planet_scores_zero() -> None:
    context = ScoringContext(planets={"sun": PlanetPlacement(sign="Gemini", house=3)})
    assert planet_significance("sun", [], context, config=CFG) == 0.0


def test_unknown_kind_uses_default_weight() -> None:
    score = planet_significance("sun", [_aspect("semisextile", 0.0)], ScoringContext(), config=CFG)
    assert score == pytest.approx(0.3 / 5)


def test_orb_beyond_cap_keeps_half_weight() -> None:
    score = planet_significance("sun", [_aspect("conjunction", 14.0)], ScoringContext(), config=CFG)
    assert score == pytest.approx(0.5 / 5)


@pytest.mark.parametrize(
    ("score", "tier"),
    [(0.0, "LOW"), (0.49, "LOW"), (0.5, "MEDIUM"), (0.69, "MEDIUM"), (0.7, "HIGH"), (1.4, "HIGH")],
)
def test_significance_tiers(score: float, tier: str) -> None:
    assert significance_tier(score, CFG.thresholds) == tier


def test_rank_is_stable_for_ties() -> None:
    ranked = rank_by_significance({"venus": 0.4, "sun": 0.9, "moon": 0.4})
    assert [name for name, _ in ranked] == ["sun", "venus", "moon"]


@given(
    kind=st.sampled_from(KINDS),
    orbs=st.lists(st.floats(min_value=0, max_value=15, allow_nan=False), min_size=1, max_size=6),
)
def test_more_aspects_never_lower_the_score(kind: str, orbs: list[float]) -> None:
    aspects = [_aspect(kind, orb, PARTNERS[index]) for index, orb in enumerate(orbs)]
    context = ScoringContext()
    scores = [
        planet_significance("sun", aspects[:count], context, config=CFG)
        for count in range(len(aspects) + 1)
    ]
    assert scores == sorted(scores)


@given(
    kind=st.sampled_from(KINDS),
    tight=st.floats(min_value=0, max_value=15, allow_nan=False),
    extra=st.floats(min_value=0, max_value=15, allow_nan=False),
)
def test_tighter_orb_never_lowers_the_score(kind: str, tight: float, extra: float) -> None:
    context = ScoringContext()
    close = planet_significance("sun", [_aspect(kind, tight)], context, config=CFG)
    wide = planet_significance("sun", [_aspect(kind, tight + extra)], context, config=CFG)
    assert close >= wide
