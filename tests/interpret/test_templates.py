from __future__ import annotations

import re

from astroguide.interpret.models import ChartAspect
from astroguide.interpret.templates import (
    ASPECT_TEMPLATES,
    aspect_template,
    render_aspect,
    replace_placeholders,
)

LITERAL_PLACEHOLDER = re.compile(r"\{\w+\}")


def test_replace_placeholders_clears_every_token() -> None:
    text = replace_placeholders("{a} and {a} with {b} and {missing}", {"a": "x", "b": ""})
    assert text == "x and x with  and "


def test_unknown_style_falls_back_to_cooperative() -> None:
    assert aspect_template("awkward") == ASPECT_TEMPLATES["cooperative"]
    assert aspect_template("neutral") == ASPECT_TEMPLATES["cooperative"]
    assert aspect_template("friction") == ASPECT_TEMPLATES["friction"]


def test_quincunx_uses_cooperative_template(chart) -> None:
    aspect = next(a for a in chart.aspects if a.aspect == "quincunx")
    text = render_aspect(aspect, chart)
    assert text
    assert "form a sextile, creating cooperative energy" in text
    assert not LITERAL_PLACEHOLDER.search(text)


def test_square_reading_uses_rules_table(chart) -> None:
    aspect = chart.aspects[0]
    text = render_aspect(aspect, chart)
    assert text.startswith("Your Sun in Gemini and Moon in Virgo form a square")
    assert "curious, versatile communication" in text
    assert not LITERAL_PLACEHOLDER.search(text)


def test_ascendant_resolves_through_angles(chart) -> None:
    aspect = ChartAspect(planet1="ascendant", planet2="venus", aspect="opposition", orb=2.0)
    text = render_aspect(aspect, chart)
    assert text.startswith("Your Ascendant in Scorpio and Venus in Taurus are in opposition")


def test_unresolvable_body_renders_empty(chart) -> None:
    aspect = ChartAspect(planet1="sun", planet2="chiron", aspect="trine", orb=1.0)
    assert render_aspect(aspect, chart) == ""


def test_fallback_phrases_for_unknown_meanings(make_chart) -> None:
    planets = {
        "sun": {"sign": "Ophiuchus", "house": 1},
        "moon": {"sign": "Ophiuchus", "house": 2},
    }
    chart = make_chart(planets=planets, aspects=[])
    aspect = ChartAspect(planet1="sun", planet2="moon", aspect="opposition", orb=1.0)
    text = render_aspect(aspect, chart)
    assert "between one quality and another quality" in text
    assert not LITERAL_PLACEHOLDER.search(text)
