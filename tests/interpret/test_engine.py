from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from astroguide.config.settings import default_settings
from astroguide.errors import ChartDataError
from astroguide.interpret.engine import (
    extract_key_themes,
    generate_chart_interpretation,
    interpret_chart,
)
from astroguide.interpret.report import format_interpretation_for_ai

THEME_HEADERS = (
    "IDENTITY & EMOTIONS (Sun, Moon, Ascendant, Chart Ruler aspects):",
    "MIND & COMMUNICATION (Mercury aspects):",
    "LOVE & SEX (Venus, Mars aspects):",
    "GROWTH & CHALLENGES (Jupiter, Saturn, Outer Planets aspects):",
)


def test_interpretation_of_full_chart(chart_data) -> None:
    result = generate_chart_interpretation(chart_data)
    assert result.angles.ascendant.ruler == "mars"
    assert result.angles.ascendant.positive == "intense, transformative emotional depth"
    assert result.chart_info.date == "1990-06-15"
    assert set(result.planet_significance) == set(chart_data["planets"])

    sun = result.planets["sun"]
    assert sun.name == "Sun"
    assert sun.positive.sign_core == "curious, versatile communication"
    assert sun.positive.house_core
    assert sun.positive.interpretation.startswith("Sun in Gemini")
    assert sun.aspect_polarity == "negative"
    assert [a.polarity for a in sun.aspects] == ["challenging", "adjusting"]

    assert result.planets["moon"].aspect_polarity == "mixed"
    assert result.planets["venus"].aspect_polarity == "positive"
    assert result.planets["jupiter"].is_retrograde


def test_key_themes(chart) -> None:
    result = generate_chart_interpretation(chart)
    themes = list(result.key_themes)
    assert themes[:2] == ["Strong Earth element influence", "Dominant Cardinal modality"]
    assert len(themes) == 5
    # Mars is the chart ruler in an angular house, so it ranks first.
    assert themes[2].startswith("Mars themes: ")
    assert extract_key_themes(result) == themes


def test_repeated_runs_are_identical(chart_data) -> None:
    first = generate_chart_interpretation(chart_data)
    second = generate_chart_interpretation(chart_data)
    assert first == second
    assert first.to_dict() == second.to_dict()
    assert format_interpretation_for_ai(first, chart_data) == format_interpretation_for_ai(
        second, chart_data
    )


def test_to_dict_uses_wire_keys(chart) -> None:
    payload = generate_chart_interpretation(chart).to_dict()
    assert {"chartInfo", "planetSignificance", "aspectGroups", "coreSynthesis"} <= set(payload)
    assert "identityEmotions" in payload["aspectGroups"]
    assert "isRetrograde" in payload["planets"]["sun"]
    assert "planetCore" in payload["planets"]["sun"]["positive"]
    json.dumps(payload)


def test_interpretation_is_immutable(chart) -> None:
    result = generate_chart_interpretation(chart)
    with pytest.raises(ValidationError):
        result.key_themes = ()  # type: ignore[misc]


def test_scorpio_ascendant_rules_by_mars(chart_data) -> None:
    chart_data["angles"]["ascendant"]["sign"] = "Scorpio"
    assert generate_chart_interpretation(chart_data).angles.ascendant.ruler == "mars"


def test_zero_aspect_chart(make_chart) -> None:
    chart = make_chart(aspects=[])
    result = generate_chart_interpretation(chart)
    assert result.core_synthesis is not None
    assert result.core_synthesis.sun_moon_aspect is None
    assert result.aspect_groups.is_empty()
    for planet in result.planets.values():
        assert planet.aspect_polarity == "positive"
        assert planet.aspects == ()

    text = format_interpretation_for_ai(result, chart)
    for header in THEME_HEADERS:
        assert header not in text
    assert "IDENTITY & EMOTIONS (Sun-Moon):" in text
    assert "Without a major aspect between them" in text


@pytest.mark.parametrize("luminary", ["sun", "moon"])
def test_missing_luminary_degrades_without_error(chart_data, luminary) -> None:
    del chart_data["planets"][luminary]
    result = interpret_chart(chart_data)
    assert result.interpretation.core_synthesis is None
    assert "CORE PERSONALITY SYNTHESIS (Luminaries + Chart Ruler)" not in result.text
    assert "PLANET SIGNIFICANCE SCORES" in result.text


def test_invalid_chart_raises(chart_data) -> None:
    del chart_data["birthData"]
    with pytest.raises(ChartDataError):
        generate_chart_interpretation(chart_data)


def test_report_sections(chart) -> None:
    text = interpret_chart(chart).text
    assert text.startswith("BIRTH CHART INTERPRETATION TEMPLATE\n")
    assert "1. Start with the CORE PERSONALITY SYNTHESIS" in text
    assert "Location: 40.7128°N, -74.006°E" in text
    assert "- Chart Ruler: MARS in Leo (House 10): How identity is expressed" in text
    assert "IDENTITY & EMOTIONS (Sun-Moon SQUARE):" in text
    assert "Aspect Style: friction, Tension: high, Strength: strong" in text
    assert "STRESS RESPONSE:" in text
    assert "Your chart ruler MARS in Leo influences how you" in text
    for header in THEME_HEADERS:
        assert header in text
    assert "VENUS TRINE JUPITER:" in text
    assert "{" not in text

    ordered = [text.index(section) for section in (
        "CORE PERSONALITY SYNTHESIS (Luminaries + Chart Ruler)",
        "ASPECT-DRIVEN INTERPRETATIONS (Grouped by Theme)",
        "PLANET SIGNIFICANCE SCORES",
        "PLACEMENT DETAILS",
        "ELEMENTAL BALANCE:",
        "MODAL BALANCE:",
    )]
    assert ordered == sorted(ordered)
    assert "Dominant Element: Earth" in text
    assert "Lacking Element: Fire" in text


def test_report_significance_list(chart) -> None:
    result = interpret_chart(chart)
    section = result.text.split("PLANET SIGNIFICANCE SCORES (Higher = More Important)")[1]
    section = section.split("PLACEMENT DETAILS")[0]
    lines = [line for line in section.splitlines() if "significance)" in line]
    assert len(lines) == 5
    assert lines[0].startswith("MARS: 0.71 (HIGH significance)")


def test_report_placements_sorted_by_significance(chart) -> None:
    result = interpret_chart(chart)
    details = result.text.split("PLACEMENT DETAILS (Technical Reference)")[1]
    headings = [line for line in details.splitlines() if "[Significance:" in line]
    assert len(headings) == 10
    scores = [float(line.rsplit("[Significance: ", 1)[1].rstrip("]")) for line in headings]
    assert scores == sorted(scores, reverse=True)
    assert any("Jupiter in Capricorn (House 3) [Retrograde]" in line for line in headings)
    assert "  Aspects: saturn opposition (challenging), pluto square (challenging)" in details


def test_report_respects_top_planets_setting(chart) -> None:
    settings = default_settings().model_copy(deep=True)
    settings.report.top_planets = 2
    result = interpret_chart(chart, config=settings)
    section = result.text.split("PLANET SIGNIFICANCE SCORES")[1].split("PLACEMENT DETAILS")[0]
    assert len([line for line in section.splitlines() if "significance)" in line]) == 2


@pytest.mark.parametrize(
    "path",
    [
        ("planets", "venus", "sign"),
        ("planets", "venus", "element"),
        ("planets", "venus", "degree"),
        ("planets", "venus", "isRetrograde"),
        ("angles", "midheaven", "sign"),
        ("birthData", "location", "latitude"),
    ],
)
def test_null_leaf_fields_fall_back_to_defaults(chart_data, path) -> None:
    *parents, leaf = path
    node = chart_data
    for key in parents:
        node = node[key]
    node[leaf] = None

    result = interpret_chart(chart_data)
    assert "PLANET SIGNIFICANCE SCORES" in result.text
    assert set(result.interpretation.planets) == set(chart_data["planets"])
