from __future__ import annotations

from astroguide.interpret.patterns import find_aspect_patterns, find_stelliums


def test_stelliums_by_sign_and_house(chart) -> None:
    found = find_stelliums(chart)
    assert [(s.kind, s.key, s.count) for s in found] == [
        ("sign", "Capricorn", 3),
        ("house", "3", 3),
    ]
    assert found[0].planets == ("jupiter", "uranus", "neptune")
    assert [s.describe() for s in found] == ["Capricorn: 3 planets", "House 3: 3 planets"]


def test_no_stelliums_in_spread_chart(make_chart) -> None:
    planets = {
        "sun": {"sign": "Aries", "house": 1},
        "moon": {"sign": "Aries", "house": 2},
        "venus": {"sign": "Leo", "house": 2},
    }
    assert find_stelliums(make_chart(planets=planets)) == []


def test_t_square_detected(chart) -> None:
    patterns = find_aspect_patterns(chart)
    assert [p.describe() for p in patterns] == ["T-square involving mars-saturn opposition"]
    assert patterns[0].supporting[0].planet2 == "pluto"


def test_yod_detected(make_chart) -> None:
    aspects = [
        {"planet1": "venus", "planet2": "saturn", "aspect": "sextile", "orb": 1.0},
        {"planet1": "venus", "planet2": "pluto", "aspect": "quincunx", "orb": 1.5},
        {"planet1": "saturn", "planet2": "pluto", "aspect": "quincunx", "orb": 2.0},
    ]
    patterns = find_aspect_patterns(make_chart(aspects=aspects))
    assert len(patterns) == 1
    assert patterns[0].name == "Yod"
    assert len(patterns[0].supporting) == 2
    assert patterns[0].describe() == "Yod pattern involving venus-saturn sextile"


def test_no_patterns_without_aspects(make_chart) -> None:
    assert find_aspect_patterns(make_chart(aspects=[])) == []
