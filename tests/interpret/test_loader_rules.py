from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from astroguide.errors import RulesetValidationError
from astroguide.interpret.loader import EMPTY_MEANING, load_ruleset, load_ruleset_from_data
from astroguide.interpret.models import PLANETS
from astroguide.interpret.rules import (
    DEFAULT_RULESET_PATH,
    RULESET_ENV_VAR,
    RulesTable,
    get_rules_table,
)


def test_packaged_ruleset_is_complete() -> None:
    ruleset = load_ruleset(DEFAULT_RULESET_PATH)
    assert ruleset.rulepack == "natal-core"
    assert set(ruleset.planets) == {body.value for body in PLANETS}
    assert set(ruleset.points) == {"ascendant", "midheaven"}
    assert len(ruleset.signs) == 12
    assert sorted(ruleset.houses) == list(range(1, 13))
    for pair in (*ruleset.planets.values(), *ruleset.signs.values(), *ruleset.houses.values()):
        assert pair.positive.core
        assert pair.negative.core


def test_ruleset_loads_from_json_path(tmp_path: Path) -> None:
    data = yaml.safe_load(DEFAULT_RULESET_PATH.read_text(encoding="utf-8"))
    json_path = tmp_path / "natal.json"
    json_path.write_text(json.dumps(data), encoding="utf-8")
    assert load_ruleset(json_path).rulepack == "natal-core"


def test_validation_collects_every_error() -> None:
    with pytest.raises(RulesetValidationError) as excinfo:
        load_ruleset_from_data(
            {
                "version": "one",
                "houses": {13: {"positive": {"core": "x"}}},
                "aspects": {"trine": {"style": {}}},
            }
        )
    paths = [error["path"] for error in excinfo.value.errors]
    assert ["rulepack"] in paths
    assert ["version"] in paths
    assert ["houses", 13] in paths
    assert ["aspects", "trine"] in paths


def test_unknown_polarity_key_is_rejected() -> None:
    with pytest.raises(RulesetValidationError):
        load_ruleset_from_data({"rulepack": "x", "signs": {"Aries": {"neutral": {"core": "x"}}}})


def test_lookups_are_total() -> None:
    rules = get_rules_table()
    assert rules.planet_meaning("chiron") is EMPTY_MEANING
    assert rules.sign_meaning("Ophiuchus") is EMPTY_MEANING
    assert rules.sign_meaning(None) is EMPTY_MEANING
    assert rules.house_meaning(None) is EMPTY_MEANING
    assert rules.house_meaning(13) is EMPTY_MEANING
    assert rules.lookup_meaning("asteroids", "ceres") is EMPTY_MEANING


def test_lookups_normalise_keys() -> None:
    rules = get_rules_table()
    assert rules.sign_meaning("scorpio") == rules.sign_meaning("Scorpio")
    assert rules.planet_meaning("VENUS", "negative").core
    assert rules.planet_meaning("ascendant").core == rules.ruleset.points["ascendant"].positive.core


@pytest.mark.parametrize(
    ("kind", "polarity", "style"),
    [
        ("conjunction", "unifying", "merged"),
        ("opposition", "challenging", "polarized"),
        ("square", "challenging", "friction"),
        ("trine", "harmonious", "flowing"),
        ("sextile", "harmonious", "cooperative"),
        ("quincunx", "adjusting", "awkward"),
        ("semisquare", "neutral", "neutral"),
    ],
)
def test_aspect_polarity_and_style(kind: str, polarity: str, style: str) -> None:
    rules = get_rules_table()
    assert rules.aspect_polarity(kind) == polarity
    assert rules.aspect_style(kind).polarity == style


def test_planet_sign_interpretation() -> None:
    rules = get_rules_table()
    text = rules.planet_sign_interpretation("sun", "Gemini")
    assert text.startswith("Sun in Gemini")
    assert "{" not in text
    assert rules.planet_sign_interpretation("sun", "") == ""


def test_ruleset_path_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    custom = tmp_path / "custom.yaml"
    custom.write_text(
        "rulepack: custom\nsigns:\n  Aries:\n    positive: {core: daring}\n",
        encoding="utf-8",
    )
    monkeypatch.setenv(RULESET_ENV_VAR, str(custom))
    get_rules_table.cache_clear()
    rules = get_rules_table()
    assert isinstance(rules, RulesTable)
    assert rules.ruleset.rulepack == "custom"
    assert rules.sign_meaning("Aries").core == "daring"
    assert rules.sign_meaning("Aries", "negative") is EMPTY_MEANING
