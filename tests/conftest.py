from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from astroguide.config.settings import SETTINGS_ENV_VAR, get_settings
from astroguide.interpret.models import BirthChart, coerce_chart
from astroguide.interpret.rules import RULESET_ENV_VAR, get_rules_table

FIXTURES = Path(__file__).parent / "interpret" / "fixtures"


@pytest.fixture(autouse=True)
def _isolated_singletons(monkeypatch: pytest.MonkeyPatch):
    """Keep cached settings and rules from leaking between tests."""

    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
    monkeypatch.delenv(RULESET_ENV_VAR, raising=False)
    get_settings.cache_clear()
    get_rules_table.cache_clear()
    yield
    get_settings.cache_clear()
    get_rules_table.cache_clear()


@pytest.fixture(scope="session")
def _full_chart_payload() -> dict[str, Any]:
    return json.loads((FIXTURES / "full_chart.json").read_text(encoding="utf-8"))


@pytest.fixture
def chart_data(_full_chart_payload: dict[str, Any]) -> dict[str, Any]:
    """A fresh, mutable copy of the full ten-planet chart payload."""

    return copy.deepcopy(_full_chart_payload)


@pytest.fixture
def chart(chart_data: dict[str, Any]) -> BirthChart:
    return coerce_chart(chart_data)


@pytest.fixture
def make_chart(chart_data: dict[str, Any]):
    """Build a chart from the full payload with selected top-level keys replaced."""

    def _make(**overrides: Any) -> BirthChart:
        payload = copy.deepcopy(chart_data)
        payload.update(overrides)
        return coerce_chart(payload)

    return _make
