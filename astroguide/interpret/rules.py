"""Read-only lookups over the natal rules table.

Every lookup is total: an unknown planet, sign, house or aspect kind returns
:data:`EMPTY_MEANING` or a neutral descriptor instead of raising, so callers
only ever coalesce to empty strings and lists.
"""

from __future__ import annotations

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

from .loader import (
    EMPTY_MEANING,
    AspectStyle,
    Meaning,
    MeaningPair,
    Ruleset,
    load_ruleset,
)
from .models import Body

LOG = logging.getLogger(__name__)

RULESET_ENV_VAR = "ASTROGUIDE_RULESET"
DEFAULT_RULESET_PATH = Path(__file__).resolve().parent / "rulesets" / "natal_core.yaml"

NEUTRAL_ASPECT_POLARITY = "neutral"
NEUTRAL_ASPECT_STYLE = AspectStyle()

_EMPTY_PAIR = MeaningPair()
_TOKEN = re.compile(r"\{(\w+)\}")


class RulesTable:
    """Lookup facade over a parsed :class:`Ruleset`."""

    def __init__(self, ruleset: Ruleset) -> None:
        self.ruleset = ruleset

    # ------------------------------------------------------------------
    def lookup_meaning(self, section: str, key: Any, polarity: str = "positive") -> Meaning:
        """Return the meaning for ``key`` in ``section`` or :data:`EMPTY_MEANING`."""

        entries: dict[Any, MeaningPair]
        if section == "planets":
            body = Body.lookup(key)
            if body is None:
                return EMPTY_MEANING
            entries = self.ruleset.points if body.is_angle else self.ruleset.planets
            return entries.get(body.value, _EMPTY_PAIR).get(polarity)
        if section == "signs":
            if not isinstance(key, str) or not key:
                return EMPTY_MEANING
            return self.ruleset.signs.get(key.strip().capitalize(), _EMPTY_PAIR).get(polarity)
        if section == "houses":
            try:
                number = int(key)
            except (TypeError, ValueError):
                return EMPTY_MEANING
            return self.ruleset.houses.get(number, _EMPTY_PAIR).get(polarity)
        return EMPTY_MEANING

    def planet_meaning(self, planet: Any, polarity: str = "positive") -> Meaning:
        return self.lookup_meaning("planets", planet, polarity)

    def sign_meaning(self, sign: Any, polarity: str = "positive") -> Meaning:
        return self.lookup_meaning("signs", sign, polarity)

    def house_meaning(self, house: Any, polarity: str = "positive") -> Meaning:
        return self.lookup_meaning("houses", house, polarity)

    def planet_sign_interpretation(self, planet: str, sign: str, polarity: str = "positive") -> str:
        """Return a one-sentence reading of ``planet`` in ``sign``."""

        template = self.ruleset.templates.get("planet_sign", {}).get(polarity)
        if not template or not sign:
            return ""
        planet_core = self.planet_meaning(planet, polarity).core
        sign_core = self.sign_meaning(sign, polarity).core
        if not planet_core or not sign_core:
            return ""
        values = {
            "planet": planet[:1].upper() + planet[1:],
            "sign": sign,
            "planetCore": planet_core,
            "signCore": sign_core,
        }
        return _TOKEN.sub(lambda match: values.get(match.group(1), ""), template)

    # ------------------------------------------------------------------
    def aspect_polarity(self, kind: str) -> str:
        rule = self.ruleset.aspects.get(str(kind).lower())
        return rule.polarity if rule else NEUTRAL_ASPECT_POLARITY

    def aspect_style(self, kind: str) -> AspectStyle:
        rule = self.ruleset.aspects.get(str(kind).lower())
        if rule is None:
            LOG.debug("no aspect style for %r; using neutral style", kind)
            return NEUTRAL_ASPECT_STYLE
        return rule.style


def ruleset_path() -> Path:
    """Return the ruleset path, honouring ``ASTROGUIDE_RULESET``."""

    raw = os.getenv(RULESET_ENV_VAR)
    if raw:
        return Path(raw).expanduser()
    return DEFAULT_RULESET_PATH


@lru_cache(maxsize=1)
def get_rules_table() -> RulesTable:
    """Return the process-wide rules table, loading it on first use."""

    path = ruleset_path()
    ruleset = load_ruleset(path)
    LOG.debug(
        "loaded ruleset %s v%s from %s", ruleset.rulepack, ruleset.version, ruleset.source
    )
    return RulesTable(ruleset)


__all__ = [
    "DEFAULT_RULESET_PATH",
    "NEUTRAL_ASPECT_POLARITY",
    "NEUTRAL_ASPECT_STYLE",
    "RULESET_ENV_VAR",
    "RulesTable",
    "get_rules_table",
    "ruleset_path",
]
