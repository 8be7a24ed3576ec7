"""Rules-table loading and validation helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..errors import RulesetValidationError

POLARITIES: tuple[str, str] = ("positive", "negative")


@dataclass(frozen=True, slots=True)
class Meaning:
    """Core text, themes and keywords for one polarity of a chart factor."""

    core: str = ""
    themes: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()


EMPTY_MEANING = Meaning()


@dataclass(frozen=True, slots=True)
class MeaningPair:
    positive: Meaning = EMPTY_MEANING
    negative: Meaning = EMPTY_MEANING

    def get(self, polarity: str) -> Meaning:
        return self.negative if polarity == "negative" else self.positive


@dataclass(frozen=True, slots=True)
class AspectStyle:
    """Display descriptor for an aspect kind."""

    polarity: str = "neutral"
    tension: str = "unknown"
    strength: str = "unknown"


@dataclass(frozen=True, slots=True)
class AspectRule:
    polarity: str
    style: AspectStyle


@dataclass(frozen=True, slots=True)
class Ruleset:
    """Parsed rules-table document."""

    rulepack: str
    version: int
    planets: dict[str, MeaningPair]
    points: dict[str, MeaningPair]
    signs: dict[str, MeaningPair]
    houses: dict[int, MeaningPair]
    aspects: dict[str, AspectRule]
    templates: dict[str, dict[str, str]]
    source: str | None = None


def _parse_raw(raw: str, *, source: str | None = None) -> Any:
    try:
        return yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - PyYAML may raise various subclasses
        raise RulesetValidationError(f"failed to parse ruleset {source or ''}: {exc}") from exc


def _normalize_tags(value: Any) -> tuple[str, ...]:
    if value is None:
        return tuple()
    if isinstance(value, (str, bytes)):
        text = value.decode("utf-8") if isinstance(value, bytes) else value
        return (text,)
    if isinstance(value, Sequence):
        return tuple(str(entry) for entry in value)
    raise ValueError("themes and keywords must be a string or sequence of strings")


def _load_meaning(payload: Any) -> Meaning:
    if payload is None:
        return EMPTY_MEANING
    if not isinstance(payload, Mapping):
        raise ValueError("meaning must be a mapping with core/themes/keywords")
    return Meaning(
        core=str(payload.get("core") or "").strip(),
        themes=_normalize_tags(payload.get("themes")),
        keywords=_normalize_tags(payload.get("keywords")),
    )


def _load_pair(payload: Any) -> MeaningPair:
    if not isinstance(payload, Mapping):
        raise ValueError("entry must be a mapping with positive/negative meanings")
    unknown = set(payload) - set(POLARITIES)
    if unknown:
        raise ValueError(f"unexpected polarity keys: {sorted(str(key) for key in unknown)}")
    return MeaningPair(
        positive=_load_meaning(payload.get("positive")),
        negative=_load_meaning(payload.get("negative")),
    )


def _load_aspect(payload: Any) -> AspectRule:
    if not isinstance(payload, Mapping):
        raise ValueError("aspect entry must be a mapping")
    polarity = str(payload.get("polarity") or "").strip()
    if not polarity:
        raise ValueError("aspect polarity is required")
    style_payload = payload.get("style") or {}
    if not isinstance(style_payload, Mapping):
        raise ValueError("aspect style must be a mapping")
    style = AspectStyle(
        polarity=str(style_payload.get("polarity") or "neutral"),
        tension=str(style_payload.get("tension") or "unknown"),
        strength=str(style_payload.get("strength") or "unknown"),
    )
    return AspectRule(polarity=polarity, style=style)


def _load_templates(payload: Any) -> dict[str, dict[str, str]]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ValueError("templates must be a mapping")
    templates: dict[str, dict[str, str]] = {}
    for name, variants in payload.items():
        if isinstance(variants, str):
            templates[str(name)] = {polarity: variants for polarity in POLARITIES}
            continue
        if not isinstance(variants, Mapping):
            raise ValueError(f"template {name!r} must be a string or polarity mapping")
        templates[str(name)] = {str(key): str(value) for key, value in variants.items()}
    return templates


def load_ruleset_from_data(data: Mapping[str, Any], *, source: str | None = None) -> Ruleset:
    errors: list[dict[str, Any]] = []

    def add_error(path: Iterable[Any], message: str) -> None:
        errors.append({"path": list(path), "message": message})

    if not isinstance(data, Mapping):
        raise RulesetValidationError("ruleset payload must be an object")

    rulepack_id = data.get("rulepack")
    if not isinstance(rulepack_id, str) or not rulepack_id.strip():
        add_error(["rulepack"], "rulepack identifier is required")
    version_raw = data.get("version", 1)
    try:
        version = int(version_raw)
    except (TypeError, ValueError):
        add_error(["version"], "version must be an integer")
        version = 0

    def load_section(name: str, *, key_fn=str) -> dict[Any, MeaningPair]:
        section = data.get(name)
        if section is None:
            return {}
        if not isinstance(section, Mapping):
            add_error([name], f"{name} must be a mapping")
            return {}
        entries: dict[Any, MeaningPair] = {}
        for key, payload in section.items():
            try:
                entries[key_fn(key)] = _load_pair(payload)
            except (TypeError, ValueError) as exc:
                add_error([name, key], str(exc))
        return entries

    planets = load_section("planets", key_fn=lambda key: str(key).lower())
    points = load_section("points", key_fn=lambda key: str(key).lower())
    signs = load_section("signs", key_fn=lambda key: str(key).capitalize())
    houses = load_section("houses", key_fn=int)
    for number in houses:
        if not 1 <= number <= 12:
            add_error(["houses", number], "house numbers must be between 1 and 12")

    aspects: dict[str, AspectRule] = {}
    aspects_payload = data.get("aspects") or {}
    if not isinstance(aspects_payload, Mapping):
        add_error(["aspects"], "aspects must be a mapping")
    else:
        for kind, payload in aspects_payload.items():
            try:
                aspects[str(kind).lower()] = _load_aspect(payload)
            except ValueError as exc:
                add_error(["aspects", kind], str(exc))

    templates: dict[str, dict[str, str]] = {}
    try:
        templates = _load_templates(data.get("templates"))
    except ValueError as exc:
        add_error(["templates"], str(exc))

    if errors:
        raise RulesetValidationError("ruleset failed validation", errors=errors)

    return Ruleset(
        rulepack=str(rulepack_id),
        version=version,
        planets=planets,
        points=points,
        signs=signs,
        houses=houses,
        aspects=aspects,
        templates=templates,
        source=source,
    )


def load_ruleset(raw: str | bytes | Path, *, source: str | None = None) -> Ruleset:
    """Load a ruleset from *raw* YAML text or a filesystem path."""

    text: str
    actual_source = source
    if isinstance(raw, Path):
        text = raw.read_text(encoding="utf-8")
        actual_source = actual_source or str(raw)
    elif isinstance(raw, bytes):
        text = raw.decode("utf-8")
    elif isinstance(raw, str):
        if "\n" not in raw and "\r" not in raw:
            candidate = Path(raw)
            if candidate.exists():
                text = candidate.read_text(encoding="utf-8")
                actual_source = actual_source or raw
            else:
                text = raw
        else:
            text = raw
    else:
        raise TypeError("ruleset loader expects text, bytes, or a Path")
    data = _parse_raw(text, source=actual_source)
    return load_ruleset_from_data(data, source=actual_source)


__all__ = [
    "AspectRule",
    "AspectStyle",
    "EMPTY_MEANING",
    "Meaning",
    "MeaningPair",
    "POLARITIES",
    "Ruleset",
    "RulesetValidationError",
    "load_ruleset",
    "load_ruleset_from_data",
]
