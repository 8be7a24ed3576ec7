"""Thematic grouping of chart aspects."""

from __future__ import annotations

from collections.abc import Iterable

from ..config.settings import Settings, ThemeGroupCfg, get_settings
from .models import AspectGroups, ChartAspect

IDENTITY_GROUP = "identityEmotions"


def theme_groups(chart_ruler: str | None, config: Settings | None = None) -> dict[str, ThemeGroupCfg]:
    """Return the configured theme groups with the chart ruler merged into identity."""

    settings = config or get_settings()
    groups = {
        key: group.model_copy(update={"planets": list(group.planets)})
        for key, group in settings.themes.as_dict().items()
    }
    if chart_ruler:
        identity = groups[IDENTITY_GROUP]
        ruler = chart_ruler.lower()
        if ruler not in identity.planets:
            identity.planets.append(ruler)
    return groups


def _member(p1: str, p2: str, planets: list[str], *, substring: bool) -> bool:
    if p1 in planets or p2 in planets:
        return True
    if substring:
        return any(member in p1 or member in p2 for member in planets)
    return False


def group_aspects_by_theme(
    aspects: Iterable[ChartAspect],
    chart_ruler: str | None,
    *,
    config: Settings | None = None,
) -> AspectGroups:
    """Assign each aspect to every theme group whose planets it touches.

    Membership is tested independently per group, so one aspect can land in
    several groups (a Mars-Jupiter square is both love/sex and growth).
    """

    settings = config or get_settings()
    groups = theme_groups(chart_ruler, settings)
    legacy = settings.grouping.legacy_substring_match
    buckets: dict[str, list[ChartAspect]] = {key: [] for key in groups}
    for aspect in aspects:
        p1, p2 = aspect.planet1.lower(), aspect.planet2.lower()
        for key, group in groups.items():
            substring = legacy and key == IDENTITY_GROUP
            if _member(p1, p2, group.planets, substring=substring):
                buckets[key].append(aspect)
    return AspectGroups(
        identity_emotions=tuple(buckets["identityEmotions"]),
        mind_communication=tuple(buckets["mindCommunication"]),
        love_sex=tuple(buckets["loveSex"]),
        growth_challenges=tuple(buckets["growthChallenges"]),
    )


__all__ = ["IDENTITY_GROUP", "group_aspects_by_theme", "theme_groups"]
