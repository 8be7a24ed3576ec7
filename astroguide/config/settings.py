"""Configuration models and helpers for AstroGuide settings."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

LOG = logging.getLogger(__name__)

CURRENT_SETTINGS_SCHEMA_VERSION = 1
SETTINGS_ENV_VAR = "ASTROGUIDE_SETTINGS"

# -------------------- Settings Schema --------------------


class ThemeGroupCfg(BaseModel):
    """Planet membership and display text for one life-theme bucket."""

    label: str
    description: str
    planets: List[str] = Field(default_factory=list)

    @field_validator("planets", mode="before")
    @classmethod
    def _lower_planets(cls, value: object) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        return [str(item).strip().lower() for item in value]  # type: ignore[union-attr]


class ThemesCfg(BaseModel):
    """The four thematic aspect groups, in report order."""

    identityEmotions: ThemeGroupCfg = Field(
        default_factory=lambda: ThemeGroupCfg(
            label="IDENTITY & EMOTIONS",
            description="Sun, Moon, Ascendant, Chart Ruler aspects",
            planets=["sun", "moon", "ascendant"],
        )
    )
    mindCommunication: ThemeGroupCfg = Field(
        default_factory=lambda: ThemeGroupCfg(
            label="MIND & COMMUNICATION",
            description="Mercury aspects",
            planets=["mercury"],
        )
    )
    loveSex: ThemeGroupCfg = Field(
        default_factory=lambda: ThemeGroupCfg(
            label="LOVE & SEX",
            description="Venus, Mars aspects",
            planets=["venus", "mars"],
        )
    )
    growthChallenges: ThemeGroupCfg = Field(
        default_factory=lambda: ThemeGroupCfg(
            label="GROWTH & CHALLENGES",
            description="Jupiter, Saturn, Outer Planets aspects",
            planets=["jupiter", "saturn", "uranus", "neptune", "pluto"],
        )
    )

    def as_dict(self) -> Dict[str, ThemeGroupCfg]:
        return {
            "identityEmotions": self.identityEmotions,
            "mindCommunication": self.mindCommunication,
            "loveSex": self.loveSex,
            "growthChallenges": self.growthChallenges,
        }


class GroupingCfg(BaseModel):
    """Aspect grouping switches."""

    # Accept substring matches (e.g. "sun" inside "sun_sign") for the
    # identity/emotions bucket, as older chart payloads relied on it.
    legacy_substring_match: bool = False


class SignificanceThresholdsCfg(BaseModel):
    """Display tiers for planet significance scores."""

    high: float = 0.7
    medium: float = 0.5
    low: float = 0.0

    @model_validator(mode="after")
    def _ordered(self) -> "SignificanceThresholdsCfg":
        if not (self.high >= self.medium >= self.low):
            raise ValueError("thresholds must satisfy high >= medium >= low")
        return self


class SignificanceCfg(BaseModel):
    """Weights used by the planet significance score."""

    aspect_weights: Dict[str, float] = Field(
        default_factory=lambda: {
            "conjunction": 1.0,
            "opposition": 0.9,
            "square": 0.9,
            "trine": 0.7,
            "sextile": 0.5,
            "quincunx": 0.4,
        }
    )
    default_weight: float = 0.3
    orb_cap: float = 10.0
    aspect_scale: float = 5.0
    angular_bonus: float = 0.2
    ruler_bonus: float = 0.2
    angular_houses: List[int] = Field(default_factory=lambda: [1, 4, 7, 10])
    thresholds: SignificanceThresholdsCfg = Field(default_factory=SignificanceThresholdsCfg)

    @field_validator("aspect_weights", mode="before")
    @classmethod
    def _coerce_weights(cls, value: object) -> Dict[str, float]:
        if not isinstance(value, dict):
            return {}
        weights: Dict[str, float] = {}
        for key, weight in value.items():
            try:
                numeric = float(weight)
            except (TypeError, ValueError):
                continue
            weights[str(key).lower()] = max(0.0, numeric)
        return weights

    @field_validator("default_weight", "angular_bonus", "ruler_bonus", mode="before")
    @classmethod
    def _non_negative(cls, value: float) -> float:
        return max(0.0, float(value))

    @field_validator("orb_cap", "aspect_scale", mode="before")
    @classmethod
    def _positive(cls, value: float) -> float:
        numeric = float(value)
        if numeric <= 0:
            raise ValueError("must be greater than zero")
        return numeric

    def weight_for(self, aspect_kind: str) -> float:
        return self.aspect_weights.get(aspect_kind.lower(), self.default_weight)


class ReportCfg(BaseModel):
    """Layout options for the formatted interpretation report."""

    top_planets: int = 5
    holistic_instructions: List[str] = Field(
        default_factory=lambda: [
            "Start with the CORE PERSONALITY SYNTHESIS - this is the foundation.",
            "Use ASPECT-DRIVEN narrative - combine placements that aspect each other.",
            "Avoid repeating isolated placement descriptions when aspects already cover them.",
            "Group aspects by theme (Identity/Emotions, Mind/Communication, Love/Sex, Growth/Challenges).",
            "Use planet significance scores to emphasize heavily aspected planets.",
            "Include BOTH positive and negative qualities throughout.",
            "Show relationships between chart pieces, not just isolated descriptions.",
        ]
    )

    @field_validator("top_planets", mode="before")
    @classmethod
    def _cap_top_planets(cls, value: int) -> int:
        return max(1, min(12, int(value)))


class Settings(BaseModel):
    """Top-level settings model."""

    schema_version: int = Field(
        default=CURRENT_SETTINGS_SCHEMA_VERSION,
        ge=1,
        description="Version marker for persisted configuration payloads.",
    )
    themes: ThemesCfg = Field(default_factory=ThemesCfg)
    grouping: GroupingCfg = Field(default_factory=GroupingCfg)
    significance: SignificanceCfg = Field(default_factory=SignificanceCfg)
    report: ReportCfg = Field(default_factory=ReportCfg)


# -------------------- Loading Helpers --------------------


def default_settings() -> Settings:
    """Return a settings instance populated with built-in defaults."""

    return Settings()


def settings_path() -> Optional[Path]:
    """Return the settings file named by ``ASTROGUIDE_SETTINGS``, if any."""

    raw = os.getenv(SETTINGS_ENV_VAR)
    if not raw:
        return None
    return Path(raw).expanduser()


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a YAML file, falling back to defaults if missing."""

    source_path = Path(path) if path else settings_path()
    if source_path is None:
        return default_settings()
    if not source_path.exists():
        LOG.warning("settings file %s not found; using defaults", source_path)
        return default_settings()
    with source_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raw = {}
    LOG.debug("loaded settings from %s", source_path)
    return Settings(**raw)


def save_settings(settings: Settings, path: Path) -> Path:
    """Persist ``settings`` to ``path`` as YAML."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(settings.model_dump(), handle, sort_keys=False, allow_unicode=True)
    return path


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings singleton."""

    return load_settings()


__all__ = [
    "CURRENT_SETTINGS_SCHEMA_VERSION",
    "GroupingCfg",
    "ReportCfg",
    "SETTINGS_ENV_VAR",
    "Settings",
    "SignificanceCfg",
    "SignificanceThresholdsCfg",
    "ThemeGroupCfg",
    "ThemesCfg",
    "default_settings",
    "get_settings",
    "load_settings",
    "save_settings",
    "settings_path",
]
