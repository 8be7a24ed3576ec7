"""Pydantic models for birth-chart input and interpretation output."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ..errors import ChartDataError

AspectPolarity = Literal["positive", "negative", "mixed"]


class Body(str, Enum):
    """Closed set of chart bodies the engine knows how to interpret."""

    SUN = "sun"
    MOON = "moon"
    MERCURY = "mercury"
    VENUS = "venus"
    MARS = "mars"
    JUPITER = "jupiter"
    SATURN = "saturn"
    URANUS = "uranus"
    NEPTUNE = "neptune"
    PLUTO = "pluto"
    ASCENDANT = "ascendant"
    MIDHEAVEN = "midheaven"

    @classmethod
    def lookup(cls, name: Any) -> Body | None:
        """Return the member for ``name`` (case-insensitive) or ``None``."""

        if isinstance(name, Body):
            return name
        if not isinstance(name, str):
            return None
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None

    @property
    def display(self) -> str:
        return self.value.capitalize()

    @property
    def is_angle(self) -> bool:
        return self in (Body.ASCENDANT, Body.MIDHEAVEN)


PLANETS: tuple[Body, ...] = tuple(body for body in Body if not body.is_angle)
ANGLE_KEYS: frozenset[str] = frozenset({Body.ASCENDANT.value, Body.MIDHEAVEN.value})


def display_name(name: str) -> str:
    """Capitalise a body key for display (``"sun"`` -> ``"Sun"``)."""

    return name[:1].upper() + name[1:] if name else ""


class _ChartModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Explicit nulls fall back to the field default.
        if isinstance(data, Mapping):
            return {key: value for key, value in data.items() if value is not None}
        return data


# -------------------- BirthChart input --------------------


class Location(_ChartModel):
    latitude: float = 0.0
    longitude: float = 0.0
    timezone: int | float | str | None = None


class BirthData(_ChartModel):
    date: str = ""
    time: str = ""
    location: Location = Field(default_factory=Location)

    @field_validator("date", "time", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return "" if value is None else str(value)


class AnglePoint(_ChartModel):
    sign: str = ""
    element: str = ""
    degree: float = 0.0


class Angles(_ChartModel):
    ascendant: AnglePoint = Field(default_factory=AnglePoint)
    midheaven: AnglePoint = Field(default_factory=AnglePoint)


class PlanetPlacement(_ChartModel):
    sign: str = ""
    element: str = ""
    house: int | None = Field(default=None, ge=1, le=12)
    degree: float = 0.0
    is_retrograde: bool = False


class HouseCusp(_ChartModel):
    number: int = Field(ge=1, le=12)
    sign: str = ""
    element: str = ""
    degree: float = 0.0


class ChartAspect(_ChartModel):
    """Angular relationship between two chart bodies."""

    planet1: str
    planet2: str
    aspect: str
    orb: float = Field(default=0.0, ge=0.0)

    @field_validator("planet1", "planet2", "aspect", mode="before")
    @classmethod
    def _lower(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("expected a string")
        return value.strip().lower()

    @model_validator(mode="after")
    def _distinct_bodies(self) -> ChartAspect:
        if self.planet1 == self.planet2:
            raise ValueError(f"aspect pairs {self.planet1!r} with itself")
        return self

    def involves(self, name: str) -> bool:
        key = name.lower()
        return self.planet1 == key or self.planet2 == key

    def connects(self, first: str, second: str) -> bool:
        a, b = first.lower(), second.lower()
        return (self.planet1 == a and self.planet2 == b) or (
            self.planet1 == b and self.planet2 == a
        )

    def other(self, name: str) -> str:
        return self.planet2 if self.planet1 == name.lower() else self.planet1


class BirthChart(_ChartModel):
    """Finished chart snapshot produced by an ephemeris collaborator."""

    birth_data: BirthData
    angles: Angles
    planets: dict[str, PlanetPlacement]
    houses: list[HouseCusp] = Field(default_factory=list)
    aspects: list[ChartAspect] = Field(default_factory=list)

    @field_validator("planets", mode="before")
    @classmethod
    def _normalise_planet_keys(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        normalised: dict[str, Any] = {}
        for key, placement in value.items():
            name = str(key).strip().lower()
            if name in ANGLE_KEYS:
                raise ValueError(f"{name!r} is an angle, not a planet")
            normalised[name] = placement
        return normalised

    def placement(self, name: str) -> PlanetPlacement | None:
        """Return the placement for a planet key or the ``ascendant`` token."""

        key = name.lower()
        if key == Body.ASCENDANT.value:
            asc = self.angles.ascendant
            return PlanetPlacement(sign=asc.sign, element=asc.element, house=1, degree=asc.degree)
        return self.planets.get(key)


def coerce_chart(data: BirthChart | Mapping[str, Any]) -> BirthChart:
    """Validate ``data`` into a :class:`BirthChart` or raise :class:`ChartDataError`."""

    if isinstance(data, BirthChart):
        return data
    if not isinstance(data, Mapping):
        raise ChartDataError("birth chart payload must be an object")
    try:
        return BirthChart.model_validate(data)
    except ValidationError as exc:
        errors = [
            {"path": list(error.get("loc", ())), "message": error.get("msg", "")}
            for error in exc.errors()
        ]
        raise ChartDataError("birth chart failed validation", errors=errors) from exc


# -------------------- Interpretation output --------------------


class _OutputModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class QualitySet(_OutputModel):
    """Planet, sign and house meanings for one polarity."""

    planet_core: str = ""
    planet_themes: tuple[str, ...] = ()
    planet_keywords: tuple[str, ...] = ()
    sign_core: str = ""
    sign_themes: tuple[str, ...] = ()
    sign_keywords: tuple[str, ...] = ()
    house_core: str = ""
    house_themes: tuple[str, ...] = ()
    house_keywords: tuple[str, ...] = ()
    interpretation: str = ""


class AnnotatedAspect(_OutputModel):
    planet1: str
    planet2: str
    aspect: str
    orb: float
    polarity: str


class PlanetInterpretation(_OutputModel):
    name: str
    sign: str
    element: str
    house: int | None
    degree: float
    is_retrograde: bool
    positive: QualitySet
    negative: QualitySet
    aspect_polarity: AspectPolarity
    aspects: tuple[AnnotatedAspect, ...] = ()


class AscendantReading(_OutputModel):
    sign: str
    element: str
    degree: float
    ruler: str
    positive: str = ""
    negative: str = ""


class MidheavenReading(_OutputModel):
    sign: str
    element: str
    degree: float
    positive: str = ""
    negative: str = ""


class AngleReadings(_OutputModel):
    ascendant: AscendantReading
    midheaven: MidheavenReading


class ChartInfo(_OutputModel):
    date: str
    time: str
    location: Location


class AspectGroups(_OutputModel):
    identity_emotions: tuple[ChartAspect, ...] = ()
    mind_communication: tuple[ChartAspect, ...] = ()
    love_sex: tuple[ChartAspect, ...] = ()
    growth_challenges: tuple[ChartAspect, ...] = ()

    def items(self) -> Iterator[tuple[str, tuple[ChartAspect, ...]]]:
        """Yield ``(camelCaseKey, aspects)`` pairs in report order."""

        yield "identityEmotions", self.identity_emotions
        yield "mindCommunication", self.mind_communication
        yield "loveSex", self.love_sex
        yield "growthChallenges", self.growth_challenges

    def is_empty(self) -> bool:
        return not any(aspects for _, aspects in self.items())


class SynthesisPoint(_OutputModel):
    sign: str
    element: str
    house: int | None = None


class RulerPoint(_OutputModel):
    planet: str
    sign: str
    element: str
    house: int | None = None


class CoreSynthesis(_OutputModel):
    """Sun, Moon and chart-ruler triad with their mutual aspects."""

    sun: SynthesisPoint
    moon: SynthesisPoint
    ascendant: SynthesisPoint
    chart_ruler: RulerPoint | None = None
    key_aspects: tuple[ChartAspect, ...] = ()
    sun_moon_aspect: ChartAspect | None = None
    sun_ruler_aspect: ChartAspect | None = None
    moon_ruler_aspect: ChartAspect | None = None


class ElementCount(_OutputModel):
    element: str
    count: int


class ModalityCount(_OutputModel):
    modality: str
    count: int


class ElementalBalance(_OutputModel):
    distribution: dict[str, int]
    dominant: str
    lacking: str
    balance: tuple[ElementCount, ...]


class ModalBalance(_OutputModel):
    distribution: dict[str, int]
    dominant: str
    balance: tuple[ModalityCount, ...]


class Interpretation(_OutputModel):
    """Structured, immutable reading of one birth chart."""

    chart_info: ChartInfo
    angles: AngleReadings
    planets: dict[str, PlanetInterpretation]
    planet_significance: dict[str, float]
    aspect_groups: AspectGroups
    core_synthesis: CoreSynthesis | None = None
    elemental_balance: ElementalBalance
    modal_balance: ModalBalance
    key_themes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Return JSON-compatible data using the camelCase wire keys."""

        return self.model_dump(by_alias=True, mode="json")


__all__ = [
    "ANGLE_KEYS",
    "AngleReadings",
    "AnglePoint",
    "Angles",
    "AnnotatedAspect",
    "AscendantReading",
    "AspectGroups",
    "AspectPolarity",
    "BirthChart",
    "BirthData",
    "Body",
    "ChartAspect",
    "ChartInfo",
    "CoreSynthesis",
    "ElementCount",
    "ElementalBalance",
    "HouseCusp",
    "Interpretation",
    "Location",
    "MidheavenReading",
    "ModalBalance",
    "ModalityCount",
    "PLANETS",
    "PlanetInterpretation",
    "PlanetPlacement",
    "QualitySet",
    "RulerPoint",
    "SynthesisPoint",
    "coerce_chart",
    "display_name",
]
