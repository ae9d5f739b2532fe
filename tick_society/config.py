"""Static configuration consumed by the World at construction."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping

DEFAULT_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def _default_categories() -> dict[str, tuple[str, ...]]:
    return {
        "people": ("🧑", "👨", "👩", "🧒", "👴", "👵"),
        "animal": ("🐕", "🐈", "🐦", "🐰", "🐻", "🦊"),
        "food": ("🍎", "🍌", "🍕", "🍔", "🍞", "🥕"),
    }


def _default_landmark_glyphs() -> dict[str, str]:
    return {
        "home": "⌂",
        "market": "🏪",
        "park": "🏞️",
        "boundary": "#",
    }


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value}")


@dataclass(frozen=True)
class WorldSection:
    width: int = 80
    height: int = 24
    tick_rate: int = 200

    def __post_init__(self) -> None:
        if self.width < 3 or self.height < 3:
            raise ValueError(
                f"world must be at least 3x3, got {self.width}x{self.height}"
            )
        if self.tick_rate <= 0:
            raise ValueError(f"tick_rate must be positive, got {self.tick_rate}")


@dataclass(frozen=True)
class CitizenSection:
    """Citizen population settings.

    Attributes:
        initial_count: Citizens created by ``World.initialize``.
        categories: Category name -> glyph pool. Categories are assigned
            round-robin in insertion order.
        movement_speed: Ticks per grid step.
        vision_range: Carried on every citizen, informational.
        needs_decay_rate: Hunger decay per tick; the other decays keep
            their fixed ratios to it.
    """

    initial_count: int = 10
    categories: dict[str, tuple[str, ...]] = field(default_factory=_default_categories)
    movement_speed: float = 1.0
    vision_range: int = 5
    needs_decay_rate: float = 0.1

    def __post_init__(self) -> None:
        if self.initial_count < 0:
            raise ValueError(f"initial_count must be >= 0, got {self.initial_count}")
        if not self.categories or any(not pool for pool in self.categories.values()):
            raise ValueError("every citizen category needs at least one glyph")
        if self.movement_speed <= 0:
            raise ValueError(f"movement_speed must be positive, got {self.movement_speed}")
        if self.needs_decay_rate < 0:
            raise ValueError(f"needs_decay_rate must be >= 0, got {self.needs_decay_rate}")


@dataclass(frozen=True)
class LandmarkSection:
    glyphs: dict[str, str] = field(default_factory=_default_landmark_glyphs)
    initial_count: int = 8
    initial_types: tuple[str, ...] = ("home", "market", "park")

    def __post_init__(self) -> None:
        if self.initial_count < 0:
            raise ValueError(f"initial_count must be >= 0, got {self.initial_count}")
        if self.initial_count and not self.initial_types:
            raise ValueError("initial_types must be non-empty")


@dataclass(frozen=True)
class ResourceSection:
    alphabet: str = DEFAULT_ALPHABET
    initial_count: int = 30
    respawn_rate: float = 0.01
    max_per_type: int = 50

    def __post_init__(self) -> None:
        if not self.alphabet:
            raise ValueError("resource alphabet must be non-empty")
        if any(not ch.isalpha() for ch in self.alphabet):
            raise ValueError(f"resource alphabet must be letters, got {self.alphabet!r}")
        if self.initial_count < 0:
            raise ValueError(f"initial_count must be >= 0, got {self.initial_count}")
        _check_probability("respawn_rate", self.respawn_rate)
        if self.max_per_type <= 0:
            raise ValueError(f"max_per_type must be positive, got {self.max_per_type}")


@dataclass(frozen=True)
class GovernmentConfig:
    formation_radius: float = 5.0
    min_founders: int = 5
    tax_interval: int = 100
    satisfaction_interval: int = 50
    recruitment_interval: int = 200
    recruitment_radius: float = 3.0
    join_probability: float = 0.3
    rebellion_probability: float = 0.01

    def __post_init__(self) -> None:
        if self.min_founders < 1:
            raise ValueError(f"min_founders must be >= 1, got {self.min_founders}")
        for name in ("tax_interval", "satisfaction_interval", "recruitment_interval"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        _check_probability("join_probability", self.join_probability)
        _check_probability("rebellion_probability", self.rebellion_probability)


@dataclass(frozen=True)
class CrimeConfig:
    crime_check_interval: int = 10
    theft_probability_unemployed: float = 0.02
    theft_probability_low_satisfaction: float = 0.01
    vandalism_probability: float = 0.005
    assault_probability: float = 0.003
    trespassing_probability: float = 0.01
    tax_evasion_probability: float = 0.01
    theft_radius: float = 3.0
    vandalism_radius: float = 2.0
    assault_radius: float = 1.0

    def __post_init__(self) -> None:
        if self.crime_check_interval <= 0:
            raise ValueError(
                f"crime_check_interval must be positive, got {self.crime_check_interval}"
            )
        for name in (
            "theft_probability_unemployed",
            "theft_probability_low_satisfaction",
            "vandalism_probability",
            "assault_probability",
            "trespassing_probability",
            "tax_evasion_probability",
        ):
            _check_probability(name, getattr(self, name))


@dataclass(frozen=True)
class PoliceConfig:
    detection_range: float = 8.0
    arrest_range: float = 1.0
    patrol_change_interval: int = 50
    patrol_radius: int = 10
    arrest_credit_penalty: float = 25.0
    flee_distance: int = 5

    def __post_init__(self) -> None:
        if self.arrest_range < 0 or self.detection_range < self.arrest_range:
            raise ValueError("need 0 <= arrest_range <= detection_range")
        if self.patrol_change_interval <= 0:
            raise ValueError("patrol_change_interval must be positive")
        if self.patrol_radius < 1:
            raise ValueError("patrol_radius must be >= 1")


@dataclass(frozen=True)
class RoutineConfig:
    ticks_per_hour: int = 60
    morning_start: int = 6
    work_start: int = 9
    work_end: int = 17
    evening_end: int = 20

    def __post_init__(self) -> None:
        if self.ticks_per_hour <= 0:
            raise ValueError(f"ticks_per_hour must be positive, got {self.ticks_per_hour}")
        hours = (self.morning_start, self.work_start, self.work_end, self.evening_end)
        if list(hours) != sorted(hours) or not all(0 <= h <= 24 for h in hours):
            raise ValueError(f"routine hours must be ordered within 0-24, got {hours}")


@dataclass(frozen=True)
class WorldConfig:
    world: WorldSection = field(default_factory=WorldSection)
    citizens: CitizenSection = field(default_factory=CitizenSection)
    landmarks: LandmarkSection = field(default_factory=LandmarkSection)
    resources: ResourceSection = field(default_factory=ResourceSection)
    government: GovernmentConfig = field(default_factory=GovernmentConfig)
    crime: CrimeConfig = field(default_factory=CrimeConfig)
    police: PoliceConfig = field(default_factory=PoliceConfig)
    routine: RoutineConfig = field(default_factory=RoutineConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WorldConfig:
        """Build a config from the nested camelCase mapping the session layer uses.

        Missing sections and keys keep their defaults; unknown keys are ignored.
        """
        world = data.get("world", {})
        citizens = data.get("citizens", {})
        landmarks = data.get("landmarks", {})
        resources = data.get("resources", {})

        world_kw = _pick(world, {"width": "width", "height": "height", "tickRate": "tick_rate"})
        citizen_kw = _pick(citizens, {
            "initialCount": "initial_count",
            "movementSpeed": "movement_speed",
            "visionRange": "vision_range",
            "needsDecayRate": "needs_decay_rate",
        })
        pools = citizens.get("emojiCategories", citizens.get("categories"))
        if pools is not None:
            citizen_kw["categories"] = {
                _normalize_category(name): tuple(glyphs) for name, glyphs in pools.items()
            }
        landmark_kw = _pick(landmarks, {"initialCount": "initial_count"})
        if "types" in landmarks:
            landmark_kw["glyphs"] = {**_default_landmark_glyphs(), **landmarks["types"]}
        if "initialTypes" in landmarks:
            landmark_kw["initial_types"] = tuple(landmarks["initialTypes"])
        resource_kw = _pick(resources, {
            "types": "alphabet",
            "initialCount": "initial_count",
            "respawnRate": "respawn_rate",
            "maxPerType": "max_per_type",
        })

        return cls(
            world=WorldSection(**world_kw),
            citizens=CitizenSection(**citizen_kw),
            landmarks=LandmarkSection(**landmark_kw),
            resources=ResourceSection(**resource_kw),
            government=GovernmentConfig(**_snake(data.get("government", {}), GovernmentConfig)),
            crime=CrimeConfig(**_snake(data.get("crime", {}), CrimeConfig)),
            police=PoliceConfig(**_snake(data.get("police", {}), PoliceConfig)),
            routine=RoutineConfig(**_snake(data.get("routine", {}), RoutineConfig)),
        )


def _pick(source: Mapping[str, Any], names: dict[str, str]) -> dict[str, Any]:
    return {dst: source[src] for src, dst in names.items() if src in source}


def _normalize_category(name: str) -> str:
    # Client payloads say "animals"; citizens carry the singular.
    return "animal" if name == "animals" else name


def _snake(section: Mapping[str, Any], target: type) -> dict[str, Any]:
    """Convert camelCase keys to snake_case, dropping ones *target* does not declare."""
    known = {f.name for f in fields(target)}
    result: dict[str, Any] = {}
    for key, value in section.items():
        snake = "".join("_" + ch.lower() if ch.isupper() else ch for ch in key)
        if snake in known:
            result[snake] = value
    return result
