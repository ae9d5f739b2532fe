"""Landmarks and the building recipes that produce them."""
from __future__ import annotations

import random as _random_mod
from dataclasses import dataclass, field
from enum import Enum

from tick_society.types import Position


class LandmarkType(str, Enum):
    HOME = "home"
    MARKET = "market"
    PARK = "park"
    BOUNDARY = "boundary"
    STORAGE = "storage"
    MEETING = "meeting"
    FARM = "farm"
    WALL = "wall"
    ROAD_HORIZONTAL = "road_horizontal"
    ROAD_VERTICAL = "road_vertical"
    INTERSECTION = "intersection"
    TOWN_HALL = "town_hall"
    COURTHOUSE = "courthouse"
    TREASURY = "treasury"
    POLICE_STATION = "police_station"
    PUBLIC_WORKS = "public_works"


@dataclass(frozen=True)
class LandmarkDef:
    glyph: str
    capacity: int = 5
    walkable: bool = True
    road: bool = False
    government: bool = False


LANDMARK_DEFS: dict[LandmarkType, LandmarkDef] = {
    LandmarkType.HOME: LandmarkDef("⌂"),
    LandmarkType.MARKET: LandmarkDef("🏪"),
    LandmarkType.PARK: LandmarkDef("🏞️"),
    LandmarkType.BOUNDARY: LandmarkDef("#", capacity=0, walkable=False),
    LandmarkType.STORAGE: LandmarkDef("□"),
    LandmarkType.MEETING: LandmarkDef("◊"),
    LandmarkType.FARM: LandmarkDef("⚘"),
    LandmarkType.WALL: LandmarkDef("█"),
    LandmarkType.ROAD_HORIZONTAL: LandmarkDef("─", road=True),
    LandmarkType.ROAD_VERTICAL: LandmarkDef("│", road=True),
    LandmarkType.INTERSECTION: LandmarkDef("┼", road=True),
    LandmarkType.TOWN_HALL: LandmarkDef("🏛", government=True),
    LandmarkType.COURTHOUSE: LandmarkDef("⚖", government=True),
    LandmarkType.TREASURY: LandmarkDef("💰", government=True),
    LandmarkType.POLICE_STATION: LandmarkDef("🚓", government=True),
    LandmarkType.PUBLIC_WORKS: LandmarkDef("🏗", government=True),
}


@dataclass
class Landmark:
    id: int
    position: Position
    type: LandmarkType
    glyph: str = ""
    occupants: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.type = LandmarkType(self.type)
        if not self.glyph:
            self.glyph = LANDMARK_DEFS[self.type].glyph

    @property
    def capacity(self) -> int:
        return LANDMARK_DEFS[self.type].capacity

    def is_walkable(self) -> bool:
        return LANDMARK_DEFS[self.type].walkable

    def is_road(self) -> bool:
        return LANDMARK_DEFS[self.type].road

    def is_government_building(self) -> bool:
        return LANDMARK_DEFS[self.type].government

    def can_enter(self) -> bool:
        return self.is_walkable() and len(self.occupants) < self.capacity

    def enter(self, citizen_id: str) -> bool:
        if citizen_id in self.occupants:
            return True
        if self.can_enter():
            self.occupants.add(citizen_id)
            return True
        return False

    def leave(self, citizen_id: str) -> None:
        self.occupants.discard(citizen_id)


@dataclass(frozen=True)
class BuildingRecipe:
    """Letters a citizen must carry and the ticks it then spends building.

    Attributes:
        landmark: Landmark type placed on completion.
        resources: Required letters; duplicates must all be present.
        build_time: Ticks spent immobile in the building state.
    """

    landmark: LandmarkType
    resources: tuple[str, ...]
    build_time: int

    def __post_init__(self) -> None:
        if not self.resources:
            raise ValueError("recipe needs at least one resource")
        if self.build_time <= 0:
            raise ValueError(f"build_time must be positive, got {self.build_time}")

    @property
    def symbol(self) -> str:
        return LANDMARK_DEFS[self.landmark].glyph


BUILDING_RECIPES: dict[LandmarkType, BuildingRecipe] = {
    recipe.landmark: recipe
    for recipe in (
        BuildingRecipe(LandmarkType.HOME, tuple("HOME"), 10),
        BuildingRecipe(LandmarkType.STORAGE, tuple("STOR"), 8),
        BuildingRecipe(LandmarkType.MEETING, tuple("MEET"), 6),
        BuildingRecipe(LandmarkType.FARM, tuple("FARM"), 12),
        BuildingRecipe(LandmarkType.WALL, tuple("WAL"), 5),
        BuildingRecipe(LandmarkType.ROAD_HORIZONTAL, tuple("RD"), 3),
        BuildingRecipe(LandmarkType.ROAD_VERTICAL, tuple("RV"), 3),
        BuildingRecipe(LandmarkType.INTERSECTION, tuple("RX"), 4),
        BuildingRecipe(LandmarkType.TOWN_HALL, tuple("TOWN"), 20),
        BuildingRecipe(LandmarkType.COURTHOUSE, tuple("COURT"), 18),
        BuildingRecipe(LandmarkType.TREASURY, tuple("GOLD"), 15),
        BuildingRecipe(LandmarkType.POLICE_STATION, tuple("POLICE"), 16),
        BuildingRecipe(LandmarkType.PUBLIC_WORKS, tuple("WORK"), 14),
    )
}

COMMON_BUILDINGS: tuple[LandmarkType, ...] = (
    LandmarkType.HOME,
    LandmarkType.STORAGE,
    LandmarkType.MEETING,
    LandmarkType.FARM,
    LandmarkType.WALL,
    LandmarkType.ROAD_HORIZONTAL,
    LandmarkType.ROAD_VERTICAL,
)
GOVERNMENT_BUILDINGS: tuple[LandmarkType, ...] = tuple(
    t for t, d in LANDMARK_DEFS.items() if d.government
)


def choose_building_type(rng: _random_mod.Random) -> LandmarkType:
    """70% common (roads included), 25% intersection, 5% government."""
    roll = rng.random()
    if roll < 0.70:
        return rng.choice(COMMON_BUILDINGS)
    if roll < 0.95:
        return LandmarkType.INTERSECTION
    return rng.choice(GOVERNMENT_BUILDINGS)
