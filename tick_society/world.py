"""World - owns every entity and runs one tick in a fixed order."""
from __future__ import annotations

import logging
import os
import random
from dataclasses import dataclass
from typing import Callable

from tick_society import events
from tick_society.citizen import BREEDING, Citizen
from tick_society.clock import Clock
from tick_society.config import WorldConfig
from tick_society.crime import CrimeBook, make_crime_system
from tick_society.events import EventQueue, WorldEvent
from tick_society.government import Government, make_formation_system, make_government_system
from tick_society.grid import Grid
from tick_society.jobs import Job, JobType
from tick_society.landmarks import Landmark, LandmarkType
from tick_society.needs import Needs
from tick_society.police import PoliceForce, make_police_system, release_detainees
from tick_society.resources import Resource
from tick_society.routine import TimeOfDay, make_routine_system, time_of_day
from tick_society.types import (
    AlreadyInitializedError,
    NotInitializedError,
    Position,
    TickContext,
    WorldStateError,
)

logger = logging.getLogger(__name__)

System = Callable[["World", TickContext], None]

PLACEMENT_ATTEMPTS = 100
STARTER_JOBS = (JobType.POLICE_OFFICER, JobType.FARMER, JobType.MERCHANT, JobType.BUILDER)


@dataclass(frozen=True)
class WorldStats:
    tick: int
    population: int
    available_resources: int
    resources_collected: int
    buildings_built: int
    births: int
    growth_rate: float
    governments: int
    active_crimes: int
    arrests: int
    officers: int


def respawn_resources(world: World, ctx: TickContext) -> None:
    """With the configured chance, move one collected resource to a free cell."""
    if ctx.random.random() >= world.config.resources.respawn_rate:
        return
    collected = [r for r in world.resources if r.collected]
    if not collected:
        return
    resource = ctx.random.choice(collected)
    position = world.random_empty_position(ctx.random)
    if position is not None:
        resource.respawn(position)


class World:
    """A single simulated society.

    Callers own the pacing: one ``tick()`` at a time per instance, with
    ``drain_events()`` in between to relay what happened.
    """

    def __init__(
        self,
        config: WorldConfig | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or WorldConfig()
        if rng is None:
            if seed is None:
                seed = int.from_bytes(os.urandom(8), "big")
            rng = random.Random(seed)
        self._seed = seed
        self._rng = rng
        self._clock = Clock(self._config.world.tick_rate)
        self._grid = Grid(self._config.world.width, self._config.world.height)

        self._citizens: list[Citizen] = []
        self._citizens_by_id: dict[str, Citizen] = {}
        self._resources: list[Resource] = []
        self._landmarks: list[Landmark] = []
        self._landmarks_by_id: dict[int, Landmark] = {}
        self._landmarks_by_pos: dict[Position, Landmark] = {}
        self._governments: list[Government] = []
        self._events = EventQueue()
        self._crimes = CrimeBook()
        self._police = PoliceForce()

        self._initialized = False
        self._next_citizen = 0
        self._next_landmark = 0
        self._births = 0
        self._buildings_built = 0
        self._resources_collected = 0

        cfg = self._config
        self._systems: list[tuple[str, System]] = [
            ("government_formation", make_formation_system(cfg.government)),
            ("government", make_government_system(cfg.government)),
            ("routine", make_routine_system(cfg.routine)),
            ("crime", make_crime_system(cfg.crime, self._crimes)),
            ("police", make_police_system(cfg.police, self._police, self._crimes, cfg.routine)),
            ("detention_release", release_detainees),
            ("resource_respawn", respawn_resources),
        ]

    # -- Accessors --

    @property
    def config(self) -> WorldConfig:
        return self._config

    @property
    def seed(self) -> int | None:
        """Seed of the internal RNG; None when the caller injected one."""
        return self._seed

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def width(self) -> int:
        return self._grid.width

    @property
    def height(self) -> int:
        return self._grid.height

    @property
    def tick_count(self) -> int:
        return self._clock.tick_number

    @property
    def tick_rate(self) -> int:
        return self._clock.tick_rate

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def citizens(self) -> list[Citizen]:
        return self._citizens

    @property
    def resources(self) -> list[Resource]:
        return self._resources

    @property
    def landmarks(self) -> list[Landmark]:
        return self._landmarks

    @property
    def governments(self) -> list[Government]:
        return self._governments

    @property
    def jobs(self) -> dict[str, Job]:
        return {c.id: c.job for c in self._citizens if c.job is not None}

    @property
    def crimes(self) -> CrimeBook:
        return self._crimes

    @property
    def police(self) -> PoliceForce:
        return self._police

    @property
    def events(self) -> EventQueue:
        return self._events

    @property
    def population(self) -> int:
        return len(self._citizens)

    def citizen_by_id(self, citizen_id: str | None) -> Citizen | None:
        if citizen_id is None:
            return None
        return self._citizens_by_id.get(citizen_id)

    def landmark_by_id(self, landmark_id: int) -> Landmark | None:
        return self._landmarks_by_id.get(landmark_id)

    def landmark_at(self, position: Position) -> Landmark | None:
        return self._landmarks_by_pos.get(position)

    def landmarks_of_type(self, landmark_type: LandmarkType) -> list[Landmark]:
        return [l for l in self._landmarks if l.type == landmark_type]

    def government_by_id(self, government_id: str | None) -> Government | None:
        for gov in self._governments:
            if gov.id == government_id:
                return gov
        return None

    def time_of_day(self) -> TimeOfDay:
        return time_of_day(self._clock.tick_number, self._config.routine)

    def stats(self) -> WorldStats:
        tick = self._clock.tick_number
        return WorldStats(
            tick=tick,
            population=len(self._citizens),
            available_resources=sum(1 for r in self._resources if not r.collected),
            resources_collected=self._resources_collected,
            buildings_built=self._buildings_built,
            births=self._births,
            growth_rate=self._births / tick if tick else 0.0,
            governments=len(self._governments),
            active_crimes=len(self._crimes.active()),
            arrests=self._police.arrests,
            officers=len(self._police),
        )

    # -- Events --

    def get_events(self) -> list[WorldEvent]:
        return self._events.query()

    def clear_events(self) -> None:
        self._events.clear()

    def drain_events(self) -> list[WorldEvent]:
        return self._events.drain()

    # -- Spatial helpers --

    def is_walkable(self, position: Position) -> bool:
        landmark = self._landmarks_by_pos.get(position)
        return landmark is None or landmark.is_walkable()

    def can_build_at(self, position: Position) -> bool:
        return self._grid.is_interior(position) and position not in self._landmarks_by_pos

    def is_empty(self, position: Position) -> bool:
        if position in self._landmarks_by_pos:
            return False
        if any(c.position == position for c in self._citizens):
            return False
        return not any(not r.collected and r.position == position for r in self._resources)

    def random_empty_position(self, rng: random.Random | None = None) -> Position | None:
        """A random interior cell with nothing on it, or None after 100 misses."""
        rng = rng or self._rng
        width, height = self._grid.width, self._grid.height
        if width < 3 or height < 3:
            return None
        for _ in range(PLACEMENT_ATTEMPTS):
            candidate = Position(rng.randint(1, width - 2), rng.randint(1, height - 2))
            if self.is_empty(candidate):
                return candidate
        return None

    def free_neighbor(self, position: Position) -> Position | None:
        """First walkable, unoccupied interior neighbour in fixed scan order."""
        occupied = {c.position for c in self._citizens}
        for candidate in self._grid.neighbors(position):
            if self._grid.is_interior(candidate) and self.is_walkable(candidate) and candidate not in occupied:
                return candidate
        return None

    def relocate(self, citizen: Citizen, position: Position) -> None:
        """Move a citizen, keeping landmark occupancy in step."""
        previous = self._landmarks_by_pos.get(citizen.position)
        if previous is not None:
            previous.leave(citizen.id)
        citizen.position = position
        current = self._landmarks_by_pos.get(position)
        if current is not None:
            current.enter(citizen.id)

    # -- Population --

    def add_landmark(self, position: Position, landmark_type: LandmarkType) -> Landmark:
        if position in self._landmarks_by_pos:
            raise ValueError(f"a landmark already stands at {position}")
        landmark_type = LandmarkType(landmark_type)
        glyph = self._config.landmarks.glyphs.get(landmark_type.value, "")
        landmark = Landmark(id=self._next_landmark, position=position, type=landmark_type, glyph=glyph)
        self._next_landmark += 1
        self._landmarks.append(landmark)
        self._landmarks_by_id[landmark.id] = landmark
        self._landmarks_by_pos[position] = landmark
        return landmark

    def add_citizen(self, citizen: Citizen) -> Citizen:
        if citizen.id in self._citizens_by_id:
            raise ValueError(f"duplicate citizen id {citizen.id!r}")
        self._citizens.append(citizen)
        self._citizens_by_id[citizen.id] = citizen
        landmark = self._landmarks_by_pos.get(citizen.position)
        if landmark is not None:
            landmark.enter(citizen.id)
        return citizen

    def add_resource(self, resource: Resource) -> Resource:
        self._resources.append(resource)
        return resource

    def add_government(self, government: Government) -> None:
        self._governments.append(government)

    def new_citizen_id(self) -> str:
        citizen_id = f"citizen-{self._next_citizen}"
        self._next_citizen += 1
        return citizen_id

    def spawn_citizen(
        self,
        position: Position,
        category: str,
        glyph: str | None = None,
        **overrides,
    ) -> Citizen:
        """Create a citizen with the configured movement and decay settings."""
        cfg = self._config.citizens
        if glyph is None:
            glyph = self._rng.choice(cfg.categories[category])
        citizen = Citizen(
            id=self.new_citizen_id(),
            glyph=glyph,
            position=position,
            category=category,
            movement_speed=cfg.movement_speed,
            vision_range=cfg.vision_range,
            needs_decay_rate=cfg.needs_decay_rate,
            **overrides,
        )
        return self.add_citizen(citizen)

    # -- Lifecycle --

    def initialize(self) -> None:
        """Lay out boundaries, landmarks, resources, citizens and starter jobs."""
        if self._initialized:
            raise AlreadyInitializedError("world is already initialized")
        cfg = self._config

        width, height = self._grid.width, self._grid.height
        for x in range(width):
            self.add_landmark(Position(x, 0), LandmarkType.BOUNDARY)
            self.add_landmark(Position(x, height - 1), LandmarkType.BOUNDARY)
        for y in range(1, height - 1):
            self.add_landmark(Position(0, y), LandmarkType.BOUNDARY)
            self.add_landmark(Position(width - 1, y), LandmarkType.BOUNDARY)

        initial_types = [LandmarkType(t) for t in cfg.landmarks.initial_types]
        for i in range(cfg.landmarks.initial_count):
            position = self.random_empty_position()
            if position is None:
                logger.warning("no room for landmark %d of %d", i + 1, cfg.landmarks.initial_count)
                break
            self.add_landmark(position, initial_types[i % len(initial_types)])

        per_type: dict[str, int] = {}
        for i in range(cfg.resources.initial_count):
            letters = [
                ch for ch in cfg.resources.alphabet
                if per_type.get(ch, 0) < cfg.resources.max_per_type
            ]
            position = self.random_empty_position()
            if not letters or position is None:
                logger.warning("stopped placing resources after %d", i)
                break
            letter = self._rng.choice(letters)
            per_type[letter] = per_type.get(letter, 0) + 1
            self.add_resource(Resource(position=position, type=letter))

        categories = list(cfg.citizens.categories)
        hired = 0
        for i in range(cfg.citizens.initial_count):
            position = self.random_empty_position()
            if position is None:
                logger.warning("stopped placing citizens after %d", i)
                break
            citizen = self.spawn_citizen(position, categories[i % len(categories)])
            if citizen.category == "people":
                job_type = STARTER_JOBS[hired % len(STARTER_JOBS)]
                hired += 1
                citizen.assign_job(Job(job_type))
                self._events.emit(0, events.JOB_ASSIGNED, citizen_id=citizen.id, job=job_type.value)
            else:
                citizen.assign_job(Job(JobType.UNEMPLOYED))

        self._initialized = True
        logger.info(
            "initialized %dx%d world: %d citizens, %d landmarks, %d resources",
            width, height, len(self._citizens), len(self._landmarks), len(self._resources),
        )

    def tick(self) -> int:
        """Advance one step. Returns the new tick number."""
        if not self._initialized:
            raise NotInitializedError("call initialize() before tick()")
        self._validate()

        tick = self._clock.advance()
        ctx = self._clock.context(self._rng)

        # Offspring born this tick wait for the next one.
        for citizen in list(self._citizens):
            try:
                self._step_citizen(citizen, ctx)
            except Exception:
                logger.exception("tick %d: citizen %s failed, skipped", tick, citizen.id)

        for name, system in self._systems:
            try:
                system(self, ctx)
            except Exception:
                logger.exception("tick %d: %s pass failed", tick, name)

        logger.debug(
            "tick %d: population %d, %d events queued", tick, len(self._citizens), len(self._events),
        )
        return tick

    def _validate(self) -> None:
        if not isinstance(self._grid, Grid) or self._grid.width <= 0 or self._grid.height <= 0:
            raise WorldStateError("grid is missing or corrupted")
        for name in ("_citizens", "_resources", "_landmarks", "_governments"):
            if not isinstance(getattr(self, name, None), list):
                raise WorldStateError(f"{name.lstrip('_')} collection is missing or corrupted")
        if len(self._citizens_by_id) != len(self._citizens):
            raise WorldStateError("citizen index is out of step with the citizen list")

    # -- Per-citizen phases --

    def _step_citizen(self, citizen: Citizen, ctx: TickContext) -> None:
        citizen.update(self, ctx)
        self._collect_at(citizen)
        self._place_building(citizen, ctx.tick_number)
        self._try_breed(citizen, ctx)

    def _collect_at(self, citizen: Citizen) -> None:
        for resource in self._resources:
            if not resource.collected and resource.position == citizen.position:
                if citizen.collect_resource(resource):
                    self._resources_collected += 1
                return

    def _place_building(self, citizen: Citizen, tick: int) -> None:
        landmark_type = citizen.completed_building
        if landmark_type is None:
            return
        citizen.completed_building = None
        if not self.can_build_at(citizen.position):
            logger.debug("tick %d: %s finished a %s on an occupied tile", tick, citizen.id, landmark_type.value)
            return
        landmark = self.add_landmark(citizen.position, landmark_type)
        landmark.enter(citizen.id)
        self._buildings_built += 1
        gov = self.government_by_id(citizen.government_id)
        if gov is not None:
            gov.attach(landmark)
        self._events.emit(
            tick, events.BUILDING,
            citizen_id=citizen.id, landmark_id=landmark.id, landmark_type=landmark_type.value,
            x=landmark.position.x, y=landmark.position.y,
        )
        logger.info("tick %d: %s built a %s at %s", tick, citizen.id, landmark_type.value, landmark.position)

    def _try_breed(self, citizen: Citizen, ctx: TickContext) -> None:
        partner = self.citizen_by_id(citizen.breeding_partner_id)
        if partner is None or not citizen.is_mutual_partner(partner):
            return
        tick = ctx.tick_number
        if not citizen.is_nearby(partner) or len(self._citizens) >= BREEDING.max_population:
            return
        if not citizen.can_breed_with(partner, tick):
            return
        spot = self.free_neighbor(citizen.position) or self.free_neighbor(partner.position)
        if spot is None:
            return

        parent = ctx.random.choice((citizen, partner))
        citizen.breed(partner, tick)
        child = self.spawn_citizen(
            spot,
            parent.category,
            glyph=parent.glyph,
            energy=50.0,
            needs=Needs(hunger=30.0, energy=50.0, social=40.0),
            job=Job(JobType.UNEMPLOYED),
        )
        self._births += 1
        self._events.emit(
            tick, events.BIRTH,
            child_id=child.id, parent_ids=[citizen.id, partner.id], x=spot.x, y=spot.y,
        )
        logger.info("tick %d: %s born to %s and %s", tick, child.id, citizen.id, partner.id)
