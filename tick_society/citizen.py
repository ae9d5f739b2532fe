"""Citizen - per-agent needs, decisions, movement, building and breeding."""
from __future__ import annotations

import random as _random_mod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from tick_society.government import Role
from tick_society.grid import Grid
from tick_society.inventory import INVENTORY_CAPACITY, InventoryHelper
from tick_society.jobs import Job, JobType
from tick_society.landmarks import BUILDING_RECIPES, LandmarkType, choose_building_type
from tick_society.needs import STAMINA_DECAY_RATIO, Needs, clamp
from tick_society.resources import Resource
from tick_society.types import Position, TickContext

if TYPE_CHECKING:
    from tick_society.world import World


class CitizenState(str, Enum):
    WANDERING = "wandering"
    SEEKING_RESOURCE = "seeking_resource"
    SEEKING_SHELTER = "seeking_shelter"
    RESTING = "resting"
    SOCIALIZING = "socializing"
    BUILDING = "building"
    SEEKING_MATE = "seeking_mate"
    WORKING = "working"
    COMMUTING = "commuting"
    PURSUING = "pursuing"
    FLEEING = "fleeing"
    DETAINED = "detained"
    SLEEPING = "sleeping"


class RoutineState(str, Enum):
    SLEEPING = "sleeping"
    WAKING_UP = "waking_up"
    COMMUTING_TO_WORK = "commuting_to_work"
    WORKING = "working"
    EVENING_ACTIVITIES = "evening_activities"


# States set by the routine or police passes; decide_action keeps them as
# the default behaviour instead of wandering.
_HELD_WHILE_TARGETED = frozenset({
    CitizenState.SEEKING_SHELTER,
    CitizenState.SEEKING_RESOURCE,
    CitizenState.SOCIALIZING,
    CitizenState.COMMUTING,
    CitizenState.WORKING,
    CitizenState.PURSUING,
    CitizenState.FLEEING,
})
_HELD_IN_PLACE = frozenset({
    CitizenState.SLEEPING,
    CitizenState.RESTING,
    CitizenState.WORKING,
})


@dataclass(frozen=True)
class BreedingRequirements:
    min_energy: float = 60.0
    min_age: int = 100
    cooldown: int = 200
    proximity_range: float = 2.0
    max_population: int = 100
    seek_probability: float = 0.1


BREEDING = BreedingRequirements()

SHELTER_THRESHOLD = 20.0
HUNGER_THRESHOLD = 30.0
SOCIAL_THRESHOLD = 30.0
BUILD_MIN_ENERGY = 40.0
BUILD_PROBABILITY = 0.05
MAX_HOMES = 15
WANDER_REFRESH = 0.05

SHELTER_REWARD = 30.0
FOOD_REWARD = 20.0
SOCIAL_REWARD = 15.0
BUILD_REWARD = 10.0

CREDIT_MIN = 0.0
CREDIT_MAX = 1000.0
CRIMINAL_CREDIT = 200.0
MODEL_CREDIT = 800.0


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


@dataclass
class Citizen:
    id: str
    glyph: str
    position: Position
    category: str
    movement_speed: float = 1.0
    vision_range: int = 5
    needs_decay_rate: float = 0.1
    state: CitizenState = CitizenState.WANDERING
    needs: Needs = field(default_factory=Needs)
    # Stamina; distinct from needs.energy and gating building and breeding.
    energy: float = 80.0
    inventory: list[str] = field(default_factory=list)
    target: Position | None = None

    is_building: bool = False
    building_progress: int = 0
    building_target: LandmarkType | None = None
    completed_building: LandmarkType | None = None

    age: int = 0
    last_breed_tick: int = -1000
    breeding_partner_id: str | None = None
    offspring: int = 0

    government_id: str | None = None
    government_role: Role = Role.INDEPENDENT
    taxes_paid: int = 0
    satisfaction: float = 50.0
    loyalty: float = 50.0
    last_tax_tick: int = -1

    social_credit: float = 500.0
    is_criminal: bool = False
    crimes_committed: int = 0
    evading_taxes: bool = False
    is_detained: bool = False
    detention_end_tick: int = 0

    job: Job | None = None
    routine_state: RoutineState | None = None
    _move_counter: float = field(default=0.0, repr=False)

    # -- Per-tick update --

    def update(self, world: World, ctx: TickContext) -> None:
        self.age += 1
        self.needs.decay(self.needs_decay_rate)
        on_road = self.is_on_road(world)
        stamina_decay = self.needs_decay_rate * STAMINA_DECAY_RATIO
        if on_road:
            stamina_decay /= 2
        self.energy = clamp(self.energy - stamina_decay)

        if self.is_detained:
            self.state = CitizenState.DETAINED
            return

        if self.is_building:
            self._advance_building()
            return

        self.decide_action(world, ctx)

        threshold = max(0.5, self.movement_speed / 2) if on_road else self.movement_speed
        self._move_counter += 1
        if self._move_counter >= threshold:
            self._move_counter = 0
            self.move(world, ctx.random)

    def decide_action(self, world: World, ctx: TickContext) -> None:
        """Pick exactly one behaviour for this tick, highest priority first."""
        rng = ctx.random
        if self.needs.energy < SHELTER_THRESHOLD:
            self._drop_pairing()
            self.state = CitizenState.SEEKING_SHELTER
            self.target_nearest_landmark(world, LandmarkType.HOME)
        elif self.needs.hunger < HUNGER_THRESHOLD:
            self._drop_pairing()
            self.state = CitizenState.SEEKING_RESOURCE
            self.target_nearest_resource(world.resources)
        elif self._wants_mate(world, ctx):
            self.state = CitizenState.SEEKING_MATE
            self._pursue_mate(world, ctx.tick_number)
        elif self.building_target is not None or self._should_build(world, rng):
            self._drop_pairing()
            self.state = CitizenState.SEEKING_RESOURCE
            self._gather_for_building(world, rng)
        elif self.needs.social < SOCIAL_THRESHOLD:
            self._drop_pairing()
            self.state = CitizenState.SOCIALIZING
            self.target_nearest_citizen(world.citizens)
        elif self._holding_routine():
            self._drop_pairing()
        else:
            self._drop_pairing()
            self._wander(world.grid, rng)

    def _holding_routine(self) -> bool:
        if self.state in _HELD_WHILE_TARGETED and self.target is not None:
            return True
        return self.state in _HELD_IN_PLACE and self.target is None

    def _wander(self, grid: Grid, rng: _random_mod.Random) -> None:
        self.state = CitizenState.WANDERING
        if self.target is None or rng.random() < WANDER_REFRESH:
            self.set_random_target(grid, rng)

    # -- Movement --

    def move(self, world: World, rng: _random_mod.Random) -> None:
        if self.target is None:
            return
        dx = _sign(self.target.x - self.position.x)
        dy = _sign(self.target.y - self.position.y)

        if dx != 0 and dy != 0 and rng.random() < 0.5:
            step = self.position.offset(dx, dy)
        elif abs(self.target.x - self.position.x) > abs(self.target.y - self.position.y):
            step = self.position.offset(dx, 0)
        else:
            step = self.position.offset(0, dy)

        if step != self.position and world.grid.is_valid_position(step) and world.is_walkable(step):
            world.relocate(self, step)

        if self.position == self.target:
            self.on_reach_target()

    def on_reach_target(self) -> None:
        self.target = None
        if self.state == CitizenState.SEEKING_SHELTER:
            self.needs.adjust("energy", SHELTER_REWARD)
        elif self.state == CitizenState.SEEKING_RESOURCE:
            # Picking the resource up is the World's job.
            self.needs.adjust("hunger", FOOD_REWARD)
        elif self.state == CitizenState.SOCIALIZING:
            self.needs.adjust("social", SOCIAL_REWARD)
        elif self.state == CitizenState.FLEEING:
            self.state = CitizenState.WANDERING
        elif self.state == CitizenState.COMMUTING:
            self.state = CitizenState.WORKING

    def set_random_target(self, grid: Grid, rng: _random_mod.Random) -> None:
        self.target = Position(
            rng.randint(1, max(1, grid.width - 2)),
            rng.randint(1, max(1, grid.height - 2)),
        )

    def is_on_road(self, world: World) -> bool:
        landmark = world.landmark_at(self.position)
        return landmark is not None and landmark.is_road()

    # -- Targeting --

    def target_nearest_resource(self, resources: list[Resource], types: list[str] | None = None) -> bool:
        candidates = [
            r for r in resources
            if not r.collected and (types is None or r.type in types)
        ]
        nearest = Grid.nearest(self.position, candidates, key=lambda r: r.position)
        if nearest is None:
            return False
        self.target = nearest.position
        return True

    def target_nearest_landmark(self, world: World, landmark_type: LandmarkType) -> bool:
        nearest = Grid.nearest(
            self.position, world.landmarks_of_type(landmark_type), key=lambda l: l.position,
        )
        if nearest is None:
            return False
        self.target = nearest.position
        return True

    def target_nearest_citizen(self, citizens: list[Citizen]) -> bool:
        others = [
            c for c in citizens
            if c.id != self.id and Grid.distance(self.position, c.position) > 0
        ]
        nearest = Grid.nearest(self.position, others, key=lambda c: c.position)
        if nearest is None:
            return False
        self.target = nearest.position
        return True

    # -- Resources --

    def collect_resource(self, resource: Resource) -> bool:
        if resource.collected:
            return False
        if InventoryHelper.add(self.inventory, resource.type, INVENTORY_CAPACITY):
            resource.collect()
            return True
        return False

    # -- Building --

    def _should_build(self, world: World, rng: _random_mod.Random) -> bool:
        if self.energy < BUILD_MIN_ENERGY or self.is_building:
            return False
        homes = len(world.landmarks_of_type(LandmarkType.HOME))
        return homes < MAX_HOMES and rng.random() < BUILD_PROBABILITY

    def plan_building(self, rng: _random_mod.Random) -> LandmarkType:
        if self.building_target is None:
            self.building_target = choose_building_type(rng)
        return self.building_target

    def _gather_for_building(self, world: World, rng: _random_mod.Random) -> None:
        recipe = BUILDING_RECIPES[self.plan_building(rng)]
        needed = InventoryHelper.missing(self.inventory, recipe.resources)
        if not needed:
            self.start_building()
            return
        if len(self.inventory) >= INVENTORY_CAPACITY:
            # No room to pick up the rest.
            self.cancel_building_plan()
            self._wander(world.grid, rng)
            return
        if not self.target_nearest_resource(world.resources, needed):
            self.cancel_building_plan()
            self._wander(world.grid, rng)

    def start_building(self) -> bool:
        if self.building_target is None:
            return False
        recipe = BUILDING_RECIPES[self.building_target]
        if not InventoryHelper.consume(self.inventory, recipe.resources):
            return False
        self.is_building = True
        self.building_progress = 0
        self.state = CitizenState.BUILDING
        self.target = None
        return True

    def cancel_building_plan(self) -> None:
        if not self.is_building:
            self.building_target = None

    def _advance_building(self) -> None:
        if self.building_target is None:
            self.is_building = False
            return
        self.state = CitizenState.BUILDING
        self.building_progress += 1
        if self.building_progress >= BUILDING_RECIPES[self.building_target].build_time:
            self.completed_building = self.building_target
            self.building_target = None
            self.is_building = False
            self.building_progress = 0
            self.energy = clamp(self.energy + BUILD_REWARD)
            self.state = CitizenState.WANDERING

    # -- Breeding --

    def is_breeding_ready(self, tick: int) -> bool:
        return (
            not self.is_detained
            and self.age >= BREEDING.min_age
            and self.energy >= BREEDING.min_energy
            and tick - self.last_breed_tick >= BREEDING.cooldown
        )

    def can_breed_with(self, other: Citizen, tick: int) -> bool:
        return other.id != self.id and self.is_breeding_ready(tick) and other.is_breeding_ready(tick)

    def is_nearby(self, other: Citizen) -> bool:
        return Grid.distance(self.position, other.position) <= BREEDING.proximity_range

    def _wants_mate(self, world: World, ctx: TickContext) -> bool:
        tick = ctx.tick_number
        if world.population >= BREEDING.max_population or not self.is_breeding_ready(tick):
            return False
        partner = world.citizen_by_id(self.breeding_partner_id)
        if partner is not None and self.can_breed_with(partner, tick):
            return True
        if self._find_suitor(world, tick) is not None:
            return True
        return ctx.random.random() < BREEDING.seek_probability

    def _find_suitor(self, world: World, tick: int) -> Citizen | None:
        for other in world.citizens:
            if other.breeding_partner_id == self.id and self.can_breed_with(other, tick):
                return other
        return None

    def _pursue_mate(self, world: World, tick: int) -> None:
        partner = world.citizen_by_id(self.breeding_partner_id)
        if partner is None or not self.can_breed_with(partner, tick):
            # Accept a pending request before asking someone new.
            partner = self._find_suitor(world, tick)
        if partner is None:
            mates = [c for c in world.citizens if self.can_breed_with(c, tick)]
            partner = Grid.nearest(self.position, mates, key=lambda c: c.position)
        if partner is None:
            self.breeding_partner_id = None
            return
        self.breeding_partner_id = partner.id
        self.target = partner.position

    def is_mutual_partner(self, other: Citizen) -> bool:
        return self.breeding_partner_id == other.id and other.breeding_partner_id == self.id

    def _drop_pairing(self) -> None:
        self.breeding_partner_id = None

    def breed(self, partner: Citizen, tick: int) -> None:
        for parent in (self, partner):
            parent.last_breed_tick = tick
            parent.offspring += 1
            parent.energy = clamp(parent.energy - 20)
            parent.needs.adjust("hunger", -30)
            parent.breeding_partner_id = None

    # -- Employment --

    def is_employed(self) -> bool:
        return self.job is not None and self.job.type != JobType.UNEMPLOYED

    def assign_job(self, job: Job) -> None:
        self.job = job

    def perform_routine(self, routine_state: RoutineState) -> None:
        self.routine_state = routine_state

    # -- Government --

    def join_government(self, government_id: str, role: Role, loyalty: float | None = None) -> None:
        self.government_id = government_id
        self.government_role = role
        if loyalty is not None:
            self.loyalty = clamp(loyalty)

    def leave_government(self, role: Role = Role.INDEPENDENT) -> None:
        self.government_id = None
        self.government_role = role

    def update_satisfaction(self, delta: float) -> None:
        self.satisfaction = clamp(self.satisfaction + delta)

    def update_loyalty(self, delta: float) -> None:
        self.loyalty = clamp(self.loyalty + delta)

    # -- Crime and detention --

    def update_social_credit(self, delta: float) -> None:
        self.social_credit = clamp(self.social_credit + delta, CREDIT_MIN, CREDIT_MAX)

    def has_criminal_standing(self) -> bool:
        return self.social_credit < CRIMINAL_CREDIT

    def is_model_citizen(self) -> bool:
        return self.social_credit > MODEL_CREDIT

    def commit_crime(self, penalty: float) -> None:
        self.update_social_credit(-penalty)
        self.is_criminal = True
        self.crimes_committed += 1

    def get_arrested(self, duration: int, tick: int, credit_penalty: float = 0.0) -> None:
        self.is_detained = True
        self.detention_end_tick = tick + duration
        self.state = CitizenState.DETAINED
        self.target = None
        self.breeding_partner_id = None
        self.update_social_credit(-credit_penalty)
        self.routine_state = RoutineState.SLEEPING

    def release_from_detention(self) -> None:
        self.is_detained = False
        self.is_criminal = False
        self.state = CitizenState.WANDERING
        self.target = None
