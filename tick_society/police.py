"""Policing - patrols, pursuit, arrest and release from detention."""
from __future__ import annotations

import logging
import random as _random_mod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from tick_society import events
from tick_society.citizen import Citizen, CitizenState
from tick_society.crime import CrimeBook
from tick_society.grid import Grid
from tick_society.jobs import JobType
from tick_society.landmarks import Landmark, LandmarkType
from tick_society.routine import time_of_day
from tick_society.types import Position

if TYPE_CHECKING:
    from tick_society.config import PoliceConfig, RoutineConfig
    from tick_society.types import TickContext
    from tick_society.world import World

logger = logging.getLogger(__name__)

# Unit octagon, walked clockwise from due east.
_OCTAGON = ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1))

ARREST_PERFORMANCE_BONUS = 2.0


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def detention_ticks(social_credit: float) -> int:
    """Sentence length, longer for citizens with worse standing."""
    if social_credit < 100:
        return 200
    if social_credit < 200:
        return 150
    return 100


@dataclass
class PatrolRoute:
    points: list[Position]
    current_index: int = 0

    def __post_init__(self) -> None:
        if not self.points:
            raise ValueError("patrol route needs at least one point")

    @property
    def current(self) -> Position:
        return self.points[self.current_index]

    def advance(self) -> Position:
        self.current_index = (self.current_index + 1) % len(self.points)
        return self.current


def make_patrol_route(
    grid: Grid,
    center: Position,
    radius: int,
    rng: _random_mod.Random | None = None,
) -> PatrolRoute:
    """Octagon of waypoints around *center*, kept inside the boundary walls.

    With *rng* the loop starts at a random waypoint.
    """
    points = [grid.clamp_interior(center.offset(dx * radius, dy * radius)) for dx, dy in _OCTAGON]
    start = rng.randrange(len(points)) if rng is not None else 0
    return PatrolRoute(points=points, current_index=start)


@dataclass
class Officer:
    citizen_id: str
    station_id: int | None = None
    route: PatrolRoute | None = None
    target_criminal_id: str | None = None


@dataclass
class PoliceForce:
    """Officer bookkeeping across ticks, keyed by citizen id."""

    officers: dict[str, Officer] = field(default_factory=dict)
    arrests: int = 0

    def sync(self, world: World) -> None:
        """Enlist every police-officer citizen and drop those who left the job."""
        on_duty = {
            c.id for c in world.citizens
            if c.job is not None and c.job.type == JobType.POLICE_OFFICER
        }
        for citizen_id in list(self.officers):
            if citizen_id not in on_duty:
                del self.officers[citizen_id]
        for citizen in world.citizens:
            if citizen.id in on_duty and citizen.id not in self.officers:
                self.officers[citizen.id] = Officer(citizen_id=citizen.id)

    def __len__(self) -> int:
        return len(self.officers)


def _nearest_station(world: World, position: Position) -> Landmark | None:
    return Grid.nearest(
        position, world.landmarks_of_type(LandmarkType.POLICE_STATION), key=lambda l: l.position,
    )


def make_police_system(
    config: PoliceConfig,
    force: PoliceForce,
    book: CrimeBook,
    routine: RoutineConfig | None = None,
) -> Callable[[World, TickContext], None]:
    """Return a system moving every officer through detect/pursue/patrol.

    Per officer, each tick:
    1. Mark unresolved crimes within detection range as detected
    2. Continue an ongoing pursuit, or pick the nearest free criminal in range
    3. Otherwise patrol, during the officer's working hours only
    """

    def police_system(world: World, ctx: TickContext) -> None:
        force.sync(world)
        now = time_of_day(ctx.tick_number, routine)
        for officer in force.officers.values():
            cop = world.citizen_by_id(officer.citizen_id)
            if cop is None or cop.is_detained:
                continue

            for crime in book.active():
                if not crime.detected and Grid.distance(cop.position, crime.location) <= config.detection_range:
                    crime.detected = True

            if officer.target_criminal_id is None:
                suspect = _spot_criminal(world, cop, config.detection_range)
                if suspect is not None:
                    officer.target_criminal_id = suspect.id
                    logger.debug("tick %d: %s pursuing %s", ctx.tick_number, cop.id, suspect.id)

            if officer.target_criminal_id is not None:
                _pursue(world, ctx, officer, cop, config, force, book)
            elif cop.job is not None and cop.job.is_working_hours(now.hour, now.day):
                _patrol(world, ctx, officer, cop, config)

    return police_system


def _spot_criminal(world: World, cop: Citizen, detection_range: float) -> Citizen | None:
    suspects = [
        c for c in world.citizens
        if c.id != cop.id
        and c.is_criminal
        and not c.is_detained
        and Grid.distance(cop.position, c.position) <= detection_range
    ]
    return Grid.nearest(cop.position, suspects, key=lambda c: c.position)


def _pursue(
    world: World,
    ctx: TickContext,
    officer: Officer,
    cop: Citizen,
    config: PoliceConfig,
    force: PoliceForce,
    book: CrimeBook,
) -> None:
    criminal = world.citizen_by_id(officer.target_criminal_id)
    if criminal is None or criminal.is_detained or not criminal.is_criminal:
        _end_pursuit(officer, cop)
        return

    distance = Grid.distance(cop.position, criminal.position)
    if distance <= config.arrest_range:
        _arrest(world, ctx, cop, criminal, config, force, book)
        _end_pursuit(officer, cop)
        return
    if distance > config.detection_range * 2:
        logger.debug("tick %d: %s lost %s", ctx.tick_number, cop.id, criminal.id)
        _end_pursuit(officer, cop)
        return

    cop.state = CitizenState.PURSUING
    cop.target = criminal.position
    if criminal.state != CitizenState.FLEEING:
        dx = criminal.position.x - cop.position.x
        dy = criminal.position.y - cop.position.y
        away = criminal.position.offset(
            _sign(dx) * config.flee_distance, _sign(dy) * config.flee_distance,
        )
        criminal.state = CitizenState.FLEEING
        criminal.breeding_partner_id = None
        criminal.target = world.grid.clamp_interior(away)


def _end_pursuit(officer: Officer, cop: Citizen) -> None:
    officer.target_criminal_id = None
    if cop.state == CitizenState.PURSUING:
        cop.state = CitizenState.WORKING
        cop.target = None


def _arrest(
    world: World,
    ctx: TickContext,
    cop: Citizen,
    criminal: Citizen,
    config: PoliceConfig,
    force: PoliceForce,
    book: CrimeBook,
) -> None:
    tick = ctx.tick_number
    duration = detention_ticks(criminal.social_credit)
    criminal.get_arrested(duration, tick, config.arrest_credit_penalty)
    resolved = book.resolve_for(criminal.id)
    if cop.job is not None:
        cop.job.update_performance(ARREST_PERFORMANCE_BONUS)
    force.arrests += 1
    world.events.emit(
        tick, events.ARREST,
        officer_id=cop.id, criminal_id=criminal.id,
        duration=duration, release_tick=criminal.detention_end_tick,
        crimes_resolved=resolved,
    )
    logger.info(
        "tick %d: %s arrested %s for %d ticks (%d crimes resolved)",
        tick, cop.id, criminal.id, duration, len(resolved),
    )


def _patrol(world: World, ctx: TickContext, officer: Officer, cop: Citizen, config: PoliceConfig) -> None:
    station = world.landmark_by_id(officer.station_id) if officer.station_id is not None else None
    reroll = ctx.tick_number % config.patrol_change_interval == 0
    if station is None or officer.route is None or reroll:
        station = _nearest_station(world, cop.position)
        if station is None:
            officer.route = None
            return
        officer.station_id = station.id
        officer.route = make_patrol_route(
            world.grid, station.position, config.patrol_radius,
            ctx.random if reroll else None,
        )

    route = officer.route
    if cop.position == route.current:
        route.advance()
    cop.state = CitizenState.WORKING
    cop.target = route.current


def release_detainees(world: World, ctx: TickContext) -> None:
    """Free every detained citizen whose release tick has arrived."""
    for citizen in world.citizens:
        if citizen.is_detained and ctx.tick_number >= citizen.detention_end_tick:
            citizen.release_from_detention()
            logger.debug("tick %d: released %s", ctx.tick_number, citizen.id)
