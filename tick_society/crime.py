"""Crime - triggers, the crime ledger, and periodic social-credit drift."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from tick_society import events
from tick_society.citizen import Citizen, CitizenState
from tick_society.government import Role
from tick_society.grid import Grid
from tick_society.landmarks import LandmarkType
from tick_society.types import Position

if TYPE_CHECKING:
    from tick_society.config import CrimeConfig
    from tick_society.types import TickContext
    from tick_society.world import World

logger = logging.getLogger(__name__)

CREDIT_INTERVAL = 100
RESOLVED_RETENTION = 500
LOW_SATISFACTION = 30.0
VANDALISM_SATISFACTION = 20.0
ASSAULT_SATISFACTION = 15.0
TRESPASS_CREDIT = 300.0
ASSAULT_VICTIM_SATISFACTION = -10.0


class CrimeType(str, Enum):
    THEFT = "theft"
    VANDALISM = "vandalism"
    ASSAULT = "assault"
    TRESPASSING = "trespassing"
    TAX_EVASION = "tax_evasion"


@dataclass(frozen=True)
class CrimeDef:
    credit_penalty: float
    description: str


CRIME_DEFS: dict[CrimeType, CrimeDef] = {
    CrimeType.THEFT: CrimeDef(50, "Stealing resources from others"),
    CrimeType.VANDALISM: CrimeDef(80, "Destroying buildings"),
    CrimeType.ASSAULT: CrimeDef(100, "Attacking other citizens"),
    CrimeType.TRESPASSING: CrimeDef(20, "Entering restricted areas"),
    CrimeType.TAX_EVASION: CrimeDef(40, "Not paying taxes"),
}


@dataclass
class Crime:
    id: str
    type: CrimeType
    perpetrator_id: str
    location: Position
    tick: int
    victim_id: str | None = None
    detected: bool = False
    resolved: bool = False


class CrimeBook:
    """Every recorded crime, resolved ones kept until they age out."""

    def __init__(self) -> None:
        self._crimes: list[Crime] = []
        self._next_id = 0

    def record(
        self,
        crime_type: CrimeType,
        perpetrator: Citizen,
        tick: int,
        victim_id: str | None = None,
    ) -> Crime:
        crime = Crime(
            id=f"crime-{self._next_id}",
            type=crime_type,
            perpetrator_id=perpetrator.id,
            location=perpetrator.position,
            tick=tick,
            victim_id=victim_id,
        )
        self._next_id += 1
        self._crimes.append(crime)
        return crime

    def all(self) -> list[Crime]:
        return list(self._crimes)

    def active(self) -> list[Crime]:
        return [c for c in self._crimes if not c.resolved]

    def active_for(self, citizen_id: str) -> list[Crime]:
        return [c for c in self._crimes if not c.resolved and c.perpetrator_id == citizen_id]

    def detect(self, crime_id: str) -> bool:
        for crime in self._crimes:
            if crime.id == crime_id:
                crime.detected = True
                return True
        return False

    def resolve_for(self, citizen_id: str) -> list[str]:
        """Resolve every open crime by *citizen_id*. Returns the crime ids."""
        resolved = []
        for crime in self.active_for(citizen_id):
            crime.resolved = True
            resolved.append(crime.id)
        return resolved

    def prune(self, tick: int, retention: int = RESOLVED_RETENTION) -> int:
        before = len(self._crimes)
        self._crimes = [
            c for c in self._crimes
            if not c.resolved or tick - c.tick < retention
        ]
        return before - len(self._crimes)

    def __len__(self) -> int:
        return len(self._crimes)


def make_crime_system(
    config: CrimeConfig,
    book: CrimeBook,
) -> Callable[[World, TickContext], None]:
    """Return a system that evaluates crime triggers and adjusts social credit.

    Every ``crime_check_interval`` ticks each free, non-fleeing citizen rolls
    each trigger independently. Every 100 ticks credit drifts toward good
    standing, and resolved crimes older than 500 ticks are dropped.
    """

    def crime_system(world: World, ctx: TickContext) -> None:
        tick = ctx.tick_number
        if tick % config.crime_check_interval == 0:
            for citizen in world.citizens:
                if citizen.is_detained or citizen.state == CitizenState.FLEEING:
                    continue
                for crime in _evaluate(world, citizen, ctx, config, book):
                    world.events.emit(
                        tick, events.CRIME,
                        crime_id=crime.id, crime_type=crime.type.value,
                        perpetrator_id=crime.perpetrator_id,
                        x=crime.location.x, y=crime.location.y,
                    )
                    logger.debug("tick %d: %s committed %s", tick, citizen.id, crime.type.value)

        if tick % CREDIT_INTERVAL == 0:
            _drift_credit(world.citizens)
        book.prune(tick)

    return crime_system


def _commit(book: CrimeBook, citizen: Citizen, crime_type: CrimeType, tick: int,
            victim_id: str | None = None) -> Crime:
    citizen.commit_crime(CRIME_DEFS[crime_type].credit_penalty)
    return book.record(crime_type, citizen, tick, victim_id)


def _evaluate(
    world: World,
    citizen: Citizen,
    ctx: TickContext,
    config: CrimeConfig,
    book: CrimeBook,
) -> list[Crime]:
    rng = ctx.random
    tick = ctx.tick_number
    committed: list[Crime] = []

    # Theft
    if not citizen.is_employed():
        theft_chance = config.theft_probability_unemployed
    elif citizen.satisfaction < LOW_SATISFACTION:
        theft_chance = config.theft_probability_low_satisfaction
    else:
        theft_chance = 0.0
    if theft_chance and rng.random() < theft_chance:
        if any(
            not r.collected and Grid.distance(citizen.position, r.position) <= config.theft_radius
            for r in world.resources
        ):
            committed.append(_commit(book, citizen, CrimeType.THEFT, tick))

    # Vandalism
    if citizen.satisfaction < VANDALISM_SATISFACTION and rng.random() < config.vandalism_probability:
        if any(
            not l.is_government_building()
            and l.type != LandmarkType.BOUNDARY
            and Grid.distance(citizen.position, l.position) <= config.vandalism_radius
            for l in world.landmarks
        ):
            committed.append(_commit(book, citizen, CrimeType.VANDALISM, tick))

    # Assault
    if citizen.satisfaction < ASSAULT_SATISFACTION and rng.random() < config.assault_probability:
        victims = [
            c for c in world.citizens
            if c.id != citizen.id
            and Grid.distance(citizen.position, c.position) <= config.assault_radius
        ]
        victim = Grid.nearest(citizen.position, victims, key=lambda c: c.position)
        if victim is not None:
            victim.update_satisfaction(ASSAULT_VICTIM_SATISFACTION)
            committed.append(_commit(book, citizen, CrimeType.ASSAULT, tick, victim.id))

    # Trespassing
    if citizen.social_credit < TRESPASS_CREDIT and rng.random() < config.trespassing_probability:
        landmark = world.landmark_at(citizen.position)
        if (
            landmark is not None
            and landmark.is_government_building()
            and citizen.government_role == Role.INDEPENDENT
        ):
            committed.append(_commit(book, citizen, CrimeType.TRESPASSING, tick))

    # Tax evasion; the next collection skips this citizen.
    if (
        citizen.government_id is not None
        and not citizen.evading_taxes
        and citizen.satisfaction < LOW_SATISFACTION
        and rng.random() < config.tax_evasion_probability
    ):
        citizen.evading_taxes = True
        committed.append(_commit(book, citizen, CrimeType.TAX_EVASION, tick))

    return committed


def _drift_credit(citizens: list[Citizen]) -> None:
    for citizen in citizens:
        if not citizen.is_criminal and citizen.satisfaction > 60:
            citizen.update_social_credit(1)
        if citizen.is_detained:
            citizen.update_social_credit(0.5)
        if citizen.is_model_citizen():
            citizen.update_satisfaction(1)
