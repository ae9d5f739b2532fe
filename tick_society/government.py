"""Governments - town-hall charters, treasury, taxation and membership churn."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable

from tick_society import events
from tick_society.grid import Grid
from tick_society.inventory import InventoryHelper
from tick_society.jobs import HIRING_LANDMARKS, Job, JobType
from tick_society.landmarks import LandmarkType
from tick_society.needs import clamp

if TYPE_CHECKING:
    from tick_society.citizen import Citizen
    from tick_society.config import GovernmentConfig
    from tick_society.landmarks import Landmark
    from tick_society.types import TickContext
    from tick_society.world import World

logger = logging.getLogger(__name__)


class Role(str, Enum):
    LEADER = "leader"
    OFFICIAL = "official"
    CITIZEN = "citizen"
    REBEL = "rebel"
    INDEPENDENT = "independent"


class GovernmentType(str, Enum):
    DEMOCRACY = "democracy"
    MONARCHY = "monarchy"
    COUNCIL = "council"
    ANARCHY = "anarchy"


# Anarchy is representable but never chosen at formation.
FOUNDING_TYPES = (GovernmentType.DEMOCRACY, GovernmentType.MONARCHY, GovernmentType.COUNCIL)

_NAME_PREFIX = {
    GovernmentType.DEMOCRACY: "Republic",
    GovernmentType.MONARCHY: "Kingdom",
    GovernmentType.COUNCIL: "Commonwealth",
    GovernmentType.ANARCHY: "Free Association",
}

FOUNDER_LOYALTY = {Role.LEADER: 100.0, Role.OFFICIAL: 80.0, Role.CITIZEN: 60.0}
OFFICIAL_SEATS = 2


@dataclass(frozen=True)
class Policy:
    name: str
    description: str = ""
    tax_rate: float | None = None


@dataclass(frozen=True)
class Law:
    name: str
    description: str
    enacted_tick: int


@dataclass
class Government:
    """One government, tied to the town hall it was founded at.

    Member ids are kept in lists so iteration order (and therefore a seeded
    run) is reproducible.
    """

    id: str
    name: str
    type: GovernmentType
    town_hall_id: int
    founded_tick: int = 0
    leader_id: str | None = None
    official_ids: list[str] = field(default_factory=list)
    citizen_ids: list[str] = field(default_factory=list)
    treasury: dict[str, int] = field(default_factory=dict)
    tax_rate: float = 0.15
    satisfaction: float = 70.0
    corruption: float = 10.0
    policies: list[Policy] = field(default_factory=list)
    laws: list[Law] = field(default_factory=list)
    building_ids: list[int] = field(default_factory=list)
    road_ids: list[int] = field(default_factory=list)

    # -- Membership --

    def member_ids(self) -> list[str]:
        members = [self.leader_id] if self.leader_id is not None else []
        return members + self.official_ids + self.citizen_ids

    def is_member(self, citizen_id: str) -> bool:
        return citizen_id in self.member_ids()

    def member_count(self) -> int:
        return len(self.member_ids())

    def add_citizen(self, citizen_id: str) -> None:
        if not self.is_member(citizen_id):
            self.citizen_ids.append(citizen_id)

    def add_official(self, citizen_id: str) -> None:
        if citizen_id in self.citizen_ids:
            self.citizen_ids.remove(citizen_id)
        if citizen_id != self.leader_id and citizen_id not in self.official_ids:
            self.official_ids.append(citizen_id)

    def set_leader(self, citizen_id: str) -> None:
        for group in (self.official_ids, self.citizen_ids):
            if citizen_id in group:
                group.remove(citizen_id)
        self.leader_id = citizen_id

    def remove_citizen(self, citizen_id: str) -> str | None:
        """Drop a member from every rank.

        If the leader leaves, the first official is promoted; returns the
        promoted id, or None when nobody was promoted.
        """
        for group in (self.official_ids, self.citizen_ids):
            if citizen_id in group:
                group.remove(citizen_id)
        if citizen_id != self.leader_id:
            return None
        self.leader_id = None
        if self.official_ids:
            self.leader_id = self.official_ids.pop(0)
        return self.leader_id

    # -- Treasury --

    def add_to_treasury(self, resource_type: str, amount: int = 1) -> None:
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        self.treasury[resource_type] = self.treasury.get(resource_type, 0) + amount

    def remove_from_treasury(self, resource_type: str, amount: int = 1) -> bool:
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        held = self.treasury.get(resource_type, 0)
        if held < amount:
            return False
        if held == amount:
            del self.treasury[resource_type]
        else:
            self.treasury[resource_type] = held - amount
        return True

    def treasury_total(self) -> int:
        return sum(self.treasury.values())

    def collect_tax(self, inventory: list[str]) -> list[str]:
        """Move ``floor(len(inventory) * tax_rate)`` oldest tokens into the treasury."""
        amount = math.floor(len(inventory) * self.tax_rate)
        taken = InventoryHelper.take_oldest(inventory, amount)
        for token in taken:
            self.add_to_treasury(token)
        return taken

    # -- Policy --

    def set_tax_rate(self, rate: float) -> None:
        self.tax_rate = clamp(rate, 0.0, 1.0)
        if self.tax_rate > 0.4:
            self.update_satisfaction(-5)
        elif self.tax_rate < 0.05:
            self.update_satisfaction(2)

    def update_satisfaction(self, delta: float) -> None:
        self.satisfaction = clamp(self.satisfaction + delta)

    def update_corruption(self, delta: float) -> None:
        self.corruption = clamp(self.corruption + delta)

    def add_policy(self, policy: Policy) -> None:
        self.policies.append(policy)
        if policy.tax_rate is not None:
            self.set_tax_rate(policy.tax_rate)

    def enact_law(self, name: str, description: str, tick: int) -> Law:
        law = Law(name=name, description=description, enacted_tick=tick)
        self.laws.append(law)
        return law

    def attach(self, landmark: Landmark) -> None:
        """Claim a road or government building; other landmarks are ignored."""
        if landmark.is_road():
            ids = self.road_ids
        elif landmark.is_government_building():
            ids = self.building_ids
        else:
            return
        if landmark.id not in ids:
            ids.append(landmark.id)


def _hire(world: World, citizen: Citizen, job_type: JobType, workplace: Landmark, tick: int) -> None:
    citizen.assign_job(Job(job_type, workplace=workplace.position))
    world.events.emit(
        tick, events.JOB_ASSIGNED,
        citizen_id=citizen.id, job=job_type.value, workplace=workplace.id,
    )


def make_formation_system(
    config: GovernmentConfig,
) -> Callable[[World, TickContext], None]:
    """Return a system that founds a government at every unclaimed town hall
    with enough unaffiliated citizens nearby."""

    def formation_system(world: World, ctx: TickContext) -> None:
        claimed = {g.town_hall_id for g in world.governments}
        for hall in world.landmarks_of_type(LandmarkType.TOWN_HALL):
            if hall.id in claimed:
                continue
            founders = [
                c for c in world.citizens
                if c.government_id is None
                and not c.is_detained
                and Grid.distance(c.position, hall.position) <= config.formation_radius
            ]
            if len(founders) < config.min_founders:
                continue
            gov = _found(world, ctx, hall, founders)
            claimed.add(hall.id)
            logger.info(
                "tick %d: %s founded at town hall %d with %d members",
                ctx.tick_number, gov.name, hall.id, gov.member_count(),
            )

    return formation_system


def _found(world: World, ctx: TickContext, hall: Landmark, founders: list[Citizen]) -> Government:
    tick = ctx.tick_number
    gov_type = ctx.random.choice(FOUNDING_TYPES)
    number = len(world.governments) + 1
    gov = Government(
        id=f"gov-{number}",
        name=f"{_NAME_PREFIX[gov_type]} #{number}",
        type=gov_type,
        town_hall_id=hall.id,
        founded_tick=tick,
    )
    gov.attach(hall)

    for index, citizen in enumerate(founders):
        if index == 0:
            role = Role.LEADER
            gov.set_leader(citizen.id)
        elif index <= OFFICIAL_SEATS:
            role = Role.OFFICIAL
            gov.add_official(citizen.id)
        else:
            role = Role.CITIZEN
            gov.add_citizen(citizen.id)
        citizen.join_government(gov.id, role, FOUNDER_LOYALTY[role])
        if role != Role.CITIZEN and not citizen.is_employed():
            _hire(world, citizen, JobType.GOVERNMENT_OFFICIAL, hall, tick)

    gov.enact_law("Founding Charter", f"Establishes the {gov.name}", tick)
    world.add_government(gov)
    world.events.emit(
        tick, events.GOVERNMENT,
        government_id=gov.id, name=gov.name, government_type=gov.type.value,
        leader_id=gov.leader_id, members=gov.member_count(), town_hall=hall.id,
    )
    return gov


def make_government_system(
    config: GovernmentConfig,
) -> Callable[[World, TickContext], None]:
    """Return a system running every government's periodic processing.

    Per government, each tick:
    1. Tax collection (every ``tax_interval`` ticks)
    2. Satisfaction upkeep (every ``satisfaction_interval`` ticks)
    3. Rebellion rolls for disaffected members
    4. Recruitment and hiring (every ``recruitment_interval`` ticks)
    """

    def government_system(world: World, ctx: TickContext) -> None:
        tick = ctx.tick_number
        for gov in world.governments:
            if tick % config.tax_interval == 0:
                _collect_taxes(world, gov, tick)
            if tick % config.satisfaction_interval == 0:
                _upkeep(world, gov)
            _rebellions(world, gov, ctx, config.rebellion_probability)
            if tick % config.recruitment_interval == 0:
                _recruit(world, gov, ctx, config)

    return government_system


def _members(world: World, gov: Government) -> list[Citizen]:
    found = (world.citizen_by_id(cid) for cid in gov.member_ids())
    return [c for c in found if c is not None]


def _collect_taxes(world: World, gov: Government, tick: int) -> None:
    collected = 0
    for citizen in _members(world, gov):
        if citizen.evading_taxes:
            citizen.evading_taxes = False
            continue
        taken = gov.collect_tax(citizen.inventory)
        if not taken:
            continue
        collected += len(taken)
        citizen.taxes_paid += len(taken)
        citizen.last_tax_tick = tick
        citizen.update_satisfaction(-1)
    world.events.emit(
        tick, events.TAX,
        government_id=gov.id, collected=collected, treasury=gov.treasury_total(),
    )


def _upkeep(world: World, gov: Government) -> None:
    members = _members(world, gov)
    per_member = gov.treasury_total() / max(1, len(members))
    if per_member > 5:
        gov.update_satisfaction(2)
    elif per_member < 1:
        gov.update_satisfaction(-2)

    for citizen in members:
        if citizen.is_on_road(world):
            citizen.update_satisfaction(1)
            citizen.update_loyalty(0.5)
        if gov.satisfaction < 30:
            citizen.update_satisfaction(-1)
            citizen.update_loyalty(-1)


def _rebellions(world: World, gov: Government, ctx: TickContext, probability: float) -> None:
    for citizen in _members(world, gov):
        if citizen.satisfaction >= 20 or citizen.loyalty >= 20:
            continue
        if ctx.random.random() >= probability:
            continue
        was_leader = citizen.id == gov.leader_id
        promoted = gov.remove_citizen(citizen.id)
        citizen.leave_government(Role.REBEL)
        if promoted is not None:
            successor = world.citizen_by_id(promoted)
            if successor is not None:
                successor.government_role = Role.LEADER
        world.events.emit(
            ctx.tick_number, events.REBELLION,
            government_id=gov.id, citizen_id=citizen.id,
            was_leader=was_leader, new_leader_id=promoted,
        )
        logger.info("tick %d: %s rebelled against %s", ctx.tick_number, citizen.id, gov.id)


def _recruit(world: World, gov: Government, ctx: TickContext, config: GovernmentConfig) -> None:
    buildings = [world.landmark_by_id(lid) for lid in gov.building_ids]
    buildings = [b for b in buildings if b is not None]
    radius = config.recruitment_radius

    for citizen in world.citizens:
        if citizen.government_id is not None or citizen.government_role == Role.REBEL:
            continue
        if citizen.is_detained:
            continue
        if not any(Grid.distance(citizen.position, b.position) <= radius for b in buildings):
            continue
        if ctx.random.random() < config.join_probability:
            gov.add_citizen(citizen.id)
            citizen.join_government(gov.id, Role.CITIZEN)

    workplaces = [l for l in world.landmarks if l.type in HIRING_LANDMARKS]
    for citizen in _members(world, gov):
        if citizen.category != "people" or citizen.is_employed() or citizen.is_detained:
            continue
        for landmark in workplaces:
            if Grid.distance(citizen.position, landmark.position) <= radius:
                _hire(world, citizen, HIRING_LANDMARKS[landmark.type], landmark, ctx.tick_number)
                break
