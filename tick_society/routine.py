"""Daily routine - a wrapping 24-hour clock driving default behaviour."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from tick_society.citizen import Citizen, CitizenState, RoutineState
from tick_society.config import RoutineConfig
from tick_society.grid import Grid
from tick_society.jobs import JobType
from tick_society.landmarks import LandmarkType
from tick_society.needs import clamp

if TYPE_CHECKING:
    from tick_society.types import TickContext
    from tick_society.world import World

EMERGENCY_THRESHOLD = 20.0
NIGHT_ENERGY_RESTORE = 0.2
BREAKFAST_HUNGER = 60.0
COMMUTE_HUNGER = 50.0
UNEMPLOYED_SOCIALIZE = 0.3
EVENING_SOCIAL = 50.0
EVENING_SOCIALIZE = 0.4
EVENING_TIRED = 50.0
EVENING_WANDER_REFRESH = 0.1
BUILDER_PLAN_CHANCE = 0.1
PERFORMANCE_NUDGE = 0.05
DAYS_PER_WEEK = 7

# Citizens in these states are left alone; another pass owns them.
_UNTOUCHED = frozenset({
    CitizenState.BUILDING,
    CitizenState.SEEKING_MATE,
    CitizenState.FLEEING,
    CitizenState.PURSUING,
})
_OFF_DUTY_RESET = frozenset({CitizenState.WORKING, CitizenState.COMMUTING, CitizenState.SLEEPING})


class Period(str, Enum):
    NIGHT = "night"
    MORNING = "morning"
    WORK = "work"
    EVENING = "evening"


@dataclass(frozen=True)
class TimeOfDay:
    hour: int
    minute: int
    period: Period
    day: int = 0


def time_of_day(tick: int, config: RoutineConfig | None = None) -> TimeOfDay:
    """Map a tick count onto the wrapping clock."""
    config = config or RoutineConfig()
    ticks_per_day = 24 * config.ticks_per_hour
    minutes = tick % ticks_per_day
    day = tick // ticks_per_day % DAYS_PER_WEEK
    hour = minutes // config.ticks_per_hour
    minute = minutes % config.ticks_per_hour
    if config.morning_start <= hour < config.work_start:
        period = Period.MORNING
    elif config.work_start <= hour < config.work_end:
        period = Period.WORK
    elif config.work_end <= hour < config.evening_end:
        period = Period.EVENING
    else:
        period = Period.NIGHT
    return TimeOfDay(hour=hour, minute=minute, period=period, day=day)


def make_routine_system(
    config: RoutineConfig,
) -> Callable[[World, TickContext], None]:
    """Return a system applying the time-of-day routine to every citizen.

    Detained citizens count as sleeping. Citizens whose hunger or needs
    energy is below 20 are skipped; the decision step handles them.
    """

    def routine_system(world: World, ctx: TickContext) -> None:
        now = time_of_day(ctx.tick_number, config)
        for citizen in world.citizens:
            if citizen.is_detained:
                citizen.perform_routine(RoutineState.SLEEPING)
                continue
            if (
                citizen.needs.hunger < EMERGENCY_THRESHOLD
                or citizen.needs.energy < EMERGENCY_THRESHOLD
            ):
                continue
            if citizen.is_building or citizen.state in _UNTOUCHED:
                continue

            if now.period == Period.NIGHT:
                _night(world, citizen)
                continue
            if citizen.state == CitizenState.SLEEPING:
                citizen.state = CitizenState.WANDERING
            if now.period == Period.MORNING:
                _morning(world, citizen, ctx, now, config)
            elif now.period == Period.WORK:
                _work(world, citizen, ctx, now)
            else:
                _evening(world, citizen, ctx)

    return routine_system


def _at_home(world: World, citizen: Citizen) -> bool:
    landmark = world.landmark_at(citizen.position)
    return landmark is not None and landmark.type == LandmarkType.HOME


def _night(world: World, citizen: Citizen) -> None:
    citizen.perform_routine(RoutineState.SLEEPING)
    if _at_home(world, citizen):
        citizen.state = CitizenState.SLEEPING
        citizen.target = None
    elif citizen.state not in (CitizenState.SEEKING_SHELTER, CitizenState.RESTING):
        if citizen.target_nearest_landmark(world, LandmarkType.HOME):
            citizen.state = CitizenState.SEEKING_SHELTER
    citizen.needs.energy = clamp(citizen.needs.energy + NIGHT_ENERGY_RESTORE)


def _commute(world: World, citizen: Citizen) -> bool:
    """Head to (or settle at) the job's workplace. False if there is none."""
    job = citizen.job
    if job is None or job.workplace_type is None:
        return False
    if job.workplace is None:
        site = Grid.nearest(
            citizen.position, world.landmarks_of_type(job.workplace_type),
            key=lambda l: l.position,
        )
        if site is None:
            return False
        job.workplace = site.position
    if citizen.position == job.workplace:
        citizen.state = CitizenState.WORKING
        citizen.target = None
    else:
        citizen.state = CitizenState.COMMUTING
        citizen.target = job.workplace
    return True


def _morning(world: World, citizen: Citizen, ctx: TickContext, now: TimeOfDay,
             config: RoutineConfig) -> None:
    citizen.perform_routine(RoutineState.WAKING_UP)
    if citizen.is_employed():
        if citizen.needs.hunger < BREAKFAST_HUNGER:
            if citizen.state != CitizenState.SEEKING_RESOURCE and citizen.target_nearest_resource(world.resources):
                citizen.state = CitizenState.SEEKING_RESOURCE
        elif now.hour >= config.work_start - 1 and citizen.needs.hunger >= COMMUTE_HUNGER:
            citizen.perform_routine(RoutineState.COMMUTING_TO_WORK)
            _commute(world, citizen)
    elif citizen.state != CitizenState.SOCIALIZING and ctx.random.random() < UNEMPLOYED_SOCIALIZE:
        if citizen.target_nearest_citizen(world.citizens):
            citizen.state = CitizenState.SOCIALIZING


def _work(world: World, citizen: Citizen, ctx: TickContext, now: TimeOfDay) -> None:
    job = citizen.job
    if not citizen.is_employed() or job is None or not job.is_working_hours(now.hour, now.day):
        citizen.perform_routine(RoutineState.WAKING_UP)
        if citizen.state in _OFF_DUTY_RESET:
            citizen.state = CitizenState.WANDERING
        return

    citizen.perform_routine(RoutineState.WORKING)
    if job.type == JobType.POLICE_OFFICER:
        # Patrol routes belong to the police pass.
        return
    if job.type == JobType.BUILDER and ctx.random.random() < BUILDER_PLAN_CHANCE:
        citizen.plan_building(ctx.random)
        return

    if not _commute(world, citizen):
        citizen.state = CitizenState.WORKING
    job.work(ctx.random)
    if ctx.random.random() < PERFORMANCE_NUDGE:
        job.update_performance(1)


def _evening(world: World, citizen: Citizen, ctx: TickContext) -> None:
    citizen.perform_routine(RoutineState.EVENING_ACTIVITIES)
    rng = ctx.random
    if citizen.needs.social < EVENING_SOCIAL and rng.random() < EVENING_SOCIALIZE:
        if citizen.target_nearest_citizen(world.citizens):
            citizen.state = CitizenState.SOCIALIZING
            return
    if citizen.needs.energy < EVENING_TIRED:
        if citizen.target_nearest_landmark(world, LandmarkType.HOME):
            citizen.state = CitizenState.SEEKING_SHELTER
            return
    if citizen.state in _OFF_DUTY_RESET or citizen.target is None or rng.random() < EVENING_WANDER_REFRESH:
        citizen.state = CitizenState.WANDERING
