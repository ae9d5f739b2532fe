"""Job types, their fixed attributes, and per-citizen employment state."""
from __future__ import annotations

import math
import random as _random_mod
from dataclasses import dataclass, field
from enum import Enum

from tick_society.landmarks import LandmarkType
from tick_society.needs import clamp
from tick_society.types import Position


class JobType(str, Enum):
    POLICE_OFFICER = "police_officer"
    DOCTOR = "doctor"
    FARMER = "farmer"
    MERCHANT = "merchant"
    BUILDER = "builder"
    GOVERNMENT_OFFICIAL = "government_official"
    UNEMPLOYED = "unemployed"


ALL_DAYS = (0, 1, 2, 3, 4, 5, 6)


@dataclass(frozen=True)
class WorkSchedule:
    start_hour: int
    end_hour: int
    working_days: tuple[int, ...] = ALL_DAYS

    def covers(self, hour: int, day: int | None = None) -> bool:
        """True if *hour* falls in the shift. Days count from 0; None skips the day check."""
        if day is not None and day not in self.working_days:
            return False
        if self.start_hour <= self.end_hour:
            return self.start_hour <= hour < self.end_hour
        # Overnight shift, e.g. 22-6.
        return hour >= self.start_hour or hour < self.end_hour


@dataclass(frozen=True)
class JobDef:
    salary: int
    schedule: WorkSchedule
    description: str
    workplace: LandmarkType | None = None


JOB_DEFS: dict[JobType, JobDef] = {
    JobType.POLICE_OFFICER: JobDef(
        15, WorkSchedule(9, 17), "Enforces law, patrols, arrests criminals",
        LandmarkType.POLICE_STATION,
    ),
    JobType.DOCTOR: JobDef(
        20, WorkSchedule(8, 18), "Heals citizens", LandmarkType.TOWN_HALL,
    ),
    JobType.FARMER: JobDef(
        10, WorkSchedule(6, 14), "Produces food resources", LandmarkType.FARM,
    ),
    JobType.MERCHANT: JobDef(
        12, WorkSchedule(9, 17), "Trades resources", LandmarkType.MARKET,
    ),
    JobType.BUILDER: JobDef(
        14, WorkSchedule(7, 16), "Constructs buildings", LandmarkType.PUBLIC_WORKS,
    ),
    JobType.GOVERNMENT_OFFICIAL: JobDef(
        18, WorkSchedule(9, 17, (0, 1, 2, 3, 4, 5)), "Manages government tasks",
        LandmarkType.TOWN_HALL,
    ),
    JobType.UNEMPLOYED: JobDef(0, WorkSchedule(0, 24), "No current employment"),
}

# Landmark type -> job hired there during recruitment sweeps.
HIRING_LANDMARKS: dict[LandmarkType, JobType] = {
    LandmarkType.POLICE_STATION: JobType.POLICE_OFFICER,
    LandmarkType.PUBLIC_WORKS: JobType.BUILDER,
    LandmarkType.FARM: JobType.FARMER,
    LandmarkType.MARKET: JobType.MERCHANT,
    LandmarkType.TOWN_HALL: JobType.GOVERNMENT_OFFICIAL,
    LandmarkType.COURTHOUSE: JobType.GOVERNMENT_OFFICIAL,
    LandmarkType.TREASURY: JobType.GOVERNMENT_OFFICIAL,
}


@dataclass
class Job:
    type: JobType
    workplace: Position | None = None
    performance: float = 70.0
    hours_worked: int = 0
    schedule: WorkSchedule = field(init=False)

    def __post_init__(self) -> None:
        self.type = JobType(self.type)
        self.schedule = JOB_DEFS[self.type].schedule

    @property
    def salary(self) -> int:
        return JOB_DEFS[self.type].salary

    @property
    def description(self) -> str:
        return JOB_DEFS[self.type].description

    @property
    def workplace_type(self) -> LandmarkType | None:
        return JOB_DEFS[self.type].workplace

    def is_working_hours(self, hour: int, day: int | None = None) -> bool:
        return self.schedule.covers(hour, day)

    def update_performance(self, delta: float) -> None:
        self.performance = clamp(self.performance + delta)

    def effective_salary(self) -> int:
        # 50% to 150% of base depending on performance.
        return math.floor(self.salary * (0.5 + self.performance / 100))

    def work(self, rng: _random_mod.Random) -> None:
        self.hours_worked += 1
        if rng.random() < 0.1:
            self.update_performance(1 if rng.random() < 0.7 else -1)
