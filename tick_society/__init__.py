"""tick-society - Emergent artificial-society simulation on a tick loop."""
from __future__ import annotations

# Orchestrator
from tick_society.world import World, WorldStats, respawn_resources

# Configuration
from tick_society.config import (
    WorldConfig, WorldSection, CitizenSection, LandmarkSection, ResourceSection,
    GovernmentConfig, CrimeConfig, PoliceConfig, RoutineConfig,
)

# Core types
from tick_society.types import (
    Position, TickContext,
    SocietyError, WorldStateError, NotInitializedError, AlreadyInitializedError,
)
from tick_society.clock import Clock
from tick_society.grid import Grid
from tick_society.events import EventQueue, WorldEvent

# Entities
from tick_society.needs import Needs
from tick_society.inventory import InventoryHelper, INVENTORY_CAPACITY
from tick_society.resources import Resource
from tick_society.landmarks import (
    Landmark, LandmarkType, LandmarkDef, LANDMARK_DEFS,
    BuildingRecipe, BUILDING_RECIPES, choose_building_type,
)
from tick_society.jobs import Job, JobType, JobDef, JOB_DEFS, WorkSchedule
from tick_society.citizen import Citizen, CitizenState, RoutineState, BREEDING
from tick_society.government import Government, GovernmentType, Role, Policy, Law
from tick_society.crime import Crime, CrimeBook, CrimeType, CRIME_DEFS

# System factories
from tick_society.government import make_formation_system, make_government_system
from tick_society.crime import make_crime_system
from tick_society.police import PatrolRoute, Officer, PoliceForce, make_police_system, release_detainees
from tick_society.routine import Period, TimeOfDay, time_of_day, make_routine_system

__all__ = [
    # Orchestrator
    "World", "WorldStats", "respawn_resources",
    # Configuration
    "WorldConfig", "WorldSection", "CitizenSection", "LandmarkSection", "ResourceSection",
    "GovernmentConfig", "CrimeConfig", "PoliceConfig", "RoutineConfig",
    # Core types
    "Position", "TickContext",
    "SocietyError", "WorldStateError", "NotInitializedError", "AlreadyInitializedError",
    "Clock", "Grid", "EventQueue", "WorldEvent",
    # Entities
    "Needs", "InventoryHelper", "INVENTORY_CAPACITY", "Resource",
    "Landmark", "LandmarkType", "LandmarkDef", "LANDMARK_DEFS",
    "BuildingRecipe", "BUILDING_RECIPES", "choose_building_type",
    "Job", "JobType", "JobDef", "JOB_DEFS", "WorkSchedule",
    "Citizen", "CitizenState", "RoutineState", "BREEDING",
    "Government", "GovernmentType", "Role", "Policy", "Law",
    "Crime", "CrimeBook", "CrimeType", "CRIME_DEFS",
    # System factories
    "make_formation_system", "make_government_system", "make_crime_system",
    "PatrolRoute", "Officer", "PoliceForce", "make_police_system", "release_detainees",
    "Period", "TimeOfDay", "time_of_day", "make_routine_system",
]
