"""Tests for tick_society.citizen - decisions, movement, building and breeding."""

import random

import pytest
from tick_society import (
    BREEDING, CitizenSection, CitizenState, CrimeConfig, LandmarkSection, LandmarkType,
    Position, Resource, ResourceSection, TickContext, World, WorldConfig, WorldSection,
    events,
)

QUIET_CRIME = CrimeConfig(
    theft_probability_unemployed=0.0,
    theft_probability_low_satisfaction=0.0,
    vandalism_probability=0.0,
    assault_probability=0.0,
    trespassing_probability=0.0,
    tax_evasion_probability=0.0,
)


def _world(**overrides):
    sections = dict(
        world=WorldSection(width=20, height=12),
        citizens=CitizenSection(initial_count=0),
        landmarks=LandmarkSection(initial_count=0),
        resources=ResourceSection(initial_count=0, respawn_rate=0.0),
        crime=QUIET_CRIME,
    )
    sections.update(overrides)
    world = World(WorldConfig(**sections), seed=42)
    world.initialize()
    return world


def _ctx(tick=1, seed=0):
    return TickContext(tick_number=tick, random=random.Random(seed))


def _citizen(world, x, y, **overrides):
    return world.spawn_citizen(Position(x, y), "people", glyph="P", **overrides)


class TestDecision:
    def test_shelter_beats_hunger(self):
        world = _world()
        world.add_landmark(Position(10, 5), LandmarkType.HOME)
        c = _citizen(world, 3, 3)
        c.needs.energy = 15.0
        c.needs.hunger = 10.0
        c.decide_action(world, _ctx())
        assert c.state == CitizenState.SEEKING_SHELTER
        assert c.target == Position(10, 5)

    def test_hunger_targets_nearest_resource(self):
        world = _world()
        world.add_resource(Resource(position=Position(15, 8), type="Q"))
        world.add_resource(Resource(position=Position(5, 4), type="Z"))
        c = _citizen(world, 3, 3)
        c.needs.hunger = 10.0
        c.decide_action(world, _ctx())
        assert c.state == CitizenState.SEEKING_RESOURCE
        assert c.target == Position(5, 4)

    def test_collected_resources_are_ignored(self):
        world = _world()
        taken = world.add_resource(Resource(position=Position(4, 3), type="Q"))
        taken.collect()
        world.add_resource(Resource(position=Position(12, 3), type="Z"))
        c = _citizen(world, 3, 3)
        c.needs.hunger = 10.0
        c.decide_action(world, _ctx())
        assert c.target == Position(12, 3)

    def test_lonely_citizen_socializes(self):
        world = _world()
        c = _citizen(world, 3, 3, energy=30.0)
        friend = _citizen(world, 6, 3)
        c.needs.social = 10.0
        c.decide_action(world, _ctx())
        assert c.state == CitizenState.SOCIALIZING
        assert c.target == friend.position

    def test_idle_citizen_wanders(self):
        world = _world()
        c = _citizen(world, 3, 3, energy=30.0)
        c.decide_action(world, _ctx())
        assert c.state == CitizenState.WANDERING
        assert c.target is not None
        assert world.grid.is_interior(c.target)

    def test_working_in_place_is_kept(self):
        world = _world()
        c = _citizen(world, 3, 3, energy=30.0)
        c.state = CitizenState.WORKING
        c.decide_action(world, _ctx())
        assert c.state == CitizenState.WORKING
        assert c.target is None


class TestMovement:
    def test_steps_along_larger_axis(self):
        world = _world()
        c = _citizen(world, 5, 5)
        c.target = Position(9, 5)
        c.move(world, random.Random(0))
        assert c.position == Position(6, 5)

    def test_boundary_blocks_step(self):
        world = _world()
        c = _citizen(world, 1, 5)
        c.target = Position(0, 5)
        c.move(world, random.Random(0))
        assert c.position == Position(1, 5)
        assert c.target == Position(0, 5)

    def test_reaching_shelter_rewards_energy(self):
        world = _world()
        c = _citizen(world, 5, 5)
        c.state = CitizenState.SEEKING_SHELTER
        c.needs.energy = 40.0
        c.target = Position(6, 5)
        c.move(world, random.Random(0))
        assert c.position == Position(6, 5)
        assert c.target is None
        assert c.needs.energy == 70.0

    def test_reaching_friend_rewards_social(self):
        world = _world()
        c = _citizen(world, 5, 5)
        c.state = CitizenState.SOCIALIZING
        c.needs.social = 20.0
        c.target = Position(5, 6)
        c.move(world, random.Random(0))
        assert c.needs.social == 35.0

    def test_relocation_tracks_occupancy(self):
        world = _world()
        home = world.add_landmark(Position(6, 5), LandmarkType.HOME)
        c = _citizen(world, 5, 5)
        c.target = Position(7, 5)
        c.move(world, random.Random(0))
        assert c.id in home.occupants
        c.move(world, random.Random(0))
        assert c.id not in home.occupants

    def test_slow_citizen_waits_for_move_counter(self):
        world = _world(citizens=CitizenSection(initial_count=0, movement_speed=3))
        c = _citizen(world, 5, 5, energy=30.0)
        c.target = Position(15, 5)
        c.state = CitizenState.COMMUTING
        c.update(world, _ctx())
        c.update(world, _ctx())
        assert c.position == Position(5, 5)
        c.update(world, _ctx())
        assert c.position == Position(6, 5)


class TestUpdate:
    def test_ages_and_decays(self):
        world = _world()
        c = _citizen(world, 5, 5)
        c.update(world, _ctx())
        assert c.age == 1
        assert c.needs.hunger == pytest.approx(49.9)
        assert c.energy == pytest.approx(79.97)

    def test_stamina_decay_halved_on_road(self):
        world = _world()
        world.add_landmark(Position(5, 5), LandmarkType.ROAD_HORIZONTAL)
        c = _citizen(world, 5, 5)
        c.update(world, _ctx())
        assert c.energy == pytest.approx(79.985)

    def test_detained_citizen_stays_put(self):
        world = _world()
        c = _citizen(world, 5, 5)
        c.target = Position(10, 5)
        c.is_detained = True
        c.update(world, _ctx())
        assert c.state == CitizenState.DETAINED
        assert c.position == Position(5, 5)
        assert c.age == 1


class TestBuilding:
    def test_start_consumes_recipe(self):
        world = _world()
        c = _citizen(world, 5, 5, inventory=list("HOMEX"))
        c.building_target = LandmarkType.HOME
        assert c.start_building()
        assert c.is_building
        assert c.inventory == ["X"]
        assert c.state == CitizenState.BUILDING

    def test_start_without_materials_fails(self):
        world = _world()
        c = _citizen(world, 5, 5, inventory=list("HOM"))
        c.building_target = LandmarkType.HOME
        assert not c.start_building()
        assert not c.is_building
        assert c.inventory == list("HOM")

    def test_gathering_targets_missing_letter(self):
        world = _world()
        world.add_resource(Resource(position=Position(3, 3), type="a"))
        world.add_resource(Resource(position=Position(12, 7), type="E"))
        c = _citizen(world, 5, 5, inventory=list("HOM"))
        c.building_target = LandmarkType.HOME
        c.decide_action(world, _ctx())
        assert c.state == CitizenState.SEEKING_RESOURCE
        assert c.target == Position(12, 7)

    def test_plan_dropped_when_letter_unavailable(self):
        world = _world()
        c = _citizen(world, 5, 5, inventory=list("HOM"))
        c.building_target = LandmarkType.HOME
        c.decide_action(world, _ctx())
        assert c.building_target is None
        assert c.state == CitizenState.WANDERING

    def test_shelter_preempts_gathering(self):
        world = _world()
        c = _citizen(world, 5, 5, inventory=list("HOM"))
        c.building_target = LandmarkType.HOME
        c.needs.energy = 10.0
        c.decide_action(world, _ctx())
        assert c.state == CitizenState.SEEKING_SHELTER
        assert c.building_target == LandmarkType.HOME

    def test_landmark_placed_after_build_time(self):
        world = _world()
        c = _citizen(world, 5, 5, inventory=list("HOME"))
        c.building_target = LandmarkType.HOME
        c.start_building()
        for _ in range(9):
            world.tick()
        assert world.landmark_at(Position(5, 5)) is None
        assert c.building_progress == 9
        world.tick()
        placed = world.landmark_at(Position(5, 5))
        assert placed is not None
        assert placed.type == LandmarkType.HOME
        assert not c.is_building
        assert world.stats().buildings_built == 1
        assert world.events.last(events.BUILDING).data["citizen_id"] == c.id

    def test_builder_immobile_while_building(self):
        world = _world()
        c = _citizen(world, 5, 5, inventory=list("RD"))
        c.building_target = LandmarkType.ROAD_HORIZONTAL
        c.start_building()
        c.target = Position(10, 10)
        world.tick()
        world.tick()
        assert c.position == Position(5, 5)
        assert c.state == CitizenState.BUILDING


def _couple(world, b_pos=(6, 5)):
    a = _citizen(world, 5, 5, age=150)
    b = _citizen(world, *b_pos, age=150)
    a.breeding_partner_id = b.id
    b.breeding_partner_id = a.id
    return a, b


class TestBreeding:
    def test_readiness(self):
        world = _world()
        c = _citizen(world, 5, 5, age=BREEDING.min_age)
        assert c.is_breeding_ready(1)
        c.energy = 59.0
        assert not c.is_breeding_ready(1)
        c.energy = 80.0
        c.last_breed_tick = 50
        assert not c.is_breeding_ready(100)
        assert c.is_breeding_ready(250)

    def test_mutual_nearby_pair_breeds(self):
        world = _world()
        a, b = _couple(world)
        world.tick()
        assert world.population == 3
        assert a.last_breed_tick == 1
        assert b.last_breed_tick == 1
        assert a.breeding_partner_id is None
        assert b.breeding_partner_id is None
        child = world.citizens[-1]
        assert child.glyph == "P"
        assert child.category == "people"
        assert child.age == 0
        assert world.events.last(events.BIRTH).data["child_id"] == child.id

    def test_breeding_costs_parents(self):
        world = _world()
        a, b = _couple(world)
        world.tick()
        assert a.offspring == 1
        assert a.energy < 61.0
        assert a.needs.hunger < 21.0

    def test_distant_pair_does_not_breed(self):
        world = _world()
        a, b = _couple(world, b_pos=(11, 5))
        world.tick()
        assert world.population == 2
        assert a.breeding_partner_id == b.id
        assert b.breeding_partner_id == a.id

    def test_one_sided_request_with_unready_partner(self):
        world = _world()
        a = _citizen(world, 5, 5, age=150)
        b = _citizen(world, 6, 5, age=0)
        a.breeding_partner_id = b.id
        world.tick()
        assert world.population == 2
        assert a.breeding_partner_id is None

    def test_suitor_is_accepted(self):
        world = _world()
        a = _citizen(world, 5, 5, age=150)
        b = _citizen(world, 9, 5, age=150, energy=70.0)
        a.breeding_partner_id = b.id
        b.decide_action(world, _ctx())
        assert b.state == CitizenState.SEEKING_MATE
        assert b.breeding_partner_id == a.id
        assert b.target == a.position

    def test_population_cap_blocks_births(self):
        world = _world()
        for _ in range(BREEDING.max_population - 2):
            _citizen(world, 15, 8)
        _couple(world)
        assert world.population == BREEDING.max_population
        world.tick()
        assert world.population == BREEDING.max_population


class TestCreditAndDetention:
    def test_commit_crime(self):
        world = _world()
        c = _citizen(world, 5, 5)
        c.commit_crime(50)
        assert c.social_credit == 450.0
        assert c.is_criminal
        assert c.crimes_committed == 1

    def test_credit_bounds(self):
        world = _world()
        c = _citizen(world, 5, 5)
        c.update_social_credit(-5000)
        assert c.social_credit == 0.0
        c.update_social_credit(5000)
        assert c.social_credit == 1000.0
        assert c.is_model_citizen()

    def test_arrest_and_release(self):
        world = _world()
        c = _citizen(world, 5, 5, social_credit=300.0)
        c.target = Position(9, 9)
        c.get_arrested(100, tick=20, credit_penalty=25)
        assert c.is_detained
        assert c.detention_end_tick == 120
        assert c.social_credit == 275.0
        assert c.target is None
        c.is_criminal = True
        c.release_from_detention()
        assert not c.is_detained
        assert not c.is_criminal
        assert c.state == CitizenState.WANDERING
