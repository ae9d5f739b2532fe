"""Tests for tick_society.crime - triggers, penalties and the crime ledger."""

import random

from tick_society import (
    CitizenSection, CitizenState, CrimeBook, CrimeConfig, CrimeType, Job, JobType,
    LandmarkSection, LandmarkType, Position, Resource, ResourceSection, Role, TickContext,
    World, WorldConfig, WorldSection, events, make_crime_system,
)

NONE = dict(
    theft_probability_unemployed=0.0,
    theft_probability_low_satisfaction=0.0,
    vandalism_probability=0.0,
    assault_probability=0.0,
    trespassing_probability=0.0,
    tax_evasion_probability=0.0,
)


def _world():
    config = WorldConfig(
        world=WorldSection(width=20, height=12),
        citizens=CitizenSection(initial_count=0),
        landmarks=LandmarkSection(initial_count=0),
        resources=ResourceSection(initial_count=0, respawn_rate=0.0),
    )
    world = World(config, seed=5)
    world.initialize()
    return world


def _run(world, tick=10, **probabilities):
    book = CrimeBook()
    config = CrimeConfig(**{**NONE, **probabilities})
    make_crime_system(config, book)(world, TickContext(tick_number=tick, random=random.Random(0)))
    return book


def _citizen(world, x=5, y=5, **overrides):
    return world.spawn_citizen(Position(x, y), "people", glyph="P", **overrides)


class TestTrespassing:
    def test_criminal_on_government_building(self):
        world = _world()
        world.add_landmark(Position(5, 5), LandmarkType.POLICE_STATION)
        c = _citizen(world, social_credit=150.0)
        book = _run(world, trespassing_probability=1.0)
        assert c.social_credit == 130.0
        assert c.is_criminal
        crimes = book.all()
        assert [cr.type for cr in crimes] == [CrimeType.TRESPASSING]
        assert crimes[0].perpetrator_id == c.id
        assert crimes[0].location == Position(5, 5)
        event = world.events.last(events.CRIME)
        assert event.data["crime_type"] == "trespassing"

    def test_members_may_enter(self):
        world = _world()
        world.add_landmark(Position(5, 5), LandmarkType.TOWN_HALL)
        c = _citizen(world, social_credit=150.0)
        c.government_role = Role.CITIZEN
        book = _run(world, trespassing_probability=1.0)
        assert len(book) == 0
        assert c.social_credit == 150.0

    def test_good_standing_never_trespasses(self):
        world = _world()
        world.add_landmark(Position(5, 5), LandmarkType.POLICE_STATION)
        _citizen(world, social_credit=500.0)
        assert len(_run(world, trespassing_probability=1.0)) == 0

    def test_ordinary_building_is_not_trespassing(self):
        world = _world()
        world.add_landmark(Position(5, 5), LandmarkType.HOME)
        _citizen(world, social_credit=150.0)
        assert len(_run(world, trespassing_probability=1.0)) == 0


class TestTriggers:
    def test_unemployed_theft_needs_nearby_resource(self):
        world = _world()
        c = _citizen(world)
        assert len(_run(world, theft_probability_unemployed=1.0)) == 0
        world.add_resource(Resource(position=Position(7, 6), type="K"))
        book = _run(world, theft_probability_unemployed=1.0)
        assert [cr.type for cr in book.all()] == [CrimeType.THEFT]
        assert c.social_credit == 450.0

    def test_satisfied_worker_does_not_steal(self):
        world = _world()
        world.add_resource(Resource(position=Position(6, 5), type="K"))
        _citizen(world, job=Job(JobType.FARMER))
        book = _run(
            world,
            theft_probability_unemployed=1.0,
            theft_probability_low_satisfaction=1.0,
        )
        assert len(book) == 0

    def test_vandalism_spares_government_buildings(self):
        world = _world()
        world.add_landmark(Position(6, 5), LandmarkType.COURTHOUSE)
        c = _citizen(world, satisfaction=10.0)
        assert len(_run(world, vandalism_probability=1.0)) == 0
        world.add_landmark(Position(4, 5), LandmarkType.FARM)
        book = _run(world, vandalism_probability=1.0)
        assert [cr.type for cr in book.all()] == [CrimeType.VANDALISM]
        assert c.social_credit == 420.0

    def test_assault_hurts_victim(self):
        world = _world()
        attacker = _citizen(world, satisfaction=10.0)
        victim = _citizen(world, 6, 5, satisfaction=50.0)
        book = _run(world, assault_probability=1.0)
        crime = book.all()[0]
        assert crime.type == CrimeType.ASSAULT
        assert crime.victim_id == victim.id
        assert victim.satisfaction == 40.0
        assert attacker.social_credit == 400.0

    def test_tax_evasion_marks_member(self):
        world = _world()
        c = _citizen(world, satisfaction=20.0)
        c.government_id = "gov-1"
        c.government_role = Role.CITIZEN
        book = _run(world, tax_evasion_probability=1.0)
        assert [cr.type for cr in book.all()] == [CrimeType.TAX_EVASION]
        assert c.evading_taxes
        assert c.social_credit == 460.0

    def test_triggers_are_independent(self):
        world = _world()
        world.add_landmark(Position(5, 5), LandmarkType.POLICE_STATION)
        world.add_resource(Resource(position=Position(6, 6), type="K"))
        _citizen(world, social_credit=250.0)
        book = _run(world, theft_probability_unemployed=1.0, trespassing_probability=1.0)
        assert {cr.type for cr in book.all()} == {CrimeType.THEFT, CrimeType.TRESPASSING}


class TestSkips:
    def test_detained_and_fleeing_are_skipped(self):
        world = _world()
        world.add_resource(Resource(position=Position(6, 5), type="K"))
        jailed = _citizen(world)
        jailed.is_detained = True
        runner = _citizen(world, 5, 6)
        runner.state = CitizenState.FLEEING
        assert len(_run(world, theft_probability_unemployed=1.0)) == 0

    def test_off_interval_tick(self):
        world = _world()
        world.add_resource(Resource(position=Position(6, 5), type="K"))
        _citizen(world)
        assert len(_run(world, tick=7, theft_probability_unemployed=1.0)) == 0


class TestCreditDrift:
    def test_every_hundred_ticks(self):
        world = _world()
        good = _citizen(world, satisfaction=70.0)
        jailed = _citizen(world, 6, 6, social_credit=100.0)
        jailed.is_detained = True
        jailed.is_criminal = True
        model = _citizen(world, 7, 7, social_credit=900.0, satisfaction=40.0)
        _run(world, tick=100)
        assert good.social_credit == 501.0
        assert jailed.social_credit == 100.5
        assert model.satisfaction == 41.0

    def test_no_drift_off_schedule(self):
        world = _world()
        good = _citizen(world, satisfaction=70.0)
        _run(world, tick=50)
        assert good.social_credit == 500.0


class TestCrimeBook:
    def test_resolve_and_prune(self):
        world = _world()
        c = _citizen(world)
        book = CrimeBook()
        old = book.record(CrimeType.THEFT, c, tick=10)
        fresh = book.record(CrimeType.ASSAULT, c, tick=400)
        assert [cr.id for cr in book.active_for(c.id)] == [old.id, fresh.id]
        assert book.resolve_for(c.id) == [old.id, fresh.id]
        assert book.active() == []
        assert book.prune(tick=600) == 1
        assert book.all() == [fresh]

    def test_unresolved_crimes_are_kept(self):
        world = _world()
        c = _citizen(world)
        book = CrimeBook()
        book.record(CrimeType.THEFT, c, tick=0)
        assert book.prune(tick=10_000) == 0
        assert len(book) == 1

    def test_detect(self):
        world = _world()
        c = _citizen(world)
        book = CrimeBook()
        crime = book.record(CrimeType.VANDALISM, c, tick=3)
        assert book.detect(crime.id)
        assert crime.detected
        assert not book.detect("crime-99")
