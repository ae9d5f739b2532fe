"""Tests for tick_society.config - defaults, validation and camelCase loading."""

import pytest
from tick_society import (
    CitizenSection, CrimeConfig, GovernmentConfig, ResourceSection,
    RoutineConfig, WorldConfig, WorldSection,
)


class TestDefaults:
    def test_default_world(self):
        cfg = WorldConfig()
        assert (cfg.world.width, cfg.world.height, cfg.world.tick_rate) == (80, 24, 200)
        assert cfg.citizens.initial_count == 10
        assert set(cfg.citizens.categories) == {"people", "animal", "food"}
        assert cfg.landmarks.initial_count == 8
        assert cfg.resources.initial_count == 30
        assert cfg.resources.respawn_rate == 0.01
        assert len(cfg.resources.alphabet) == 52

    def test_subsystem_defaults(self):
        cfg = WorldConfig()
        assert cfg.crime.crime_check_interval == 10
        assert cfg.police.detection_range == 8.0
        assert cfg.police.arrest_range == 1.0
        assert cfg.routine.ticks_per_hour == 60
        assert cfg.government.tax_interval == 100


class TestValidation:
    def test_world_too_small(self):
        with pytest.raises(ValueError):
            WorldSection(width=2, height=10)

    def test_tick_rate_positive(self):
        with pytest.raises(ValueError):
            WorldSection(tick_rate=0)

    def test_empty_glyph_pool(self):
        with pytest.raises(ValueError):
            CitizenSection(categories={"people": ()})

    def test_probability_range(self):
        with pytest.raises(ValueError):
            ResourceSection(respawn_rate=1.5)
        with pytest.raises(ValueError):
            CrimeConfig(assault_probability=-0.1)
        with pytest.raises(ValueError):
            GovernmentConfig(join_probability=2.0)

    def test_alphabet_letters_only(self):
        with pytest.raises(ValueError):
            ResourceSection(alphabet="AB1")

    def test_routine_hours_ordered(self):
        with pytest.raises(ValueError):
            RoutineConfig(work_start=18, work_end=17)
        with pytest.raises(ValueError):
            RoutineConfig(ticks_per_hour=0)


class TestFromDict:
    def test_maps_camel_case_sections(self):
        cfg = WorldConfig.from_dict({
            "world": {"width": 40, "height": 20, "tickRate": 100},
            "citizens": {
                "initialCount": 5,
                "movementSpeed": 2,
                "emojiCategories": {"people": ["P"], "animals": ["D"]},
            },
            "landmarks": {"initialCount": 3},
            "resources": {"types": "ABC", "respawnRate": 0.5, "maxPerType": 4},
        })
        assert (cfg.world.width, cfg.world.height, cfg.world.tick_rate) == (40, 20, 100)
        assert cfg.citizens.initial_count == 5
        assert cfg.citizens.movement_speed == 2
        assert cfg.citizens.categories == {"people": ("P",), "animal": ("D",)}
        assert cfg.landmarks.initial_count == 3
        assert cfg.resources.alphabet == "ABC"
        assert cfg.resources.respawn_rate == 0.5
        assert cfg.resources.max_per_type == 4

    def test_subsystem_sections_ignore_unknown_keys(self):
        cfg = WorldConfig.from_dict({
            "crime": {"crimeCheckInterval": 5, "notASetting": True},
            "police": {"detectionRange": 4},
        })
        assert cfg.crime.crime_check_interval == 5
        assert cfg.police.detection_range == 4

    def test_missing_sections_keep_defaults(self):
        assert WorldConfig.from_dict({}) == WorldConfig()

    def test_invalid_values_raise(self):
        with pytest.raises(ValueError):
            WorldConfig.from_dict({"world": {"width": 0}})
