"""Tests for config.py - parameter management."""

import json
import tempfile
from pathlib import Path

import pytest

from achem.config import SimulationConfig


class TestSimulationConfig:
    def test_defaults(self):
        cfg = SimulationConfig()
        assert cfg.grid_size == 50
        assert cfg.grid_cells == 2500
        assert cfg.movement_chance == 0.5
        assert cfg.enzyme_range == 3
        assert cfg.enzyme_capacity == 8
        assert cfg.mutation_rate == 0.0

    def test_immutable(self):
        cfg = SimulationConfig()
        try:
            cfg.max_ticks = 999  # type: ignore[misc]
            raise AssertionError("Should be frozen")
        except AttributeError:
            pass

    def test_json_round_trip(self):
        cfg = SimulationConfig()
        restored = SimulationConfig.from_json(cfg.to_json())
        assert restored == cfg

    def test_json_holds_only_constructor_fields(self):
        data = json.loads(SimulationConfig().to_json())
        assert "grid_cells" not in data
        assert set(data) == set(SimulationConfig.__dataclass_fields__)

    def test_json_unknown_field_rejected(self):
        text = json.dumps({"grid_size": 10, "grid_cells": 100})
        with pytest.raises(TypeError):
            SimulationConfig.from_json(text)

    def test_json_round_trip_custom(self):
        cfg = SimulationConfig(
            grid_size=12,
            initial_atoms=30,
            enzyme_count=3,
            movement_chance=1.0,
            enzyme_range=2,
            enzyme_capacity=4,
            mutation_rate=0.25,
            seed_id=42,
        )
        restored = SimulationConfig.from_json(cfg.to_json())
        assert restored == cfg
        assert restored.enzyme_capacity == 4

    def test_json_is_valid_json(self):
        data = json.loads(SimulationConfig().to_json())
        assert isinstance(data, dict)
        assert data["grid_size"] == 50

    def test_save_load_file(self):
        cfg = SimulationConfig(seed_id=7)
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            cfg.save(path)
            assert path.exists()
            assert SimulationConfig.load(path) == cfg


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"grid_size": 0}, "grid_size"),
        ({"grid_size": 5, "initial_atoms": 26}, "exceeds grid cells"),
        ({"initial_atoms": 5, "enzyme_count": 6}, "enzyme_count"),
        ({"movement_chance": 1.5}, "movement_chance"),
        ({"movement_chance": -0.1}, "movement_chance"),
        ({"enzyme_range": 0}, "enzyme_range"),
        ({"enzyme_capacity": 0}, "enzyme_capacity"),
        ({"mutation_rate": 2.0}, "mutation_rate"),
        ({"mutation_sigma": -1.0}, "mutation_sigma"),
        ({"max_ticks": -1}, "max_ticks"),
        ({"seed_id": -1}, "seed_id"),
    ],
)
def test_invalid_values_rejected(kwargs, message):
    with pytest.raises(ValueError, match=message):
        SimulationConfig(**kwargs)
