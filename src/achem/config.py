"""Parameter management for simulation reproducibility.

Frozen dataclass with JSON serialization.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path


@dataclass(frozen=True)
class SimulationConfig:
    """Complete simulation configuration."""

    grid_size: int = 50
    initial_atoms: int = 200
    enzyme_count: int = 10
    movement_chance: float = 0.5
    enzyme_range: int = 3
    enzyme_capacity: int = 8
    mutation_rate: float = 0.0  # per-tick chance to mutate one enzyme
    mutation_sigma: float = 5.0
    max_ticks: int = 100
    seed_id: int = 0

    def __post_init__(self) -> None:
        """Validate simulation parameters."""
        if self.grid_size < 1:
            raise ValueError(f"grid_size must be >= 1, got {self.grid_size}")
        if self.initial_atoms < 0:
            raise ValueError(
                f"initial_atoms must be non-negative, got {self.initial_atoms}"
            )
        if self.initial_atoms > self.grid_size**2:
            raise ValueError(
                f"initial_atoms ({self.initial_atoms}) exceeds grid cells "
                f"({self.grid_size**2})"
            )
        if not (0 <= self.enzyme_count <= self.initial_atoms):
            raise ValueError(
                f"enzyme_count must be in [0, {self.initial_atoms}], "
                f"got {self.enzyme_count}"
            )
        if not (0.0 <= self.movement_chance <= 1.0):
            raise ValueError(
                f"movement_chance must be in [0, 1], got {self.movement_chance}"
            )
        if self.enzyme_range < 1:
            raise ValueError(f"enzyme_range must be >= 1, got {self.enzyme_range}")
        if self.enzyme_capacity < 1:
            raise ValueError(
                f"enzyme_capacity must be >= 1, got {self.enzyme_capacity}"
            )
        if not (0.0 <= self.mutation_rate <= 1.0):
            raise ValueError(
                f"mutation_rate must be in [0, 1], got {self.mutation_rate}"
            )
        if self.mutation_sigma < 0:
            raise ValueError(
                f"mutation_sigma must be non-negative, got {self.mutation_sigma}"
            )
        if self.max_ticks < 0:
            raise ValueError(f"max_ticks must be non-negative, got {self.max_ticks}")
        if self.seed_id < 0:
            raise ValueError(f"seed_id must be non-negative, got {self.seed_id}")

    @property
    def grid_cells(self) -> int:
        return self.grid_size**2

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> SimulationConfig:
        return cls(**json.loads(json_str))

    def save(self, path: Path) -> None:
        path.write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> SimulationConfig:
        return cls.from_json(path.read_text(encoding="utf-8"))
