"""Observer module: per-tick grid summaries and trace output."""

from __future__ import annotations

import csv
from pathlib import Path

from achem.grid import SquareGrid

FIELDNAMES = ["tick", "atom_count", "bond_count", "enzyme_count", "mean_state"]


class Observer:
    """Read-only renderer that records one summary row per refresh."""

    def __init__(self) -> None:
        self.records: list[dict[str, float]] = []
        self.refreshes: int = 0

    def snapshot(self, grid: SquareGrid) -> dict[str, float]:
        # One read of the occupancy table, so a concurrent move cannot tear it.
        atoms = list(grid.occupancy().values())
        mean_state = sum(atom.state for atom in atoms) / len(atoms) if atoms else 0.0
        return {
            "tick": self.refreshes,
            "atom_count": len(atoms),
            "bond_count": grid.bond_count(),
            "enzyme_count": sum(1 for atom in atoms if atom.enzyme),
            "mean_state": mean_state,
        }

    def refresh(self, grid: SquareGrid) -> None:
        self.refreshes += 1
        self.records.append(self.snapshot(grid))

    def to_csv(self, path: Path) -> None:
        if not self.records:
            return
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
            writer.writeheader()
            writer.writerows(self.records)
