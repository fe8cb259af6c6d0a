"""Simulation orchestration: seeded world construction and the tick loop."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace

from achem.atom import Atom, AtomType
from achem.chemist import Chemist
from achem.config import SimulationConfig
from achem.grid import SquareGrid
from achem.location import SquareLocation
from achem.mutation import InsertionMutation, Mutation, mutate_enzyme
from achem.observer import Observer
from achem.reaction import ReactionData
from achem.simulator import Simulator, TickReport

logger = logging.getLogger(__name__)

DEFAULT_BASE_RULES: tuple[ReactionData, ...] = (
    ReactionData.parse("x1 + y1 -> x2y2", spontaneous=True),
)
DEFAULT_ENZYME_RULES: tuple[ReactionData, ...] = (
    ReactionData.parse("x2 + y0 -> x3y1"),
    ReactionData.parse("x3y1 -> x0 + y0"),
)


@dataclass(frozen=True)
class SimulationRunResult:
    """Return payload for a single simulation run."""

    seed_id: int
    ticks: int
    reports: list[TickReport]
    records: list[dict[str, float]]
    mutations_applied: int
    final_atoms: list[dict[str, object]]
    final_enzyme_rules: dict[int, list[str]]
    observer: Observer = field(repr=False)


def populate_grid(
    grid: SquareGrid,
    cfg: SimulationConfig,
    rng: random.Random,
    enzyme_rules: Sequence[ReactionData] = DEFAULT_ENZYME_RULES,
) -> list[Atom]:
    """Scatter ``cfg.initial_atoms`` random atoms over distinct cells.

    The first ``cfg.enzyme_count`` atoms placed are enzymes carrying
    *enzyme_rules*.
    """
    cells = [SquareLocation(x, y) for x in range(grid.size) for y in range(grid.size)]
    types = AtomType.concrete()
    placed: list[Atom] = []
    for i, location in enumerate(rng.sample(cells, cfg.initial_atoms)):
        enzyme = i < cfg.enzyme_count
        atom = Atom(
            rng.choice(types),
            state=rng.randrange(2),
            enzyme=enzyme,
            reactions=list(enzyme_rules) if enzyme else [],
        )
        if grid.add_atom(location, atom):
            placed.append(atom)
        else:
            logger.warning("cell %s already occupied, skipped %r", location, atom)
    return placed


def run_simulation(
    cfg: SimulationConfig,
    *,
    base_rules: Sequence[ReactionData] = DEFAULT_BASE_RULES,
    enzyme_rules: Sequence[ReactionData] = DEFAULT_ENZYME_RULES,
    mutations: Sequence[Mutation] | None = None,
) -> SimulationRunResult:
    """Build a random world from *cfg* and run it for ``cfg.max_ticks`` ticks.

    Every atom's cell is queued for a reaction check on the first tick.
    After each tick, with probability ``cfg.mutation_rate``, one random
    enzyme's rule table is mutated.
    """
    rng = random.Random(cfg.seed_id)
    observer = Observer()
    grid = SquareGrid(
        cfg.grid_size,
        enzyme_capacity=cfg.enzyme_capacity,
        renderer=observer,
    )
    atoms = populate_grid(grid, cfg, rng, enzyme_rules)
    enzymes = [atom for atom in atoms if atom.enzyme]
    if mutations is None:
        mutations = (InsertionMutation(cfg.enzyme_capacity, sigma=cfg.mutation_sigma),)

    simulator = Simulator(
        grid,
        cfg,
        rng,
        Chemist(base_rules, enzyme_range=cfg.enzyme_range),
    )
    simulator.updated_locations.extend(atom.location for atom in atoms)

    reports: list[TickReport] = []
    mutations_applied = 0
    for _ in range(cfg.max_ticks):
        reports.append(simulator.tick())
        if cfg.mutation_rate > 0 and enzymes and rng.random() < cfg.mutation_rate:
            target = rng.choice(enzymes)
            if mutate_enzyme(target, grid, rng, mutations) is not None:
                mutations_applied += 1

    logger.info(
        "seed %d: %d atoms, %d ticks, %d reactions, %d mutations",
        cfg.seed_id,
        len(grid),
        len(reports),
        sum(report.reactions for report in reports),
        mutations_applied,
    )
    return _finalize_result(cfg, grid, reports, observer, mutations_applied)


def _finalize_result(
    cfg: SimulationConfig,
    grid: SquareGrid,
    reports: list[TickReport],
    observer: Observer,
    mutations_applied: int,
) -> SimulationRunResult:
    """Build SimulationRunResult from final grid state."""
    details: list[dict[str, object]] = []
    rule_tables: dict[int, list[str]] = {}
    for atom in grid.all_atoms():
        details.append(
            {
                "id": atom.atom_id,
                "type": atom.type.symbol,
                "state": atom.state,
                "x": atom.location.x,
                "y": atom.location.y,
                "enzyme": atom.enzyme,
                "bonds": sorted(atom.bonds),
            }
        )
        if atom.enzyme:
            rule_tables[atom.atom_id] = [str(rule) for rule in atom.active_reactions]

    return SimulationRunResult(
        seed_id=cfg.seed_id,
        ticks=len(reports),
        reports=reports,
        records=observer.records,
        mutations_applied=mutations_applied,
        final_atoms=details,
        final_enzyme_rules=rule_tables,
        observer=observer,
    )


def run_simulation_batch(
    cfg: SimulationConfig,
    *,
    seed_ids: tuple[int, ...] | list[int] | range,
    **kwargs: object,
) -> Iterator[tuple[int, SimulationRunResult]]:
    """Yield results for multiple seeds with shared config."""
    for seed_id in seed_ids:
        yield seed_id, run_simulation(replace(cfg, seed_id=seed_id), **kwargs)
