"""CLI entrypoint for a seeded simulation run."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path

from achem.config import SimulationConfig
from achem.simulate import SimulationRunResult, run_simulation, run_simulation_batch

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the AChem grid simulation")
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--ticks", type=int, default=None)
    parser.add_argument("--size", type=int, default=None)
    parser.add_argument("--atoms", type=int, default=None)
    parser.add_argument("--enzymes", type=int, default=None)
    parser.add_argument("--movement-chance", type=float, default=None)
    parser.add_argument("--mutation-rate", type=float, default=None)
    parser.add_argument("--output-dir", type=Path, default=Path("outputs/run"))
    parser.add_argument("--seed-start", type=int, default=None)
    parser.add_argument("--seed-end", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SimulationConfig:
    """Start from --config (or defaults) and apply explicit overrides."""
    cfg = SimulationConfig.load(args.config) if args.config else SimulationConfig()
    overrides = {
        "seed_id": args.seed,
        "max_ticks": args.ticks,
        "grid_size": args.size,
        "initial_atoms": args.atoms,
        "enzyme_count": args.enzymes,
        "movement_chance": args.movement_chance,
        "mutation_rate": args.mutation_rate,
    }
    return replace(cfg, **{k: v for k, v in overrides.items() if v is not None})


def _write_run_outputs(result: SimulationRunResult, out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    trace_path = out_dir / f"trace_seed_{result.seed_id}.csv"
    result.observer.to_csv(trace_path)

    summary = {
        "seed_id": result.seed_id,
        "ticks": result.ticks,
        "total_reactions": sum(report.reactions for report in result.reports),
        "total_moves": sum(report.moves_accepted for report in result.reports),
        "mutations_applied": result.mutations_applied,
        "final_atom_count": len(result.final_atoms),
        "final_enzyme_rules": result.final_enzyme_rules,
    }
    summary_path = out_dir / f"summary_seed_{result.seed_id}.json"
    summary_path.write_text(json.dumps(summary, indent=2), encoding="utf-8")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cfg = build_config(args)
    args.output_dir.mkdir(parents=True, exist_ok=True)

    if args.seed_start is None and args.seed_end is None:
        cfg.save(args.output_dir / f"params_seed_{cfg.seed_id}.json")
        _write_run_outputs(run_simulation(cfg), args.output_dir)
        return

    if args.seed_start is None or args.seed_end is None:
        raise ValueError("--seed-start and --seed-end must be provided together")
    if args.seed_end < args.seed_start:
        raise ValueError("--seed-end must be >= --seed-start")
    if args.seed is not None:
        logger.warning("--seed is ignored in batch mode when seed range is provided")

    seed_ids = range(args.seed_start, args.seed_end + 1)
    params_dir = args.output_dir / "params"
    params_dir.mkdir(parents=True, exist_ok=True)
    for seed_id in seed_ids:
        replace(cfg, seed_id=seed_id).save(params_dir / f"seed_{seed_id}.json")

    for seed_id, result in run_simulation_batch(cfg, seed_ids=seed_ids):
        _write_run_outputs(result, args.output_dir / f"seed_{seed_id}")


if __name__ == "__main__":
    main()
