"""CLI smoke tests for the simulation runner."""

import json
import subprocess
import sys

import pytest

from achem.config import SimulationConfig
from achem.run import build_config, main, parse_args


def test_run_cli_smoke(tmp_path):
    out_dir = tmp_path / "out"
    cmd = [
        sys.executable,
        "-m",
        "achem.run",
        "--seed",
        "0",
        "--ticks",
        "10",
        "--size",
        "10",
        "--atoms",
        "20",
        "--enzymes",
        "2",
        "--output-dir",
        str(out_dir),
    ]
    result = subprocess.run(cmd, check=True, capture_output=True, text=True)
    assert result.returncode == 0

    summary_path = out_dir / "summary_seed_0.json"
    csv_path = out_dir / "trace_seed_0.csv"
    assert summary_path.exists()
    assert csv_path.exists()
    assert (out_dir / "params_seed_0.json").exists()

    data = json.loads(summary_path.read_text(encoding="utf-8"))
    assert data["seed_id"] == 0
    assert data["ticks"] == 10
    assert data["final_atom_count"] == 20
    assert len(data["final_enzyme_rules"]) == 2


def test_run_cli_batch_mode_writes_seed_outputs(tmp_path):
    out_dir = tmp_path / "out"
    main(
        [
            "--ticks",
            "5",
            "--size",
            "8",
            "--atoms",
            "12",
            "--enzymes",
            "1",
            "--output-dir",
            str(out_dir),
            "--seed-start",
            "0",
            "--seed-end",
            "1",
        ]
    )

    assert (out_dir / "seed_0" / "summary_seed_0.json").exists()
    assert (out_dir / "seed_1" / "summary_seed_1.json").exists()
    assert SimulationConfig.load(out_dir / "params" / "seed_1.json").seed_id == 1


def test_batch_mode_needs_both_bounds(tmp_path):
    with pytest.raises(ValueError, match="together"):
        main(["--output-dir", str(tmp_path), "--seed-start", "0"])


def test_overrides_apply_on_top_of_config_file(tmp_path):
    path = tmp_path / "cfg.json"
    SimulationConfig(grid_size=20, initial_atoms=50, enzyme_count=5).save(path)

    cfg = build_config(parse_args(["--config", str(path), "--ticks", "7"]))

    assert cfg.grid_size == 20
    assert cfg.initial_atoms == 50
    assert cfg.max_ticks == 7
