"""
Tests of the ripplelab command-line interface using Click's CliRunner.
"""

import os
import sys
from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend to avoid display issues
import numpy as np
from click.testing import CliRunner

# Add the parent directory to the path so we can import ripplelab
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from ripplelab.cli import cli, main
from ripplelab.modeling import WaveSimulationConfig


def write_small_config(path: Path, **simulation) -> Path:
    """Write a small circular pond configuration to ``path``."""
    config = WaveSimulationConfig.from_dict({
        "lattice": {"width": 48, "height": 48},
        "shape": {"kind": "circle", "radius": 18},
        "impulses": [{"frame": 0, "x": 24, "y": 24}],
        "simulation": {"frames": 20, "snapshot_interval": 5, **simulation},
        "plot": {"figsize": [3, 3], "dpi": 40, "fps": 5},
    })
    return config.to_yaml(path)


def test_init_config_writes_defaults():
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["init-config", "--output", "pond.yaml"])
        assert result.exit_code == 0, result.output

        config = WaveSimulationConfig.from_yaml("pond.yaml")
        assert config.lattice.width == 200
        assert len(config.impulses) == 1
        assert config.impulses[0].x == 100

        # Refuses to replace an existing file unless asked
        result = runner.invoke(cli, ["init-config", "--output", "pond.yaml"])
        assert result.exit_code != 0
        assert "already exists" in result.output

        result = runner.invoke(cli, ["init-config", "--output", "pond.yaml", "--overwrite"])
        assert result.exit_code == 0, result.output


def test_simulate_without_visualization():
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_small_config(Path("pond.yaml"))
        result = runner.invoke(cli, ["simulate", "-c", "pond.yaml", "-o", "run", "--no-visualization"])
        assert result.exit_code == 0, result.output

        assert Path("run/wavefield.npz").exists()
        assert not Path("run/final_frame.png").exists()
        with np.load("run/wavefield.npz") as data:
            assert data["snapshots"].shape == (4, 48, 48)
            assert data["energy"].shape == (20,)


def test_simulate_with_figures_and_animation():
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_small_config(Path("pond.yaml"), save_snapshots=True, output_dir="results")
        result = runner.invoke(cli, ["simulate", "-c", "pond.yaml", "--frames", "10", "--animate"])
        assert result.exit_code == 0, result.output

        assert Path("results/wavefield.npz").exists()
        assert Path("results/final_frame.png").exists()
        assert Path("results/wavefield.gif").exists()
        assert Path("results/snapshots/height_step_00005.png").exists()
        assert Path("results/snapshots/height_step_00010.png").exists()


def test_simulate_reports_invalid_config():
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("bad.yaml").write_text("physics:\n  wave_speed: 3.0\n")
        result = runner.invoke(cli, ["simulate", "-c", "bad.yaml", "-o", "run"])
        assert result.exit_code != 0
        assert "wave_speed" in result.output
        assert not Path("run/wavefield.npz").exists()


def test_simulate_reports_figure_write_errors():
    """Errors raised while writing figures become Click errors, not tracebacks."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_small_config(Path("pond.yaml"), save_snapshots=True)
        Path("run").mkdir()
        # A plain file where the snapshot directory should go
        Path("run/snapshots").write_text("not a directory")

        result = runner.invoke(cli, ["simulate", "-c", "pond.yaml", "-o", "run"])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error" in result.output
        assert Path("run/wavefield.npz").exists()


def test_mask_preview():
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_small_config(Path("pond.yaml"))
        result = runner.invoke(cli, ["mask", "-c", "pond.yaml", "-o", "mask.png"])
        assert result.exit_code == 0, result.output
        assert Path("mask.png").exists()
        assert "cells inside" in result.output


def test_render_saved_results():
    runner = CliRunner()
    with runner.isolated_filesystem():
        write_small_config(Path("pond.yaml"))
        result = runner.invoke(cli, ["simulate", "-c", "pond.yaml", "-o", "run", "--no-visualization"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, [
            "render",
            "--data", "run/wavefield.npz",
            "-o", "anim.gif",
            "-c", "pond.yaml",
            "--fps", "4",
            "--display-range", "40",
        ])
        assert result.exit_code == 0, result.output
        assert Path("anim.gif").exists()


def test_render_without_snapshots_fails():
    runner = CliRunner()
    with runner.isolated_filesystem():
        np.savez(
            "empty.npz",
            snapshots=np.zeros((0, 8, 8)),
            mask=np.ones((8, 8), dtype=bool),
        )
        result = runner.invoke(cli, ["render", "--data", "empty.npz", "-o", "anim.gif"])
        assert result.exit_code != 0
        assert "No snapshots" in result.output


def test_main_returns_exit_codes(tmp_path):
    assert main(["init-config", "-o", str(tmp_path / "pond.yaml")]) == 0
    assert main(["init-config", "-o", str(tmp_path / "pond.yaml")]) == 1
