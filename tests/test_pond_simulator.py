"""
Test script for the pond simulation driver and its rendering helpers.
"""

import os
import sys

import matplotlib
matplotlib.use("Agg")
import numpy as np
import pytest

# Add the parent directory to the path so we can import ripplelab
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from ripplelab.modeling import PlotConfig, WaveSimulationConfig, is_contained
from ripplelab.simulators.pond import (
    animate_snapshots,
    build_field,
    height_to_rgb,
    impulses_for_frame,
    load_results,
    plot_frame,
    plot_mask,
    run_simulation,
    save_results,
    save_snapshot_images,
    screen_to_lattice,
)


def small_config(**overrides):
    """60x60 circular pond with one centred impulse."""
    data = {
        "lattice": {"width": 60, "height": 60, "cell_size": 4},
        "shape": {"kind": "circle", "radius": 25},
        "physics": {"wave_speed": 0.5, "damping": 0.995},
        "impulses": [{"frame": 0, "x": 30, "y": 30}],
        "simulation": {"frames": 30, "snapshot_interval": 10},
        "plot": {"figsize": [4, 4], "dpi": 50},
    }
    data.update(overrides)
    return WaveSimulationConfig.from_dict(data)


def test_screen_to_lattice():
    assert screen_to_lattice(0, 0, 4) == (0, 0)
    assert screen_to_lattice(7.9, 8, 4) == (1, 2)
    assert screen_to_lattice(119, 41, 1) == (119, 41)


def test_impulses_for_frame():
    """Defaults fill in missing values and pixel positions are converted."""
    config = small_config(impulses=[
        {"frame": 0, "x": 30, "y": 30},
        {"frame": 2, "x": 81, "y": 42, "units": "pixels", "duration": 3, "strength": -5, "radius": 3},
    ])
    assert impulses_for_frame(config, 0) == [(30.0, 30.0, 20.0, 8.0)]
    assert impulses_for_frame(config, 1) == []
    assert impulses_for_frame(config, 2) == [(20.0, 10.0, -5.0, 3.0)]
    assert impulses_for_frame(config, 4) == [(20.0, 10.0, -5.0, 3.0)]
    assert impulses_for_frame(config, 5) == []


def test_build_field():
    config = small_config()
    field = build_field(config)
    assert field.shape == (60, 60)
    assert field.wave_speed == 0.5
    assert field.mask[30, 30]
    assert not field.mask[30, 55]


def test_run_simulation():
    config = small_config()
    calls = []
    results = run_simulation(config, callback=lambda field, frame: calls.append((frame, field.step_count)))

    assert results['snapshots'].shape == (3, 60, 60)
    np.testing.assert_array_equal(results['snapshot_steps'], [10, 20, 30])
    assert results['energy'].shape == (30,)
    assert results['max_abs'].shape == (30,)
    assert results['mask'].shape == (60, 60)
    assert results['outline'].shape == (200, 2)
    assert results['final_height'].shape == (60, 60)
    assert results['config'] is config

    # One step per frame, callback after the step
    assert calls == [(frame, frame + 1) for frame in range(30)]

    assert results['max_abs'][0] == pytest.approx(20.0)
    assert np.all(results['energy'] > 0)
    np.testing.assert_array_equal(results['snapshots'][-1], results['final_height'])
    for snapshot in results['snapshots']:
        assert is_contained(snapshot, results['mask'])
    # end for


def test_run_simulation_frame_override():
    results = run_simulation(small_config(), frames=7, log=True)
    assert results['energy'].shape == (7,)
    assert results['snapshots'].shape == (0, 60, 60)


def test_run_simulation_without_impulses_stays_at_rest():
    results = run_simulation(small_config(impulses=[]), frames=10)
    assert np.all(results['final_height'] == 0.0)
    assert np.all(results['energy'] == 0.0)


def test_run_simulation_rejects_non_positive_frames():
    with pytest.raises(ValueError):
        run_simulation(small_config(), frames=0)


def test_held_impulse_pumps_more_energy():
    tap = run_simulation(small_config(), frames=20)
    held = run_simulation(small_config(impulses=[{"frame": 0, "x": 30, "y": 30, "duration": 5}]), frames=20)
    assert held['energy'][-1] > tap['energy'][-1]


def test_save_and_load_results(tmp_path):
    results = run_simulation(small_config())
    path = save_results(results, tmp_path / "run" / "wavefield.npz")
    assert path.exists()

    loaded = load_results(path)
    assert 'config' not in loaded
    np.testing.assert_array_equal(loaded['snapshots'], results['snapshots'])
    np.testing.assert_array_equal(loaded['mask'], results['mask'])
    np.testing.assert_array_equal(loaded['snapshot_steps'], results['snapshot_steps'])


def test_load_results_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_results(tmp_path / "missing.npz")

    incomplete = tmp_path / "incomplete.npz"
    np.savez(incomplete, energy=np.zeros(3))
    with pytest.raises(ValueError):
        load_results(incomplete)


def test_height_to_rgb_clamps_and_paints_background():
    heights = np.array([[0.0, 500.0], [-500.0, 10.0]])
    mask = np.array([[True, True], [True, False]])
    rgb = height_to_rgb(heights, mask, display_range=80.0, colormap="gray", background=(255, 0, 0))

    assert rgb.shape == (2, 2, 3)
    np.testing.assert_allclose(rgb[0, 1], [1.0, 1.0, 1.0])
    np.testing.assert_allclose(rgb[1, 0], [0.0, 0.0, 0.0])
    np.testing.assert_allclose(rgb[0, 0], [0.5, 0.5, 0.5], atol=0.01)
    np.testing.assert_allclose(rgb[1, 1], [1.0, 0.0, 0.0])

    # The input field is never modified
    assert heights[0, 1] == 500.0


def test_height_to_rgb_rejects_bad_range():
    with pytest.raises(ValueError):
        height_to_rgb(np.zeros((2, 2)), np.ones((2, 2), dtype=bool), display_range=0.0)


def test_plot_helpers_write_images(tmp_path):
    results = run_simulation(small_config())
    plot_cfg = PlotConfig(figsize=(4, 4), dpi=50)

    frame_path = tmp_path / "frame.png"
    plot_frame(results['final_height'], results['mask'], plot_cfg=plot_cfg,
               outline=results['outline'], step=30, output=frame_path)
    assert frame_path.exists()

    mask_path = tmp_path / "mask.png"
    plot_mask(results['mask'], plot_cfg=plot_cfg, outline=results['outline'], output=mask_path)
    assert mask_path.exists()

    paths = save_snapshot_images(results, tmp_path / "snapshots", plot_cfg=plot_cfg)
    assert [path.name for path in paths] == [
        "height_step_00010.png",
        "height_step_00020.png",
        "height_step_00030.png",
    ]
    assert all(path.exists() for path in paths)


def test_animate_snapshots(tmp_path):
    results = run_simulation(small_config())
    plot_cfg = PlotConfig(figsize=(3, 3), dpi=40, fps=5)
    output = animate_snapshots(
        results['snapshots'],
        results['mask'],
        tmp_path / "anim.gif",
        plot_cfg=plot_cfg,
        steps=results['snapshot_steps'],
        outline=results['outline'],
    )
    assert output == tmp_path / "anim.gif"
    assert output.exists()

    empty = np.zeros((0, 60, 60))
    assert animate_snapshots(empty, results['mask'], tmp_path / "none.gif") is None
