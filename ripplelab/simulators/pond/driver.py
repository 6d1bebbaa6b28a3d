"""
Pond Wave Simulation Driver.

This module plays the role of the interactive front end: for every frame it
applies the pointer impulses scheduled for that frame, advances the wave
field by exactly one step and reads the field back for rendering. Pointer
input is scripted through the configuration so runs are reproducible.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import numpy as np
from rich.console import Console
from rich.progress import Progress, TextColumn, BarColumn, TaskProgressColumn, TimeRemainingColumn

from ripplelab.modeling import (
    WaveField,
    WaveSimulationConfig,
    shape_from_config,
    shape_outline,
)


console = Console()

# (x, y, strength, radius) in lattice coordinates
Impulse = Tuple[float, float, float, float]

# Called after every step with the field and the 0-based frame index
FrameCallback = Callable[[WaveField, int], None]


def build_field(config: WaveSimulationConfig) -> WaveField:
    """
    Create the wave field described by a configuration.

    Args:
        config (WaveSimulationConfig): Validated configuration.

    Returns:
        WaveField: A field at rest with the configured mask.
    """
    width = config.lattice.width
    height = config.lattice.height
    inside = shape_from_config(config.shape, width, height)
    return WaveField(
        width,
        height,
        inside,
        wave_speed=config.physics.wave_speed,
        damping=config.physics.damping,
    )
# end def build_field


def screen_to_lattice(px: float, py: float, cell_size: int) -> Tuple[int, int]:
    """
    Convert display pixel coordinates to the lattice cell under them.

    Args:
        px (float): Horizontal pixel coordinate.
        py (float): Vertical pixel coordinate.
        cell_size (int): Display pixels per lattice cell.

    Returns:
        Tuple[int, int]: Cell coordinates ``(x, y)``.
    """
    return int(px // cell_size), int(py // cell_size)
# end def screen_to_lattice


def impulses_for_frame(config: WaveSimulationConfig, frame: int) -> List[Impulse]:
    """
    Collect the impulses whose button is held on a given frame.

    Args:
        config (WaveSimulationConfig): Validated configuration.
        frame (int): 0-based frame index.

    Returns:
        List[Impulse]: ``(x, y, strength, radius)`` tuples in lattice coordinates.
    """
    impulses = []
    for impulse in config.impulses:
        if not impulse.active_on(frame):
            continue
        # end if

        if impulse.units == "pixels":
            x, y = screen_to_lattice(impulse.x, impulse.y, config.lattice.cell_size)
        else:
            x, y = impulse.x, impulse.y
        # end if

        strength = impulse.strength if impulse.strength is not None else config.excitation.strength
        radius = impulse.radius if impulse.radius is not None else config.excitation.radius
        impulses.append((float(x), float(y), float(strength), float(radius)))
    # end for
    return impulses
# end def impulses_for_frame


def run_simulation(
        config: WaveSimulationConfig,
        log: bool = False,
        callback: Optional[FrameCallback] = None,
        frames: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Run a pond simulation frame by frame.

    Args:
        config (WaveSimulationConfig): Validated configuration.
        log (bool, optional): Print the setup and show a progress bar. Defaults to False.
        callback (callable, optional): Called as ``callback(field, frame)`` after each step.
        frames (int, optional): Overrides ``config.simulation.frames``.

    Returns:
        dict: Simulation results containing:
            - 'snapshots': Height snapshots of shape ``(n, height, width)``
            - 'snapshot_steps': Step number of each snapshot
            - 'mask': The boundary mask
            - 'outline': Shape outline points for drawing
            - 'energy': Sum of squared inside heights after each step
            - 'max_abs': Peak ``|height|`` after each step
            - 'final_height': Height field after the last step
            - 'config': The configuration used
    """
    num_frames = int(frames) if frames is not None else config.simulation.frames
    if num_frames <= 0:
        raise ValueError(f"Number of frames must be positive, got {num_frames}")
    # end if
    interval = config.simulation.snapshot_interval

    field = build_field(config)

    if log:
        console.log(f"[yellow]Lattice:[/] {field.width} x {field.height} (cell size {config.lattice.cell_size})")
        console.log(f"[yellow]Shape:[/] {config.shape.kind.value}, {int(field.mask.sum())} cells inside")
        console.log(f"[yellow]Wave speed:[/] {field.wave_speed}")
        console.log(f"[yellow]Damping:[/] {field.damping}")
        console.log(f"[yellow]Impulses:[/] {len(config.impulses)}")
        console.log(f"[yellow]Frames:[/] {num_frames}, snapshot every {interval}")
    # end if

    energy = np.zeros(num_frames, dtype=np.float64)
    max_abs = np.zeros(num_frames, dtype=np.float64)
    snapshots = []
    snapshot_steps = []

    def advance(frame: int) -> None:
        for x, y, strength, radius in impulses_for_frame(config, frame):
            field.excite(x, y, strength, radius)
        # end for

        field.step()

        energy[frame] = field.energy()
        max_abs[frame] = float(np.max(np.abs(field.heights)))
        if (frame + 1) % interval == 0:
            snapshots.append(field.snapshot())
            snapshot_steps.append(frame + 1)
        # end if

        if callback is not None:
            callback(field, frame)
        # end if
    # end def advance

    if log:
        with Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeRemainingColumn(),
        ) as progress:
            task = progress.add_task("[cyan]Running simulation...", total=num_frames)
            for frame in range(num_frames):
                advance(frame)
                progress.update(task, advance=1)
            # end for
        # end with
    else:
        for frame in range(num_frames):
            advance(frame)
        # end for
    # end if

    if snapshots:
        snapshot_array = np.stack(snapshots)
    else:
        snapshot_array = np.zeros((0,) + field.shape, dtype=np.float64)
    # end if

    return {
        'snapshots': snapshot_array,
        'snapshot_steps': np.asarray(snapshot_steps, dtype=np.int64),
        'mask': field.mask.copy(),
        'outline': shape_outline(config.shape, field.width, field.height),
        'energy': energy,
        'max_abs': max_abs,
        'final_height': field.snapshot(),
        'config': config,
    }
# end def run_simulation


def save_results(results: Dict[str, Any], path: Union[str, Path]) -> Path:
    """
    Write the array part of simulation results to a compressed ``.npz`` file.

    Args:
        results (dict): Output of :func:`run_simulation`.
        path (str or Path): Destination file.

    Returns:
        Path: The written path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savez_compressed(
        path,
        snapshots=results['snapshots'],
        snapshot_steps=results['snapshot_steps'],
        mask=results['mask'],
        outline=results['outline'],
        energy=results['energy'],
        max_abs=results['max_abs'],
        final_height=results['final_height'],
    )
    return path
# end def save_results


def load_results(path: Union[str, Path]) -> Dict[str, np.ndarray]:
    """
    Read results written by :func:`save_results`.

    Args:
        path (str or Path): Path to the ``.npz`` file.

    Returns:
        dict: Arrays keyed like the output of :func:`run_simulation`, without 'config'.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If a required array is missing.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Results file not found: {path}")
    # end if

    with np.load(path) as data:
        missing = {"snapshots", "mask"} - set(data.files)
        if missing:
            raise ValueError(f"Results file {path} is missing arrays: {', '.join(sorted(missing))}")
        # end if
        return {key: data[key] for key in data.files}
    # end with
# end def load_results
