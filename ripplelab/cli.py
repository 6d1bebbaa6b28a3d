"""
Command-line interface for running ripplelab pond simulations.

This module exposes a Click-based CLI that wraps the wave field engine and
the pond driver: running a configured simulation, previewing the boundary
mask, animating a saved run and writing a default configuration.
"""

# Imports
from __future__ import annotations
from pathlib import Path
from typing import Optional, Sequence
import click
import numpy as np
import yaml
from rich.console import Console
from rich.table import Table
from ripplelab.modeling import (
    PlotConfig,
    WaveSimulationConfig,
    is_contained,
    shape_outline,
)
from ripplelab.simulators.pond import (
    animate_snapshots,
    build_field,
    load_results,
    plot_frame,
    plot_mask,
    run_simulation,
    save_results,
    save_snapshot_images,
)

# Shared rich console instance to keep styling consistent across commands.
console = Console()


class ClickBaseException(click.ClickException):
    """
    Convert arbitrary exceptions into Click-friendly messages.

    Click expects errors to inherit from ``click.ClickException`` to show user
    friendly output without tracebacks. Wrapping raised exceptions in this
    helper keeps the CLI surface predictable while preserving the original
    message.
    """

    def __init__(self, exc: Exception):
        super().__init__(str(exc))
    # end def __init__

# end class ClickBaseException


@click.group(help="Command-line interface for ripplelab wave simulations.")
def cli() -> None:
    """
    Top-level Click group used as the entry point for all subcommands.
    """
# end def cli


def _load_config(config_path: Path) -> WaveSimulationConfig:
    """
    Load a simulation configuration, normalising loader errors to ``ValueError``.
    """
    try:
        return WaveSimulationConfig.from_yaml(config_path)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc
    # end try
# end def _load_config


@cli.command(help="Run a pond simulation described by a YAML configuration.")
@click.option(
    "-c",
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    help="Path to the YAML configuration file.",
)
@click.option(
    "-o",
    "--output",
    "output_dir",
    default=None,
    type=click.Path(path_type=Path, file_okay=False, dir_okay=True),
    help="Directory for results. Defaults to simulation.output_dir from the configuration.",
)
@click.option(
    "--frames",
    type=int,
    default=None,
    help="Number of frames to simulate, overriding the configuration.",
)
@click.option(
    "--animate/--no-animate",
    default=False,
    help="Generate a GIF animation of the snapshots.",
)
@click.option(
    "--no-visualization",
    is_flag=True,
    help="Skip all figures and only write the numerical results.",
)
def simulate(
        config_path: Path,
        output_dir: Optional[Path],
        frames: Optional[int],
        animate: bool,
        no_visualization: bool,
) -> None:
    """
    Run the pond simulation and save its results.

    Args:
        config_path: Path to the YAML configuration describing the simulation.
        output_dir: Directory where results are written.
        frames: Optional override of the number of frames.
        animate: Whether to render an animation of the snapshots.
        no_visualization: Whether to skip every figure.
    """
    figure_path = None
    animation_path = None
    snapshot_paths = []
    try:
        config = _load_config(config_path)
        output_dir = Path(output_dir) if output_dir is not None else config.simulation.output_dir

        console.print(f"[green]Starting pond simulation from[/green] {config_path}")
        results = run_simulation(config, log=True, frames=frames)
        data_path = save_results(results, output_dir / "wavefield.npz")

        if not no_visualization:
            figure_path = output_dir / "final_frame.png"
            plot_frame(
                results['final_height'],
                results['mask'],
                plot_cfg=config.plot,
                outline=results['outline'],
                step=len(results['energy']),
                output=figure_path,
            )

            if config.simulation.save_snapshots:
                snapshot_paths = save_snapshot_images(results, output_dir / "snapshots", plot_cfg=config.plot)
            # end if

            if animate:
                console.log("[green]Animating pond simulation...[/green]")
                animation_path = animate_snapshots(
                    results['snapshots'],
                    results['mask'],
                    output_dir / "wavefield.gif",
                    plot_cfg=config.plot,
                    steps=results['snapshot_steps'],
                    outline=results['outline'],
                )
            # end if
        # end if
    except (FileNotFoundError, ValueError, KeyError, OSError) as exc:
        raise ClickBaseException(exc) from exc
    # end try

    # Present a human-friendly summary of what was just generated and where.
    info_table = Table(title="Pond Simulation Summary")
    info_table.add_column("Setting", style="cyan", no_wrap=True)
    info_table.add_column("Value", style="magenta")
    info_table.add_row("Configuration", str(config_path))
    info_table.add_row("Lattice", f"{config.lattice.width} x {config.lattice.height}")
    info_table.add_row("Frames", str(len(results['energy'])))
    info_table.add_row("Snapshots", str(len(results['snapshots'])))
    info_table.add_row("Peak |height|", f"{float(np.max(results['max_abs'])):.4f}")
    info_table.add_row("Final energy", f"{float(results['energy'][-1]):.4f}")
    info_table.add_row("Contained", str(is_contained(results['final_height'], results['mask'])))
    info_table.add_row("Data", str(data_path))
    if figure_path:
        info_table.add_row("Final frame", str(figure_path))
    if snapshot_paths:
        info_table.add_row("Snapshot images", str(len(snapshot_paths)))
    if animation_path:
        info_table.add_row("Animation", str(animation_path))
    console.print(info_table)
# end def simulate


@cli.command(help="Preview the boundary mask of a configuration.")
@click.option(
    "-c",
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    help="Path to the YAML configuration file.",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    default=None,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Path to save the figure. If not provided, the figure is displayed interactively.",
)
def mask(
        config_path: Path,
        output_path: Optional[Path],
) -> None:
    """
    Evaluate the configured shape on the lattice and plot the resulting mask.

    Args:
        config_path: Path to the YAML configuration.
        output_path: Optional image destination.
    """
    try:
        config = _load_config(config_path)
        width, height = config.lattice.width, config.lattice.height
        mask_array = build_field(config).mask
        plot_mask(
            mask_array,
            plot_cfg=config.plot,
            outline=shape_outline(config.shape, width, height),
            output=output_path,
            show=output_path is None,
        )
    except (FileNotFoundError, ValueError, KeyError, OSError) as exc:
        raise ClickBaseException(exc) from exc
    # end try

    console.print(f"[green]Mask:[/green] {int(mask_array.sum())} of {width * height} cells inside")
    if output_path is not None:
        console.print(f"[green]Saved mask preview to[/green] {output_path}")
    # end if
# end def mask


@cli.command(help="Animate the snapshots of a saved simulation.")
@click.option(
    "--data",
    "data_path",
    required=True,
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    help="Path to the wavefield.npz file written by 'simulate'.",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    required=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Destination animation (.gif uses Pillow, other suffixes use ffmpeg).",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    help="Optional configuration whose plot section styles the animation.",
)
@click.option(
    "--fps",
    type=int,
    default=None,
    help="Frames per second, overriding the configuration.",
)
@click.option(
    "--display-range",
    type=float,
    default=None,
    help="Heights beyond +/- this value saturate the colormap.",
)
def render(
        data_path: Path,
        output_path: Path,
        config_path: Optional[Path],
        fps: Optional[int],
        display_range: Optional[float],
) -> None:
    """
    Render an animation from saved results.

    Args:
        data_path: Path to saved results.
        output_path: Destination animation file.
        config_path: Optional configuration for plot styling.
        fps: Optional frame rate override.
        display_range: Optional colour clamp override.
    """
    try:
        config = _load_config(config_path) if config_path is not None else WaveSimulationConfig()
        updates = {}
        if fps is not None:
            updates["fps"] = fps
        if display_range is not None:
            updates["display_range"] = display_range
        plot_cfg = PlotConfig.model_validate({**config.plot.model_dump(), **updates})

        results = load_results(data_path)
        written = animate_snapshots(
            results['snapshots'],
            results['mask'],
            output_path,
            plot_cfg=plot_cfg,
            steps=results.get('snapshot_steps'),
            outline=results.get('outline'),
        )
    except (FileNotFoundError, ValueError, KeyError, OSError) as exc:
        raise ClickBaseException(exc) from exc
    # end try

    if written is None:
        raise click.ClickException(f"No snapshots stored in {data_path}")
    # end if
    console.print(f"[green]Saved animation to[/green] {written}")
# end def render


@cli.command(
    name="init-config",
    help="Write the default pond configuration to a YAML file.",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    required=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Destination YAML file.",
)
@click.option(
    "--overwrite/--no-overwrite",
    default=False,
    help="Allow replacing an existing output file (default: do not overwrite).",
)
def init_config(
        output_path: Path,
        overwrite: bool,
) -> None:
    """
    Serialise the default configuration with a single centred impulse.

    Args:
        output_path: Destination YAML file.
        overwrite: Whether an existing file may be replaced.
    """
    try:
        output_path = Path(output_path)
        if output_path.exists() and not overwrite:
            raise FileExistsError(
                f"Output file '{output_path}' already exists. Use --overwrite to replace it."
            )
        # end if

        config = WaveSimulationConfig.from_dict({
            "impulses": [{"frame": 0, "x": 100, "y": 100}],
        })
        config.to_yaml(output_path)
    except (FileExistsError, ValueError, OSError) as exc:
        raise ClickBaseException(exc) from exc
    # end try

    console.print(f"[green]Saved default configuration to[/green] {output_path}")
# end def init_config


def main(
        argv: Optional[Sequence[str]] = None
) -> int:
    """Execute the CLI entry point as expected by ``console_scripts`` hooks.

    Args:
        argv: Optional sequence of command-line arguments. When ``None`` the
            process ``sys.argv`` is used instead.

    Returns:
        Zero on success, or one if a Click-handled exception was raised.
    """
    try:
        cli.main(args=list(argv) if argv is not None else None, prog_name="ripplelab", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return 1
    # end try
    return 0
# end def main


if __name__ == "__main__":
    raise SystemExit(main())
# end if
