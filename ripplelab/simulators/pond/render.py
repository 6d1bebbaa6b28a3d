"""
Rendering helpers for pond simulations.

Heights are mapped to colours through a matplotlib colormap. The mapping
clamps values to ``[-display_range, display_range]``; the physical field is
never modified.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import matplotlib
import matplotlib.pyplot as plt
import numpy as np
from matplotlib import animation
from rich.console import Console
from rich.progress import Progress, TextColumn, BarColumn, TaskProgressColumn, TimeRemainingColumn

from ripplelab.modeling import PlotConfig


console = Console()


def height_to_rgb(
        heights: np.ndarray,
        mask: np.ndarray,
        display_range: float = 80.0,
        colormap: str = "seismic",
        background: Sequence[int] = (15, 15, 25),
) -> np.ndarray:
    """
    Map a height field to an RGB image.

    Args:
        heights (numpy.ndarray): Height field of shape ``(height, width)``.
        mask (numpy.ndarray): Boolean mask of the same shape.
        display_range (float, optional): Heights beyond ``±display_range`` saturate.
            Defaults to 80.0.
        colormap (str, optional): Matplotlib colormap name. Defaults to ``seismic``.
        background (sequence, optional): RGB colour (0-255) of cells outside the mask.

    Returns:
        numpy.ndarray: Float image of shape ``(height, width, 3)`` with values in ``[0, 1]``.
    """
    if display_range <= 0:
        raise ValueError(f"display_range must be positive, got {display_range}")
    # end if

    norm = np.clip(heights, -display_range, display_range) / display_range
    cmap = matplotlib.colormaps[colormap]
    rgb = cmap((norm + 1.0) / 2.0)[..., :3]
    rgb[~mask] = np.asarray(background, dtype=np.float64) / 255.0
    return rgb
# end def height_to_rgb


def _draw_outline(ax: plt.Axes, outline: Optional[np.ndarray], plot_cfg: PlotConfig) -> None:
    """
    Draw the closed shape outline on the axes.
    """
    if outline is None or len(outline) < 2 or not plot_cfg.show_outline:
        return
    # end if
    closed = np.vstack([outline, outline[:1]])
    ax.plot(closed[:, 0], closed[:, 1], color=plot_cfg.outline_color, linewidth=2)
# end def _draw_outline


def _frame_title(plot_cfg: PlotConfig, step: Optional[int]) -> str:
    if step is None:
        return plot_cfg.title
    # end if
    return f"{plot_cfg.title} - Step {step}"
# end def _frame_title


def plot_frame(
        heights: np.ndarray,
        mask: np.ndarray,
        plot_cfg: Optional[PlotConfig] = None,
        outline: Optional[np.ndarray] = None,
        step: Optional[int] = None,
        output: Optional[Path] = None,
        show: bool = False,
) -> plt.Figure:
    """
    Render one height field snapshot.

    Args:
        heights (numpy.ndarray): Height field to display.
        mask (numpy.ndarray): Boundary mask.
        plot_cfg (PlotConfig, optional): Rendering options. Defaults to ``PlotConfig()``.
        outline (numpy.ndarray, optional): Shape outline points ``(n, 2)``.
        step (int, optional): Step number shown in the title.
        output (Path, optional): File where the figure is saved.
        show (bool, optional): Display the figure interactively. Defaults to False.

    Returns:
        matplotlib.figure.Figure: The figure (closed unless ``show`` is True).
    """
    plot_cfg = plot_cfg if plot_cfg is not None else PlotConfig()

    fig, ax = plt.subplots(figsize=plot_cfg.figsize, dpi=plot_cfg.dpi)
    rgb = height_to_rgb(
        heights,
        mask,
        display_range=plot_cfg.display_range,
        colormap=plot_cfg.colormap,
        background=plot_cfg.background,
    )
    ax.imshow(rgb, origin="upper", interpolation="nearest")
    _draw_outline(ax, outline, plot_cfg)
    ax.set_title(_frame_title(plot_cfg, step))
    ax.set_xlabel("x (cells)")
    ax.set_ylabel("y (cells)")
    ax.set_xlim(-0.5, heights.shape[1] - 0.5)
    ax.set_ylim(heights.shape[0] - 0.5, -0.5)
    fig.tight_layout()

    if output is not None:
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output, dpi=plot_cfg.dpi)
    # end if

    if show:
        plt.show()
    else:
        plt.close(fig)
    # end if
    return fig
# end def plot_frame


def plot_mask(
        mask: np.ndarray,
        plot_cfg: Optional[PlotConfig] = None,
        outline: Optional[np.ndarray] = None,
        output: Optional[Path] = None,
        show: bool = False,
) -> plt.Figure:
    """
    Render the boundary mask, inside cells in white.

    Args:
        mask (numpy.ndarray): Boundary mask.
        plot_cfg (PlotConfig, optional): Rendering options.
        outline (numpy.ndarray, optional): Shape outline points.
        output (Path, optional): File where the figure is saved.
        show (bool, optional): Display the figure interactively.

    Returns:
        matplotlib.figure.Figure: The figure.
    """
    plot_cfg = plot_cfg if plot_cfg is not None else PlotConfig()

    fig, ax = plt.subplots(figsize=plot_cfg.figsize, dpi=plot_cfg.dpi)
    ax.imshow(mask, cmap="gray", origin="upper", interpolation="nearest", vmin=0, vmax=1)
    _draw_outline(ax, outline, plot_cfg)
    ax.set_title(f"{plot_cfg.title} - Mask ({int(mask.sum())} cells inside)")
    ax.set_xlabel("x (cells)")
    ax.set_ylabel("y (cells)")
    fig.tight_layout()

    if output is not None:
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output, dpi=plot_cfg.dpi)
    # end if

    if show:
        plt.show()
    else:
        plt.close(fig)
    # end if
    return fig
# end def plot_mask


def save_snapshot_images(
        results: Dict[str, np.ndarray],
        output_dir: Union[str, Path],
        plot_cfg: Optional[PlotConfig] = None,
) -> List[Path]:
    """
    Save every snapshot of a run as ``height_step_XXXXX.png``.

    Args:
        results (dict): Output of ``run_simulation`` or ``load_results``.
        output_dir (str or Path): Destination directory.
        plot_cfg (PlotConfig, optional): Rendering options.

    Returns:
        List[Path]: Paths of the written images.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    steps = results.get('snapshot_steps')
    for index, snapshot in enumerate(results['snapshots']):
        step = int(steps[index]) if steps is not None else index
        path = output_dir / f"height_step_{step:05d}.png"
        plot_frame(
            snapshot,
            results['mask'],
            plot_cfg=plot_cfg,
            outline=results.get('outline'),
            step=step,
            output=path,
        )
        paths.append(path)
    # end for
    return paths
# end def save_snapshot_images


def animate_snapshots(
        snapshots: np.ndarray,
        mask: np.ndarray,
        output_path: Union[str, Path],
        plot_cfg: Optional[PlotConfig] = None,
        steps: Optional[Sequence[int]] = None,
        outline: Optional[np.ndarray] = None,
) -> Optional[Path]:
    """
    Animate a sequence of height snapshots.

    A ``.gif`` destination uses the Pillow writer, anything else ffmpeg.

    Args:
        snapshots (numpy.ndarray): Array of shape ``(n, height, width)``.
        mask (numpy.ndarray): Boundary mask.
        output_path (str or Path): Destination file.
        plot_cfg (PlotConfig, optional): Rendering options.
        steps (sequence, optional): Step number of each snapshot, shown in the title.
        outline (numpy.ndarray, optional): Shape outline points.

    Returns:
        Path or None: The written file, or None when there is nothing to animate.
    """
    if len(snapshots) == 0:
        console.log("[red]No snapshots available for animation.[/]")
        return None
    # end if

    plot_cfg = plot_cfg if plot_cfg is not None else PlotConfig()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    def to_rgb(heights: np.ndarray) -> np.ndarray:
        return height_to_rgb(
            heights,
            mask,
            display_range=plot_cfg.display_range,
            colormap=plot_cfg.colormap,
            background=plot_cfg.background,
        )
    # end def to_rgb

    fig, ax = plt.subplots(figsize=plot_cfg.figsize, dpi=plot_cfg.dpi)
    image = ax.imshow(to_rgb(snapshots[0]), origin="upper", interpolation="nearest")
    _draw_outline(ax, outline, plot_cfg)
    ax.set_xlabel("x (cells)")
    ax.set_ylabel("y (cells)")
    title = ax.set_title(_frame_title(plot_cfg, steps[0] if steps is not None else 0))
    fig.tight_layout()

    def update(frame_index):
        image.set_data(to_rgb(snapshots[frame_index]))
        step = steps[frame_index] if steps is not None else frame_index
        title.set_text(_frame_title(plot_cfg, int(step)))
        return image, title
    # end def update

    anim = animation.FuncAnimation(
        fig, update, frames=len(snapshots),
        interval=1000 / plot_cfg.fps, blit=False
    )

    writer = "pillow" if output_path.suffix.lower() == ".gif" else "ffmpeg"
    with Progress(
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeRemainingColumn(),
    ) as progress:
        task = progress.add_task("[cyan]Rendering frames...", total=len(snapshots))
        anim.save(
            output_path,
            writer=writer,
            fps=plot_cfg.fps,
            progress_callback=lambda current, total: progress.update(task, completed=current + 1),
        )
    # end with
    plt.close(fig)

    console.log(f"[cyan]Saved animation to:[/cyan] {output_path}")
    return output_path
# end def animate_snapshots
