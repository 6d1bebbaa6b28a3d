"""Frame-by-frame driver and rendering for pond simulations."""

from .driver import (
    Impulse,
    build_field,
    screen_to_lattice,
    impulses_for_frame,
    run_simulation,
    save_results,
    load_results,
)
from .render import (
    height_to_rgb,
    plot_frame,
    plot_mask,
    save_snapshot_images,
    animate_snapshots,
)

__all__ = [
    "Impulse",
    "build_field",
    "screen_to_lattice",
    "impulses_for_frame",
    "run_simulation",
    "save_results",
    "load_results",
    "height_to_rgb",
    "plot_frame",
    "plot_mask",
    "save_snapshot_images",
    "animate_snapshots",
]
