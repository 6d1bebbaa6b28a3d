"""
Validation utilities for wave fields.

This module provides read-only diagnostics used to check that a simulated
field respects its physical constraints: stable parameters, finite values,
no energy outside the medium and a quiet lattice border.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from rich.console import Console

from .wave_field import REFERENCE_HEIGHT, WaveField


console = Console()


def is_stable(wave_speed: float, damping: float) -> bool:
    """
    Check the parameter constraints of the explicit scheme.

    Args:
        wave_speed: Wave speed constant ``c``.
        damping: Velocity damping factor.

    Returns:
        True if ``c**2 <= 1`` and ``0 < damping <= 1``.
    """
    return bool(np.isfinite(wave_speed) and wave_speed ** 2 <= 1.0 and 0.0 < damping <= 1.0)
# end def is_stable


def is_finite_field(values: np.ndarray) -> bool:
    """True if no NaN or Inf is present."""
    return bool(np.all(np.isfinite(values)))
# end def is_finite_field


def is_contained(heights: np.ndarray, mask: np.ndarray) -> bool:
    """
    Check that every cell outside the medium holds the reference value.

    Args:
        heights: Height field of shape ``(height, width)``.
        mask: Boolean mask of the same shape.

    Returns:
        True if no energy leaked outside the mask.
    """
    return bool(np.all(heights[~mask] == REFERENCE_HEIGHT))
# end def is_contained


def has_quiet_border(heights: np.ndarray) -> bool:
    """Check that the outermost rows and columns hold the reference value."""
    return bool(
        np.all(heights[0, :] == REFERENCE_HEIGHT)
        and np.all(heights[-1, :] == REFERENCE_HEIGHT)
        and np.all(heights[:, 0] == REFERENCE_HEIGHT)
        and np.all(heights[:, -1] == REFERENCE_HEIGHT)
    )
# end def has_quiet_border


def is_valid_field(
        field: WaveField,
        max_abs: Optional[float] = None,
        verbose: bool = False,
) -> bool:
    """
    Check a wave field against all of its invariants.

    A valid field should:
    - Use stable parameters
    - Not contain NaN or Inf values
    - Hold the reference value outside the mask
    - Hold the reference value on the lattice border
    - Stay below ``max_abs`` in magnitude, when given

    Args:
        field: The wave field to inspect.
        max_abs: Optional bound on ``|height|``.
        verbose: Whether to print the failed criterion.

    Returns:
        True if the field is valid, False otherwise.
    """
    heights = field.heights

    if not is_stable(field.wave_speed, field.damping):
        if verbose:
            console.print(f"[red][!] Unstable parameters c={field.wave_speed}, damping={field.damping}[/]")
        return False
    # end if

    if not is_finite_field(heights) or not is_finite_field(field.velocities):
        if verbose:
            console.print("[red][!] NaN or Inf detected[/]")
        return False
    # end if

    if not is_contained(heights, field.mask):
        if verbose:
            leaked = int(np.count_nonzero(heights[~field.mask]))
            console.print(f"[red][!] {leaked} cells outside the mask carry energy[/]")
        return False
    # end if

    if not has_quiet_border(heights):
        if verbose:
            console.print("[red][!] Lattice border is not at rest[/]")
        return False
    # end if

    if max_abs is not None:
        peak = float(np.max(np.abs(heights)))
        if peak >= max_abs:
            if verbose:
                console.print(f"[red][!] Peak height {peak:.2f} exceeds {max_abs}[/]")
            return False
        # end if
    # end if

    return True
# end def is_valid_field
