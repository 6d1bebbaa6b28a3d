"""
2D Scalar Wave Field on a Masked Lattice.

This module implements the finite-difference engine behind the pond
simulations. A height map and its velocity live on a fixed lattice, a static
boundary mask tells which cells belong to the medium, and every call to
:meth:`WaveField.step` advances the discretised wave equation by one frame.
Walls of the mask mirror the wave back inside while the outermost lattice
rows and columns are clamped to zero.
"""

from __future__ import annotations

from typing import Callable, Tuple

import numpy as np


# Reference value held by every cell that carries no physical state.
REFERENCE_HEIGHT = 0.0

# Predicate deciding whether a lattice cell belongs to the medium.
InsideFn = Callable[[float, float], bool]


class WaveFieldError(ValueError):
    """
    Raised when a wave field cannot be constructed.
    """
# end class WaveFieldError


class WaveField:
    """
    Height and velocity fields over a masked 2D lattice.

    The fields are kept as flat contiguous buffers of size ``width * height``
    indexed by ``y * width + x``. The mask is a parallel flat boolean buffer
    computed once at construction.
    """

    def __init__(
            self,
            width: int,
            height: int,
            inside: InsideFn,
            wave_speed: float = 0.5,
            damping: float = 0.995
    ):
        """
        Build a wave field and evaluate the shape predicate on every cell.

        Args:
            width (int): Number of lattice columns.
            height (int): Number of lattice rows.
            inside (callable): Predicate ``inside(x, y) -> bool`` in lattice
                coordinates, True for cells inside the medium.
            wave_speed (float, optional): Wave speed constant ``c``. Must satisfy
                ``c**2 <= 1``. Defaults to 0.5.
            damping (float, optional): Per-step multiplicative factor applied to
                the velocity, in ``(0, 1]``. Defaults to 0.995.

        Raises:
            WaveFieldError: If the dimensions or the physical parameters are invalid.
        """
        width, height = self._check_dimensions(width, height)
        mask = np.fromiter(
            (bool(inside(x, y)) for y in range(height) for x in range(width)),
            dtype=bool,
            count=width * height,
        )
        self._setup(width, height, mask, wave_speed, damping)
    # end def __init__

    @classmethod
    def from_mask(
            cls,
            mask: np.ndarray,
            wave_speed: float = 0.5,
            damping: float = 0.995
    ) -> WaveField:
        """
        Build a wave field from a precomputed boolean mask.

        Args:
            mask (numpy.ndarray): Boolean array of shape ``(height, width)``.
            wave_speed (float, optional): Wave speed constant. Defaults to 0.5.
            damping (float, optional): Velocity damping factor. Defaults to 0.995.

        Returns:
            WaveField: A new field sharing no memory with ``mask``.
        """
        mask = np.asarray(mask)
        if mask.ndim != 2:
            raise WaveFieldError(f"Mask must be 2D, got shape {mask.shape}")
        # end if
        width, height = cls._check_dimensions(mask.shape[1], mask.shape[0])
        field = cls.__new__(cls)
        field._setup(width, height, mask.astype(bool).ravel().copy(), wave_speed, damping)
        return field
    # end def from_mask

    @staticmethod
    def _check_dimensions(width, height) -> Tuple[int, int]:
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise WaveFieldError(f"Lattice {name} must be an integer, got {value!r}")
            # end if
            if value <= 0:
                raise WaveFieldError(f"Lattice {name} must be positive, got {value}")
            # end if
        # end for
        return int(width), int(height)
    # end def _check_dimensions

    def _setup(
            self,
            width: int,
            height: int,
            mask: np.ndarray,
            wave_speed: float,
            damping: float
    ) -> None:
        wave_speed = float(wave_speed)
        damping = float(damping)
        if not np.isfinite(wave_speed) or wave_speed ** 2 > 1.0:
            raise WaveFieldError(
                f"Unstable wave speed {wave_speed}: the scheme requires wave_speed**2 <= 1"
            )
        # end if
        if not 0.0 < damping <= 1.0:
            raise WaveFieldError(f"Damping must lie in (0, 1], got {damping}")
        # end if

        self._width = width
        self._height = height
        self._wave_speed = wave_speed
        self._damping = damping
        self._step_count = 0

        size = width * height
        self._mask = mask
        self._mask.flags.writeable = False
        self._height_buf = np.zeros(size, dtype=np.float64)
        self._velocity_buf = np.zeros(size, dtype=np.float64)
        self._scratch_buf = np.zeros(size, dtype=np.float64)

        # Outermost rows and columns of the lattice
        border = np.zeros((height, width), dtype=bool)
        border[0, :] = True
        border[-1, :] = True
        border[:, 0] = True
        border[:, -1] = True
        self._border = np.flatnonzero(border)

        # Swept cells: inside the mask and away from the border, so all four
        # neighbours are valid flat indices.
        self._cells = np.flatnonzero(self._mask & ~border.ravel())
        self._neighbours = np.stack([
            self._cells - width,
            self._cells + width,
            self._cells - 1,
            self._cells + 1,
        ])
        self._neighbour_inside = self._mask[self._neighbours]

        # Excitations only reach cells of the medium
        self._mask_2d = self._mask.reshape(height, width)
    # end def _setup

    # region PROPERTIES

    @property
    def width(self) -> int:
        """Number of lattice columns."""
        return self._width
    # end def width

    @property
    def height(self) -> int:
        """Number of lattice rows."""
        return self._height
    # end def height

    @property
    def shape(self) -> Tuple[int, int]:
        """Lattice shape as ``(height, width)``."""
        return self._height, self._width
    # end def shape

    @property
    def wave_speed(self) -> float:
        return self._wave_speed
    # end def wave_speed

    @property
    def damping(self) -> float:
        return self._damping
    # end def damping

    @property
    def step_count(self) -> int:
        """Number of steps taken since construction or the last reset."""
        return self._step_count
    # end def step_count

    @property
    def mask(self) -> np.ndarray:
        """Read-only ``(height, width)`` view of the boundary mask."""
        return self._mask_2d
    # end def mask

    @property
    def heights(self) -> np.ndarray:
        """Read-only ``(height, width)`` view of the current height field."""
        view = self._height_buf.reshape(self._height, self._width).view()
        view.flags.writeable = False
        return view
    # end def heights

    @property
    def velocities(self) -> np.ndarray:
        """Read-only ``(height, width)`` view of the current velocity field."""
        view = self._velocity_buf.reshape(self._height, self._width).view()
        view.flags.writeable = False
        return view
    # end def velocities

    # endregion PROPERTIES

    # region PUBLIC

    def excite(
            self,
            cx: float,
            cy: float,
            strength: float,
            radius: float
    ) -> None:
        """
        Inject an impulse into the velocity field around ``(cx, cy)``.

        Every cell of the medium within ``radius`` of the centre receives
        ``strength * (1 - d / radius) ** 2`` where ``d`` is its Euclidean
        distance to the centre. Contributions accumulate with any previous
        excitation. Cells outside the lattice are ignored.

        Args:
            cx (float): Horizontal lattice coordinate of the centre.
            cy (float): Vertical lattice coordinate of the centre.
            strength (float): Peak velocity added at the centre.
            radius (float): Radius of the radial falloff, in cells.
        """
        if strength == 0 or radius <= 0:
            return
        # end if

        x0 = max(0, int(np.floor(cx - radius)))
        x1 = min(self._width - 1, int(np.ceil(cx + radius)))
        y0 = max(0, int(np.floor(cy - radius)))
        y1 = min(self._height - 1, int(np.ceil(cy + radius)))
        if x0 > x1 or y0 > y1:
            return
        # end if

        ys, xs = np.ogrid[y0:y1 + 1, x0:x1 + 1]
        distance = np.hypot(xs - cx, ys - cy)
        falloff = np.clip(1.0 - distance / radius, 0.0, None) ** 2
        contribution = strength * falloff
        contribution[~self._mask_2d[y0:y1 + 1, x0:x1 + 1]] = 0.0

        velocity = self._velocity_buf.reshape(self._height, self._width)
        velocity[y0:y1 + 1, x0:x1 + 1] += contribution
    # end def excite

    def step(self) -> None:
        """
        Advance the field by one fixed time step.

        Heights are integrated first, then the Laplacian of the settled heights
        drives the new velocities, which are written to a scratch buffer and
        copied back once the whole sweep is done.
        """
        cells = self._cells
        heights = self._height_buf

        # Integrate position
        heights[cells] += self._velocity_buf[cells]

        # Wall neighbours contribute -h[c], i.e. a zero neighbour height
        centre = heights[cells]
        neighbour_sum = np.where(self._neighbour_inside, heights[self._neighbours], 0.0).sum(axis=0)
        laplacian = (neighbour_sum - 4.0 * centre) / 4.0
        acceleration = laplacian * self._wave_speed ** 2

        # Read old, write new, commit in place so views stay live
        scratch = self._scratch_buf
        scratch.fill(0.0)
        scratch[cells] = (self._velocity_buf[cells] + acceleration) * self._damping
        np.copyto(self._velocity_buf, scratch)

        # Absorbing lattice border
        heights[self._border] = REFERENCE_HEIGHT
        self._step_count += 1
    # end def step

    def height_at(self, x: int, y: int) -> float:
        """
        Return the height of cell ``(x, y)``.

        Args:
            x (int): Column index.
            y (int): Row index.

        Returns:
            float: Current height, or the reference value outside the lattice.
        """
        x, y = int(x), int(y)
        if not (0 <= x < self._width and 0 <= y < self._height):
            return REFERENCE_HEIGHT
        # end if
        return float(self._height_buf[y * self._width + x])
    # end def height_at

    def energy(self) -> float:
        """
        Sum of squared heights over the cells of the medium.

        Returns:
            float: Non-negative scalar, zero for a field at rest.
        """
        inside = self._height_buf[self._mask]
        return float(np.dot(inside, inside))
    # end def energy

    def snapshot(self) -> np.ndarray:
        """Copy of the current height field as a ``(height, width)`` array."""
        return self._height_buf.reshape(self._height, self._width).copy()
    # end def snapshot

    def reset(self) -> None:
        """Put the medium back at rest, keeping the mask."""
        self._height_buf.fill(REFERENCE_HEIGHT)
        self._velocity_buf.fill(0.0)
        self._scratch_buf.fill(0.0)
        self._step_count = 0
    # end def reset

    # endregion PUBLIC

    def __repr__(self) -> str:
        return (
            f"WaveField({self._width}x{self._height}, inside={int(self._mask.sum())}, "
            f"wave_speed={self._wave_speed}, damping={self._damping}, steps={self._step_count})"
        )
    # end def __repr__

# end class WaveField
