"""
Shape predicates for wave field boundary masks.

Every helper returns a callable ``inside(x, y) -> bool`` expressed in lattice
coordinates, ready to be handed to :class:`~ripplelab.modeling.wave_field.WaveField`.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Sequence, Tuple, Union

import matplotlib.image as mpimg
import numpy as np
from scipy.ndimage import zoom

from .wave_field import InsideFn

if TYPE_CHECKING:
    from .config import ShapeConfig


def circle(cx: float, cy: float, radius: float) -> InsideFn:
    """
    Disk of the given radius, boundary excluded.

    Args:
        cx (float): Horizontal coordinate of the centre.
        cy (float): Vertical coordinate of the centre.
        radius (float): Radius in cells.

    Returns:
        callable: Predicate true when the distance to the centre is below ``radius``.
    """
    if radius <= 0:
        raise ValueError(f"Circle radius must be positive, got {radius}")
    # end if

    def inside(x: float, y: float) -> bool:
        return (x - cx) ** 2 + (y - cy) ** 2 < radius ** 2
    # end def inside

    return inside
# end def circle


def ellipse(cx: float, cy: float, rx: float, ry: float) -> InsideFn:
    """
    Axis-aligned ellipse with semi-axes ``rx`` and ``ry``.
    """
    if rx <= 0 or ry <= 0:
        raise ValueError(f"Ellipse radii must be positive, got ({rx}, {ry})")
    # end if

    def inside(x: float, y: float) -> bool:
        return ((x - cx) / rx) ** 2 + ((y - cy) / ry) ** 2 < 1.0
    # end def inside

    return inside
# end def ellipse


def rectangle(x0: float, y0: float, x1: float, y1: float) -> InsideFn:
    """
    Half-open rectangle ``[x0, x1) x [y0, y1)``.
    """
    if x1 <= x0 or y1 <= y0:
        raise ValueError(f"Degenerate rectangle ({x0}, {y0}) - ({x1}, {y1})")
    # end if

    def inside(x: float, y: float) -> bool:
        return x0 <= x < x1 and y0 <= y < y1
    # end def inside

    return inside
# end def rectangle


def polygon(vertices: Sequence[Tuple[float, float]]) -> InsideFn:
    """
    Simple polygon tested with the even-odd ray casting rule.

    Args:
        vertices (sequence): Polygon corners as ``(x, y)`` pairs, in order.
            The polygon is closed implicitly.

    Returns:
        callable: Predicate true for points strictly enclosed by the polygon.
    """
    points = np.asarray(vertices, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 2 or len(points) < 3:
        raise ValueError("A polygon needs at least three (x, y) vertices")
    # end if
    xs, ys = points[:, 0], points[:, 1]
    xs_next, ys_next = np.roll(xs, -1), np.roll(ys, -1)

    def inside(x: float, y: float) -> bool:
        crosses = (ys > y) != (ys_next > y)
        with np.errstate(divide="ignore", invalid="ignore"):
            x_cross = xs + (y - ys) * (xs_next - xs) / (ys_next - ys)
        # end with
        return bool(np.count_nonzero(crosses & (x < x_cross)) % 2)
    # end def inside

    return inside
# end def polygon


def circle_outline(
        cx: float,
        cy: float,
        radius: float,
        segments: int = 200
) -> np.ndarray:
    """
    Sample points along a circle, used to draw the pond rim.

    Args:
        cx (float): Horizontal coordinate of the centre.
        cy (float): Vertical coordinate of the centre.
        radius (float): Circle radius.
        segments (int, optional): Number of points. Defaults to 200.

    Returns:
        numpy.ndarray: Array of shape ``(segments, 2)`` holding ``(x, y)`` points.
    """
    angles = np.arange(segments) / segments * 2.0 * np.pi
    return np.column_stack((cx + radius * np.cos(angles), cy + radius * np.sin(angles)))
# end def circle_outline


def mask_from_image(
        path: Union[str, Path],
        shape: Tuple[int, int],
        threshold: float = 0.5,
        invert: bool = False
) -> np.ndarray:
    """
    Build a boolean mask from a greyscale or RGB image.

    Bright pixels are inside the medium. The image is resampled with nearest
    neighbour interpolation so the mask keeps hard edges.

    Args:
        path (str or Path): Image file readable by matplotlib.
        shape (tuple): Target lattice shape ``(height, width)``.
        threshold (float, optional): Grey level separating inside from outside,
            on a 0-1 scale. Defaults to 0.5.
        invert (bool, optional): Treat dark pixels as inside. Defaults to False.

    Returns:
        numpy.ndarray: Boolean array of the requested shape.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Mask image not found: {path}")
    # end if

    img = np.asarray(mpimg.imread(path), dtype=np.float64)
    if img.ndim == 3:
        # Drop alpha, convert RGB to grayscale
        img = np.mean(img[..., :3], axis=2)
    # end if
    if img.max() > 1.0:
        img = img / 255.0
    # end if

    if img.shape != tuple(shape):
        zoom_factors = (shape[0] / img.shape[0], shape[1] / img.shape[1])
        img = zoom(img, zoom_factors, order=0)
        # zoom may be off by one cell on odd ratios
        padded = np.zeros(shape, dtype=np.float64)
        rows, cols = min(shape[0], img.shape[0]), min(shape[1], img.shape[1])
        padded[:rows, :cols] = img[:rows, :cols]
        img = padded
    # end if

    mask = img >= threshold
    return ~mask if invert else mask
# end def mask_from_image


def shape_from_config(
        shape_config: ShapeConfig,
        width: int,
        height: int
) -> InsideFn:
    """
    Build the boundary predicate described by a shape configuration.

    Args:
        shape_config (ShapeConfig): Validated shape section.
        width (int): Lattice width, used for the default centre.
        height (int): Lattice height, used for the default centre.

    Returns:
        callable: Predicate ``inside(x, y) -> bool``.
    """
    if shape_config.center is not None:
        cx, cy = shape_config.center
    else:
        cx, cy = width / 2.0, height / 2.0
    # end if

    kind = shape_config.kind
    if kind == "circle":
        return circle(cx, cy, shape_config.radius)
    elif kind == "ellipse":
        rx, ry = shape_config.radii
        return ellipse(cx, cy, rx, ry)
    elif kind == "rectangle":
        (x0, y0), (x1, y1) = shape_config.corners
        return rectangle(x0, y0, x1, y1)
    elif kind == "polygon":
        return polygon(shape_config.vertices)
    elif kind == "image":
        mask = mask_from_image(
            shape_config.image,
            (height, width),
            threshold=shape_config.threshold,
            invert=shape_config.invert,
        )
        return lambda x, y: bool(mask[y, x])
    # end if
    raise ValueError(f"Unknown shape kind: {kind}")
# end def shape_from_config


def shape_outline(
        shape_config: ShapeConfig,
        width: int,
        height: int
) -> np.ndarray:
    """
    Closed outline of a configured shape as ``(n, 2)`` points, for drawing.

    Image masks have no analytic outline and yield an empty array.
    """
    if shape_config.center is not None:
        cx, cy = shape_config.center
    else:
        cx, cy = width / 2.0, height / 2.0
    # end if

    kind = shape_config.kind
    if kind == "circle":
        return circle_outline(cx, cy, shape_config.radius)
    elif kind == "ellipse":
        rx, ry = shape_config.radii
        angles = np.arange(200) / 200 * 2.0 * np.pi
        return np.column_stack((cx + rx * np.cos(angles), cy + ry * np.sin(angles)))
    elif kind == "rectangle":
        (x0, y0), (x1, y1) = shape_config.corners
        return np.array([(x0, y0), (x1, y0), (x1, y1), (x0, y1)], dtype=np.float64)
    elif kind == "polygon":
        return np.asarray(shape_config.vertices, dtype=np.float64)
    # end if
    return np.empty((0, 2), dtype=np.float64)
# end def shape_outline
