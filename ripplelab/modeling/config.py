"""
Configuration models for pond simulations.

The configuration is written in YAML and validated with pydantic. Each
section mirrors one concern of the simulation: the lattice, the shape of the
medium, the physical constants, the default impulse, the scripted pointer
input, the run length and the rendering options.
"""

from __future__ import annotations

import math
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

import matplotlib
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class ShapeKind(str, Enum):
    """Supported boundary shapes."""
    CIRCLE = "circle"
    ELLIPSE = "ellipse"
    RECTANGLE = "rectangle"
    POLYGON = "polygon"
    IMAGE = "image"


class LatticeConfig(BaseModel):
    """
    Lattice dimensions.

    Attributes:
        width (int): Number of columns.
        height (int): Number of rows.
        cell_size (int): Display pixels per lattice cell.
    """
    width: int = Field(200, gt=0)
    height: int = Field(200, gt=0)
    cell_size: int = Field(1, gt=0)

    model_config = {"extra": "forbid"}


class ShapeConfig(BaseModel):
    """
    Shape of the medium, in lattice coordinates.

    Only the attributes relevant to ``kind`` are used. ``center`` defaults to
    the middle of the lattice.
    """
    kind: ShapeKind = ShapeKind.CIRCLE
    center: Optional[Tuple[float, float]] = None
    radius: Optional[float] = 80.0
    radii: Optional[Tuple[float, float]] = None
    corners: Optional[Tuple[Tuple[float, float], Tuple[float, float]]] = None
    vertices: Optional[List[Tuple[float, float]]] = None
    image: Optional[Path] = None
    threshold: float = Field(0.5, ge=0.0, le=1.0)
    invert: bool = False

    model_config = {"extra": "forbid"}

    @model_validator(mode='after')
    def validate_kind_parameters(self) -> 'ShapeConfig':
        """Check that the parameters required by the shape kind are present."""
        if self.kind == ShapeKind.CIRCLE:
            if self.radius is None or self.radius <= 0:
                raise ValueError("circle shape requires a positive radius")
        elif self.kind == ShapeKind.ELLIPSE:
            if self.radii is None or min(self.radii) <= 0:
                raise ValueError("ellipse shape requires two positive radii")
        elif self.kind == ShapeKind.RECTANGLE:
            if self.corners is None:
                raise ValueError("rectangle shape requires corners [[x0, y0], [x1, y1]]")
            (x0, y0), (x1, y1) = self.corners
            if x1 <= x0 or y1 <= y0:
                raise ValueError("rectangle corners must satisfy x0 < x1 and y0 < y1")
        elif self.kind == ShapeKind.POLYGON:
            if self.vertices is None or len(self.vertices) < 3:
                raise ValueError("polygon shape requires at least three vertices")
        elif self.kind == ShapeKind.IMAGE:
            if self.image is None:
                raise ValueError("image shape requires an image path")
        return self


class PhysicsConfig(BaseModel):
    """
    Physical constants of the medium.

    Attributes:
        wave_speed (float): Wave speed constant ``c``, with ``c**2 <= 1``.
        damping (float): Velocity damping factor per step, in ``(0, 1]``.
    """
    wave_speed: float = 0.5
    damping: float = 0.995

    model_config = {"extra": "forbid"}

    @field_validator("wave_speed")
    @classmethod
    def validate_wave_speed(cls, value: float) -> float:
        if not math.isfinite(value) or value ** 2 > 1.0:
            raise ValueError(f"wave_speed**2 must not exceed 1 for a stable scheme, got {value}")
        return value

    @field_validator("damping")
    @classmethod
    def validate_damping(cls, value: float) -> float:
        if not 0.0 < value <= 1.0:
            raise ValueError(f"damping must lie in (0, 1], got {value}")
        return value


class ExcitationConfig(BaseModel):
    """Default impulse applied for each pointer event."""
    strength: float = 20.0
    radius: float = Field(8.0, gt=0)

    model_config = {"extra": "forbid"}


class ImpulseConfig(BaseModel):
    """
    A scripted pointer press.

    Attributes:
        frame (int): First frame on which the impulse is applied.
        x (float): Horizontal position.
        y (float): Vertical position.
        strength (float, optional): Overrides the default strength.
        radius (float, optional): Overrides the default radius.
        duration (int): Number of consecutive frames the button is held.
        units (str): ``cells`` for lattice coordinates, ``pixels`` for display
            coordinates divided by the cell size.
    """
    frame: int = Field(0, ge=0)
    x: float
    y: float
    strength: Optional[float] = None
    radius: Optional[float] = Field(None, gt=0)
    duration: int = Field(1, ge=1)
    units: Literal["cells", "pixels"] = "cells"

    model_config = {"extra": "forbid"}

    def active_on(self, frame: int) -> bool:
        """Whether the button is held on the given frame."""
        return self.frame <= frame < self.frame + self.duration


class SimulationConfig(BaseModel):
    """Run length and snapshot options."""
    frames: int = Field(200, gt=0)
    snapshot_interval: int = Field(5, ge=1)
    save_snapshots: bool = False
    output_dir: Path = Path("outputs")

    model_config = {"extra": "forbid"}


class PlotConfig(BaseModel):
    """
    Rendering options.

    ``display_range`` bounds the colour mapping only; the physical field is
    never clamped.
    """
    display_range: float = Field(80.0, gt=0)
    colormap: str = "seismic"
    background: Tuple[int, int, int] = (15, 15, 25)
    outline_color: str = "#c89664"
    show_outline: bool = True
    title: str = "Wave Simulation - Pond"
    figsize: Tuple[float, float] = (10.0, 8.0)
    dpi: int = Field(100, gt=0)
    fps: int = Field(20, gt=0)

    model_config = {"extra": "forbid"}

    @field_validator("colormap")
    @classmethod
    def validate_colormap(cls, value: str) -> str:
        if value not in matplotlib.colormaps:
            raise ValueError(f"Unknown matplotlib colormap: {value}")
        return value

    @field_validator("background")
    @classmethod
    def validate_background(cls, value: Tuple[int, int, int]) -> Tuple[int, int, int]:
        if any(not 0 <= channel <= 255 for channel in value):
            raise ValueError(f"background channels must lie in [0, 255], got {value}")
        return value


class WaveSimulationConfig(BaseModel):
    """
    Complete description of a pond simulation.
    """
    lattice: LatticeConfig = Field(default_factory=LatticeConfig)
    shape: ShapeConfig = Field(default_factory=ShapeConfig)
    physics: PhysicsConfig = Field(default_factory=PhysicsConfig)
    excitation: ExcitationConfig = Field(default_factory=ExcitationConfig)
    impulses: List[ImpulseConfig] = Field(default_factory=list)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    plot: PlotConfig = Field(default_factory=PlotConfig)

    model_config = {"extra": "forbid"}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> WaveSimulationConfig:
        """
        Validate a configuration dictionary.

        Args:
            data (dict, optional): Raw configuration. ``None`` yields the defaults.

        Returns:
            WaveSimulationConfig: The validated configuration.
        """
        if data is None:
            data = {}
        # end if
        if not isinstance(data, dict):
            raise ValueError(f"Configuration must be a mapping, got {type(data).__name__}")
        # end if
        return cls.model_validate(data)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> WaveSimulationConfig:
        """
        Load and validate a YAML configuration file.

        Args:
            path (str or Path): Path to the YAML file.

        Returns:
            WaveSimulationConfig: The validated configuration.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the content is not a valid configuration.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        # end if

        with open(path, "r") as f:
            data = yaml.safe_load(f)
        # end with
        return cls.from_dict(data)

    def to_yaml(self, path: Union[str, Path]) -> Path:
        """
        Write the configuration to a YAML file.

        Args:
            path (str or Path): Destination file.

        Returns:
            Path: The written path.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, sort_keys=False)
        # end with
        return path
