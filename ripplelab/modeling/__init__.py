"""Wave field engine, boundary shapes, configuration and validation tools."""

from .wave_field import (
    REFERENCE_HEIGHT,
    InsideFn,
    WaveField,
    WaveFieldError,
)

from .shapes import (
    circle,
    ellipse,
    rectangle,
    polygon,
    circle_outline,
    mask_from_image,
    shape_from_config,
    shape_outline,
)

from .config import (
    ShapeKind,
    LatticeConfig,
    ShapeConfig,
    PhysicsConfig,
    ExcitationConfig,
    ImpulseConfig,
    SimulationConfig,
    PlotConfig,
    WaveSimulationConfig,
)

from .validation import (
    is_stable,
    is_finite_field,
    is_contained,
    has_quiet_border,
    is_valid_field,
)

__all__ = [
    # Wave field
    "REFERENCE_HEIGHT",
    "InsideFn",
    "WaveField",
    "WaveFieldError",

    # Shapes
    "circle",
    "ellipse",
    "rectangle",
    "polygon",
    "circle_outline",
    "mask_from_image",
    "shape_from_config",
    "shape_outline",

    # Configuration
    "ShapeKind",
    "LatticeConfig",
    "ShapeConfig",
    "PhysicsConfig",
    "ExcitationConfig",
    "ImpulseConfig",
    "SimulationConfig",
    "PlotConfig",
    "WaveSimulationConfig",

    # Validation
    "is_stable",
    "is_finite_field",
    "is_contained",
    "has_quiet_border",
    "is_valid_field",
]
