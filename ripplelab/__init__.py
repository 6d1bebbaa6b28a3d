"""ripplelab: 2D wave propagation on masked lattices."""

__version__ = "0.1.0"
