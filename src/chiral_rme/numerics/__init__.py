"""数值工具模块。"""

from .quadrature import composite_radial_grid
from .radial import (
    OscillatorParameter,
    RadialParameters,
    RadialQuadrature,
    coordinate_space_norm,
)

__all__ = [
    "composite_radial_grid",
    "OscillatorParameter",
    "RadialParameters",
    "RadialQuadrature",
    "coordinate_space_norm",
]
