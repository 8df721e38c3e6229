"""两核子 LSJT 基、算符扇区与角动量耦合。"""

from .states import RelativeCMState, RelativeState
from .spaces import (
    RelativeCMSpace,
    RelativeCMSubspace,
    RelativeSpace,
    RelativeSubspace,
    make_space,
)
from .sectors import (
    OperatorLabels,
    OperatorMatrix,
    Sector,
    Sectors,
    allocated_entries,
    construct_zero_operator,
    sector_allowed,
    upper_triangular_entries,
)
from .angular import AngularCoupling

__all__ = [
    "RelativeState",
    "RelativeCMState",
    "RelativeSpace",
    "RelativeSubspace",
    "RelativeCMSpace",
    "RelativeCMSubspace",
    "make_space",
    "OperatorLabels",
    "OperatorMatrix",
    "Sector",
    "Sectors",
    "allocated_entries",
    "construct_zero_operator",
    "sector_allowed",
    "upper_triangular_entries",
    "AngularCoupling",
]
