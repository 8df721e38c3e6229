"""手征算符族与手征阶。"""

from .orders import ChiralOrder, OrderSchedule, ScheduleState
from .base import (
    ChiralOperator,
    available_operators,
    make_operator,
    register_operator,
    safe_evaluate,
)
from .m1 import M1Operator

__all__ = [
    "ChiralOrder",
    "OrderSchedule",
    "ScheduleState",
    "ChiralOperator",
    "M1Operator",
    "available_operators",
    "make_operator",
    "register_operator",
    "safe_evaluate",
]
