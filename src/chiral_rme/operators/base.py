"""手征算符族：统一的约化矩阵元接口、按名称创建的工厂与占位算符。"""
from __future__ import annotations

import abc
import logging
import math
from typing import Callable, Dict, Iterable, Optional, Tuple, Type, Union

import numpy as np

from chiral_rme.basis.angular import AngularCoupling
from chiral_rme.basis.states import RelativeCMState, RelativeState
from chiral_rme.constants import DEFAULT_CONSTANTS, PhysicalConstants
from chiral_rme.errors import UnknownOperatorError
from chiral_rme.numerics.radial import OscillatorParameter, RadialQuadrature

from .orders import ChiralOrder

logger = logging.getLogger(__name__)

BasisState = Union[RelativeState, RelativeCMState]

BODIES = (1, 2)


def safe_evaluate(function: Callable[..., float], *args, **kwargs) -> float:
    """调用矩阵元公式，并把 NaN 结果置为 0。

    在量子数简并组合处分母为零，浮点运算给出 NaN；这种情况不是错误。
    """
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        value = float(function(*args, **kwargs))
    if math.isnan(value):
        return 0.0
    return value


class ChiralOperator(abc.ABC):
    """手征有效场论算符的抽象基类。

    子类声明张量秩 ``J0`` 与宇称 ``G0``，并实现 :meth:`matrix_element`，
    即给定阶、体数与同位旋张量秩时的单项公式。``order`` 只是元数据：
    任意阶的矩阵元都可以单独计算。
    """

    name: str = ""
    J0: int = 0
    G0: int = 0

    def __init__(
        self,
        order: "str | ChiralOrder" = ChiralOrder.FULL,
        *,
        T0: int = 0,
        constants: Optional[PhysicalConstants] = None,
        angular: Optional[AngularCoupling] = None,
        quadrature: Optional[RadialQuadrature] = None,
        regularize: bool = True,
        regulator: float = 1.0,
    ) -> None:
        self.order = ChiralOrder.parse(order)
        self.T0 = int(T0)
        self.constants = constants if constants is not None else DEFAULT_CONSTANTS
        self.angular = angular if angular is not None else AngularCoupling()
        self.quadrature = quadrature if quadrature is not None else RadialQuadrature()
        self.regularize = bool(regularize)
        self.regulator = float(regulator)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(order={self.order.label!r}, J0={self.J0}, "
            f"G0={self.G0}, T0={self.T0})"
        )

    @abc.abstractmethod
    def matrix_element(
        self,
        order: ChiralOrder,
        bra: BasisState,
        ket: BasisState,
        b: OscillatorParameter,
        T0: int,
        body: int,
    ) -> float:
        """单个具体阶、单个体数的约化矩阵元（未经 NaN 处理）。"""

    def reduced_matrix_element(
        self,
        order: "str | ChiralOrder",
        bra: BasisState,
        ket: BasisState,
        osc_b: "float | OscillatorParameter",
        T0: Optional[int] = None,
        bodies: Iterable[int] = BODIES,
    ) -> float:
        """给定阶的约化矩阵元，对一体与两体贡献求和。

        ``order`` 为 ``full`` 时对全部具体阶求和。
        """
        if type(bra) is not type(ket):
            raise TypeError("bra 与 ket 必须属于同一种表示。")
        order = ChiralOrder.parse(order)
        b = osc_b if isinstance(osc_b, OscillatorParameter) else OscillatorParameter(float(osc_b))
        rank = self.T0 if T0 is None else int(T0)
        orders = ChiralOrder.expansion() if order is ChiralOrder.FULL else (order,)
        body_list = tuple(bodies)

        total = 0.0
        for single in orders:
            for body in body_list:
                total += safe_evaluate(self.matrix_element, single, bra, ket, b, rank, body)
        if math.isnan(total):
            return 0.0
        return total


_REGISTRY: Dict[str, Type[ChiralOperator]] = {}


def register_operator(cls: Type[ChiralOperator]) -> Type[ChiralOperator]:
    """类装饰器：以 ``cls.name`` 注册算符。"""
    if not cls.name:
        raise ValueError("注册的算符必须声明 name。")
    _REGISTRY[cls.name] = cls
    return cls


def available_operators() -> Tuple[str, ...]:
    return tuple(sorted(_REGISTRY))


def make_operator(name: str, order: "str | ChiralOrder" = ChiralOrder.FULL, **kwargs) -> ChiralOperator:
    """按名称创建算符实例，名称未注册时抛出 :class:`UnknownOperatorError`。"""
    key = str(name).strip().lower()
    try:
        cls = _REGISTRY[key]
    except KeyError:
        raise UnknownOperatorError(str(name), available_operators()) from None
    return cls(order, **kwargs)


_WARNED_STUBS: set = set()


class _StubOperator(ChiralOperator):
    """尚未实现公式的算符：只声明对称性，矩阵元恒为 0。"""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        if self.name not in _WARNED_STUBS:
            _WARNED_STUBS.add(self.name)
            logger.warning("算符 %s 尚未实现，所有矩阵元为 0。", self.name)

    def matrix_element(self, order, bra, ket, b, T0, body) -> float:
        return 0.0


@register_operator
class IdentityOperator(_StubOperator):
    name = "identity"
    J0 = 0
    G0 = 0


@register_operator
class ChargeRadiusOperator(_StubOperator):
    name = "charge_radius"
    J0 = 0
    G0 = 0


@register_operator
class GamowTellerOperator(_StubOperator):
    name = "gamow_teller"
    J0 = 1
    G0 = 0
