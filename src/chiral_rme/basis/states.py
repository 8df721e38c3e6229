r"""两体相对坐标与相对-质心坐标的 LSJT 基矢量子数。"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RelativeState:
    r"""相对坐标基矢 :math:`|n (L S) J, T\rangle`。

    ``n`` 为径向量子数，振子量子数 ``N = 2n + L``。
    """

    n: int
    L: int
    S: int
    J: int
    T: int

    @property
    def N(self) -> int:
        return 2 * self.n + self.L

    @property
    def g(self) -> int:
        return self.L % 2


@dataclass(frozen=True)
class RelativeCMState:
    r"""相对-质心基矢 :math:`|[n_r l_r, n_c l_c] L, S; J, T\rangle`。

    ``nr``、``nc`` 为径向量子数，``Nr``、``Nc`` 为对应的振子量子数。
    """

    nr: int
    lr: int
    nc: int
    lc: int
    L: int
    S: int
    J: int
    T: int

    @property
    def Nr(self) -> int:
        return 2 * self.nr + self.lr

    @property
    def Nc(self) -> int:
        return 2 * self.nc + self.lc

    @property
    def N(self) -> int:
        return self.Nr + self.Nc

    @property
    def g(self) -> int:
        return (self.lr + self.lc) % 2
