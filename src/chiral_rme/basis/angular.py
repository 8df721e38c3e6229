r"""角动量耦合系数与两核子 LSJT 基下的约化矩阵元。

约化矩阵元采用 Edmonds 约定，参数顺序为先 bra 后 ket。张量积
:math:`[A^{k_1}(1) \otimes B^{k_2}(2)]^{k}` 的约化矩阵元由 9j 符号给出，
其余规则均由它特化得到。
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Tuple, Union

from sympy import Rational
from sympy.physics.wigner import wigner_3j, wigner_6j, wigner_9j

AngularValue = Union[int, Rational]

HALF = Rational(1, 2)

# 单个自旋 1/2 上 Pauli 矩阵与自旋算符的约化矩阵元
_SIGMA_RME = math.sqrt(6.0)
_SPIN_RME = math.sqrt(1.5)
_EPS = 1e-14


def _is_integer(value) -> bool:
    return int(2 * value) % 2 == 0


def _triad(j1: AngularValue, j2: AngularValue, j3: AngularValue) -> bool:
    """三角条件且 ``j1 + j2 + j3`` 为整数。"""
    if not abs(j1 - j2) <= j3 <= j1 + j2:
        return False
    return _is_integer(j1 + j2 + j3)


def _hat(*values: AngularValue) -> float:
    product = 1.0
    for value in values:
        product *= float(2 * value + 1)
    return math.sqrt(product)


@dataclass
class AngularCoupling:
    """缓存 3j/6j/9j 符号并给出算符约化矩阵元。"""

    cache_3j: Dict[Tuple[AngularValue, ...], float] = field(default_factory=dict)
    cache_6j: Dict[Tuple[AngularValue, ...], float] = field(default_factory=dict)
    cache_9j: Dict[Tuple[AngularValue, ...], float] = field(default_factory=dict)

    def wigner_3j(self, j1, j2, j3, m1, m2, m3) -> float:
        """返回 Wigner 3j 符号。"""
        key = (j1, j2, j3, m1, m2, m3)
        if key not in self.cache_3j:
            if not _triad(j1, j2, j3) or m1 + m2 + m3 != 0:
                value = 0.0
            else:
                value = float(wigner_3j(j1, j2, j3, m1, m2, m3).evalf())
            self.cache_3j[key] = value
        return self.cache_3j[key]

    def wigner_6j(self, j1, j2, j3, l1, l2, l3) -> float:
        """返回 Wigner 6j 符号，不满足三角条件时为 0。"""
        key = (j1, j2, j3, l1, l2, l3)
        if key not in self.cache_6j:
            if not (
                _triad(j1, j2, j3)
                and _triad(j1, l2, l3)
                and _triad(l1, j2, l3)
                and _triad(l1, l2, j3)
            ):
                value = 0.0
            else:
                value = float(wigner_6j(j1, j2, j3, l1, l2, l3).evalf())
            self.cache_6j[key] = value
        return self.cache_6j[key]

    def wigner_9j(self, j1, j2, j3, j4, j5, j6, j7, j8, j9) -> float:
        """返回 Wigner 9j 符号，任一行或列不满足三角条件时为 0。"""
        key = (j1, j2, j3, j4, j5, j6, j7, j8, j9)
        if key not in self.cache_9j:
            rows_ok = _triad(j1, j2, j3) and _triad(j4, j5, j6) and _triad(j7, j8, j9)
            cols_ok = _triad(j1, j4, j7) and _triad(j2, j5, j8) and _triad(j3, j6, j9)
            if not (rows_ok and cols_ok):
                value = 0.0
            else:
                value = float(wigner_9j(*key).evalf())
            self.cache_9j[key] = value
        return self.cache_9j[key]

    # ------------------------------------------------------------------
    # 基本约化矩阵元
    # ------------------------------------------------------------------

    def tensor_product_rme(
        self,
        j1p: AngularValue,
        j1: AngularValue,
        j2p: AngularValue,
        j2: AngularValue,
        Jp: AngularValue,
        J: AngularValue,
        k1: int,
        k2: int,
        k: int,
        rme1: float,
        rme2: float,
    ) -> float:
        r"""耦合基 :math:`|(j_1 j_2) J\rangle` 中张量积算符的约化矩阵元。"""
        if abs(rme1) < _EPS or abs(rme2) < _EPS:
            return 0.0
        nine = self.wigner_9j(j1p, j1, k1, j2p, j2, k2, Jp, J, k)
        if abs(nine) < _EPS:
            return 0.0
        return _hat(J, Jp, k) * nine * rme1 * rme2

    def spherical_harmonic_rme(self, lp: int, l: int, k: int) -> float:
        r""":math:`\langle l' \| C_k \| l \rangle`，:math:`C_k` 为非归一化球谐函数。"""
        three = self.wigner_3j(lp, k, l, 0, 0, 0)
        if abs(three) < _EPS:
            return 0.0
        return (-1) ** lp * _hat(l, lp) * three

    def _single_spin_rme(self, Sp: int, S: int, particle: int) -> float:
        if particle == 1:
            return self.tensor_product_rme(
                HALF, HALF, HALF, HALF, Sp, S, 1, 0, 1, _SPIN_RME, math.sqrt(2.0))
        return self.tensor_product_rme(
            HALF, HALF, HALF, HALF, Sp, S, 0, 1, 1, math.sqrt(2.0), _SPIN_RME)

    def spin_symmetric_rme(self, Sp: int, S: int) -> float:
        r""":math:`\langle S' \| (\sigma_1 + \sigma_2)/2 \| S \rangle`，同样用于同位旋。"""
        return self._single_spin_rme(Sp, S, 1) + self._single_spin_rme(Sp, S, 2)

    def spin_antisymmetric_rme(self, Sp: int, S: int) -> float:
        r""":math:`\langle S' \| (\sigma_1 - \sigma_2)/2 \| S \rangle`，同样用于同位旋。"""
        return self._single_spin_rme(Sp, S, 1) - self._single_spin_rme(Sp, S, 2)

    def pauli_product_rme(self, Sp: int, S: int, k: int) -> float:
        r""":math:`\langle S' \| [\sigma_1 \otimes \sigma_2]^{k} \| S \rangle`。"""
        return self.tensor_product_rme(
            HALF, HALF, HALF, HALF, Sp, S, 1, 1, k, _SIGMA_RME, _SIGMA_RME)

    # ------------------------------------------------------------------
    # 相对坐标 |(L S) J> 基
    # ------------------------------------------------------------------

    def relative_lrel_rme(self, Lp: int, L: int, Sp: int, S: int, Jp: int, J: int) -> float:
        """相对轨道角动量 ``L_rel`` 的约化矩阵元。"""
        if Lp != L or Sp != S:
            return 0.0
        orbital = math.sqrt(L * (L + 1) * (2 * L + 1))
        return self.tensor_product_rme(
            Lp, L, Sp, S, Jp, J, 1, 0, 1, orbital, math.sqrt(2 * S + 1))

    def relative_spin_symmetric_rme(self, Lp, L, Sp, S, Jp, J, kL: int, kJ: int) -> float:
        r""":math:`[C_{k_L} \otimes (\sigma_1+\sigma_2)/2]^{k_J}`。"""
        return self.tensor_product_rme(
            Lp, L, Sp, S, Jp, J, kL, 1, kJ,
            self.spherical_harmonic_rme(Lp, L, kL),
            self.spin_symmetric_rme(Sp, S),
        )

    def relative_spin_antisymmetric_rme(self, Lp, L, Sp, S, Jp, J, kL: int, kJ: int) -> float:
        r""":math:`[C_{k_L} \otimes (\sigma_1-\sigma_2)/2]^{k_J}`。"""
        return self.tensor_product_rme(
            Lp, L, Sp, S, Jp, J, kL, 1, kJ,
            self.spherical_harmonic_rme(Lp, L, kL),
            self.spin_antisymmetric_rme(Sp, S),
        )

    def relative_pauli_product_rme(self, Lp, L, Sp, S, Jp, J, kL: int, kS: int, kJ: int) -> float:
        r""":math:`[C_{k_L} \otimes [\sigma_1 \otimes \sigma_2]^{k_S}]^{k_J}`。"""
        return self.tensor_product_rme(
            Lp, L, Sp, S, Jp, J, kL, kS, kJ,
            self.spherical_harmonic_rme(Lp, L, kL),
            self.pauli_product_rme(Sp, S, kS),
        )

    # ------------------------------------------------------------------
    # 相对-质心 |[(lr lc) L, S] J> 基
    # ------------------------------------------------------------------

    def _relative_cm_spatial_rme(self, lrp, lr, lcp, lc, Lp, L, kr: int, kc: int, kL: int) -> float:
        return self.tensor_product_rme(
            lrp, lr, lcp, lc, Lp, L, kr, kc, kL,
            self.spherical_harmonic_rme(lrp, lr, kr),
            self.spherical_harmonic_rme(lcp, lc, kc),
        )

    def relative_cm_spin_symmetric_rme(self, lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J,
                                       kr: int, kc: int, kL: int, kJ: int) -> float:
        spatial = self._relative_cm_spatial_rme(lrp, lr, lcp, lc, Lp, L, kr, kc, kL)
        return self.tensor_product_rme(
            Lp, L, Sp, S, Jp, J, kL, 1, kJ, spatial, self.spin_symmetric_rme(Sp, S))

    def relative_cm_spin_antisymmetric_rme(self, lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J,
                                           kr: int, kc: int, kL: int, kJ: int) -> float:
        spatial = self._relative_cm_spatial_rme(lrp, lr, lcp, lc, Lp, L, kr, kc, kL)
        return self.tensor_product_rme(
            Lp, L, Sp, S, Jp, J, kL, 1, kJ, spatial, self.spin_antisymmetric_rme(Sp, S))

    def relative_cm_pauli_product_rme(self, lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J,
                                      kr: int, kc: int, kL: int, kS: int, kJ: int) -> float:
        spatial = self._relative_cm_spatial_rme(lrp, lr, lcp, lc, Lp, L, kr, kc, kL)
        return self.tensor_product_rme(
            Lp, L, Sp, S, Jp, J, kL, kS, kJ, spatial, self.pauli_product_rme(Sp, S, kS))

    def relative_cm_lsum_rme(self, lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J) -> float:
        """总轨道角动量 ``L_rel + L_cm`` 的约化矩阵元。"""
        if lrp != lr or lcp != lc or Lp != L or Sp != S:
            return 0.0
        orbital = math.sqrt(L * (L + 1) * (2 * L + 1))
        return self.tensor_product_rme(
            Lp, L, Sp, S, Jp, J, 1, 0, 1, orbital, math.sqrt(2 * S + 1))

    def relative_cm_orbital_product_rme(self, lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J,
                                        rel_rme: float, cm_rme: float) -> float:
        """相对与质心两个矢量耦合成秩 1 的约化矩阵元，自旋为旁观者。"""
        if Sp != S:
            return 0.0
        spatial = self.tensor_product_rme(
            lrp, lr, lcp, lc, Lp, L, 1, 1, 1, rel_rme, cm_rme)
        return self.tensor_product_rme(
            Lp, L, Sp, S, Jp, J, 1, 0, 1, spatial, math.sqrt(2 * S + 1))
