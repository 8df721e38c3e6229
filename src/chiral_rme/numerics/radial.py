r"""谐振子径向函数与正规化的 π 介子交换径向积分。

径向变量以谐振子长度为单位（``b = 1``），径向函数取

.. math::

    R_{nl}(r) = \mathcal{N}_{nl}\, r^l e^{-r^2/2} L_n^{l+1/2}(r^2),
    \qquad
    \mathcal{N}_{nl} = \sqrt{\frac{2\, n!}{\Gamma(n + l + 3/2)}}.

积分均对未归一化的 :math:`r^l e^{-r^2/2} L_n^{l+1/2}(r^2)` 乘积进行，
归一化因子由调用方乘入；谐振子矩阵元 ``radial_r_me``、``radius_me``、
``gradient_me`` 除外，它们已归一化。
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Tuple

import numpy as np
from scipy.special import eval_genlaguerre, gammaln

from .quadrature import composite_radial_grid

# LENPIC 局域正规化函数 (1 - exp(-r^2/R^2))^n 的幂次
REGULATOR_POWER = 6


@dataclass(frozen=True)
class OscillatorParameter:
    """相对坐标谐振子长度 ``b``，质心长度为 ``b / 2``。"""

    b: float

    @property
    def relative(self) -> float:
        return self.b

    @property
    def cm(self) -> float:
        return 0.5 * self.b


@dataclass(frozen=True)
class RadialParameters:
    """两体径向积分参数，``regulator`` 与 ``pion_mass`` 均已按振子长度无量纲化。"""

    nbra: int
    lbra: int
    nket: int
    lket: int
    regularize: bool
    regulator: float
    pion_mass: float


def coordinate_space_norm(n: int, l: int, b: float = 1.0) -> float:
    """坐标空间谐振子径向函数的归一化常数。"""
    log_norm = 0.5 * (math.log(2.0) + gammaln(n + 1) - gammaln(n + l + 1.5))
    return math.exp(log_norm) / b ** (l + 1.5)


def radial_function(n: int, l: int, r: np.ndarray) -> np.ndarray:
    """未归一化的径向函数 ``r^l exp(-r^2/2) L_n^{l+1/2}(r^2)``。"""
    r = np.asarray(r, dtype=float)
    return r**l * np.exp(-0.5 * r * r) * eval_genlaguerre(n, l + 0.5, r * r)


def radial_derivative(n: int, l: int, r: np.ndarray) -> np.ndarray:
    """未归一化径向函数对 ``r`` 的一阶导数。"""
    r = np.asarray(r, dtype=float)
    r2 = r * r
    laguerre = eval_genlaguerre(n, l + 0.5, r2)
    if n > 0:
        laguerre_prime = -eval_genlaguerre(n - 1, l + 1.5, r2)
    else:
        laguerre_prime = np.zeros_like(r)
    envelope = np.exp(-0.5 * r2)
    value = (-(r ** (l + 1)) * laguerre + 2.0 * r ** (l + 1) * laguerre_prime) * envelope
    if l > 0:
        value = value + l * r ** (l - 1) * laguerre * envelope
    return value


def _yukawa(x: np.ndarray) -> np.ndarray:
    return np.exp(-x) / x


def _regulator(r: np.ndarray, params: RadialParameters) -> np.ndarray:
    if not params.regularize:
        return np.ones_like(r)
    R = params.regulator
    return (1.0 - np.exp(-(r * r) / (R * R))) ** REGULATOR_POWER


def _kernel_ypi(r: np.ndarray, params: RadialParameters) -> np.ndarray:
    x = params.pion_mass * r
    return _yukawa(x) * _regulator(r, params)


def _kernel_wpi_ypi(r: np.ndarray, params: RadialParameters) -> np.ndarray:
    x = params.pion_mass * r
    return (1.0 + 1.0 / x) * _yukawa(x) * _regulator(r, params)


def _kernel_zpi_ypi(r: np.ndarray, params: RadialParameters) -> np.ndarray:
    x = params.pion_mass * r
    return (1.0 + x) / 3.0 * _yukawa(x) * _regulator(r, params)


def _kernel_tpi_ypi(r: np.ndarray, params: RadialParameters) -> np.ndarray:
    x = params.pion_mass * r
    return (1.0 + 3.0 / x + 3.0 / (x * x)) * _yukawa(x) * _regulator(r, params)


def _kernel_mpir_wpi_ypi(r: np.ndarray, params: RadialParameters) -> np.ndarray:
    x = params.pion_mass * r
    return x * (1.0 + 1.0 / x) * _yukawa(x) * _regulator(r, params)


def _kernel_regularized_delta(r: np.ndarray, params: RadialParameters) -> np.ndarray:
    R = params.regulator
    return np.exp(-(r * r) / (R * R)) / (math.pi**1.5 * R**3)


Kernel = Callable[[np.ndarray, RadialParameters], np.ndarray]


@dataclass
class RadialQuadrature:
    """分段 Gauss-Legendre 径向积分器，按参数缓存结果。

    Parameters
    ----------
    n_points : int
        每个区段的高斯点数。
    segment_width : float
        区段宽度（振子长度单位）。
    padding : float
        在经典转折点 ``sqrt(2N + 3)`` 之外额外积分的距离。
    """

    n_points: int = 32
    segment_width: float = 1.0
    padding: float = 8.0
    _grids: Dict[int, Tuple[np.ndarray, np.ndarray]] = field(
        init=False, default_factory=dict, repr=False)
    _cache: Dict[Tuple[str, object], float] = field(
        init=False, default_factory=dict, repr=False)

    def _grid(self, quanta: int) -> Tuple[np.ndarray, np.ndarray]:
        if quanta not in self._grids:
            r_max = math.sqrt(2.0 * quanta + 3.0) + self.padding
            n_segments = max(1, math.ceil(r_max / self.segment_width))
            self._grids[quanta] = composite_radial_grid(
                r_max, n_segments, self.n_points)
        return self._grids[quanta]

    def _measure(self, nbra: int, lbra: int, nket: int, lket: int) -> Tuple[np.ndarray, np.ndarray]:
        quanta = max(2 * nbra + lbra, 2 * nket + lket)
        r, w = self._grid(quanta)
        product = radial_function(nbra, lbra, r) * radial_function(nket, lket, r)
        return r, w * r * r * product

    def integrate(self, params: RadialParameters, kernel: Kernel, name: str | None = None) -> float:
        """对 ``r^2 R'(r) R(r) K(r)`` 积分；非有限结果按原样返回。"""
        key = (name or kernel.__name__, params)
        if key in self._cache:
            return self._cache[key]
        r, measure = self._measure(params.nbra, params.lbra, params.nket, params.lket)
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            value = float(np.sum(measure * kernel(r, params)))
        self._cache[key] = value
        return value

    def integral_ypi(self, params: RadialParameters) -> float:
        return self.integrate(params, _kernel_ypi)

    def integral_wpi_ypi(self, params: RadialParameters) -> float:
        return self.integrate(params, _kernel_wpi_ypi)

    def integral_zpi_ypi(self, params: RadialParameters) -> float:
        return self.integrate(params, _kernel_zpi_ypi)

    def integral_tpi_ypi(self, params: RadialParameters) -> float:
        return self.integrate(params, _kernel_tpi_ypi)

    def integral_mpir_wpi_ypi(self, params: RadialParameters) -> float:
        return self.integrate(params, _kernel_mpir_wpi_ypi)

    def integral_regularized_delta(self, params: RadialParameters) -> float:
        return self.integrate(params, _kernel_regularized_delta)

    # ------------------------------------------------------------------
    # 归一化谐振子矩阵元
    # ------------------------------------------------------------------

    def overlap(self, nbra: int, lbra: int, nket: int, lket: int) -> float:
        """归一化径向函数的交叠积分，用于检查求积精度。"""
        key = ("overlap", (nbra, lbra, nket, lket))
        if key not in self._cache:
            _, measure = self._measure(nbra, lbra, nket, lket)
            norm = coordinate_space_norm(nbra, lbra) * coordinate_space_norm(nket, lket)
            self._cache[key] = norm * float(np.sum(measure))
        return self._cache[key]

    def radial_r_me(self, nbra: int, nket: int, lbra: int, lket: int) -> float:
        r""":math:`\int r^2 dr\, R_{n'l'}(r)\, r\, R_{nl}(r)`。"""
        key = ("r", (nbra, nket, lbra, lket))
        if key not in self._cache:
            r, measure = self._measure(nbra, lbra, nket, lket)
            norm = coordinate_space_norm(nbra, lbra) * coordinate_space_norm(nket, lket)
            self._cache[key] = norm * float(np.sum(measure * r))
        return self._cache[key]

    def radius_me(self, nbra: int, nket: int, lbra: int, lket: int, angular) -> float:
        r"""约化矩阵元 :math:`\langle n'l' \| \vec r \| nl \rangle`。"""
        c1 = angular.spherical_harmonic_rme(lbra, lket, 1)
        if c1 == 0.0:
            return 0.0
        return c1 * self.radial_r_me(nbra, nket, lbra, lket)

    def gradient_me(self, nbra: int, nket: int, lbra: int, lket: int, angular) -> float:
        r"""约化矩阵元 :math:`\langle n'l' \| \vec\nabla \| nl \rangle`。"""
        c1 = angular.spherical_harmonic_rme(lbra, lket, 1)
        if c1 == 0.0:
            return 0.0
        key = ("grad", (nbra, nket, lbra, lket))
        if key not in self._cache:
            quanta = max(2 * nbra + lbra, 2 * nket + lket)
            r, w = self._grid(quanta)
            centrifugal = -lket if lbra == lket + 1 else lket + 1
            bra = radial_function(nbra, lbra, r)
            ket = radial_function(nket, lket, r)
            d_ket = radial_derivative(nket, lket, r)
            integrand = bra * (d_ket + centrifugal * ket / r) * r * r
            norm = coordinate_space_norm(nbra, lbra) * coordinate_space_norm(nket, lket)
            self._cache[key] = norm * float(np.sum(w * integrand))
        return c1 * self._cache[key]
