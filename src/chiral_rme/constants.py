"""物理常数表。

所有输入以 MeV / GeV 给出，算符公式使用的 fm 单位量以只读属性导出。
低能常数 ``d9``、``d18``、``L2`` 为拟合参数，默认值仅作起点，
可通过 :meth:`PhysicalConstants.with_overrides` 替换。
"""
from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from typing import Mapping


@dataclass(frozen=True)
class PhysicalConstants:
    r"""不可变的物理常数集合。

    Attributes
    ----------
    hbarc : float
        :math:`\hbar c`，单位 MeV fm。
    proton_mass, neutron_mass : float
        质子、中子质量 (MeV)。
    pion_mass : float
        同位旋平均的 π 介子质量 (MeV)。
    pion_decay_constant : float
        :math:`F_\pi` (MeV)。
    gA : float
        轴矢耦合常数。
    proton_magnetic_moment, neutron_magnetic_moment : float
        核子磁矩，以核磁子为单位。
    d9, d18 : float
        低能常数 (GeV^-2)。
    L2 : float
        接触项低能常数 (GeV^-4)。
    """

    hbarc: float = 197.3269804
    proton_mass: float = 938.27208816
    neutron_mass: float = 939.56542052
    pion_mass: float = 138.03898
    pion_decay_constant: float = 92.1
    gA: float = 1.29
    proton_magnetic_moment: float = 2.792847344
    neutron_magnetic_moment: float = -1.91304273
    d9: float = -1.0
    d18: float = -0.97
    L2: float = 1.0

    @property
    def nucleon_mass(self) -> float:
        return 0.5 * (self.proton_mass + self.neutron_mass)

    @property
    def reduced_nucleon_mass(self) -> float:
        """两核子约化质量 (MeV)。"""
        return 0.5 * self.nucleon_mass

    @property
    def nucleon_mass_fm(self) -> float:
        return self.nucleon_mass / self.hbarc

    @property
    def pion_mass_fm(self) -> float:
        return self.pion_mass / self.hbarc

    @property
    def pion_decay_constant_fm(self) -> float:
        return self.pion_decay_constant / self.hbarc

    @property
    def nuclear_magneton_fm(self) -> float:
        """核磁子 :math:`e\\hbar/2m_p`，取 e = 1，单位 fm。"""
        return self.hbarc / (2.0 * self.proton_mass)

    @property
    def isoscalar_nucleon_magnetic_moment(self) -> float:
        return 0.5 * (self.proton_magnetic_moment + self.neutron_magnetic_moment)

    @property
    def isovector_nucleon_magnetic_moment(self) -> float:
        return 0.5 * (self.proton_magnetic_moment - self.neutron_magnetic_moment)

    @property
    def d9_fm(self) -> float:
        return self.d9 * (self.hbarc / 1000.0) ** 2

    @property
    def d18_fm(self) -> float:
        return self.d18 * (self.hbarc / 1000.0) ** 2

    @property
    def L2_fm(self) -> float:
        return self.L2 * (self.hbarc / 1000.0) ** 4

    def oscillator_length(self, hw: float) -> float:
        """相对坐标谐振子长度 ``b = sqrt(hbarc^2 / (mu hw))``，单位 fm。"""
        if hw <= 0:
            raise ValueError("谐振子能量 hw 必须为正。")
        return math.sqrt(self.hbarc * self.hbarc / self.reduced_nucleon_mass / hw)

    def with_overrides(self, overrides: Mapping[str, float] | None = None, **kwargs: float) -> "PhysicalConstants":
        """返回替换了部分常数的新实例，未知名称抛出 ``ValueError``。"""
        values = dict(overrides or {})
        values.update(kwargs)
        if not values:
            return self
        known = {item.name for item in fields(self)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"未知物理常数: {', '.join(unknown)}")
        return replace(self, **{key: float(val) for key, val in values.items()})


DEFAULT_CONSTANTS = PhysicalConstants()
