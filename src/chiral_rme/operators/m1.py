r"""磁偶极 (M1) 算符的手征有效场论修正。

采用 LENPIC 幂次计数：

- LO：无贡献；
- NLO：一体项为冲量近似（不正规化），两体项为同位旋矢量 π 交换流，
  比例于 :math:`g_A \bar d_{18} m_\pi^3 / (12\pi F_\pi^2 \mu_N)`；
- N2LO：无修正；
- N3LO：目前仅实现同位旋标量两体项（``d9`` 项与接触项 ``L2``），
  它对氘核最为重要；
- N4LO：尚无结果。

相对-质心表示下的 N3LO 两体修正尚未推导，贡献为 0。
"""
from __future__ import annotations

import math

import numpy as np

from chiral_rme.basis.states import RelativeCMState, RelativeState
from chiral_rme.numerics.radial import (
    OscillatorParameter,
    RadialParameters,
    coordinate_space_norm,
)

from .base import BasisState, ChiralOperator, register_operator
from .orders import ChiralOrder


@register_operator
class M1Operator(ChiralOperator):
    """M1 算符，``J0 = 1``、正宇称。"""

    name = "m1"
    J0 = 1
    G0 = 0

    def matrix_element(
        self,
        order: ChiralOrder,
        bra: BasisState,
        ket: BasisState,
        b: OscillatorParameter,
        T0: int,
        body: int,
    ) -> float:
        relative_cm = isinstance(ket, RelativeCMState)

        if order is ChiralOrder.LO:
            return 0.0
        if order is ChiralOrder.NLO:
            if body == 1:
                if relative_cm:
                    return self._nlo_one_body_relative_cm(bra, ket, T0)
                return self._nlo_one_body_relative(bra, ket, T0)
            if body == 2:
                if relative_cm:
                    return self._nlo_two_body_relative_cm(bra, ket, b, T0)
                return self._nlo_two_body_relative(bra, ket, b, T0)
            return 0.0
        if order is ChiralOrder.N2LO:
            return 0.0
        if order is ChiralOrder.N3LO:
            if body != 2 or relative_cm:
                return 0.0
            return self._n3lo_two_body_isoscalar(bra, ket, b, T0)
        if order is ChiralOrder.N4LO:
            return 0.0
        raise ValueError(f"matrix_element 需要具体的手征阶，而不是 {order.label!r}。")

    # ------------------------------------------------------------------
    # 低能常数前因子
    # ------------------------------------------------------------------

    @property
    def d18_prefactor(self) -> float:
        r""":math:`g_A m_\pi^3 \bar d_{18} / (12 \pi F_\pi^2 \mu_N)`。"""
        c = self.constants
        numerator = c.gA * c.d18_fm * c.pion_mass_fm**3
        denominator = 12.0 * math.pi * c.nuclear_magneton_fm * c.pion_decay_constant_fm**2
        return numerator / denominator

    @property
    def d9_prefactor(self) -> float:
        r""":math:`g_A m_\pi^3 \bar d_9 / (\sqrt{3} \pi F_\pi^2)`。"""
        c = self.constants
        numerator = c.gA * c.d9_fm * c.pion_mass_fm**3
        return numerator / (math.sqrt(3.0) * math.pi * c.pion_decay_constant_fm**2)

    # ------------------------------------------------------------------
    # NLO，相对坐标
    # ------------------------------------------------------------------

    def _nlo_one_body_relative(self, bra: RelativeState, ket: RelativeState, T0: int) -> float:
        """冲量近似，只在 ``n = n'``、``L = L'`` 时非零。"""
        if bra.n != ket.n or bra.L != ket.L:
            return 0.0

        am = self.angular
        c = self.constants
        Lp, L = bra.L, ket.L
        Sp, S = bra.S, ket.S
        Jp, J = bra.J, ket.J
        Tp, T = bra.T, ket.T
        delta_T = 1.0 if Tp == T else 0.0

        if T0 == 0:
            spin_term = (c.isoscalar_nucleon_magnetic_moment
                         * am.relative_spin_symmetric_rme(Lp, L, Sp, S, Jp, J, 0, 1)
                         * delta_T)
            orbital_term = 0.5 * am.relative_lrel_rme(Lp, L, Sp, S, Jp, J) * delta_T
            return spin_term + orbital_term

        if T0 == 1:
            symm_isospin = am.spin_symmetric_rme(Tp, T)
            asymm_isospin = am.spin_antisymmetric_rme(Tp, T)
            spin_symm_term = (c.isovector_nucleon_magnetic_moment
                              * am.relative_spin_symmetric_rme(Lp, L, Sp, S, Jp, J, 0, 1)
                              * symm_isospin)
            spin_asymm_term = (c.isovector_nucleon_magnetic_moment
                               * am.relative_spin_antisymmetric_rme(Lp, L, Sp, S, Jp, J, 0, 1)
                               * asymm_isospin)
            orbital_term = 0.5 * am.relative_lrel_rme(Lp, L, Sp, S, Jp, J) * symm_isospin
            return spin_symm_term + spin_asymm_term + orbital_term

        return 0.0

    def _nlo_two_body_relative(
        self,
        bra: RelativeState,
        ket: RelativeState,
        b: OscillatorParameter,
        T0: int,
    ) -> float:
        """同位旋矢量 π 交换流，只有 ``T0 = 1`` 分量。"""
        if T0 != 1:
            return 0.0

        am = self.angular
        Lp, L = bra.L, ket.L
        Sp, S = bra.S, ket.S
        Jp, J = bra.J, ket.J

        T1_rme = am.pauli_product_rme(bra.T, ket.T, 1)
        A6S1_rme = math.sqrt(10.0) * am.relative_pauli_product_rme(Lp, L, Sp, S, Jp, J, 2, 1, 1)
        S1_rme = am.relative_pauli_product_rme(Lp, L, Sp, S, Jp, J, 0, 1, 1)
        if T1_rme == 0.0 or (A6S1_rme == 0.0 and S1_rme == 0.0):
            return 0.0

        brel = np.float64(b.relative)
        prel = RadialParameters(
            bra.n, Lp, ket.n, L,
            self.regularize,
            self.regulator / brel,
            self.constants.pion_mass_fm * brel,
        )
        norm_product = coordinate_space_norm(ket.n, L) * coordinate_space_norm(bra.n, Lp)
        zpi_integral = norm_product * self.quadrature.integral_zpi_ypi(prel)
        tpi_integral = norm_product * self.quadrature.integral_tpi_ypi(prel)

        result = A6S1_rme * zpi_integral + S1_rme * tpi_integral
        return result * self.d18_prefactor * T1_rme

    # ------------------------------------------------------------------
    # NLO，相对-质心坐标
    # ------------------------------------------------------------------

    def _nlo_one_body_relative_cm(self, bra: RelativeCMState, ket: RelativeCMState, T0: int) -> float:
        am = self.angular
        q = self.quadrature
        c = self.constants
        lrp, lr = bra.lr, ket.lr
        lcp, lc = bra.lc, ket.lc
        Lp, L = bra.L, ket.L
        Sp, S = bra.S, ket.S
        Jp, J = bra.J, ket.J
        Tp, T = bra.T, ket.T
        delta_T = 1.0 if Tp == T else 0.0

        # 自旋项不乘径向 delta，与已发表公式核对前保持原样
        symm_spin = am.relative_cm_spin_symmetric_rme(
            lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J, 0, 0, 0, 1)

        if T0 == 0:
            spin_term = c.isoscalar_nucleon_magnetic_moment * symm_spin * delta_T
            # 按相对坐标规则以耦合后的 L 计算，未乘径向 delta；与已发表公式核对前保持原样
            orbital_term = 0.5 * am.relative_lrel_rme(Lp, L, Sp, S, Jp, J) * delta_T
            return spin_term + orbital_term

        if T0 == 1:
            symm_isospin = am.spin_symmetric_rme(Tp, T)
            asymm_isospin = am.spin_antisymmetric_rme(Tp, T)
            asymm_spin = am.relative_cm_spin_antisymmetric_rme(
                lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J, 0, 0, 0, 1)
            radial_diagonal = 1.0 if (bra.Nr == ket.Nr and bra.Nc == ket.Nc) else 0.0
            lsum_me = radial_diagonal * am.relative_cm_lsum_rme(
                lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J)

            # 质心坐标与相对动量（及其反向）的交叉轨道项
            mass_ratio_sqrt = 0.5
            rcm_prel_me = mass_ratio_sqrt * am.relative_cm_orbital_product_rme(
                lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J,
                q.gradient_me(bra.nr, ket.nr, lrp, lr, am),
                q.radius_me(bra.nc, ket.nc, lcp, lc, am),
            )
            rrel_pcm_me = am.relative_cm_orbital_product_rme(
                lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J,
                q.radius_me(bra.nr, ket.nr, lrp, lr, am),
                q.gradient_me(bra.nc, ket.nc, lcp, lc, am),
            ) / mass_ratio_sqrt

            spin_symm_term = c.isovector_nucleon_magnetic_moment * symm_spin * symm_isospin
            spin_asymm_term = c.isovector_nucleon_magnetic_moment * asymm_spin * asymm_isospin
            orbital_diagonal_term = 0.5 * lsum_me * symm_isospin
            orbital_cross_term = 0.5 * (2.0 * rcm_prel_me + 0.5 * rrel_pcm_me) * asymm_isospin
            return spin_symm_term + spin_asymm_term + orbital_diagonal_term + orbital_cross_term

        return 0.0

    def _nlo_two_body_relative_cm(
        self,
        bra: RelativeCMState,
        ket: RelativeCMState,
        b: OscillatorParameter,
        T0: int,
    ) -> float:
        if T0 != 1:
            return 0.0

        am = self.angular
        q = self.quadrature
        T1_rme = am.pauli_product_rme(bra.T, ket.T, 1)
        if T1_rme == 0.0:
            return 0.0

        lrp, lr = bra.lr, ket.lr
        lcp, lc = bra.lc, ket.lc
        Lp, L = bra.L, ket.L
        Sp, S = bra.S, ket.S
        Jp, J = bra.J, ket.J
        pion_mass = self.constants.pion_mass_fm

        bcm = np.float64(b.cm)
        brel = np.float64(b.relative)
        prel = RadialParameters(
            bra.nr, lrp, ket.nr, lr,
            self.regularize,
            self.regulator / brel,
            pion_mass * brel,
        )

        def pauli(kr: int, kc: int, kL: int, kS: int) -> float:
            return am.relative_cm_pauli_product_rme(
                lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J, kr, kc, kL, kS, 1)

        A1_rme = -math.sqrt(3.0) * pauli(1, 1, 1, 0)
        A2_rme = math.sqrt(3.0 / 5.0) * pauli(1, 1, 1, 2)
        A3_rme = math.sqrt(9.0 / 5.0) * pauli(1, 1, 2, 2)
        A4_rme = math.sqrt(14.0 / 5.0) * pauli(3, 1, 2, 2)
        A5_rme = math.sqrt(28.0 / 5.0) * pauli(3, 1, 3, 2)

        norm_product_rel = coordinate_space_norm(ket.nr, lr) * coordinate_space_norm(bra.nr, lrp)

        relative_cm = 0.0
        tensor_sum = A2_rme + A3_rme + A4_rme + A5_rme
        if A1_rme != 0.0 or tensor_sum != 0.0:
            mpir_integral = pion_mass * bcm * q.radial_r_me(bra.nc, ket.nc, lcp, lc)
            mpir_wpi_integral = norm_product_rel * q.integral_mpir_wpi_ypi(prel)
            relative_cm = mpir_integral * (A1_rme + mpir_wpi_integral * tensor_sum)

        relative = 0.0
        if bra.nc == ket.nc and lcp == lc:
            # 秩 2 球谐作用在质心坐标上，与相对表示不同；与已发表公式核对前保持原样
            A6S1_rme = math.sqrt(10.0) * pauli(0, 2, 2, 1)
            S1_rme = pauli(0, 0, 0, 1)
            if A6S1_rme != 0.0 or S1_rme != 0.0:
                zpi_integral = norm_product_rel * q.integral_zpi_ypi(prel)
                tpi_integral = norm_product_rel * q.integral_tpi_ypi(prel)
                relative = zpi_integral * A6S1_rme + tpi_integral * S1_rme

        return self.d18_prefactor * T1_rme * (relative_cm + relative)

    # ------------------------------------------------------------------
    # N3LO，相对坐标，同位旋标量
    # ------------------------------------------------------------------

    def _n3lo_two_body_isoscalar(
        self,
        bra: RelativeState,
        ket: RelativeState,
        b: OscillatorParameter,
        T0: int,
    ) -> float:
        """``d9`` 项加接触项 ``L2``，整体乘以 ``2 M_N``；同位旋矢量部分未实现。"""
        if T0 != 0:
            return 0.0

        am = self.angular
        q = self.quadrature
        c = self.constants
        Lp, L = bra.L, ket.L
        Sp, S = bra.S, ket.S
        Jp, J = bra.J, ket.J
        Tp, T = bra.T, ket.T

        S_rme = am.relative_spin_symmetric_rme(Lp, L, Sp, S, Jp, J, 0, 1)
        A6S_rme = math.sqrt(10.0) * am.relative_spin_symmetric_rme(Lp, L, Sp, S, Jp, J, 2, 1)
        T0_rme = am.pauli_product_rme(Tp, T, 0)
        contact = L == 0 and Lp == 0 and Tp == T
        if S_rme == 0.0 and A6S_rme == 0.0:
            return 0.0

        # 此处标度参数的位置与 NLO 相反（π 质量在 regulator 位），与已发表公式核对前保持原样
        brel = np.float64(b.relative)
        prel = RadialParameters(
            bra.n, Lp, ket.n, L,
            self.regularize,
            c.pion_mass_fm * brel,
            self.regulator / brel,
        )
        norm_product = coordinate_space_norm(ket.n, L) * coordinate_space_norm(bra.n, Lp)

        d9_term = 0.0
        if T0_rme != 0.0:
            ypi_integral = norm_product * q.integral_ypi(prel)
            wpi_integral = norm_product * q.integral_wpi_ypi(prel)
            d9_term = self.d9_prefactor * T0_rme * (wpi_integral * A6S_rme - ypi_integral * S_rme)

        L2_term = 0.0
        if contact and S_rme != 0.0:
            # 径向积分未归一化，这里同样乘以归一化因子
            delta_integral = norm_product * q.integral_regularized_delta(prel) / brel**3
            L2_term = 2.0 * c.L2_fm * S_rme * delta_integral

        return (d9_term + L2_term) * 2.0 * c.nucleon_mass_fm
