import math

import pytest

from chiral_rme.basis.angular import AngularCoupling
from chiral_rme.basis.spaces import RelativeCMSpace, RelativeSpace
from chiral_rme.basis.states import RelativeCMState, RelativeState
from chiral_rme.constants import DEFAULT_CONSTANTS
from chiral_rme.errors import UnknownOperatorError
from chiral_rme.numerics.radial import OscillatorParameter, RadialQuadrature
from chiral_rme.operators import (
    ChiralOperator,
    ChiralOrder,
    M1Operator,
    available_operators,
    make_operator,
    safe_evaluate,
)

B = DEFAULT_CONSTANTS.oscillator_length(20.0)

DEUTERON = RelativeState(n=0, L=0, S=1, J=1, T=0)
SINGLET = RelativeState(n=0, L=0, S=0, J=0, T=1)


def _states(space):
    return [state for subspace in space for state in subspace.states]


@pytest.fixture(scope="module")
def m1():
    return M1Operator("n3lo")


def test_factory_creates_registered_operators():
    assert {"m1", "identity", "charge_radius", "gamow_teller"} <= set(available_operators())
    operator = make_operator("M1", "nlo")
    assert isinstance(operator, M1Operator)
    assert operator.order is ChiralOrder.NLO
    assert (operator.J0, operator.G0) == (1, 0)
    assert make_operator("gamow_teller").J0 == 1


def test_factory_rejects_unknown_name():
    with pytest.raises(UnknownOperatorError) as excinfo:
        make_operator("e2")
    assert excinfo.value.name == "e2"
    assert "m1" in excinfo.value.known


def test_unimplemented_operators_vanish():
    operator = make_operator("charge_radius", "n4lo")
    assert operator.reduced_matrix_element("full", DEUTERON, DEUTERON, B) == 0.0


@pytest.mark.parametrize("order", ["lo", "n2lo", "n4lo"])
@pytest.mark.parametrize("space", [RelativeSpace(2, 2), RelativeCMSpace(2, 2)],
                         ids=["relative", "relative_cm"])
def test_orders_without_corrections_vanish(m1, order, space):
    states = _states(space)
    for bra in states:
        for ket in states:
            for T0 in (0, 1):
                assert m1.reduced_matrix_element(order, bra, ket, B, T0=T0) == 0.0


def test_relative_cm_n3lo_vanishes(m1):
    states = _states(RelativeCMSpace(2, 2))
    for bra in states:
        for ket in states:
            assert m1.reduced_matrix_element("n3lo", bra, ket, B, T0=0) == 0.0


def test_nlo_one_body_requires_equal_radial_and_orbital_numbers(m1):
    states = _states(RelativeSpace(4, 2))
    for bra in states:
        for ket in states:
            if bra.n == ket.n and bra.L == ket.L:
                continue
            for T0 in (0, 1):
                value = m1.reduced_matrix_element("nlo", bra, ket, B, T0=T0, bodies=(1,))
                assert value == 0.0


def test_nlo_one_body_isoscalar_deuteron_s_wave(m1):
    value = m1.reduced_matrix_element("nlo", DEUTERON, DEUTERON, B, T0=0, bodies=(1,))
    expected = DEFAULT_CONSTANTS.isoscalar_nucleon_magnetic_moment * math.sqrt(6.0)
    assert value == pytest.approx(expected)


def test_nlo_two_body_is_purely_isovector(m1):
    states = _states(RelativeSpace(2, 2))
    for bra in states:
        for ket in states:
            for T0 in (0, 2):
                assert m1.reduced_matrix_element("nlo", bra, ket, B, T0=T0, bodies=(2,)) == 0.0
    value = m1.reduced_matrix_element("nlo", SINGLET, DEUTERON, B, T0=1, bodies=(2,))
    assert math.isfinite(value)
    assert value != 0.0


def test_relative_cm_nlo_two_body_is_purely_isovector(m1):
    states = _states(RelativeCMSpace(2, 1))
    for bra in states:
        for ket in states:
            assert m1.reduced_matrix_element("nlo", bra, ket, B, T0=0, bodies=(2,)) == 0.0


def test_n3lo_is_isoscalar(m1):
    assert m1.reduced_matrix_element("n3lo", DEUTERON, DEUTERON, B, T0=1) == 0.0
    value = m1.reduced_matrix_element("n3lo", DEUTERON, DEUTERON, B, T0=0)
    assert math.isfinite(value)
    assert value != 0.0
    assert m1.reduced_matrix_element("n3lo", DEUTERON, DEUTERON, B, T0=0, bodies=(1,)) == 0.0


class _RecordingQuadrature(RadialQuadrature):
    def integral_ypi(self, params):
        self.seen.append(params)
        return super().integral_ypi(params)


def test_n3lo_scales_radial_parameters_in_swapped_positions():
    quadrature = _RecordingQuadrature()
    quadrature.seen = []
    operator = M1Operator("n3lo", quadrature=quadrature, regulator=0.9)
    operator.reduced_matrix_element("n3lo", DEUTERON, DEUTERON, B, T0=0)
    assert quadrature.seen
    params = quadrature.seen[0]
    assert params.regulator == pytest.approx(DEFAULT_CONSTANTS.pion_mass_fm * B)
    assert params.pion_mass == pytest.approx(0.9 / B)


def test_full_order_sums_all_orders(m1):
    pairs = [(DEUTERON, DEUTERON), (SINGLET, DEUTERON)]
    for bra, ket in pairs:
        for T0 in (0, 1):
            total = sum(
                m1.reduced_matrix_element(order, bra, ket, B, T0=T0)
                for order in ChiralOrder.expansion()
            )
            assert m1.reduced_matrix_element("full", bra, ket, B, T0=T0) == pytest.approx(total)


def test_degenerate_oscillator_length_is_clamped_to_zero(m1):
    value = m1.reduced_matrix_element("nlo", SINGLET, DEUTERON, 0.0, T0=1, bodies=(2,))
    assert value == 0.0


def test_relative_cm_nlo_is_finite():
    operator = M1Operator("nlo")
    states = _states(RelativeCMSpace(2, 2))
    values = [
        operator.reduced_matrix_element("nlo", bra, ket, OscillatorParameter(B), T0=T0)
        for bra in states[:6]
        for ket in states[:6]
        for T0 in (0, 1)
    ]
    assert all(math.isfinite(value) for value in values)
    assert any(value != 0.0 for value in values)


def test_mixed_representations_are_rejected(m1):
    relcm = RelativeCMState(nr=0, lr=0, nc=0, lc=0, L=0, S=1, J=1, T=0)
    with pytest.raises(TypeError):
        m1.reduced_matrix_element("nlo", DEUTERON, relcm, B)


class _NaNOperator(ChiralOperator):
    name = "nan_probe"
    J0 = 0

    def matrix_element(self, order, bra, ket, b, T0, body):
        return float("nan")


def test_nan_results_become_zero():
    operator = _NaNOperator("lo")
    assert operator.reduced_matrix_element("full", DEUTERON, DEUTERON, B) == 0.0
    assert safe_evaluate(lambda: float("nan")) == 0.0
    assert safe_evaluate(lambda x: 2.0 * x, 1.5) == 3.0


class _RecordingAngular(AngularCoupling):
    def relative_cm_pauli_product_rme(self, lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J,
                                      kr, kc, kL, kS, kJ):
        self.ranks.append((kr, kc, kL, kS))
        return super().relative_cm_pauli_product_rme(
            lrp, lr, lcp, lc, Lp, L, Sp, S, Jp, J, kr, kc, kL, kS, kJ)


def test_relative_cm_two_body_rank_two_harmonic_acts_on_cm_coordinate():
    angular = _RecordingAngular()
    angular.ranks = []
    operator = M1Operator("nlo", angular=angular)
    bra = RelativeCMState(nr=0, lr=0, nc=0, lc=1, L=1, S=0, J=1, T=1)
    ket = RelativeCMState(nr=0, lr=0, nc=0, lc=1, L=1, S=1, J=1, T=0)
    value = operator.reduced_matrix_element("nlo", bra, ket, B, T0=1, bodies=(2,))
    assert math.isfinite(value)
    assert (0, 2, 2, 1) in angular.ranks
    assert (2, 0, 2, 1) not in angular.ranks
    args = (0, 0, 1, 1, 1, 1, 0, 1, 1, 1)
    assert angular.relative_cm_pauli_product_rme(*args, 0, 2, 2, 1, 1) != 0.0
    assert angular.relative_cm_pauli_product_rme(*args, 2, 0, 2, 1, 1) == 0.0


def test_relative_cm_isoscalar_orbital_term_uses_coupled_orbital_rule():
    operator = M1Operator("nlo")
    am = operator.angular
    bra = RelativeCMState(nr=1, lr=1, nc=0, lc=0, L=1, S=1, J=1, T=1)
    ket = RelativeCMState(nr=0, lr=1, nc=0, lc=0, L=1, S=1, J=1, T=1)
    value = operator.reduced_matrix_element("nlo", bra, ket, B, T0=0, bodies=(1,))
    expected = (
        DEFAULT_CONSTANTS.isoscalar_nucleon_magnetic_moment
        * am.relative_cm_spin_symmetric_rme(1, 1, 0, 0, 1, 1, 1, 1, 1, 1, 0, 0, 0, 1)
        + 0.5 * am.relative_lrel_rme(1, 1, 1, 1, 1, 1)
    )
    assert expected != 0.0
    assert value == pytest.approx(expected)


def test_n3lo_contact_term_only_between_isospin_conserving_s_waves():
    operator = M1Operator("n3lo", constants=DEFAULT_CONSTANTS.with_overrides(d9=0.0))
    d_wave = RelativeState(n=0, L=2, S=1, J=1, T=0)
    assert operator.reduced_matrix_element("n3lo", DEUTERON, DEUTERON, B, T0=0) != 0.0
    assert operator.reduced_matrix_element("n3lo", DEUTERON, d_wave, B, T0=0) == 0.0
    assert operator.reduced_matrix_element("n3lo", d_wave, DEUTERON, B, T0=0) == 0.0
    assert operator.reduced_matrix_element("n3lo", d_wave, d_wave, B, T0=0) == 0.0
