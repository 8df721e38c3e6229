import math

import pytest

from chiral_rme.basis.angular import HALF, AngularCoupling


@pytest.fixture(scope="module")
def am():
    return AngularCoupling()


def test_six_j_triangle_violation_is_zero(am):
    assert am.wigner_6j(1, 1, 3, 1, 1, 1) == 0.0


def test_nine_j_with_zero_reduces_to_six_j(am):
    expected = am.wigner_6j(1, 1, 1, 2, 1, 1) / 3.0
    assert am.wigner_9j(1, 1, 1, 1, 2, 1, 1, 1, 0) == pytest.approx(expected)


def test_nine_j_for_two_spin_halves():
    # {1/2 1/2 1; 1/2 1/2 1; 1 1 0} = -{1/2 1/2 1; 1/2 1/2 1} / 3 = -1/18
    am = AngularCoupling()
    assert am.wigner_9j(HALF, HALF, 1, HALF, HALF, 1, 1, 1, 0) == pytest.approx(-1.0 / 18.0)
    assert am.wigner_9j(HALF, HALF, 1, HALF, HALF, 1, 1, 1, 3) == 0.0


def test_nine_j_is_cached(am):
    am.wigner_9j(HALF, HALF, 1, HALF, HALF, 1, 1, 1, 0)
    assert (HALF, HALF, 1, HALF, HALF, 1, 1, 1, 0) in am.cache_9j


def test_spherical_harmonic_rme(am):
    assert am.spherical_harmonic_rme(0, 0, 0) == pytest.approx(1.0)
    assert am.spherical_harmonic_rme(1, 0, 1) == pytest.approx(1.0)
    assert am.spherical_harmonic_rme(3, 2, 1) == pytest.approx(math.sqrt(3.0))
    assert am.spherical_harmonic_rme(1, 2, 1) == pytest.approx(-math.sqrt(2.0))
    assert am.spherical_harmonic_rme(2, 2, 1) == 0.0


def test_total_spin_rme(am):
    assert am.spin_symmetric_rme(1, 1) == pytest.approx(math.sqrt(6.0))
    assert am.spin_symmetric_rme(0, 0) == pytest.approx(0.0, abs=1e-12)
    assert am.spin_symmetric_rme(1, 0) == pytest.approx(0.0, abs=1e-12)


def test_antisymmetric_spin_connects_singlet_and_triplet(am):
    assert am.spin_antisymmetric_rme(1, 1) == pytest.approx(0.0, abs=1e-12)
    assert abs(am.spin_antisymmetric_rme(1, 0)) == pytest.approx(math.sqrt(3.0))
    assert abs(am.spin_antisymmetric_rme(0, 1)) == pytest.approx(math.sqrt(3.0))


def test_scalar_pauli_product(am):
    # [s1 x s2]^0 = -sigma1.sigma2 / sqrt(3)
    assert am.pauli_product_rme(0, 0, 0) == pytest.approx(math.sqrt(3.0))
    assert am.pauli_product_rme(1, 1, 0) == pytest.approx(-1.0)
    assert am.pauli_product_rme(1, 0, 0) == 0.0


def test_vector_pauli_product_is_antisymmetric(am):
    assert am.pauli_product_rme(1, 1, 1) == pytest.approx(0.0, abs=1e-12)
    assert am.pauli_product_rme(0, 0, 1) == 0.0
    assert am.pauli_product_rme(1, 0, 1) != 0.0


def test_relative_orbital_angular_momentum(am):
    assert am.relative_lrel_rme(1, 1, 0, 0, 1, 1) == pytest.approx(math.sqrt(6.0))
    assert am.relative_lrel_rme(0, 0, 1, 1, 1, 1) == 0.0
    assert am.relative_lrel_rme(2, 0, 1, 1, 1, 1) == 0.0


def test_relative_spin_in_s_wave(am):
    assert am.relative_spin_symmetric_rme(0, 0, 1, 1, 1, 1, 0, 1) == pytest.approx(math.sqrt(6.0))
    assert am.relative_spin_symmetric_rme(0, 0, 0, 0, 0, 0, 0, 1) == 0.0


def test_relative_cm_lsum_matches_relative_rule_without_cm_motion(am):
    rel = am.relative_lrel_rme(2, 2, 1, 1, 3, 2)
    relcm = am.relative_cm_lsum_rme(2, 2, 0, 0, 2, 2, 1, 1, 3, 2)
    assert relcm == pytest.approx(rel)


def test_relative_cm_spin_reduces_to_relative_for_s_wave_cm(am):
    rel = am.relative_spin_symmetric_rme(1, 1, 1, 1, 2, 1, 0, 1)
    relcm = am.relative_cm_spin_symmetric_rme(1, 1, 0, 0, 1, 1, 1, 1, 2, 1, 0, 0, 0, 1)
    assert relcm == pytest.approx(rel)
