import math

import numpy as np
import pytest

from chiral_rme.basis.angular import AngularCoupling
from chiral_rme.numerics.quadrature import composite_radial_grid
from chiral_rme.numerics.radial import (
    OscillatorParameter,
    RadialParameters,
    RadialQuadrature,
    coordinate_space_norm,
)


@pytest.fixture(scope="module")
def quadrature():
    return RadialQuadrature()


def test_composite_grid_integrates_polynomials():
    nodes, weights = composite_radial_grid(4.0, 4, 8)
    assert nodes.shape == weights.shape == (32,)
    assert np.all(np.diff(nodes) > 0)
    assert weights.sum() == pytest.approx(4.0)
    assert np.sum(weights * nodes**3) == pytest.approx(64.0)


def test_composite_grid_rejects_bad_arguments():
    with pytest.raises(ValueError):
        composite_radial_grid(0.0, 4, 8)
    with pytest.raises(ValueError):
        composite_radial_grid(1.0, 0, 8)


def test_ground_state_norm():
    assert coordinate_space_norm(0, 0) == pytest.approx(math.sqrt(4.0 / math.sqrt(math.pi)))


@pytest.mark.parametrize("l", [0, 1, 2])
def test_radial_functions_are_orthonormal(quadrature, l):
    for n in range(4):
        for m in range(4):
            expected = 1.0 if n == m else 0.0
            assert quadrature.overlap(n, l, m, l) == pytest.approx(expected, abs=1e-10)


def test_radius_and_gradient_between_lowest_states(quadrature):
    am = AngularCoupling()
    assert quadrature.radial_r_me(0, 0, 1, 0) == pytest.approx(math.sqrt(1.5))
    assert quadrature.radius_me(0, 0, 1, 0, am) == pytest.approx(math.sqrt(1.5))
    assert quadrature.gradient_me(0, 0, 1, 0, am) == pytest.approx(-math.sqrt(1.5))
    assert quadrature.gradient_me(0, 0, 1, 1, am) == 0.0


def test_regularized_integrals_are_finite(quadrature):
    params = RadialParameters(0, 0, 1, 0, True, 0.7, 1.0)
    for method in (
        quadrature.integral_ypi,
        quadrature.integral_wpi_ypi,
        quadrature.integral_zpi_ypi,
        quadrature.integral_tpi_ypi,
        quadrature.integral_mpir_wpi_ypi,
        quadrature.integral_regularized_delta,
    ):
        assert math.isfinite(method(params))


def test_regulator_suppresses_short_distance(quadrature):
    bare = RadialParameters(0, 0, 0, 0, False, 0.7, 1.0)
    regularized = RadialParameters(0, 0, 0, 0, True, 0.7, 1.0)
    assert 0.0 < quadrature.integral_ypi(regularized) < quadrature.integral_ypi(bare)


def test_vanishing_pion_mass_gives_nan(quadrature):
    params = RadialParameters(0, 0, 0, 0, True, float("inf"), 0.0)
    assert math.isnan(quadrature.integral_tpi_ypi(params))


def test_integrals_are_cached(quadrature):
    params = RadialParameters(1, 2, 0, 2, True, 0.8, 0.9)
    first = quadrature.integral_wpi_ypi(params)
    assert quadrature.integral_wpi_ypi(params) == first
    assert ("_kernel_wpi_ypi", params) in quadrature._cache


def test_oscillator_parameter_lengths():
    b = OscillatorParameter(1.8)
    assert b.relative == 1.8
    assert b.cm == pytest.approx(0.9)
