import numpy as np
import pytest

from chiral_rme.basis.sectors import (
    OperatorLabels,
    OperatorMatrix,
    Sectors,
    construct_zero_operator,
    sector_allowed,
    upper_triangular_entries,
)
from chiral_rme.basis.spaces import RelativeCMSpace, RelativeSpace, make_space


def test_relative_space_subspaces():
    space = RelativeSpace(2, 2)
    labels = [subspace.labels[:4] for subspace in space]
    assert labels == [
        (0, 0, 0, 1),
        (0, 1, 1, 0),
        (1, 0, 1, 0),
        (1, 1, 0, 1),
        (1, 1, 1, 1),
        (1, 1, 2, 1),
        (2, 0, 2, 1),
        (2, 1, 1, 0),
        (2, 1, 2, 0),
    ]
    assert [subspace.size for subspace in space] == [2, 2, 1, 1, 1, 1, 1, 1, 1]
    assert space.dimension == 11


def test_relative_states_respect_truncation():
    space = RelativeSpace(4, 3)
    for subspace in space:
        assert (subspace.L + subspace.S + subspace.T) % 2 == 1
        assert subspace.J <= 3
        assert [state.N for state in subspace.states] == list(range(subspace.L, 5, 2))
        for state in subspace.states:
            assert state.g == subspace.g


def test_relative_cm_states_are_antisymmetric_and_truncated():
    space = RelativeCMSpace(3, 2)
    assert len(space) > 0
    for subspace in space:
        assert subspace.size > 0
        Ns = [state.N for state in subspace.states]
        assert Ns == sorted(Ns)
        for state in subspace.states:
            assert state.N <= 3
            assert state.g == subspace.g
            assert (state.lr + state.S + state.T) % 2 == 1
            assert abs(state.lr - state.lc) <= state.L <= state.lr + state.lc


def test_lookup_and_unknown_representation():
    space = RelativeSpace(2, 2)
    assert space.lookup((1, 1, 2, 1, 1)) == 5
    with pytest.raises(KeyError):
        space.lookup((5, 1, 2, 1, 1))
    with pytest.raises(ValueError):
        make_space("momentum", 2, 2)


@pytest.mark.parametrize("T0", [0, 1, 2])
def test_sectors_are_exactly_the_allowed_upper_triangle(T0):
    space = RelativeSpace(4, 3)
    labels = OperatorLabels(J0=1, G0=0, T0_min=0, T0_max=2)
    sectors = Sectors(space, labels, T0)
    found = {(sector.bra_index, sector.ket_index) for sector in sectors}
    expected = {
        (i, j)
        for i, bra in enumerate(space)
        for j, ket in enumerate(space)
        if i <= j and sector_allowed(bra, ket, 1, 0, T0)
    }
    assert found == expected
    for sector in sectors:
        bra, ket = sector.bra_subspace, sector.ket_subspace
        assert abs(bra.J - ket.J) <= 1 <= bra.J + ket.J
        assert (bra.g + ket.g) % 2 == 0
        assert abs(bra.T - ket.T) <= T0 <= bra.T + ket.T
        assert sectors.find(sector.bra_index, sector.ket_index) >= 0
    assert sectors.find(0, 0) == -1  # J = 0 -> J = 0 has no rank-1 component


def test_scalar_isoscalar_sectors_are_diagonal_in_quantum_numbers():
    space = RelativeSpace(2, 2)
    labels = OperatorLabels(J0=0, G0=0, T0_min=0, T0_max=0)
    sectors = Sectors(space, labels, 0)
    for sector in sectors:
        assert sector.bra_subspace.J == sector.ket_subspace.J
        assert sector.bra_subspace.T == sector.ket_subspace.T


def test_zero_operator_geometry():
    space = RelativeSpace(2, 2)
    labels = OperatorLabels(J0=1, G0=0, T0_min=0, T0_max=1)
    sectors, matrices = construct_zero_operator(space, labels)
    assert matrices.T0_values() == (0, 1)
    for T0 in labels.T0_range:
        assert len(matrices[T0]) == len(sectors[T0])
        for sector, block in zip(sectors[T0], matrices[T0]):
            assert block.shape == sector.shape
            assert not block.any()


def test_upper_triangular_entry_count():
    space = RelativeSpace(4, 1)
    labels = OperatorLabels(J0=0, G0=0, T0_min=0, T0_max=0)
    sectors = Sectors(space, labels, 0)
    total = 0
    for sector in sectors:
        rows, cols = sector.shape
        total += rows * (rows + 1) // 2 if sector.is_diagonal else rows * cols
    assert upper_triangular_entries(sectors) == total


def test_operator_matrix_arithmetic():
    a = OperatorMatrix({0: [np.ones((2, 2))], 1: [np.zeros((1, 3))]})
    b = a.zeros_like()
    b[0][0][0, 1] = 2.0
    assert a[0][0][0, 1] == 1.0
    a.add_(b)
    assert a[0][0][0, 1] == 3.0
    copy = a.copy()
    copy[0][0][:] = 0.0
    assert a[0][0][0, 0] == 1.0
    assert not a.allclose(copy)
    with pytest.raises(ValueError):
        a.add_(OperatorMatrix({0: [np.ones((2, 2))]}))


def test_operator_labels_validation():
    with pytest.raises(ValueError):
        OperatorLabels(J0=1, G0=0, T0_min=1, T0_max=0)
    with pytest.raises(ValueError):
        OperatorLabels(J0=1, G0=0, T0_min=0, T0_max=3)
    with pytest.raises(ValueError):
        OperatorLabels(J0=1, G0=2, T0_min=0, T0_max=1)
