"""算符扇区与分块矩阵。

扇区是满足选择定则的 ``(bra 子空间, ket 子空间)`` 对；在厄米对称约定下
只保存上三角 (bra 索引 <= ket 索引)。每个同位旋张量秩 ``T0`` 单独建立一组扇区
与一组稠密矩阵块。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Tuple

import numpy as np

from .spaces import Subspace, _SpaceBase, _triangle


@dataclass(frozen=True)
class OperatorLabels:
    """算符的张量秩 ``J0``、宇称 ``G0`` 与 ``T0`` 范围。"""

    J0: int
    G0: int
    T0_min: int
    T0_max: int
    symmetry_phase_mode: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.T0_min <= self.T0_max <= 2:
            raise ValueError("要求 0 <= T0_min <= T0_max <= 2。")
        if self.G0 not in (0, 1):
            raise ValueError("G0 只能为 0 或 1。")

    @property
    def T0_range(self) -> range:
        return range(self.T0_min, self.T0_max + 1)


@dataclass(frozen=True)
class Sector:
    bra_index: int
    ket_index: int
    bra_subspace: Subspace
    ket_subspace: Subspace
    T0: int

    @property
    def is_diagonal(self) -> bool:
        return self.bra_index == self.ket_index

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.bra_subspace.size, self.ket_subspace.size)


def sector_allowed(bra: Subspace, ket: Subspace, J0: int, G0: int, T0: int) -> bool:
    """角动量三角、宇称与同位旋选择定则。"""
    if not _triangle(bra.J, ket.J, J0):
        return False
    if (bra.g + ket.g + G0) % 2 != 0:
        return False
    return _triangle(bra.T, ket.T, T0)


class Sectors(Sequence[Sector]):
    """单个 ``T0`` 分量的全部允许扇区。"""

    def __init__(self, space: _SpaceBase, labels: OperatorLabels, T0: int) -> None:
        self.space = space
        self.labels = labels
        self.T0 = int(T0)
        sectors: List[Sector] = []
        for bra_index, bra in enumerate(space.subspaces):
            for ket_index in range(bra_index, len(space.subspaces)):
                ket = space.subspaces[ket_index]
                if sector_allowed(bra, ket, labels.J0, labels.G0, self.T0):
                    sectors.append(Sector(bra_index, ket_index, bra, ket, self.T0))
        self._sectors: Tuple[Sector, ...] = tuple(sectors)
        self._lookup: Dict[Tuple[int, int], int] = {
            (sector.bra_index, sector.ket_index): index
            for index, sector in enumerate(self._sectors)
        }

    def __len__(self) -> int:
        return len(self._sectors)

    def __getitem__(self, index):  # type: ignore[override]
        return self._sectors[index]

    def __iter__(self) -> Iterator[Sector]:
        return iter(self._sectors)

    def find(self, bra_index: int, ket_index: int) -> int:
        """返回扇区索引，不存在时为 ``-1``。"""
        return self._lookup.get((bra_index, ket_index), -1)


class OperatorMatrix:
    """按 ``T0`` 索引的稠密矩阵块集合，每个扇区一个块。"""

    def __init__(self, blocks: Dict[int, List[np.ndarray]]) -> None:
        self.blocks = blocks

    @classmethod
    def zeros(cls, sectors: Dict[int, Sectors]) -> "OperatorMatrix":
        return cls({
            T0: [np.zeros(sector.shape, dtype=float) for sector in group]
            for T0, group in sectors.items()
        })

    def zeros_like(self) -> "OperatorMatrix":
        return OperatorMatrix({
            T0: [np.zeros_like(block) for block in group]
            for T0, group in self.blocks.items()
        })

    def copy(self) -> "OperatorMatrix":
        return OperatorMatrix({
            T0: [block.copy() for block in group]
            for T0, group in self.blocks.items()
        })

    def add_(self, other: "OperatorMatrix") -> "OperatorMatrix":
        """原地逐块相加，要求几何结构一致。"""
        if self.blocks.keys() != other.blocks.keys():
            raise ValueError("T0 分量不一致，无法相加。")
        for T0, group in self.blocks.items():
            other_group = other.blocks[T0]
            if len(group) != len(other_group):
                raise ValueError("扇区数量不一致，无法相加。")
            for block, other_block in zip(group, other_group):
                block += other_block
        return self

    def __getitem__(self, T0: int) -> List[np.ndarray]:
        return self.blocks[T0]

    def __contains__(self, T0: object) -> bool:
        return T0 in self.blocks

    def T0_values(self) -> Tuple[int, ...]:
        return tuple(sorted(self.blocks))

    def allclose(self, other: "OperatorMatrix", **kwargs) -> bool:
        if self.blocks.keys() != other.blocks.keys():
            return False
        return all(
            len(group) == len(other.blocks[T0])
            and all(np.allclose(a, b, **kwargs) for a, b in zip(group, other.blocks[T0]))
            for T0, group in self.blocks.items()
        )


def construct_zero_operator(space: _SpaceBase, labels: OperatorLabels) -> Tuple[Dict[int, Sectors], OperatorMatrix]:
    """为 ``labels.T0_range`` 中每个 ``T0`` 构建扇区与零矩阵。"""
    sectors = {T0: Sectors(space, labels, T0) for T0 in labels.T0_range}
    return sectors, OperatorMatrix.zeros(sectors)


def upper_triangular_entries(sectors: Sectors) -> int:
    """上三角存储下独立矩阵元数目。"""
    total = 0
    for sector in sectors:
        rows, cols = sector.shape
        if sector.is_diagonal:
            total += rows * (rows + 1) // 2
        else:
            total += rows * cols
    return total


def allocated_entries(blocks: Sequence[np.ndarray]) -> int:
    return int(sum(block.size for block in blocks))
