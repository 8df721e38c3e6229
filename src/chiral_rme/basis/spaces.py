"""截断基空间的构建：子空间按耦合量子数 ``(L, S, J, T, g)`` 分组。"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple, Union

from .states import RelativeCMState, RelativeState


SubspaceLabels = Tuple[int, int, int, int, int]


def _triangle(j1: int, j2: int, j3: int) -> bool:
    return abs(j1 - j2) <= j3 <= j1 + j2


@dataclass(frozen=True)
class RelativeSubspace:
    """共享 ``(L, S, J, T, g)`` 的相对坐标态，按 ``N`` 递增排列。"""

    L: int
    S: int
    J: int
    T: int
    g: int
    Nmax: int
    states: Tuple[RelativeState, ...]

    @classmethod
    def build(cls, L: int, S: int, J: int, T: int, Nmax: int) -> "RelativeSubspace":
        states = tuple(
            RelativeState(n=(N - L) // 2, L=L, S=S, J=J, T=T)
            for N in range(L, Nmax + 1, 2)
        )
        return cls(L=L, S=S, J=J, T=T, g=L % 2, Nmax=Nmax, states=states)

    @property
    def labels(self) -> SubspaceLabels:
        return (self.L, self.S, self.J, self.T, self.g)

    @property
    def size(self) -> int:
        return len(self.states)

    def __len__(self) -> int:
        return len(self.states)

    def __getitem__(self, index: int) -> RelativeState:
        return self.states[index]


@dataclass(frozen=True)
class RelativeCMSubspace:
    """共享 ``(L, S, J, T, g)`` 的相对-质心态，按总振子量子数排列。"""

    L: int
    S: int
    J: int
    T: int
    g: int
    Nmax: int
    states: Tuple[RelativeCMState, ...]

    @classmethod
    def build(cls, L: int, S: int, J: int, T: int, g: int, Nmax: int) -> "RelativeCMSubspace":
        states: List[RelativeCMState] = []
        for N in range(g, Nmax + 1, 2):
            for Nr in range(N + 1):
                Nc = N - Nr
                for lr in range(Nr % 2, Nr + 1, 2):
                    # 反对称化要求 lr + S + T 为奇数
                    if (lr + S + T) % 2 != 1:
                        continue
                    for lc in range(Nc % 2, Nc + 1, 2):
                        if not _triangle(lr, lc, L):
                            continue
                        states.append(
                            RelativeCMState(
                                nr=(Nr - lr) // 2,
                                lr=lr,
                                nc=(Nc - lc) // 2,
                                lc=lc,
                                L=L,
                                S=S,
                                J=J,
                                T=T,
                            )
                        )
        return cls(L=L, S=S, J=J, T=T, g=g, Nmax=Nmax, states=tuple(states))

    @property
    def labels(self) -> SubspaceLabels:
        return (self.L, self.S, self.J, self.T, self.g)

    @property
    def size(self) -> int:
        return len(self.states)

    def __len__(self) -> int:
        return len(self.states)

    def __getitem__(self, index: int) -> RelativeCMState:
        return self.states[index]


Subspace = Union[RelativeSubspace, RelativeCMSubspace]


class _SpaceBase:
    representation: str = ""

    def __init__(self, Nmax: int, Jmax: int) -> None:
        if Nmax < 0 or Jmax < 0:
            raise ValueError("Nmax 与 Jmax 必须为非负整数。")
        self.Nmax = int(Nmax)
        self.Jmax = int(Jmax)
        self.subspaces: Tuple[Subspace, ...] = tuple(self._build())

    def _build(self) -> Iterator[Subspace]:
        raise NotImplementedError

    def __len__(self) -> int:
        return len(self.subspaces)

    def __getitem__(self, index: int) -> Subspace:
        return self.subspaces[index]

    def __iter__(self) -> Iterator[Subspace]:
        return iter(self.subspaces)

    @property
    def dimension(self) -> int:
        return sum(subspace.size for subspace in self.subspaces)

    def lookup(self, labels: SubspaceLabels) -> int:
        """返回给定标签的子空间索引，不存在时抛出 ``KeyError``。"""
        for index, subspace in enumerate(self.subspaces):
            if subspace.labels == tuple(labels):
                return index
        raise KeyError(labels)


class RelativeSpace(_SpaceBase):
    """``(Nmax, Jmax)`` 截断下的相对坐标 LSJT 空间。"""

    representation = "relative"

    def _build(self) -> Iterator[RelativeSubspace]:
        for L in range(self.Nmax + 1):
            for S in range(2):
                for J in range(abs(L - S), min(L + S, self.Jmax) + 1):
                    for T in range(2):
                        if (L + S + T) % 2 != 1:
                            continue
                        yield RelativeSubspace.build(L, S, J, T, self.Nmax)


class RelativeCMSpace(_SpaceBase):
    """``(Nmax, Jmax)`` 截断下的相对-质心 LSJT 空间，空子空间被剔除。"""

    representation = "relative_cm"

    def _build(self) -> Iterator[RelativeCMSubspace]:
        for L in range(self.Nmax + 1):
            for S in range(2):
                for J in range(abs(L - S), min(L + S, self.Jmax) + 1):
                    for T in range(2):
                        for g in range(2):
                            subspace = RelativeCMSubspace.build(
                                L, S, J, T, g, self.Nmax)
                            if subspace.size:
                                yield subspace


def make_space(representation: str, Nmax: int, Jmax: int) -> Union[RelativeSpace, RelativeCMSpace]:
    if representation == "relative":
        return RelativeSpace(Nmax, Jmax)
    if representation == "relative_cm":
        return RelativeCMSpace(Nmax, Jmax)
    raise ValueError(f"未知表示: {representation!r}")
