"""手征展开阶的有序枚举与逐阶处理的状态机。"""
from __future__ import annotations

from enum import Enum
from typing import Iterator, Optional, Tuple

from chiral_rme.errors import UnknownOrderError


class ChiralOrder(Enum):
    """闭合有序的手征阶集合；``FULL`` 表示所有阶之和。"""

    LO = (0, "lo")
    NLO = (1, "nlo")
    N2LO = (2, "n2lo")
    N3LO = (3, "n3lo")
    N4LO = (4, "n4lo")
    FULL = (5, "full")

    @property
    def rank(self) -> int:
        return self.value[0]

    @property
    def label(self) -> str:
        return self.value[1]

    def __lt__(self, other: "ChiralOrder") -> bool:
        if not isinstance(other, ChiralOrder):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "ChiralOrder") -> bool:
        if not isinstance(other, ChiralOrder):
            return NotImplemented
        return self.rank <= other.rank

    @classmethod
    def expansion(cls) -> Tuple["ChiralOrder", ...]:
        """参与逐阶迭代的具体阶，按优先级从低到高。"""
        return (cls.LO, cls.NLO, cls.N2LO, cls.N3LO, cls.N4LO)

    @classmethod
    def labels(cls) -> Tuple[str, ...]:
        return tuple(order.label for order in cls)

    @classmethod
    def parse(cls, value: "str | ChiralOrder") -> "ChiralOrder":
        if isinstance(value, ChiralOrder):
            return value
        label = str(value).strip().lower()
        for order in cls:
            if order.label == label:
                return order
        raise UnknownOrderError(str(value), cls.labels())


class ScheduleState(Enum):
    PENDING = "pending"
    ACCUMULATING = "accumulating"
    DONE = "done"


class OrderSchedule:
    """逐阶处理的状态机：``PENDING -> ACCUMULATING(order) -> DONE``。

    每次 :meth:`advance` 返回下一个需要处理的阶；当前阶等于所请求的截断阶
    （或已到展开的最后一阶）时转入 ``DONE``，之后不再产生任何阶。
    ``FULL`` 截断处理全部具体阶。
    """

    def __init__(self, requested: "str | ChiralOrder") -> None:
        self.requested = ChiralOrder.parse(requested)
        self.state = ScheduleState.PENDING
        self.current: Optional[ChiralOrder] = None
        self._sequence = ChiralOrder.expansion()

    @property
    def planned(self) -> Tuple[ChiralOrder, ...]:
        """截断前将被处理的全部阶。"""
        if self.requested is ChiralOrder.FULL:
            return self._sequence
        return tuple(order for order in self._sequence if order <= self.requested)

    def advance(self) -> Optional[ChiralOrder]:
        if self.state is ScheduleState.DONE:
            return None
        if self.state is ScheduleState.PENDING:
            self.state = ScheduleState.ACCUMULATING
            self.current = self._sequence[0]
            return self.current

        assert self.current is not None
        if self.current is self.requested or self.current is self._sequence[-1]:
            self.state = ScheduleState.DONE
            self.current = None
            return None
        self.current = self._sequence[self._sequence.index(self.current) + 1]
        return self.current

    def __iter__(self) -> Iterator[ChiralOrder]:
        while True:
            order = self.advance()
            if order is None:
                return
            yield order

    @property
    def done(self) -> bool:
        return self.state is ScheduleState.DONE
