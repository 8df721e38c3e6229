"""逐阶遍历截断基、填充并累加算符矩阵的驱动器。"""
from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Optional, Protocol, TextIO, Union

from chiral_rme.basis.sectors import (
    OperatorLabels,
    OperatorMatrix,
    Sectors,
    allocated_entries,
    construct_zero_operator,
    upper_triangular_entries,
)
from chiral_rme.basis.spaces import RelativeCMSpace, RelativeSpace, make_space
from chiral_rme.numerics.radial import OscillatorParameter
from chiral_rme.operators.base import ChiralOperator, make_operator
from chiral_rme.operators.orders import ChiralOrder, OrderSchedule

if TYPE_CHECKING:  # pragma: no cover
    from chiral_rme.config import RunConfig

logger = logging.getLogger(__name__)

Space = Union[RelativeSpace, RelativeCMSpace]


class OperatorWriter(Protocol):
    def write(
        self,
        *,
        name: str,
        order_label: str,
        cumulative: bool,
        space: Space,
        labels: OperatorLabels,
        sectors: Dict[int, Sectors],
        matrices: OperatorMatrix,
        hw: float,
        timestamp: int,
    ) -> Path:
        ...


class _SimpleProgress:
    """逐阶矩阵元计算的百分比进度，写到 stderr（或给定的流）。"""

    __slots__ = (
        "total",
        "desc",
        "stream",
        "count",
        "_last_percent",
        "_last_print",
    )

    def __init__(self, total: int, desc: str, stream: Optional[TextIO] = None) -> None:
        self.total = max(int(total), 0)
        self.desc = desc
        self.stream = stream if stream is not None else sys.stderr
        self.count = 0
        self._last_percent = -1
        self._last_print = time.perf_counter()
        if self.total == 0:
            self._write_line(0)

    def update(self, step: int = 1) -> None:
        if self.total == 0:
            return
        self.count = min(self.count + step, self.total)
        percent = int((self.count * 100) / self.total)
        now = time.perf_counter()
        if (
            percent != self._last_percent
            or now - self._last_print >= 0.25
            or self.count == self.total
        ):
            self._write_line(percent)
            self._last_percent = percent
            self._last_print = now

    def close(self) -> None:
        if self.total > 0:
            self._write_line(100)
        self.stream.write("\n")
        self.stream.flush()

    def _write_line(self, percent: int) -> None:
        message = f"\r{self.desc}: {percent:3d}% ({self.count}/{self.total})"
        self.stream.write(message)
        self.stream.flush()


@dataclass
class OperatorArtifact:
    """单阶（或累计）矩阵及其输出文件。"""

    order: ChiralOrder
    cumulative: bool
    matrices: OperatorMatrix
    path: Optional[Path] = None

    @property
    def label(self) -> str:
        if self.cumulative:
            return f"{self.order.label}_cumulative"
        return self.order.label


@dataclass
class DriverResult:
    space: Space
    labels: OperatorLabels
    sectors: Dict[int, Sectors]
    order_artifacts: List[OperatorArtifact]
    cumulative: OperatorArtifact

    @property
    def artifacts(self) -> List[OperatorArtifact]:
        return [*self.order_artifacts, self.cumulative]

    @property
    def orders(self) -> List[ChiralOrder]:
        return [artifact.order for artifact in self.order_artifacts]


@dataclass
class BasisDriver:
    """在 ``(Nmax, Jmax)`` 截断基上逐阶计算算符约化矩阵元。

    每一阶从零矩阵开始填充，完成全部 ``T0``/扇区/态对循环后交给写出器，
    并加入累计矩阵；处理完所请求的截断阶后再写出累计矩阵并结束。
    """

    operator: ChiralOperator
    Nmax: int
    Jmax: int
    T0_min: int
    T0_max: int
    hw: float
    representation: str = "relative"
    writer: Optional[OperatorWriter] = None
    timestamp: Optional[int] = None
    progress: bool | str | None = None
    evaluations: Dict[ChiralOrder, int] = field(init=False, default_factory=dict)

    @classmethod
    def from_config(cls, config: "RunConfig", writer: Optional[OperatorWriter] = None,
                    progress: bool | str | None = None) -> "BasisDriver":
        """先创建算符（名称未知时立即失败），再组装驱动器。"""
        operator = make_operator(
            config.name,
            config.order,
            constants=config.physical_constants(),
            regularize=config.regularize,
            regulator=config.regulator,
        )
        return cls(
            operator=operator,
            Nmax=config.Nmax,
            Jmax=config.Jmax,
            T0_min=config.Tmin,
            T0_max=config.Tmax,
            hw=config.hw,
            representation=config.representation,
            writer=writer,
            progress=progress,
        )

    @property
    def oscillator(self) -> OscillatorParameter:
        return OscillatorParameter(self.operator.constants.oscillator_length(self.hw))

    def build(self):
        """构建基空间、算符标签、扇区与零矩阵。"""
        space = make_space(self.representation, self.Nmax, self.Jmax)
        labels = OperatorLabels(
            self.operator.J0, self.operator.G0, self.T0_min, self.T0_max)
        sectors, matrices = construct_zero_operator(space, labels)
        return space, labels, sectors, matrices

    def compute_order(
        self,
        order: ChiralOrder,
        sectors: Dict[int, Sectors],
        template: OperatorMatrix,
        b: OscillatorParameter,
    ) -> OperatorMatrix:
        """只含本阶贡献的矩阵，总是从零开始。"""
        matrices = template.zeros_like()
        reporter = None
        if self.progress:
            desc = self.progress if isinstance(self.progress, str) else "Evaluating"
            total = sum(sector.shape[0] * sector.shape[1]
                        for group in sectors.values() for sector in group)
            reporter = _SimpleProgress(total, f"{desc} {order.label}")

        count = 0
        operator = self.operator
        for T0, group in sectors.items():
            blocks = matrices[T0]
            for sector_index, sector in enumerate(group):
                block = blocks[sector_index]
                bra_subspace = sector.bra_subspace
                ket_subspace = sector.ket_subspace
                for bra_index, bra in enumerate(bra_subspace.states):
                    for ket_index, ket in enumerate(ket_subspace.states):
                        block[bra_index, ket_index] = operator.reduced_matrix_element(
                            order, bra, ket, b, T0=T0)
                        count += 1
                    if reporter is not None:
                        reporter.update(ket_subspace.size)
        if reporter is not None:
            reporter.close()
        self.evaluations[order] = count
        return matrices

    def run(self) -> DriverResult:
        timestamp = int(time.time()) if self.timestamp is None else int(self.timestamp)
        space, labels, sectors, cumulative = self.build()
        b = self.oscillator

        logger.info(
            "Truncation: Nmax %d Jmax %d T0_max %d", self.Nmax, self.Jmax, self.T0_max)
        logger.info(
            "Matrix elements: %s",
            " ".join(str(upper_triangular_entries(sectors[T0])) for T0 in labels.T0_range))
        logger.info(
            "Allocated: %s",
            " ".join(str(allocated_entries(cumulative[T0])) for T0 in labels.T0_range))

        schedule = OrderSchedule(self.operator.order)
        order_artifacts: List[OperatorArtifact] = []
        for order in schedule:
            contribution = self.compute_order(order, sectors, cumulative, b)
            cumulative.add_(contribution)
            artifact = OperatorArtifact(order=order, cumulative=False, matrices=contribution)
            artifact.path = self._emit(artifact, space, labels, sectors, timestamp)
            order_artifacts.append(artifact)
            logger.info("Order %s done", order.label)

        final = OperatorArtifact(
            order=schedule.requested, cumulative=True, matrices=cumulative)
        final.path = self._emit(final, space, labels, sectors, timestamp)
        return DriverResult(
            space=space,
            labels=labels,
            sectors=sectors,
            order_artifacts=order_artifacts,
            cumulative=final,
        )

    def _emit(self, artifact: OperatorArtifact, space, labels, sectors, timestamp: int) -> Optional[Path]:
        if self.writer is None:
            return None
        return self.writer.write(
            name=self.operator.name,
            order_label=artifact.order.label,
            cumulative=artifact.cumulative,
            space=space,
            labels=labels,
            sectors=sectors,
            matrices=artifact.matrices,
            hw=self.hw,
            timestamp=timestamp,
        )
