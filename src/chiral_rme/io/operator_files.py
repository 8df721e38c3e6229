"""Flat-file persistence for relative and relative-cm operator matrices."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Union

from chiral_rme.basis.sectors import OperatorLabels, OperatorMatrix, Sectors
from chiral_rme.basis.spaces import RelativeCMSpace, RelativeSpace

FORMAT_VERSION = 1

_REPRESENTATION_TAGS = {
    "relative": ("rel", "RELATIVE LSJT"),
    "relative_cm": ("relcm", "RELATIVE-CM LSJT"),
}

_COLUMN_HEADERS = {
    "relative": "T0  N' L' S' J' T'  N L S J T  JT-RME",
    "relative_cm": "T0  Nr' lr' Nc' lc' L' S' J' T'  Nr lr Nc lc L S J T  JT-RME",
}

StateKey = Tuple[int, ...]
ElementKey = Tuple[int, StateKey, StateKey]


def format_hw(hw: float) -> str:
    """Shortest decimal form of the oscillator energy, e.g. ``20`` or ``17.5``."""
    return f"{hw:g}"


def artifact_filename(
    name: str,
    representation: str,
    order_label: str,
    Nmax: int,
    Jmax: int,
    hw: float,
    timestamp: int,
    *,
    cumulative: bool = False,
) -> str:
    tag = _REPRESENTATION_TAGS[representation][0]
    order_part = f"{order_label}_cumulative" if cumulative else order_label
    return (
        f"{name}_2b_{tag}_{order_part}_N{Nmax}_J{Jmax}"
        f"_hw{format_hw(hw)}_{timestamp}.txt"
    )


def _state_columns(state) -> StateKey:
    if hasattr(state, "lr"):
        return (state.Nr, state.lr, state.Nc, state.lc, state.L, state.S, state.J, state.T)
    return (state.N, state.L, state.S, state.J, state.T)


def write_operator(
    path: Path,
    space: Union[RelativeSpace, RelativeCMSpace],
    labels: OperatorLabels,
    sectors: Dict[int, Sectors],
    matrices: OperatorMatrix,
    *,
    verbose: bool = True,
) -> Path:
    """Write header plus one line per stored matrix element.

    Diagonal sectors contribute their upper triangle only.
    """
    representation = space.representation
    title = _REPRESENTATION_TAGS[representation][1]
    lines: List[str] = []
    if verbose:
        lines.extend([
            f"# {title}",
            "#   version",
            "#   J0 g0 T0_min T0_max symmetry_phase_mode  [P0=0 hermitian]",
            "#   Nmax Jmax",
            f"#   {_COLUMN_HEADERS[representation]}",
        ])
    lines.append(str(FORMAT_VERSION))
    lines.append(
        f"{labels.J0} {labels.G0} {labels.T0_min} {labels.T0_max} {labels.symmetry_phase_mode}")
    lines.append(f"{space.Nmax} {space.Jmax}")

    for T0 in labels.T0_range:
        blocks = matrices[T0]
        for sector_index, sector in enumerate(sectors[T0]):
            block = blocks[sector_index]
            bra_states = sector.bra_subspace.states
            ket_states = sector.ket_subspace.states
            for bra_index, bra in enumerate(bra_states):
                start = bra_index if sector.is_diagonal else 0
                bra_columns = " ".join(f"{value:2d}" for value in _state_columns(bra))
                for ket_index in range(start, len(ket_states)):
                    ket_columns = " ".join(
                        f"{value:2d}" for value in _state_columns(ket_states[ket_index]))
                    value = float(block[bra_index, ket_index])
                    lines.append(
                        f"{T0:2d}   {bra_columns}   {ket_columns}   {value:+.16e}")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        handle.write("\n".join(lines))
        handle.write("\n")
    return path


@dataclass
class OperatorFile:
    version: int
    J0: int
    G0: int
    T0_min: int
    T0_max: int
    symmetry_phase_mode: int
    Nmax: int
    Jmax: int
    elements: Dict[ElementKey, float]


def read_operator(path: Path) -> OperatorFile:
    """Parse a file produced by :func:`write_operator`."""
    with Path(path).open("r", encoding="utf-8") as handle:
        rows = [
            line.split() for line in handle
            if line.strip() and not line.lstrip().startswith("#")
        ]
    if len(rows) < 3:
        raise ValueError(f"Truncated operator file: {path}")
    version = int(rows[0][0])
    if version != FORMAT_VERSION:
        raise ValueError(f"Unsupported operator file version {version}")
    J0, G0, T0_min, T0_max, mode = (int(token) for token in rows[1])
    Nmax, Jmax = (int(token) for token in rows[2])

    elements: Dict[ElementKey, float] = {}
    for row in rows[3:]:
        width = (len(row) - 2) // 2
        T0 = int(row[0])
        bra = tuple(int(token) for token in row[1:1 + width])
        ket = tuple(int(token) for token in row[1 + width:1 + 2 * width])
        elements[(T0, bra, ket)] = float(row[-1])
    return OperatorFile(
        version=version,
        J0=J0,
        G0=G0,
        T0_min=T0_min,
        T0_max=T0_max,
        symmetry_phase_mode=mode,
        Nmax=Nmax,
        Jmax=Jmax,
        elements=elements,
    )


class OperatorFileWriter:
    """Write driver artifacts into ``base_path`` under deterministic names."""

    def __init__(self, base_path: Path, *, verbose: bool = True) -> None:
        self.base_path = Path(base_path)
        self.verbose = verbose

    def _resolve(self, name: str) -> Path:
        return self.base_path / name

    def write(
        self,
        *,
        name: str,
        order_label: str,
        cumulative: bool,
        space,
        labels: OperatorLabels,
        sectors: Dict[int, Sectors],
        matrices: OperatorMatrix,
        hw: float,
        timestamp: int,
    ) -> Path:
        filename = artifact_filename(
            name,
            space.representation,
            order_label,
            space.Nmax,
            space.Jmax,
            hw,
            timestamp,
            cumulative=cumulative,
        )
        return write_operator(
            self._resolve(filename), space, labels, sectors, matrices, verbose=self.verbose)
