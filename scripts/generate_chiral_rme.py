"""生成谐振子基下的手征有效场论算符约化矩阵元。"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from chiral_rme.assembly import BasisDriver
from chiral_rme.basis import allocated_entries, upper_triangular_entries
from chiral_rme.config import load_config, resolve_config
from chiral_rme.errors import ChiralRMEError, ConfigurationError
from chiral_rme.io import OperatorFileWriter


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generates CEFT reduced matrix elements in HO basis.")
    parser.add_argument("-n", "--name", default=None,
                        help="Name of operator (default: identity).")
    parser.add_argument("-o", "--order", default=None,
                        help="Chiral order of operator (default: lo).")
    parser.add_argument("-E", "--hw", type=float, default=None,
                        help="Oscillator energy of basis.")
    parser.add_argument("-N", "--Nmax", type=int, default=None,
                        help="Nmax truncation of basis.")
    parser.add_argument("-J", "--Jmax", type=int, default=None,
                        help="Jmax truncation of basis.")
    parser.add_argument("-t", "--Tmin", type=int, default=None,
                        help="Minimum isotensor rank T0.")
    parser.add_argument("-T", "--Tmax", type=int, default=None,
                        help="Maximum isotensor rank T0.")
    parser.add_argument("-c", "--config", type=Path, default=None,
                        help="TOML file with any of the options above.")
    parser.add_argument("--representation", choices=["relative", "relative_cm"], default=None,
                        help="Basis representation (default: relative).")
    parser.add_argument("--regulator", type=float, default=None,
                        help="Local regulator length R in fm (default: 1.0).")
    parser.add_argument("--no-regularize", dest="regularize", action="store_const",
                        const=False, default=None,
                        help="Disable regularization of two-body radial integrals.")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Directory for the generated operator files.")
    parser.add_argument("--progress", action="store_true",
                        help="Display a progress bar for every chiral order.")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides = {
        key: getattr(args, key)
        for key in ("name", "order", "hw", "Nmax", "Jmax", "Tmin", "Tmax",
                    "representation", "regulator", "regularize", "output_dir")
    }
    try:
        file_values = load_config(args.config) if args.config is not None else None
        config = resolve_config(file_values, overrides)
        driver = BasisDriver.from_config(
            config,
            writer=OperatorFileWriter(config.output_dir),
            progress="矩阵元计算进度" if args.progress else None,
        )
    except ConfigurationError as err:
        print(f"error: {err}", file=sys.stderr)
        return 2
    except ChiralRMEError as err:
        print(f"error: {err}", file=sys.stderr)
        return 1

    print()
    print(f"Generating {config.name} matrix elements...")
    print(f"Beginning {config.representation} LSJT operator basis setup...")

    result = driver.run()

    print(f"Truncation: Nmax {config.Nmax} Jmax {config.Jmax} T0_max {config.Tmax}")
    print("Matrix elements:", " ".join(
        str(upper_triangular_entries(result.sectors[T0])) for T0 in result.labels.T0_range))
    print("Allocated:", " ".join(
        str(allocated_entries(result.cumulative.matrices[T0])) for T0 in result.labels.T0_range))
    for artifact in result.artifacts:
        print(f"  {artifact.label:>18s} -> {artifact.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
