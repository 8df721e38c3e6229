"""Operator file input/output."""

from .operator_files import (
    OperatorFile,
    OperatorFileWriter,
    artifact_filename,
    format_hw,
    read_operator,
    write_operator,
)

__all__ = [
    "OperatorFile",
    "OperatorFileWriter",
    "artifact_filename",
    "format_hw",
    "read_operator",
    "write_operator",
]
