"""算符矩阵的逐阶装配。"""

from .driver import BasisDriver, DriverResult, OperatorArtifact

__all__ = ["BasisDriver", "DriverResult", "OperatorArtifact"]
