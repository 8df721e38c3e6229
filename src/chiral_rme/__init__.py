"""手征有效场论 M1 算符约化矩阵元生成包。"""

__all__ = [
    "basis",
    "numerics",
    "operators",
    "assembly",
    "io",
    "config",
    "constants",
    "errors",
]
