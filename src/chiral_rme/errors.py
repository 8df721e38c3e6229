"""包内统一使用的异常类型。"""
from __future__ import annotations


class ChiralRMEError(Exception):
    """所有本包异常的基类。"""


class UnknownOperatorError(ChiralRMEError, ValueError):
    """算符名称未注册。"""

    def __init__(self, name: str, known: tuple[str, ...] = ()) -> None:
        self.name = name
        self.known = tuple(known)
        message = f"未知算符: {name!r}"
        if self.known:
            message += f"（可用: {', '.join(self.known)}）"
        super().__init__(message)


class UnknownOrderError(ChiralRMEError, ValueError):
    """手征阶标签无法识别。"""

    def __init__(self, label: str, known: tuple[str, ...] = ()) -> None:
        self.label = label
        self.known = tuple(known)
        message = f"未知手征阶: {label!r}"
        if self.known:
            message += f"（可用: {', '.join(self.known)}）"
        super().__init__(message)


class ConfigurationError(ChiralRMEError, ValueError):
    """运行参数不合法。"""
