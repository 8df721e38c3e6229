"""运行参数：配置文件读取、命令行覆盖与合法性检查。"""
from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping

from chiral_rme.constants import DEFAULT_CONSTANTS, PhysicalConstants
from chiral_rme.errors import ConfigurationError, UnknownOrderError
from chiral_rme.operators.orders import ChiralOrder

REPRESENTATIONS = ("relative", "relative_cm")


@dataclass(frozen=True)
class RunConfig:
    r"""一次矩阵元生成所需的全部输入。

    Attributes
    ----------
    name : str
        算符名称。
    order : str
        截断手征阶标签。
    hw : float
        谐振子能量 (MeV)。
    Nmax, Jmax : int
        基截断。
    Tmin, Tmax : int
        同位旋张量秩 ``T0`` 的范围。
    representation : str
        ``relative`` 或 ``relative_cm``。
    regularize : bool
        两体径向积分是否使用正规化函数。
    regulator : float
        正规化长度 ``R`` (fm)。
    output_dir : Path
        输出目录。
    constants : Mapping[str, float]
        对 :class:`PhysicalConstants` 字段的覆盖。
    """

    name: str = "identity"
    order: str = "lo"
    hw: float = 0.0
    Nmax: int = 0
    Jmax: int = 0
    Tmin: int = 0
    Tmax: int = 0
    representation: str = "relative"
    regularize: bool = True
    regulator: float = 1.0
    output_dir: Path = Path(".")
    constants: Mapping[str, float] = field(default_factory=dict)

    def validate(self) -> "RunConfig":
        if self.hw <= 0:
            raise ConfigurationError("谐振子能量 hw 必须为正。")
        if self.Nmax < 0 or self.Jmax < 0:
            raise ConfigurationError("Nmax 与 Jmax 必须为非负整数。")
        if not 0 <= self.Tmin <= self.Tmax <= 2:
            raise ConfigurationError("要求 0 <= Tmin <= Tmax <= 2。")
        if self.representation not in REPRESENTATIONS:
            raise ConfigurationError(
                f"未知表示 {self.representation!r}，可用: {', '.join(REPRESENTATIONS)}")
        if self.regulator <= 0:
            raise ConfigurationError("正规化长度 regulator 必须为正。")
        try:
            ChiralOrder.parse(self.order)
        except UnknownOrderError as err:
            raise ConfigurationError(str(err)) from err
        try:
            self.physical_constants()
        except ValueError as err:
            raise ConfigurationError(str(err)) from err
        return self

    def physical_constants(self) -> PhysicalConstants:
        return DEFAULT_CONSTANTS.with_overrides(self.constants)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "RunConfig":
        """由字典构建，键名与命令行长选项一致（``-`` 与 ``_`` 等价）。"""
        known = {item.name: item for item in fields(cls)}
        values: Dict[str, Any] = {}
        for raw_key, value in mapping.items():
            key = str(raw_key).replace("-", "_")
            if key not in known:
                raise ConfigurationError(f"未知配置项: {raw_key!r}")
            values[key] = value
        try:
            return cls(**_coerce(values))
        except (TypeError, ValueError) as err:
            raise ConfigurationError(f"配置项类型错误: {err}") from err


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    converted = dict(values)
    for key in ("Nmax", "Jmax", "Tmin", "Tmax"):
        if key in converted:
            value = converted[key]
            if isinstance(value, bool) or int(value) != value:
                raise ValueError(f"{key} 必须为整数")
            converted[key] = int(value)
    for key in ("hw", "regulator"):
        if key in converted:
            converted[key] = float(converted[key])
    if "output_dir" in converted:
        converted["output_dir"] = Path(converted["output_dir"])
    if "constants" in converted:
        converted["constants"] = {
            str(name): float(value) for name, value in dict(converted["constants"]).items()
        }
    if "regularize" in converted and not isinstance(converted["regularize"], bool):
        raise ValueError("regularize 必须为布尔值")
    return converted


def load_config(path: Path) -> Dict[str, Any]:
    """读取 TOML 配置文件，返回原始键值。"""
    path = Path(path)
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as err:
        raise ConfigurationError(f"找不到配置文件: {path}") from err
    except tomllib.TOMLDecodeError as err:
        raise ConfigurationError(f"配置文件格式错误 ({path}): {err}") from err


def resolve_config(file_values: Mapping[str, Any] | None, overrides: Mapping[str, Any]) -> RunConfig:
    """合并配置文件与命令行参数（值为 ``None`` 的命令行项不覆盖），并校验。"""
    merged: Dict[str, Any] = dict(file_values or {})
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value
    return RunConfig.from_mapping(merged).validate()
