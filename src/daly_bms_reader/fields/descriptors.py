"""
字段描述模型
============

声明式地描述如何从响应数据中提取一个命名的物理量：
字节偏移、长度、整数编码、数值变换、单位和说明。
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Tuple, Union

from ..config.constants import MAX_CELLS, MAX_SENSORS, DEFAULT_CELLS, DEFAULT_SENSORS

Number = Union[int, Decimal]


class FieldType(Enum):
    """字段的整数编码，值为字节数"""

    U8 = 1
    U16_BIG_ENDIAN = 2
    U32_BIG_ENDIAN = 4

    @property
    def size(self) -> int:
        return self.value


@dataclass(frozen=True)
class Identity:
    """原值输出"""

    def apply(self, value: Decimal) -> Decimal:
        return value


@dataclass(frozen=True)
class Divide:
    """除以常数，例如 mV -> V"""

    divisor: Number

    def __post_init__(self):
        if self.divisor == 0:
            raise ValueError("divisor不能为0")

    def apply(self, value: Decimal) -> Decimal:
        return value / Decimal(self.divisor)


@dataclass(frozen=True)
class Offset:
    """加上常数（负数即减去零点偏移）"""

    offset: Number

    def apply(self, value: Decimal) -> Decimal:
        return value + Decimal(self.offset)


@dataclass(frozen=True)
class BitTest:
    """
    均衡位读取

    按设备文档的计算方式取 value % 2**bit，而不是移位取位。
    """

    bit: int

    def __post_init__(self):
        if not 0 <= self.bit < 8:
            raise ValueError(f"bit必须在0到7之间: {self.bit}")

    def apply(self, value: Decimal) -> Decimal:
        return value % (1 << self.bit)


@dataclass(frozen=True)
class Chain:
    """按顺序依次应用多个变换"""

    steps: Tuple["ValueTransform", ...]

    def apply(self, value: Decimal) -> Decimal:
        for step in self.steps:
            value = step.apply(value)
        return value


ValueTransform = Union[Identity, Divide, Offset, BitTest, Chain]

IDENTITY = Identity()


@dataclass(frozen=True)
class FieldDescriptor:
    """单个字段的提取规则"""

    name: str  # 输出变量名
    field_type: FieldType  # 整数编码
    offset: int  # 在拼接数据中的字节偏移
    length: int  # 字节长度
    transform: ValueTransform = IDENTITY
    unit: str = ""
    note: str = ""

    def __post_init__(self):
        """参数验证"""
        if self.offset < 0:
            raise ValueError(f"{self.name}: offset不能为负数")
        if self.length != self.field_type.size:
            raise ValueError(
                f"{self.name}: 长度{self.length}与编码{self.field_type.name}不一致"
            )

    @property
    def end(self) -> int:
        return self.offset + self.length


@dataclass(frozen=True)
class CommandDescriptor:
    """一条命令及其全部字段"""

    name: str  # 例如 "0x95"
    command_id: int
    fields: Tuple[FieldDescriptor, ...] = field(default_factory=tuple)

    @property
    def required_length(self) -> int:
        """解码所需的最小数据长度"""
        return max((f.end for f in self.fields), default=0)


@dataclass(frozen=True)
class RuntimeCounts:
    """探测得到的电芯数量和温度传感器数量"""

    cells: int = DEFAULT_CELLS
    sensors: int = DEFAULT_SENSORS

    def __post_init__(self):
        if not 0 <= self.cells <= MAX_CELLS:
            raise ValueError(f"cells必须在0到{MAX_CELLS}之间: {self.cells}")
        if not 0 <= self.sensors <= MAX_SENSORS:
            raise ValueError(f"sensors必须在0到{MAX_SENSORS}之间: {self.sensors}")

    @classmethod
    def clamped(cls, cells: Number, sensors: Number) -> "RuntimeCounts":
        """把任意数值限制在硬件上限之内"""
        return cls(
            cells=max(0, min(MAX_CELLS, int(cells))),
            sensors=max(0, min(MAX_SENSORS, int(sensors))),
        )
