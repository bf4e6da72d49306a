"""
内置命令描述生成
================

根据当前的电芯/传感器数量生成内置命令（0x94-0x98）的字段描述。

0x95 和 0x96 的响应由多帧组成，每帧数据内容的第一个字节是帧序号，
拼接后仍保留在缓冲区中，因此字段偏移每隔一帧要跳过该字节：

* 单体电压：每帧3个16位值，第 c 个电芯(从0开始)偏移为 1 + 2c + (c // 3) * 2
* 温度：每帧7个8位值，第 s 个传感器(从0开始)偏移为 s + 1 + s // 7

数量变化时必须重新调用生成函数，不能修改已有的描述列表。
"""

from typing import List

from ..config.constants import (
    BmsCommand,
    CELLS_PER_FRAME,
    SENSORS_PER_FRAME,
    BALANCE_BYTES,
    COUNT_CELLS,
    COUNT_SENSORS,
)
from .descriptors import (
    BitTest,
    CommandDescriptor,
    Divide,
    FieldDescriptor,
    FieldType,
    Offset,
    RuntimeCounts,
)

# 温度原始值的零点偏移
TEMPERATURE_OFFSET = -40
ERROR_FLAG_BYTES = 8


def command_name(command_id: int) -> str:
    """命令的显示名称，例如 0x95 -> "0x95" """
    return f"{command_id:#04x}"


def cell_voltage_offset(cell: int) -> int:
    """第 cell 个电芯(从0开始)在拼接数据中的偏移"""
    return 1 + 2 * cell + (cell // CELLS_PER_FRAME) * 2


def temperature_offset(sensor: int) -> int:
    """第 sensor 个传感器(从0开始)在拼接数据中的偏移"""
    return sensor + 1 + sensor // SENSORS_PER_FRAME


def frame_count(command_id: int, counts: RuntimeCounts) -> int:
    """
    计算命令响应的帧数

    与设备保持一致使用 count // 每帧条目数 + 1，而不是向上取整。
    """
    if command_id == BmsCommand.CELL_VOLTAGES:
        return counts.cells // CELLS_PER_FRAME + 1
    if command_id == BmsCommand.TEMPERATURES:
        return counts.sensors // SENSORS_PER_FRAME + 1
    return 1


def _count_fields(counts: RuntimeCounts) -> List[FieldDescriptor]:
    return [
        FieldDescriptor(COUNT_CELLS, FieldType.U8, 0, 1, note="number of cells"),
        FieldDescriptor(COUNT_SENSORS, FieldType.U8, 1, 1, note="number of temperature sensors"),
    ]


def _cell_fields(counts: RuntimeCounts) -> List[FieldDescriptor]:
    return [
        FieldDescriptor(
            name=f"Spannung_Zelle_{cell + 1}",
            field_type=FieldType.U16_BIG_ENDIAN,
            offset=cell_voltage_offset(cell),
            length=2,
            transform=Divide(1000),
            unit="V",
            note=f"unit {cell + 1} voltage",
        )
        for cell in range(counts.cells)
    ]


def _temperature_fields(counts: RuntimeCounts) -> List[FieldDescriptor]:
    return [
        FieldDescriptor(
            name=f"Temperatur_{sensor + 1}",
            field_type=FieldType.U8,
            offset=temperature_offset(sensor),
            length=1,
            transform=Offset(TEMPERATURE_OFFSET),
            unit="Grad Celsius",
            note=f"cell {sensor + 1} temperature",
        )
        for sensor in range(counts.sensors)
    ]


def _balance_fields(counts: RuntimeCounts) -> List[FieldDescriptor]:
    fields = []
    for index in range(min(counts.cells, BALANCE_BYTES * 8)):
        fields.append(
            FieldDescriptor(
                name=f"Zelle_{index + 1}_Balance",
                field_type=FieldType.U8,
                offset=index // 8,
                length=1,
                transform=BitTest(index % 8),
                note="cell balance state, 0 = Close, 1 = Open",
            )
        )
    return fields


def _error_fields(counts: RuntimeCounts) -> List[FieldDescriptor]:
    return [
        FieldDescriptor(
            name=f"Fehlercode_{i}",
            field_type=FieldType.U8,
            offset=i,
            length=1,
            note=f"Battery failure status byte {i}",
        )
        for i in range(ERROR_FLAG_BYTES)
    ]


_BUILDERS = {
    BmsCommand.COUNTS: _count_fields,
    BmsCommand.CELL_VOLTAGES: _cell_fields,
    BmsCommand.TEMPERATURES: _temperature_fields,
    BmsCommand.BALANCE_STATE: _balance_fields,
    BmsCommand.ERROR_FLAGS: _error_fields,
}


def build_descriptors(command_id: int, counts: RuntimeCounts) -> CommandDescriptor:
    """
    生成内置命令的描述

    Args:
        command_id: 内置命令字(0x94-0x98)
        counts: 当前的电芯/传感器数量

    Returns:
        新的 CommandDescriptor

    Raises:
        KeyError: 不是内置命令
    """
    try:
        builder = _BUILDERS[BmsCommand(command_id)]
    except ValueError:
        raise KeyError(f"不是内置命令: {command_id:#04x}") from None
    return CommandDescriptor(
        name=command_name(command_id),
        command_id=int(command_id),
        fields=tuple(builder(counts)),
    )


def builtin_commands(counts: RuntimeCounts) -> List[CommandDescriptor]:
    """活动周期中执行的内置命令（不含0x94数量探测）"""
    return [
        build_descriptors(command_id, counts)
        for command_id in (
            BmsCommand.CELL_VOLTAGES,
            BmsCommand.TEMPERATURES,
            BmsCommand.BALANCE_STATE,
            BmsCommand.ERROR_FLAGS,
        )
    ]
