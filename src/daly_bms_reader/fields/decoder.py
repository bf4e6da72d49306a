"""
字节解码引擎
============

根据字段描述从原始数据中提取无符号整数（高字节在前），
应用数值变换后以字段名存入结果字典。

解码是纯函数：相同输入总是得到相同输出，可以随时对缓存的数据重放。
"""

from decimal import Decimal
from typing import Dict, Iterable, MutableMapping, Optional

from ..core.exceptions import DescriptorRangeError
from .descriptors import FieldDescriptor


def extract_raw(buffer: bytes, descriptor: FieldDescriptor) -> int:
    """
    提取字段的原始无符号整数

    Raises:
        DescriptorRangeError: 偏移和长度超出缓冲区
    """
    if descriptor.end > len(buffer):
        raise DescriptorRangeError(
            f"字段 {descriptor.name} 越界: offset={descriptor.offset}, "
            f"length={descriptor.length}, 缓冲区长度={len(buffer)}"
        )
    return int.from_bytes(buffer[descriptor.offset:descriptor.end], "big", signed=False)


def decode(
    buffer: bytes,
    descriptors: Iterable[FieldDescriptor],
    values: Optional[MutableMapping[str, Decimal]] = None,
) -> MutableMapping[str, Decimal]:
    """
    按字段描述解码数据

    Args:
        buffer: 拼接后的数据内容
        descriptors: 字段描述列表
        values: 可选的目标字典，解码结果合并进去；None 时新建字典

    Returns:
        字段名 -> Decimal 数值

    Raises:
        DescriptorRangeError: 任一字段越界（描述生成错误，不做截断读取）
    """
    # 先全部校验再写入，越界时目标字典保持不变
    decoded: Dict[str, Decimal] = {}
    for descriptor in descriptors:
        raw = extract_raw(buffer, descriptor)
        decoded[descriptor.name] = descriptor.transform.apply(Decimal(raw))

    if values is None:
        return decoded
    values.update(decoded)
    return values
