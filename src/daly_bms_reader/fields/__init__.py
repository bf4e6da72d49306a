"""
字段模块
========

包含字段描述模型、内置命令描述生成、外部字段目录和字节解码引擎。
"""

from .descriptors import (
    BitTest,
    Chain,
    CommandDescriptor,
    Divide,
    FieldDescriptor,
    FieldType,
    Identity,
    Offset,
    RuntimeCounts,
)
from .builder import build_descriptors, builtin_commands, frame_count
from .catalogue import load_catalogue
from .decoder import decode

__all__ = [
    "BitTest",
    "Chain",
    "CommandDescriptor",
    "Divide",
    "FieldDescriptor",
    "FieldType",
    "Identity",
    "Offset",
    "RuntimeCounts",
    "build_descriptors",
    "builtin_commands",
    "frame_count",
    "load_catalogue",
    "decode",
]
