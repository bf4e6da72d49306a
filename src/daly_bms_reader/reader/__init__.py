"""
读取模块
========

包含命令编排（活动周期、数量探测、缓存重放）和派生数值计算。
"""

from .provider import CycleResult, DalyBmsProvider, DayValue, serial_transport_factory
from .derived import compute_derived

__all__ = [
    "CycleResult",
    "DalyBmsProvider",
    "DayValue",
    "serial_transport_factory",
    "compute_derived",
]
