"""
Daly BMS 串口读取工具
====================

通过串口读取Daly电池管理系统(BMS)的数据，并把二进制响应解码为带名称和单位的物理量。

主要功能：
- 13字节校验帧的封装与解析
- 多帧响应拼接
- 校验失败自动重试
- 声明式字段解码
- 命令缓存重放

作者: lanford
版本: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "lanford"
__email__ = ""
__description__ = "Daly BMS 串口读取工具"

# 导出主要类
from .reader.provider import DalyBmsProvider, CycleResult
from .config.settings import ProviderSettings, SerialConfig
from .core.serial_manager import SerialManager
from .core.exceptions import DalyBmsError

__all__ = [
    "DalyBmsProvider",
    "CycleResult",
    "ProviderSettings",
    "SerialConfig",
    "SerialManager",
    "DalyBmsError",
]
