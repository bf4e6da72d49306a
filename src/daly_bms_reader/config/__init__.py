"""
配置模块
=======

包含系统常量定义和配置管理功能。
"""

from .constants import *
from .settings import *

__all__ = [
    # 常量
    "BmsCommand",
    "FRAME_START",
    "FRAME_SIZE",
    "FRAME_CONTENT_LENGTH",
    "MAX_CELLS",
    "MAX_SENSORS",
    "DEFAULT_BAUDRATE",
    "DEFAULT_ADDRESS",
    # 配置
    "SerialConfig",
    "ProviderSettings",
]
