"""
核心模块
========

包含数据帧处理、串口管理、校验算法和带重试的收发功能。
"""

from .checksum import calculate_checksum
from .frame_handler import DalyFrame, FrameHandler
from .serial_manager import SerialManager, Transport
from .transceiver import RetryingTransceiver

__all__ = [
    "calculate_checksum",
    "DalyFrame",
    "FrameHandler",
    "SerialManager",
    "Transport",
    "RetryingTransceiver",
]
