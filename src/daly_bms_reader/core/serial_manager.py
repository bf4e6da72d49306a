"""
串口管理模块
============

提供BMS传输层接口定义和基于pyserial的串口实现。
"""

import serial
from serial.tools import list_ports
from typing import List, Optional, Dict, Protocol

from ..config.settings import SerialConfig
from .exceptions import TransportError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class Transport(Protocol):
    """
    传输层接口

    一次只处理一个请求：先 write_bytes 发送请求帧，再用 read_byte 逐字节读取响应。
    失败时抛出 TransportError；设备不支持的命令可抛出 UnknownCommandError。
    """

    def connect(self) -> None: ...

    def disconnect(self) -> None: ...

    def write_bytes(self, data: bytes) -> int: ...

    def read_byte(self) -> int: ...


class SerialManager:
    """串口管理器"""

    def __init__(self, config: SerialConfig):
        """
        初始化串口管理器

        Args:
            config: 串口配置对象
        """
        self.config = config
        self._port: Optional[serial.Serial] = None

    @property
    def port(self) -> Optional[serial.Serial]:
        """获取串口对象"""
        return self._port

    @property
    def is_open(self) -> bool:
        """检查串口是否已打开"""
        return self._port is not None and self._port.is_open

    def connect(self) -> None:
        """
        打开串口连接

        Raises:
            TransportError: 串口无法打开
        """
        if self.is_open:
            logger.warning(f"串口 {self.config.port} 已经打开")
            return
        try:
            self._port = serial.Serial(**self.config.to_serial_kwargs())
        except (serial.SerialException, ValueError) as e:
            self._port = None
            raise TransportError(f"打开串口失败: {e}") from e
        logger.debug(f"成功打开串口 {self.config.port}")

    def disconnect(self) -> None:
        """关闭串口连接"""
        try:
            if self._port and self._port.is_open:
                self._port.close()
                logger.debug(f"已关闭串口 {self.config.port}")
        except serial.SerialException as e:
            logger.error(f"关闭串口失败: {e}")
        finally:
            self._port = None

    def write_bytes(self, data: bytes) -> int:
        """
        向串口写入数据

        写入前清空输入缓冲区，丢弃上一次交互遗留的字节。

        Args:
            data: 要写入的字节数据

        Returns:
            写入的字节数

        Raises:
            TransportError: 串口未打开或写入不完整
        """
        if not self.is_open:
            raise TransportError("串口未打开，无法写入数据")
        try:
            self._port.reset_input_buffer()
            bytes_written = self._port.write(data)
        except serial.SerialException as e:
            raise TransportError(f"写入数据失败: {e}") from e
        if bytes_written != len(data):
            raise TransportError(f"写入不完整: {bytes_written}/{len(data)} 字节")
        return bytes_written

    def read_byte(self) -> int:
        """
        从串口读取一个字节

        Returns:
            读取到的字节值(0-255)

        Raises:
            TransportError: 串口未打开、读取失败或超时
        """
        if not self.is_open:
            raise TransportError("串口未打开，无法读取数据")
        try:
            data = self._port.read(1)
        except serial.SerialException as e:
            raise TransportError(f"读取数据失败: {e}") from e
        if not data:
            raise TransportError(f"读取超时({self.config.timeout}s)")
        return data[0]

    @staticmethod
    def list_available_ports() -> List[Dict[str, str]]:
        """
        获取系统可用的串口列表

        Returns:
            串口信息列表，每个元素包含device、description等字段
        """
        ports = []
        for port_info in list_ports.comports():
            ports.append({
                'device': port_info.device,
                'description': port_info.description or '未知设备',
                'hwid': port_info.hwid or '未知硬件ID'
            })
        return ports

    @staticmethod
    def print_available_ports() -> None:
        """打印系统可用的串口信息"""
        ports = SerialManager.list_available_ports()

        if not ports:
            print("没有找到可用的串口。")
            return

        print("可用的串口：")
        for port in ports:
            print(f"  {port['device']} - {port['description']}")

    def __enter__(self):
        """支持with语句"""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """支持with语句"""
        self.disconnect()
