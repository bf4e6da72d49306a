"""
配置管理
========

提供串口和BMS读取相关的配置类。
"""

from dataclasses import dataclass
import serial

from .constants import (
    DEFAULT_BAUDRATE,
    DEFAULT_ADDRESS,
    DEFAULT_SLEEP_MS,
    DEFAULT_READ_TIMEOUT_MS,
    DEFAULT_CELLS,
    DEFAULT_SENSORS,
)


@dataclass
class SerialConfig:
    """串口配置类"""

    port: str  # 串口号
    baudrate: int = DEFAULT_BAUDRATE  # 波特率
    bytesize: int = serial.EIGHTBITS  # 数据位
    parity: str = serial.PARITY_NONE  # 校验位
    stopbits: float = serial.STOPBITS_ONE  # 停止位
    timeout: float = DEFAULT_READ_TIMEOUT_MS / 1000  # 超时时间(秒)

    def to_serial_kwargs(self) -> dict:
        """转换为serial.Serial的参数字典"""
        return {
            "port": self.port,
            "baudrate": self.baudrate,
            "bytesize": self.bytesize,
            "parity": self.parity,
            "stopbits": self.stopbits,
            "timeout": self.timeout,
        }


@dataclass
class ProviderSettings:
    """
    BMS读取配置类

    保存设备地址、命令间隔以及探测到的电芯/传感器数量。
    持久化由调用方负责，探测结果会直接写回本对象。
    """

    port: str = ""  # 串口号
    baudrate: int = DEFAULT_BAUDRATE  # 波特率
    address: int = DEFAULT_ADDRESS  # 上位机地址
    sleep_milliseconds: int = DEFAULT_SLEEP_MS  # 命令重试间隔(毫秒)
    read_timeout_milliseconds: int = DEFAULT_READ_TIMEOUT_MS  # 读取超时(毫秒)
    count_cells: int = DEFAULT_CELLS  # 电芯数量
    count_sensors: int = DEFAULT_SENSORS  # 温度传感器数量

    def __post_init__(self):
        """参数验证"""
        if not 0 <= self.address <= 0xFF:
            raise ValueError("address必须在0到255之间")
        if self.baudrate <= 0:
            raise ValueError("baudrate必须大于0")
        if self.sleep_milliseconds < 0:
            raise ValueError("sleep_milliseconds不能为负数")
        if self.read_timeout_milliseconds <= 0:
            raise ValueError("read_timeout_milliseconds必须大于0")

    def to_serial_config(self) -> SerialConfig:
        """生成对应的串口配置"""
        return SerialConfig(
            port=self.port,
            baudrate=self.baudrate,
            timeout=self.read_timeout_milliseconds / 1000,
        )
