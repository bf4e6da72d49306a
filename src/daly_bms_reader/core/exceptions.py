"""
异常定义
========

BMS通信和解码过程中使用的异常层次。
"""


class DalyBmsError(IOError):
    """所有BMS通信异常的基类"""


class TransportError(DalyBmsError):
    """串口读写失败"""


class ExchangeCancelled(TransportError):
    """重试等待期间收到取消信号，整个收发过程终止"""


class UnknownCommandError(DalyBmsError):
    """设备或传输层无法处理该命令字，不重试"""

    def __init__(self, command_id: int):
        super().__init__(f"未知命令: {command_id:#04x}")
        self.command_id = command_id


class ChecksumMismatch(DalyBmsError):
    """收到的响应中至少有一帧校验和不匹配"""

    def __init__(self, command_id: int, frame_count: int = 1):
        super().__init__(f"命令 {command_id:#04x} 的响应({frame_count}帧)校验失败")
        self.command_id = command_id
        self.frame_count = frame_count


class ChecksumExhausted(DalyBmsError):
    """内层重试次数用尽，仍未收到有效响应"""

    def __init__(self, command_id: int, attempts: int):
        super().__init__(f"命令 {command_id:#04x} 在 {attempts} 次尝试后仍未收到有效响应")
        self.command_id = command_id
        self.attempts = attempts


class CycleFailure(DalyBmsError):
    """外层重试次数用尽，本次活动周期放弃"""

    def __init__(self, command_name: str, attempts: int):
        super().__init__(f"读取错误超过上限({attempts})，命令 {command_name} 中止")
        self.command_name = command_name
        self.attempts = attempts


class CatalogueError(ValueError):
    """外部字段目录格式错误"""


class DescriptorRangeError(ValueError):
    """字段描述越过了数据缓冲区的边界"""
