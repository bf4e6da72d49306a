"""
系统常量定义
============

定义Daly BMS串口通信协议中使用的各种常量。
"""

from enum import IntEnum
from typing import Final


class BmsCommand(IntEnum):
    """Daly BMS 命令字枚举"""

    # 由外部字段目录描述的命令
    PACK_STATUS = 0x90  # 总电压、电流、SOC
    CELL_VOLTAGE_RANGE = 0x91  # 最高/最低单体电压
    TEMPERATURE_RANGE = 0x92  # 最高/最低温度
    CHARGE_STATE = 0x93  # 充放电状态、MOS状态
    # 内置命令
    COUNTS = 0x94  # 电芯数量、温度传感器数量
    CELL_VOLTAGES = 0x95  # 单体电压（多帧）
    TEMPERATURES = 0x96  # 温度传感器（多帧）
    BALANCE_STATE = 0x97  # 均衡状态
    ERROR_FLAGS = 0x98  # 故障状态字节


# 数据帧格式定义
FRAME_START: Final[int] = 0xA5  # 帧起始标志
FRAME_CONTENT_LENGTH: Final[int] = 8  # 数据内容固定8字节
FRAME_HEADER_SIZE: Final[int] = 4  # 起始标志 + 地址 + 命令字 + 长度
FRAME_CRC_SIZE: Final[int] = 1  # 校验和(1字节)
FRAME_SIZE: Final[int] = FRAME_HEADER_SIZE + FRAME_CONTENT_LENGTH + FRAME_CRC_SIZE
MAX_SYNC_BYTES: Final[int] = 64  # 寻找帧起始标志时最多丢弃的字节数

# 多帧命令每帧容纳的条目数
CELLS_PER_FRAME: Final[int] = 3  # 每帧3个16位单体电压
SENSORS_PER_FRAME: Final[int] = 7  # 每帧7个8位温度值
BALANCE_BYTES: Final[int] = 6  # 均衡状态占用的内容字节数

# 硬件上限
MAX_CELLS: Final[int] = 48
MAX_SENSORS: Final[int] = 16
DEFAULT_CELLS: Final[int] = 16  # 尚未探测时假定的电芯数量
DEFAULT_SENSORS: Final[int] = 8  # 尚未探测时假定的温度传感器数量

# 重试配置
MAX_RETRIES: Final[int] = 2  # 校验失败重试次数（内层）与命令重试次数（外层）
RETRY_DELAY_MS: Final[int] = 100  # 内层重试等待时间(毫秒)

# 串口/设备配置默认值
DEFAULT_BAUDRATE: Final[int] = 9600  # 默认波特率
DEFAULT_ADDRESS: Final[int] = 64  # 默认上位机地址 0x40
DEFAULT_SLEEP_MS: Final[int] = 120  # 命令间等待时间(毫秒)
DEFAULT_READ_TIMEOUT_MS: Final[int] = 5000  # 读取超时(毫秒)

# 输出变量名
COUNT_CELLS: Final[str] = "count_cells"
COUNT_SENSORS: Final[str] = "count_sensors"
LADE_WH: Final[str] = "LadeWh"
ENTLADE_WH: Final[str] = "EntladeWh"
LADELEISTUNG: Final[str] = "Ladeleistung"
ENTLADELEISTUNG: Final[str] = "Entladeleistung"
