"""
校验算法模块
============

提供Daly协议使用的累加校验算法。
"""


def calculate_checksum(data: bytes) -> int:
    """
    计算数据的校验和

    采用简单的累加校验算法，将所有字节相加后取低8位。

    Args:
        data: 需要计算校验和的字节数据

    Returns:
        校验和值，8位无符号整数

    Raises:
        TypeError: 当输入不是bytes类型时抛出

    Examples:
        >>> calculate_checksum(b'hello')
        20
        >>> calculate_checksum(b'')
        0
    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("输入数据必须是bytes类型")

    checksum = 0
    for byte in data:
        checksum += byte

    return checksum & 0xFF
