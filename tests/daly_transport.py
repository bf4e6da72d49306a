"""
测试用传输层
============

按命令字回放从真实设备抓取的响应，不需要串口硬件。
"""

from typing import Dict, List, Optional

from daly_bms_reader.core.exceptions import TransportError, UnknownCommandError

# 14个电芯、1个温度传感器的设备应答（十六进制）
DEVICE_RESPONSES: Dict[int, str] = {
    0x90: "a501900802100000763001f4eb",
    0x91: "a50191080ec8050e9c0901f4c2",
    0x92: "a50192083d013d019c0901f456",
    0x93: "a50193080001011000004e20c1",
    0x94: "0000a50194080e0100000200002073",
    0x95: (
        "a5019508010ec00ec20ec720d7"
        "a5019508020ec80ec80ec620e5"
        "a5019508030ec20ec20e9c20b0"
        "a5019508040ec40ec40ec420dd"
        "a5019508050ec30ec00ec420d9"
    ),
    0x96: "a5019608013d00000000000082a5019608020000000000000046",
    0x97: "a5019708000111100000000067",
    0x98: "a5019808000011110000000068",
    0xD8: "a501d808000000000000000086",
}


class FixtureTransport:
    """
    模拟Daly BMS的传输层

    - write_bytes 根据请求帧的命令字准备应答
    - read_byte 逐字节返回应答，没有数据时抛出 TransportError
    - error=True 时所有读取都失败
    - corrupt 指定命令前若干次应答的校验和被破坏
    """

    def __init__(self, responses: Optional[Dict[int, str]] = None):
        self.responses = dict(DEVICE_RESPONSES if responses is None else responses)
        self.error = False
        self.corrupt: Dict[int, int] = {}
        self.written: List[bytes] = []
        self.is_open = False
        self.connect_count = 0
        self.disconnect_count = 0
        self._pending = bytearray()

    def connect(self) -> None:
        if self.is_open:
            raise TransportError("Port already in use")
        self.is_open = True
        self.connect_count += 1

    def disconnect(self) -> None:
        if not self.is_open:
            raise RuntimeError("closed port without open")
        self.is_open = False
        self.disconnect_count += 1

    def write_bytes(self, data: bytes) -> int:
        assert data is not None
        self.written.append(bytes(data))
        command = data[2]
        if command not in self.responses:
            raise UnknownCommandError(command)

        answer = bytearray.fromhex(self.responses[command])
        if self.corrupt.get(command, 0) > 0:
            self.corrupt[command] -= 1
            answer[-1] ^= 0xFF
        self._pending = answer
        return len(data)

    def read_byte(self) -> int:
        if self.error or not self._pending:
            raise TransportError("No more result found")
        return self._pending.pop(0)

    def commands_written(self) -> List[int]:
        return [frame[2] for frame in self.written]
