"""
数据帧处理模块
==============

负责Daly协议数据帧的封装、解析以及多帧响应的拼接。

数据帧格式(13字节)：
| 起始标志 0xA5 (1B) | 地址 (1B) | 命令字 (1B) | 长度 0x08 (1B) | 数据内容 (8B) | 校验和 (1B) |

校验和为前12个字节之和的低8位。
"""

from dataclasses import dataclass
from typing import Tuple, Union

from ..config.constants import (
    BmsCommand,
    FRAME_START,
    FRAME_CONTENT_LENGTH,
    FRAME_HEADER_SIZE,
    FRAME_SIZE,
    MAX_SYNC_BYTES,
)
from .checksum import calculate_checksum
from .exceptions import TransportError
from .serial_manager import Transport
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DalyFrame:
    """解析后的数据帧，是否有效由 is_valid 判断"""

    start: int
    address: int
    command: int
    length: int
    content: bytes
    crc: int  # 帧内携带的校验和

    @property
    def calculated_crc(self) -> int:
        """根据前12个字节重新计算的校验和"""
        header = bytes((self.start, self.address, self.command, self.length))
        return calculate_checksum(header + self.content)

    @property
    def is_valid(self) -> bool:
        return self.crc == self.calculated_crc

    def to_bytes(self) -> bytes:
        """序列化为13字节"""
        header = bytes((self.start, self.address, self.command, self.length))
        return header + self.content + bytes((self.crc,))


class FrameHandler:
    """数据帧处理器"""

    @staticmethod
    def pack_frame(address: int, cmd: Union[BmsCommand, int]) -> bytes:
        """
        将地址和命令字打包成请求帧

        请求帧的数据内容固定为8个0字节。

        Args:
            address: 上位机地址(0-255)
            cmd: 命令字，可以是BmsCommand枚举或整数

        Returns:
            13字节的请求帧

        Examples:
            >>> FrameHandler.pack_frame(0x40, BmsCommand.COUNTS).hex()
            'a5409408000000000000000081'
        """
        if not 0 <= address <= 0xFF or not 0 <= int(cmd) <= 0xFF:
            raise ValueError(f"地址或命令字超出范围: address={address}, cmd={cmd}")

        body = bytes((FRAME_START, address, int(cmd), FRAME_CONTENT_LENGTH))
        body += bytes(FRAME_CONTENT_LENGTH)
        return body + bytes((calculate_checksum(body),))

    @staticmethod
    def unpack_frame(frame_data: bytes) -> DalyFrame:
        """
        解析数据帧

        校验和不匹配时不抛出异常，由调用方根据 is_valid 决定是否重试。

        Args:
            frame_data: 13字节的数据帧

        Returns:
            DalyFrame 对象

        Raises:
            ValueError: 数据长度不是13字节
        """
        if len(frame_data) != FRAME_SIZE:
            raise ValueError(f"数据帧长度错误: 期望={FRAME_SIZE}, 实际={len(frame_data)}")

        start, address, cmd, length = frame_data[:FRAME_HEADER_SIZE]
        content_end = FRAME_HEADER_SIZE + FRAME_CONTENT_LENGTH
        return DalyFrame(
            start=start,
            address=address,
            command=cmd,
            length=length,
            content=bytes(frame_data[FRAME_HEADER_SIZE:content_end]),
            crc=frame_data[content_end],
        )

    @staticmethod
    def read_frame(transport: Transport) -> DalyFrame:
        """
        从传输层逐字节读取一个数据帧

        起始标志之前的字节（线路噪声）会被丢弃。

        Args:
            transport: 传输层对象

        Returns:
            DalyFrame 对象（可能无效）

        Raises:
            TransportError: 读取失败或找不到起始标志
        """
        skipped = 0
        byte = transport.read_byte()
        while byte != FRAME_START:
            skipped += 1
            if skipped > MAX_SYNC_BYTES:
                raise TransportError(f"{MAX_SYNC_BYTES} 字节内未找到帧起始标志")
            byte = transport.read_byte()
        if skipped:
            logger.debug(f"丢弃帧起始标志前的 {skipped} 个字节")

        frame_data = bytearray((byte,))
        while len(frame_data) < FRAME_SIZE:
            frame_data.append(transport.read_byte())
        return FrameHandler.unpack_frame(bytes(frame_data))

    @staticmethod
    def receive_frames(transport: Transport, frame_count: int) -> Tuple[bytes, bool]:
        """
        读取多个数据帧并拼接数据内容

        每帧的8字节内容（包括其中的帧序号字节）按到达顺序拼接。
        只要有一帧无效，整个结果即视为无效。

        Args:
            transport: 传输层对象
            frame_count: 要读取的帧数

        Returns:
            元组(拼接后的数据内容, 是否全部有效)
        """
        if frame_count < 1:
            raise ValueError(f"帧数必须大于0: {frame_count}")

        content = bytearray()
        all_valid = True
        for index in range(frame_count):
            frame = FrameHandler.read_frame(transport)
            if not frame.is_valid:
                logger.warning(
                    f"命令 {frame.command:#04x} 第{index + 1}/{frame_count}帧校验失败: "
                    f"接收={frame.crc:#04x}, 计算={frame.calculated_crc:#04x}"
                )
                all_valid = False
            content += frame.content
        return bytes(content), all_valid
