"""
收发模块
========

发送请求帧并接收（多帧）响应，校验失败或传输失败时按固定间隔重试。
"""

import threading
from typing import Optional

from ..config.constants import MAX_RETRIES, RETRY_DELAY_MS
from .exceptions import (
    ChecksumExhausted,
    ChecksumMismatch,
    ExchangeCancelled,
    TransportError,
    UnknownCommandError,
)
from .frame_handler import FrameHandler
from .serial_manager import Transport
from ..utils.logger import get_logger
from ..utils.retry import AttemptOutcome, AttemptResult, RetryPolicy, retry_call

logger = get_logger(__name__)


class RetryingTransceiver:
    """带校验重试的收发器"""

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        初始化收发器

        Args:
            policy: 重试策略，默认2次尝试、间隔100ms
            cancel_event: 取消信号，等待重试期间被置位时终止收发
        """
        self.policy = policy or RetryPolicy.from_milliseconds(MAX_RETRIES, RETRY_DELAY_MS)
        self.cancel_event = cancel_event

    def exchange(
        self, transport: Transport, address: int, command_id: int, frame_count: int = 1
    ) -> bytes:
        """
        发送命令并返回拼接后的响应数据内容

        Args:
            transport: 已连接的传输层对象
            address: 上位机地址
            command_id: 命令字
            frame_count: 预期的响应帧数

        Returns:
            所有响应帧数据内容的拼接

        Raises:
            ChecksumExhausted: 所有尝试均未得到有效响应
            ExchangeCancelled: 等待重试期间收到取消信号
            UnknownCommandError: 传输层不支持该命令
        """
        request = FrameHandler.pack_frame(address, command_id)

        def attempt(number: int) -> AttemptResult[bytes]:
            try:
                transport.write_bytes(request)
                content, all_valid = FrameHandler.receive_frames(transport, frame_count)
            except (UnknownCommandError, ExchangeCancelled) as e:
                return AttemptResult.fatal(e)
            except TransportError as e:
                logger.warning(f"第{number}次尝试: 命令 {command_id:#04x} 传输失败: {e}")
                return AttemptResult.retry(e)

            if not all_valid:
                logger.warning(
                    f"第{number}次尝试: 命令 {command_id:#04x} 的响应帧无效，校验和不匹配"
                )
                return AttemptResult.retry(ChecksumMismatch(command_id, frame_count))
            return AttemptResult.success(content)

        result = retry_call(
            attempt,
            policy=self.policy,
            cancel_event=self.cancel_event,
            logger=logger,
            label=f"命令 {command_id:#04x}",
        )

        if result.outcome is AttemptOutcome.SUCCESS:
            return result.value
        if result.outcome is AttemptOutcome.FATAL:
            raise result.error
        if result.outcome is AttemptOutcome.CANCELLED:
            raise ExchangeCancelled("重试过程被中断") from result.error
        raise ChecksumExhausted(command_id, self.policy.max_attempts) from result.error
