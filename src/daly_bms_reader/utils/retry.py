"""重试与退避工具
====================

提供固定间隔的同步重试循环。每次尝试返回一个带标签的结果
（成功 / 可重试 / 致命），等待期间可通过 ``threading.Event`` 协作取消。
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

_T = TypeVar("_T")


class AttemptOutcome(Enum):
    """单次尝试的结果类型"""

    SUCCESS = "success"
    RETRY = "retry"  # 可重试失败
    FATAL = "fatal"  # 不可重试失败
    CANCELLED = "cancelled"  # 等待重试期间被取消


@dataclass(frozen=True)
class AttemptResult(Generic[_T]):
    """单次尝试的结果"""

    outcome: AttemptOutcome
    value: Optional[_T] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, value: _T) -> "AttemptResult[_T]":
        return cls(AttemptOutcome.SUCCESS, value=value)

    @classmethod
    def retry(cls, error: BaseException) -> "AttemptResult[_T]":
        return cls(AttemptOutcome.RETRY, error=error)

    @classmethod
    def fatal(cls, error: BaseException) -> "AttemptResult[_T]":
        return cls(AttemptOutcome.FATAL, error=error)

    @property
    def ok(self) -> bool:
        return self.outcome is AttemptOutcome.SUCCESS


@dataclass(frozen=True)
class RetryPolicy:
    """重试策略：最大尝试次数 + 固定等待时间"""

    max_attempts: int
    delay: float  # 两次尝试之间的等待时间(秒)

    def __post_init__(self):
        """参数验证"""
        if self.max_attempts < 1:
            raise ValueError("max_attempts必须大于等于1")
        if self.delay < 0:
            raise ValueError("delay不能为负数")

    @classmethod
    def from_milliseconds(cls, max_attempts: int, delay_ms: int) -> "RetryPolicy":
        return cls(max_attempts=max_attempts, delay=delay_ms / 1000)


def wait_or_cancel(delay: float, cancel_event: Optional[threading.Event]) -> bool:
    """
    阻塞等待指定时间

    Args:
        delay: 等待时间(秒)
        cancel_event: 取消信号，可为None

    Returns:
        正常等待结束返回True，收到取消信号返回False
    """
    if cancel_event is None:
        cancel_event = threading.Event()
    return not cancel_event.wait(delay)


def retry_call(
    func: Callable[[int], AttemptResult[_T]],
    *,
    policy: RetryPolicy,
    cancel_event: Optional[threading.Event] = None,
    logger=None,
    label: str = "",
) -> AttemptResult[_T]:
    """固定间隔的同步重试调用

    Args:
        func: 接收尝试序号(从1开始)，返回 AttemptResult
        policy: 重试策略
        cancel_event: 可选取消信号；尝试前或等待期间被置位时立即停止
        logger: 可选日志记录器
        label: 日志中显示的操作名称

    Returns:
        第一个成功或致命的结果；全部可重试失败时返回最后一次结果；
        被取消时返回 CANCELLED 结果
    """
    result: AttemptResult[_T] = AttemptResult(AttemptOutcome.RETRY)
    for attempt in range(1, policy.max_attempts + 1):
        if cancel_event is not None and cancel_event.is_set():
            return AttemptResult(AttemptOutcome.CANCELLED, error=result.error)
        result = func(attempt)
        if result.outcome is not AttemptOutcome.RETRY:
            return result
        if attempt == policy.max_attempts:
            break
        if logger:
            logger.debug(
                f"{label} 第{attempt}/{policy.max_attempts}次失败，"
                f"{policy.delay * 1000:.0f}ms 后重试"
            )
        if not wait_or_cancel(policy.delay, cancel_event):
            return AttemptResult(AttemptOutcome.CANCELLED, error=result.error)
    return result
