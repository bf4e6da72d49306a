"""
工具模块
========

包含日志记录、重试策略等工具功能。
"""

from .logger import get_logger, setup_logger, set_level
from .retry import AttemptOutcome, AttemptResult, RetryPolicy, retry_call

__all__ = [
    "get_logger",
    "setup_logger",
    "set_level",
    "AttemptOutcome",
    "AttemptResult",
    "RetryPolicy",
    "retry_call",
]
