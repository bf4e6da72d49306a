"""
日志记录模块
============

提供统一的日志记录功能，支持彩色输出和调用位置追踪。
"""

import datetime
import inspect
import logging
import sys
from typing import Optional
from pathlib import Path

ROOT_LOGGER_NAME = "daly_bms_reader"


class ColoredFormatter(logging.Formatter):
    """彩色日志格式化器"""

    # ANSI颜色代码
    COLORS = {
        'DEBUG': '\033[36m',    # 青色
        'INFO': '\033[0m',      # 默认色
        'WARNING': '\033[33m',  # 黄色
        'ERROR': '\033[31m',    # 红色
        'CRITICAL': '\033[35m', # 紫色
        'RESET': '\033[0m'      # 重置
    }

    def format(self, record):
        """格式化日志记录"""
        # 跳过logging模块自身的栈帧，找到真正的调用者
        frame = inspect.currentframe()
        try:
            while frame:
                filename = frame.f_code.co_filename
                if filename != __file__ and filename != logging.__file__:
                    caller_filename = Path(filename).name
                    caller_function = frame.f_code.co_name
                    caller_line = frame.f_lineno
                    break
                frame = frame.f_back
            else:
                caller_filename = "unknown"
                caller_function = "unknown"
                caller_line = 0
        finally:
            del frame

        # 毫秒精度的时间戳
        now = datetime.datetime.now()
        milliseconds = now.microsecond // 1000
        timestamp = now.strftime(f"%Y-%m-%d %H:%M:%S.{milliseconds:03d}")

        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        return (
            f"{color}[{timestamp}] {record.levelname:<7} {record.getMessage()} "
            f"[{caller_filename}.{caller_function}():{caller_line}]{reset}"
        )


# 全局日志器字典
_loggers = {}


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    设置日志器

    Args:
        name: 日志器名称
        level: 日志级别
        log_file: 日志文件路径，None表示不写入文件
        console_output: 是否输出到控制台

    Returns:
        配置好的日志器
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 清除已有的处理器
    logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter())
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # 防止重复输出
    logger.propagate = False

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    获取日志器实例

    Args:
        name: 日志器名称，通常传入 __name__

    Returns:
        日志器实例
    """
    if name not in _loggers:
        _loggers[name] = setup_logger(name)
    return _loggers[name]


def set_level(level: int) -> None:
    """统一调整所有已创建日志器的级别（CLI的 --verbose 使用）"""
    for logger in _loggers.values():
        logger.setLevel(level)
