"""
命令行接口模块
==============

提供BMS读取的命令行接口。
"""

from .bms_cli import BmsCLI

__all__ = [
    "BmsCLI",
]
