"""
BMS读取命令行接口
================

提供串口列表、连接测试和一次性读取的命令行接口。
"""

import json
from decimal import Decimal
from typing import Mapping

from ..config.settings import ProviderSettings
from ..core.exceptions import DalyBmsError
from ..core.serial_manager import SerialManager
from ..reader.provider import DalyBmsProvider
from ..utils.logger import get_logger

logger = get_logger(__name__)


class BmsCLI:
    """BMS读取命令行接口"""

    @staticmethod
    def show_available_ports() -> None:
        """显示可用的串口"""
        SerialManager.print_available_ports()

    @staticmethod
    def probe(settings: ProviderSettings) -> bool:
        """测试连接并显示探测到的电芯/传感器数量"""
        provider = DalyBmsProvider(settings)
        try:
            message = provider.test_connection(settings)
        except DalyBmsError as e:
            print(f"❌ {e}")
            return False
        print(f"✅ {message}")
        print(f"   温度传感器: {settings.count_sensors}")
        return True

    @staticmethod
    def read(settings: ProviderSettings, as_json: bool = False) -> bool:
        """探测数量后执行一次完整读取并输出所有数值"""
        provider = DalyBmsProvider(settings)
        try:
            provider.first_run()
        except DalyBmsError as e:
            print(f"❌ 探测电芯数量失败: {e}")
            return False

        values: dict = {}
        if not provider.do_activity_work(values):
            print("❌ 读取失败，详见日志")
            return False

        if as_json:
            print(BmsCLI.format_json(values))
        else:
            BmsCLI.print_values(values)
        return True

    @staticmethod
    def format_json(values: Mapping[str, Decimal]) -> str:
        """把数值格式化为JSON（Decimal按字符串输出以保留精度）"""
        return json.dumps(
            {name: str(value) for name, value in values.items()},
            ensure_ascii=False,
            indent=2,
        )

    @staticmethod
    def print_values(values: Mapping[str, Decimal]) -> None:
        """按名称对齐打印数值"""
        if not values:
            print("没有读取到任何数值。")
            return
        width = max(len(name) for name in values)
        for name, value in values.items():
            print(f"  {name:<{width}}  {value}")
