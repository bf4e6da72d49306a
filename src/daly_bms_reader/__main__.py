#!/usr/bin/env python3
"""
Daly BMS 串口读取工具 - 模块CLI入口
==================================

支持通过 python -m daly_bms_reader 调用
"""

import logging
import sys
import argparse

from .cli.bms_cli import BmsCLI
from .config.constants import DEFAULT_ADDRESS, DEFAULT_BAUDRATE
from .config.settings import ProviderSettings
from .utils.logger import get_logger, set_level

logger = get_logger(__name__)

# 版本信息
VERSION = "1.0.0"
PROGRAM_NAME = "Daly BMS 串口读取工具"


def create_parser():
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        description=f"{PROGRAM_NAME} v{VERSION}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例：
  # 列出可用串口
  python -m daly_bms_reader ports

  # 测试连接并探测电芯数量
  python -m daly_bms_reader probe --port /dev/ttyUSB0

  # 读取全部数值并以JSON输出
  python -m daly_bms_reader read --port /dev/ttyUSB0 --json
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"{PROGRAM_NAME} v{VERSION}"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")

    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    subparsers.add_parser("ports", help="列出可用串口")

    for name, help_text in (("probe", "测试连接并探测电芯/传感器数量"), ("read", "读取全部数值")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--port", required=True, help="串口号（如 COM1, /dev/ttyUSB0）")
        sub.add_argument(
            "--address", type=int, default=DEFAULT_ADDRESS, help=f"上位机地址（默认{DEFAULT_ADDRESS}）"
        )
        sub.add_argument(
            "--baudrate", type=int, default=DEFAULT_BAUDRATE, help=f"波特率（默认{DEFAULT_BAUDRATE}）"
        )
        if name == "read":
            sub.add_argument("--json", action="store_true", help="以JSON格式输出")

    return parser


def settings_from_args(args) -> ProviderSettings:
    """根据命令行参数生成读取配置"""
    return ProviderSettings(port=args.port, baudrate=args.baudrate, address=args.address)


def main():
    """主函数"""
    try:
        parser = create_parser()
        args = parser.parse_args()

        if args.verbose:
            set_level(logging.DEBUG)

        if not args.command:
            parser.print_help()
            return

        if args.command == "ports":
            BmsCLI.show_available_ports()
            return

        settings = settings_from_args(args)
        if args.command == "probe":
            success = BmsCLI.probe(settings)
        else:
            success = BmsCLI.read(settings, as_json=args.json)
        sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print("\n\n👋 用户中断程序，退出")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"参数错误: {e}")
        print(f"\n💥 参数错误: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
