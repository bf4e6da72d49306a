#!/usr/bin/env python3
"""
配置类测试
==========

测试 daly_bms_reader.config.settings 模块中的配置类：
- SerialConfig 默认值与参数转换
- ProviderSettings 参数验证和串口配置生成
"""

import pytest
import serial

from daly_bms_reader.config.settings import ProviderSettings, SerialConfig


class TestSerialConfig:
    """测试SerialConfig配置类"""

    def test_serial_config_default_values(self):
        """只提供串口号时使用Daly BMS的默认参数"""
        config = SerialConfig(port="COM1")

        assert config.port == "COM1"
        assert config.baudrate == 9600
        assert config.bytesize == serial.EIGHTBITS
        assert config.parity == serial.PARITY_NONE
        assert config.stopbits == serial.STOPBITS_ONE
        assert config.timeout == 5.0

    def test_to_serial_kwargs(self):
        config = SerialConfig(port="/dev/ttyUSB0", baudrate=19200, timeout=0.5)

        assert config.to_serial_kwargs() == {
            "port": "/dev/ttyUSB0",
            "baudrate": 19200,
            "bytesize": serial.EIGHTBITS,
            "parity": serial.PARITY_NONE,
            "stopbits": serial.STOPBITS_ONE,
            "timeout": 0.5,
        }


class TestProviderSettings:
    """测试ProviderSettings配置类"""

    def test_default_values(self):
        settings = ProviderSettings()

        assert settings.address == 64
        assert settings.sleep_milliseconds == 120
        assert settings.read_timeout_milliseconds == 5000
        assert settings.count_cells == 16
        assert settings.count_sensors == 8

    @pytest.mark.parametrize("kwargs", [
        {"address": -1},
        {"address": 256},
        {"baudrate": 0},
        {"sleep_milliseconds": -1},
        {"read_timeout_milliseconds": 0},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ProviderSettings(**kwargs)

    def test_to_serial_config(self):
        """读取超时从毫秒换算为秒"""
        settings = ProviderSettings(port="COM3", baudrate=19200, read_timeout_milliseconds=1500)

        config = settings.to_serial_config()

        assert config.port == "COM3"
        assert config.baudrate == 19200
        assert config.timeout == pytest.approx(1.5)

    def test_counts_are_mutable(self):
        """探测结果可以直接写回配置"""
        settings = ProviderSettings()
        settings.count_cells = 14
        settings.count_sensors = 1
        assert (settings.count_cells, settings.count_sensors) == (14, 1)
