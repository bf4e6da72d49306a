#!/usr/bin/env python3
"""
串口管理器测试
==============

测试 daly_bms_reader.core.serial_manager 模块中的串口传输层。

串口测试涉及硬件设备，这里用mock对象模拟serial.Serial。
"""

import pytest
from unittest.mock import MagicMock, Mock, patch
import serial

from daly_bms_reader.config.settings import SerialConfig
from daly_bms_reader.core.exceptions import TransportError
from daly_bms_reader.core.serial_manager import SerialManager


@pytest.fixture
def config():
    return SerialConfig(port="COM1", baudrate=9600)


@pytest.fixture
def mock_port():
    port = MagicMock()
    port.is_open = True
    return port


class TestConnect:
    """打开和关闭串口"""

    def test_init(self, config):
        manager = SerialManager(config)

        assert manager.config == config
        assert manager.port is None
        assert manager.is_open is False

    @patch('serial.Serial')
    def test_connect_success(self, mock_serial_class, config, mock_port):
        mock_serial_class.return_value = mock_port
        manager = SerialManager(config)

        manager.connect()

        assert manager.is_open is True
        assert manager.port is mock_port
        mock_serial_class.assert_called_once_with(**config.to_serial_kwargs())

    @patch('serial.Serial')
    def test_connect_failure(self, mock_serial_class, config):
        """无法打开时抛出TransportError"""
        mock_serial_class.side_effect = serial.SerialException("Port not found")
        manager = SerialManager(config)

        with pytest.raises(TransportError, match="打开串口失败"):
            manager.connect()
        assert manager.port is None

    @patch('serial.Serial')
    def test_connect_twice(self, mock_serial_class, config, mock_port):
        mock_serial_class.return_value = mock_port
        manager = SerialManager(config)

        manager.connect()
        manager.connect()

        assert mock_serial_class.call_count == 1

    @patch('serial.Serial')
    def test_disconnect(self, mock_serial_class, config, mock_port):
        mock_serial_class.return_value = mock_port
        manager = SerialManager(config)
        manager.connect()

        manager.disconnect()

        mock_port.close.assert_called_once()
        assert manager.port is None

    def test_disconnect_without_connect(self, config):
        SerialManager(config).disconnect()

    @patch('serial.Serial')
    def test_context_manager(self, mock_serial_class, config, mock_port):
        mock_serial_class.return_value = mock_port

        with SerialManager(config) as manager:
            assert manager.is_open

        mock_port.close.assert_called_once()


class TestReadWrite:
    """读写数据"""

    @patch('serial.Serial')
    def test_write_bytes(self, mock_serial_class, config, mock_port):
        """写入前清空输入缓冲区"""
        mock_port.write.return_value = 13
        mock_serial_class.return_value = mock_port
        manager = SerialManager(config)
        manager.connect()

        frame = bytes.fromhex("a540900800000000000000007d")
        assert manager.write_bytes(frame) == 13

        mock_port.reset_input_buffer.assert_called_once()
        mock_port.write.assert_called_once_with(frame)

    @patch('serial.Serial')
    def test_write_incomplete(self, mock_serial_class, config, mock_port):
        mock_port.write.return_value = 5
        mock_serial_class.return_value = mock_port
        manager = SerialManager(config)
        manager.connect()

        with pytest.raises(TransportError, match="写入不完整"):
            manager.write_bytes(bytes(13))

    def test_write_when_closed(self, config):
        with pytest.raises(TransportError):
            SerialManager(config).write_bytes(b"\xa5")

    @patch('serial.Serial')
    def test_read_byte(self, mock_serial_class, config, mock_port):
        mock_port.read.return_value = b"\xa5"
        mock_serial_class.return_value = mock_port
        manager = SerialManager(config)
        manager.connect()

        assert manager.read_byte() == 0xA5
        mock_port.read.assert_called_once_with(1)

    @patch('serial.Serial')
    def test_read_timeout(self, mock_serial_class, config, mock_port):
        """超时(读到空数据)视为传输错误"""
        mock_port.read.return_value = b""
        mock_serial_class.return_value = mock_port
        manager = SerialManager(config)
        manager.connect()

        with pytest.raises(TransportError, match="读取超时"):
            manager.read_byte()

    @patch('serial.Serial')
    def test_read_serial_exception(self, mock_serial_class, config, mock_port):
        mock_port.read.side_effect = serial.SerialException("device disconnected")
        mock_serial_class.return_value = mock_port
        manager = SerialManager(config)
        manager.connect()

        with pytest.raises(TransportError, match="读取数据失败"):
            manager.read_byte()


class TestPortListing:
    """串口列表"""

    @patch('daly_bms_reader.core.serial_manager.list_ports.comports')
    def test_list_available_ports(self, mock_comports):
        port = Mock(device="/dev/ttyUSB0", description="USB-Serial", hwid="USB VID:PID=1A86:7523")
        mock_comports.return_value = [port]

        ports = SerialManager.list_available_ports()

        assert ports == [{
            'device': "/dev/ttyUSB0",
            'description': "USB-Serial",
            'hwid': "USB VID:PID=1A86:7523",
        }]

    @patch('daly_bms_reader.core.serial_manager.list_ports.comports')
    def test_print_no_ports(self, mock_comports, capsys):
        mock_comports.return_value = []

        SerialManager.print_available_ports()

        assert "没有找到可用的串口" in capsys.readouterr().out
