"""
收发器重试测试
==============

测试RetryingTransceiver的校验重试、传输失败处理和取消。
"""

import threading
from unittest.mock import patch

import pytest

from daly_bms_reader.core.exceptions import (
    ChecksumExhausted,
    ChecksumMismatch,
    ExchangeCancelled,
    TransportError,
    UnknownCommandError,
)
from daly_bms_reader.core.transceiver import RetryingTransceiver
from daly_bms_reader.utils.retry import RetryPolicy

from tests.daly_transport import FixtureTransport


@pytest.fixture
def transport():
    t = FixtureTransport()
    t.connect()
    return t


@pytest.fixture
def transceiver():
    return RetryingTransceiver(policy=RetryPolicy(max_attempts=2, delay=0))


class TestExchange:
    """正常收发"""

    def test_default_policy(self):
        """默认2次尝试，间隔100ms"""
        policy = RetryingTransceiver().policy
        assert policy.max_attempts == 2
        assert policy.delay == pytest.approx(0.1)

    def test_exchange_single_frame(self, transport, transceiver):
        """单帧命令返回8字节内容"""
        content = transceiver.exchange(transport, 64, 0x90, 1)

        assert content == bytes.fromhex("02100000763001f4")
        assert transport.written == [bytes.fromhex("a540900800000000000000007d")]

    def test_exchange_multi_frame(self, transport, transceiver):
        """多帧命令返回拼接内容"""
        content = transceiver.exchange(transport, 64, 0x95, 5)
        assert len(content) == 40


class TestRetry:
    """重试行为"""

    def test_checksum_failure_then_success(self, transport, transceiver):
        """第一次校验失败，第二次成功"""
        transport.corrupt[0x91] = 1

        content = transceiver.exchange(transport, 64, 0x91, 1)

        assert content == bytes.fromhex("0ec8050e9c0901f4")
        assert transport.commands_written() == [0x91, 0x91]

    def test_checksum_exhausted(self, transport, transceiver):
        """两次都校验失败时抛出ChecksumExhausted"""
        transport.corrupt[0x91] = 2

        with pytest.raises(ChecksumExhausted) as exc_info:
            transceiver.exchange(transport, 64, 0x91, 1)

        assert exc_info.value.attempts == 2
        assert isinstance(exc_info.value.__cause__, ChecksumMismatch)
        assert len(transport.written) == 2

    def test_transport_failure_consumes_attempt(self, transport, transceiver):
        """传输失败与校验失败一样消耗一次尝试"""
        transport.error = True

        with pytest.raises(ChecksumExhausted) as exc_info:
            transceiver.exchange(transport, 64, 0x90, 1)

        assert isinstance(exc_info.value.__cause__, TransportError)
        assert len(transport.written) == 2

    def test_unknown_command_not_retried(self, transport, transceiver):
        """未知命令立即失败，不重试"""
        with pytest.raises(UnknownCommandError):
            transceiver.exchange(transport, 64, 0x42, 1)
        assert len(transport.written) == 1

    def test_backoff_between_attempts(self, transport):
        """只在两次尝试之间等待，最后一次失败后不等待"""
        transport.corrupt[0x90] = 5
        transceiver = RetryingTransceiver(policy=RetryPolicy(max_attempts=3, delay=0.1))

        with patch("daly_bms_reader.utils.retry.wait_or_cancel", return_value=True) as wait:
            with pytest.raises(ChecksumExhausted):
                transceiver.exchange(transport, 64, 0x90, 1)

        assert wait.call_count == 2
        assert wait.call_args[0][0] == pytest.approx(0.1)


class TestCancellation:
    """取消信号"""

    def test_cancel_during_backoff(self, transport):
        """等待重试期间收到取消信号，抛出ExchangeCancelled"""
        cancel = threading.Event()
        transceiver = RetryingTransceiver(
            policy=RetryPolicy(max_attempts=2, delay=5.0), cancel_event=cancel
        )
        transport.corrupt[0x90] = 2
        timer = threading.Timer(0.05, cancel.set)
        timer.start()
        try:
            with pytest.raises(ExchangeCancelled):
                transceiver.exchange(transport, 64, 0x90, 1)
        finally:
            timer.cancel()

        assert len(transport.written) == 1

    def test_cancel_is_transport_error(self):
        """取消属于致命的传输错误"""
        assert issubclass(ExchangeCancelled, TransportError)

    def test_already_cancelled(self, transport):
        """取消信号已置位时不发送任何命令"""
        cancel = threading.Event()
        cancel.set()
        transceiver = RetryingTransceiver(cancel_event=cancel)

        with pytest.raises(ExchangeCancelled):
            transceiver.exchange(transport, 64, 0x90, 1)
        assert transport.written == []
