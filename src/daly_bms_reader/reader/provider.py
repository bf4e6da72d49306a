"""
BMS读取模块
===========

按顺序执行内置命令和字段目录中的命令，把响应解码为命名数值。

每条命令有两层重试：
- 内层（RetryingTransceiver）：校验失败或传输失败，间隔100ms，最多2次
- 外层（本模块）：内层失败后整条命令重试，间隔为配置的命令间隔，最多2次

外层重试用尽时放弃本次活动周期的剩余命令，已写入的数值保留。
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from typing import (
    Callable,
    Collection,
    Dict,
    Iterable,
    List,
    MutableMapping,
    Optional,
    Protocol,
)

from ..config.constants import (
    BmsCommand,
    MAX_RETRIES,
    COUNT_CELLS,
    COUNT_SENSORS,
    LADE_WH,
    ENTLADE_WH,
    LADELEISTUNG,
    ENTLADELEISTUNG,
)
from ..config.settings import ProviderSettings
from ..core.exceptions import (
    CycleFailure,
    DalyBmsError,
    ExchangeCancelled,
    UnknownCommandError,
)
from ..core.serial_manager import SerialManager, Transport
from ..core.transceiver import RetryingTransceiver
from ..fields.builder import build_descriptors, builtin_commands, frame_count
from ..fields.catalogue import load_catalogue
from ..fields.decoder import decode
from ..fields.descriptors import CommandDescriptor, RuntimeCounts
from ..utils.logger import get_logger
from ..utils.retry import AttemptOutcome, AttemptResult, RetryPolicy, retry_call
from .derived import compute_derived

logger = get_logger(__name__)

# 数量变化后缓存失效的命令
_COUNT_DEPENDENT = (
    BmsCommand.CELL_VOLTAGES,
    BmsCommand.TEMPERATURES,
    BmsCommand.BALANCE_STATE,
)


class DayValue(Protocol):
    """按天累计的数值（例如由功率累计能量），由外部实现"""

    def add_value(self, value: Optional[Decimal]) -> None: ...

    @property
    def total_value(self) -> Decimal: ...


TransportFactory = Callable[[ProviderSettings], Transport]
DayValueFactory = Callable[[str], DayValue]


def serial_transport_factory(settings: ProviderSettings) -> Transport:
    """默认的传输层：pyserial 串口"""
    return SerialManager(settings.to_serial_config())


@dataclass
class CycleResult:
    """一次活动周期的结果"""

    success: bool
    values: MutableMapping[str, Decimal] = field(default_factory=dict)
    error: Optional[DalyBmsError] = None


class DalyBmsProvider:
    """Daly BMS 读取器"""

    def __init__(
        self,
        settings: Optional[ProviderSettings] = None,
        transport_factory: TransportFactory = serial_transport_factory,
        catalogue: Optional[Iterable[CommandDescriptor]] = None,
        day_value_factory: Optional[DayValueFactory] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        初始化读取器

        Args:
            settings: 读取配置，None 时使用默认配置
            transport_factory: 根据配置创建传输层对象
            catalogue: 字段目录中的命令，None 时加载随包发布的目录
            day_value_factory: 按名称创建日累计值，None 时不累计能量
            cancel_event: 取消信号，置位后正在等待的重试立即终止；
                只对当前周期有效，first_run/do_activity_work/test_connection 开始时清除
        """
        self.transport_factory = transport_factory
        self.catalogue: List[CommandDescriptor] = (
            load_catalogue() if catalogue is None else list(catalogue)
        )
        self.day_value_factory = day_value_factory
        self.cancel_event = cancel_event or threading.Event()
        self.transceiver = RetryingTransceiver(cancel_event=self.cancel_event)

        self.counts = RuntimeCounts()
        self._builtin: List[CommandDescriptor] = builtin_commands(self.counts)
        self._raw_cache: Dict[str, bytes] = {}
        self._lade_wh: Optional[DayValue] = None
        self._entlade_wh: Optional[DayValue] = None

        self.settings = settings or ProviderSettings()
        self.apply_settings(self.settings)

    @property
    def commands(self) -> List[CommandDescriptor]:
        """活动周期中按顺序执行的全部命令"""
        return self.catalogue + self._builtin

    def cached_raw(self, command_name: str) -> Optional[bytes]:
        """命令最近一次成功读取的原始数据"""
        return self._raw_cache.get(command_name)

    def apply_settings(self, settings: ProviderSettings) -> None:
        """采用配置中保存的数量并重新生成命令描述"""
        self.settings = settings
        self._set_counts(
            RuntimeCounts.clamped(settings.count_cells, settings.count_sensors)
        )

    def _set_counts(self, counts: RuntimeCounts) -> None:
        if counts != self.counts:
            for command_id in _COUNT_DEPENDENT:
                self._raw_cache.pop(f"{command_id:#04x}", None)
            logger.debug(f"电芯/传感器数量变化: {self.counts} -> {counts}")
        self.counts = counts
        self._builtin = builtin_commands(counts)

    @contextmanager
    def connection(self, settings: Optional[ProviderSettings] = None):
        """
        上下文管理器，打开传输层并保证退出时关闭

        Examples:
            >>> with provider.connection() as transport:
            ...     provider.discover_counts(transport, 64)
        """
        transport = self.transport_factory(settings or self.settings)
        transport.connect()
        try:
            yield transport
        finally:
            transport.disconnect()

    def fetch(
        self, transport: Transport, address: int, command: CommandDescriptor
    ) -> bytes:
        """发送命令并返回原始数据（只做I/O，不解码）"""
        logger.debug(f"发送命令 {command.name}")
        frames = frame_count(command.command_id, self.counts)
        return self.transceiver.exchange(transport, address, command.command_id, frames)

    def discover_counts(
        self,
        transport: Transport,
        address: int,
        settings: Optional[ProviderSettings] = None,
    ) -> RuntimeCounts:
        """
        读取电芯数量和温度传感器数量

        结果限制在硬件上限内，写回配置（由调用方持久化），
        并重新生成依赖数量的命令描述。

        Raises:
            DalyBmsError: 读取失败
        """
        settings = settings or self.settings
        command = build_descriptors(BmsCommand.COUNTS, self.counts)
        raw = self.fetch(transport, address, command)
        values = decode(raw, command.fields)
        counts = RuntimeCounts.clamped(values[COUNT_CELLS], values[COUNT_SENSORS])

        settings.count_cells = counts.cells
        settings.count_sensors = counts.sensors
        self._set_counts(counts)
        logger.debug(f"电芯数量: {counts.cells}, 温度传感器数量: {counts.sensors}")
        return counts

    def _execute(
        self,
        transport: Transport,
        address: int,
        command: CommandDescriptor,
        values: MutableMapping[str, Decimal],
    ) -> None:
        """带外层重试地执行一条命令，成功后缓存原始数据"""
        policy = RetryPolicy.from_milliseconds(MAX_RETRIES, self.settings.sleep_milliseconds)

        def attempt(number: int) -> AttemptResult[bytes]:
            logger.debug(f"命令 {command.name} 第{number}/{policy.max_attempts}次尝试")
            try:
                raw = self.fetch(transport, address, command)
            except (UnknownCommandError, ExchangeCancelled) as e:
                return AttemptResult.fatal(e)
            except DalyBmsError as e:
                logger.error(str(e))
                return AttemptResult.retry(e)
            decode(raw, command.fields, values)
            self._raw_cache[command.name] = raw
            return AttemptResult.success(raw)

        result = retry_call(
            attempt,
            policy=policy,
            cancel_event=self.cancel_event,
            logger=logger,
            label=f"命令 {command.name}",
        )
        if result.outcome is AttemptOutcome.SUCCESS:
            return
        if result.outcome is AttemptOutcome.FATAL:
            raise result.error
        if result.outcome is AttemptOutcome.CANCELLED:
            raise ExchangeCancelled("重试过程被中断") from result.error
        raise CycleFailure(command.name, policy.max_attempts) from result.error

    def run_cycle(
        self,
        transport: Transport,
        address: int,
        commands: Iterable[CommandDescriptor],
        replay: Collection[str] = (),
        values: Optional[MutableMapping[str, Decimal]] = None,
    ) -> CycleResult:
        """
        执行一次活动周期

        Args:
            transport: 已连接的传输层对象
            address: 上位机地址
            commands: 按顺序执行的命令
            replay: 使用缓存数据重放的命令名；尚无缓存时照常读取
            values: 结果写入的字典，None 时新建

        Returns:
            CycleResult；失败时 values 中保留失败前已解码的数值
        """
        values = {} if values is None else values
        for command in commands:
            cached = self._raw_cache.get(command.name)
            if command.name in replay and cached is not None:
                logger.debug(f"使用命令 '{command.name}' 的缓存结果")
                decode(cached, command.fields, values)
                continue
            try:
                self._execute(transport, address, command, values)
            except (CycleFailure, UnknownCommandError, ExchangeCancelled) as e:
                logger.error(str(e))
                return CycleResult(success=False, values=values, error=e)
        return CycleResult(success=True, values=values)

    def first_run(self) -> None:
        """
        首次运行：创建日累计值并探测电芯/传感器数量

        Raises:
            DalyBmsError: 探测失败
        """
        self.cancel_event.clear()
        if self.day_value_factory is not None:
            self._lade_wh = self.day_value_factory(LADE_WH)
            self._entlade_wh = self.day_value_factory(ENTLADE_WH)
        with self.connection() as transport:
            counts = self.discover_counts(transport, self.settings.address)
        logger.info(f"探测到 {counts.cells} 个电芯, {counts.sensors} 个温度传感器")

    def do_activity_work(
        self,
        values: MutableMapping[str, object],
        replay: Collection[str] = (),
    ) -> bool:
        """
        读取全部数值

        Args:
            values: 结果写入的字典
            replay: 使用缓存数据重放的命令名

        Returns:
            成功返回True，失败返回False（错误已记录日志）
        """
        self.cancel_event.clear()
        try:
            with self.connection() as transport:
                values[COUNT_CELLS] = Decimal(self.counts.cells)
                values[COUNT_SENSORS] = Decimal(self.counts.sensors)
                result = self.run_cycle(
                    transport, self.settings.address, self.commands, replay, values
                )
        except DalyBmsError as e:
            logger.error(str(e))
            return False
        if not result.success:
            return False

        compute_derived(values)
        if self._lade_wh is not None and self._entlade_wh is not None:
            self._lade_wh.add_value(values.get(LADELEISTUNG))
            values[LADE_WH] = self._lade_wh.total_value
            self._entlade_wh.add_value(values.get(ENTLADELEISTUNG))
            values[ENTLADE_WH] = self._entlade_wh.total_value
        return True

    def test_connection(self, settings: ProviderSettings) -> str:
        """
        测试连接：用给定配置打开新连接并探测数量

        Returns:
            成功信息

        Raises:
            DalyBmsError: 连接或读取失败
        """
        self.cancel_event.clear()
        try:
            with self.connection(settings) as transport:
                counts = self.discover_counts(transport, settings.address, settings)
        except DalyBmsError as e:
            raise DalyBmsError(f"连接测试失败: {e}") from e
        logger.debug(f"读取到的电芯数量: {counts.cells}")
        return f"连接成功，检测到 {counts.cells} 个电芯"
