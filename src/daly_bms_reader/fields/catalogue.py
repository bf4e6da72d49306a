"""
外部字段目录
============

从JSON文件加载命令及字段描述。数值变换以步骤列表表示，
例如 ``[["offset", -30000], ["divide", 10]]``，在加载时一次性解析。
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from ..core.exceptions import CatalogueError
from .descriptors import (
    IDENTITY,
    BitTest,
    Chain,
    CommandDescriptor,
    Divide,
    FieldDescriptor,
    FieldType,
    Offset,
    ValueTransform,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CATALOGUE = Path(__file__).resolve().parent.parent / "data" / "dalybms_fields.json"

_TRANSFORM_KINDS = {
    "divide": Divide,
    "offset": Offset,
    "bit": BitTest,
}


def parse_transform(steps: Optional[Sequence[Sequence[Any]]]) -> ValueTransform:
    """
    把步骤列表解析为数值变换

    Args:
        steps: [[kind, arg], ...]，空列表或None表示原值

    Returns:
        单个变换，或多个步骤组成的 Chain
    """
    if not steps:
        return IDENTITY

    parsed = []
    for step in steps:
        if not isinstance(step, (list, tuple)) or len(step) != 2:
            raise CatalogueError(f"变换步骤格式错误: {step!r}")
        kind, argument = step
        factory = _TRANSFORM_KINDS.get(kind)
        if factory is None:
            raise CatalogueError(f"未知的变换类型: {kind!r}")
        if not isinstance(argument, int) or isinstance(argument, bool):
            raise CatalogueError(f"变换参数必须是整数: {step!r}")
        try:
            parsed.append(factory(argument))
        except ValueError as e:
            raise CatalogueError(str(e)) from e

    if len(parsed) == 1:
        return parsed[0]
    return Chain(tuple(parsed))


def _parse_field(entry: Dict[str, Any]) -> FieldDescriptor:
    try:
        field_type = FieldType[entry.get("type", "U8")]
    except KeyError:
        raise CatalogueError(f"未知的字段类型: {entry.get('type')!r}") from None
    try:
        return FieldDescriptor(
            name=entry["name"],
            field_type=field_type,
            offset=int(entry["offset"]),
            length=int(entry.get("length", field_type.size)),
            transform=parse_transform(entry.get("transform")),
            unit=entry.get("unit", ""),
            note=entry.get("note", ""),
        )
    except KeyError as e:
        raise CatalogueError(f"字段缺少必填项 {e}: {entry!r}") from None
    except ValueError as e:
        raise CatalogueError(str(e)) from e


def parse_catalogue(data: List[Dict[str, Any]]) -> List[CommandDescriptor]:
    """
    解析已加载的目录数据

    Raises:
        CatalogueError: 格式错误或字段名重复
    """
    if not isinstance(data, list):
        raise CatalogueError("字段目录必须是命令列表")

    commands = []
    seen_names = set()
    for entry in data:
        try:
            command_id = int(str(entry["command"]), 16)
            fields = tuple(_parse_field(f) for f in entry.get("fields", []))
        except CatalogueError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogueError(f"命令条目格式错误: {entry!r}") from e

        for descriptor in fields:
            if descriptor.name in seen_names:
                raise CatalogueError(f"字段名重复: {descriptor.name}")
            seen_names.add(descriptor.name)

        commands.append(
            CommandDescriptor(
                name=entry.get("name", f"{command_id:#04x}"),
                command_id=command_id,
                fields=fields,
            )
        )
    return commands


def load_catalogue(path: Optional[Union[str, Path]] = None) -> List[CommandDescriptor]:
    """
    从JSON文件加载字段目录

    Args:
        path: 目录文件路径，None 时使用随包发布的默认目录

    Returns:
        CommandDescriptor 列表，顺序与文件一致
    """
    path = Path(path) if path is not None else DEFAULT_CATALOGUE
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogueError(f"字段目录 {path} 不是有效的JSON: {e}") from e

    commands = parse_catalogue(data)
    logger.debug(f"已加载字段目录 {path.name}: {len(commands)} 条命令")
    return commands
