"""
派生数值
========

根据解码结果计算功率以及充/放电方向上的电流和功率。
"""

from decimal import Decimal
from typing import MutableMapping

from ..config.constants import LADELEISTUNG, ENTLADELEISTUNG

VOLTAGE = "Batteriespannung"
CURRENT = "Ampere"
POWER = "Leistung"
CHARGE_CURRENT = "Ladestrom"
DISCHARGE_CURRENT = "Entladestrom"

_ZERO = Decimal(0)


def compute_derived(values: MutableMapping[str, Decimal]) -> MutableMapping[str, Decimal]:
    """
    计算派生数值并写回 values

    电流为正表示充电。缺少电压或电流时不做任何修改。
    """
    voltage = values.get(VOLTAGE)
    current = values.get(CURRENT)
    if voltage is None or current is None:
        return values

    power = voltage * current
    values[POWER] = power
    values[LADELEISTUNG] = max(power, _ZERO)
    values[ENTLADELEISTUNG] = max(-power, _ZERO)
    values[CHARGE_CURRENT] = max(current, _ZERO)
    values[DISCHARGE_CURRENT] = max(-current, _ZERO)
    return values
