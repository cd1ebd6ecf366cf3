"""精度工具：十进制数值 <-> 整数定点表示（用于配置输入与展示）。"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal, InvalidOperation

from shared.utils.fixed_point import FIXED_POINT_DECIMALS


def to_decimal(value: object) -> Decimal:
    """把 int/float/str 统一转成 Decimal（float 先走 str，避免二进制噪声）。"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    try:
        if isinstance(value, float):
            return Decimal(repr(value))
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid numeric value: {value!r}") from exc


def to_fixed(value: object, decimals: int = FIXED_POINT_DECIMALS) -> int:
    """十进制数值 -> 定点整数，向下取整到最小单位。

    Examples
    --------
    >>> to_fixed("1000.5")
    1000500000
    """
    d = to_decimal(value)
    if not d.is_finite():
        raise ValueError(f"Invalid numeric value: {value!r}")
    scaled = d.scaleb(decimals).to_integral_value(rounding=ROUND_FLOOR)
    return int(scaled)


def from_fixed(value: int, decimals: int = FIXED_POINT_DECIMALS) -> Decimal:
    """定点整数 -> Decimal（精确）。"""
    return Decimal(int(value)).scaleb(-decimals)


def fixed_to_float(value: int | None, decimals: int = FIXED_POINT_DECIMALS) -> float | None:
    """定点整数 -> float（仅用于展示/画图）。"""
    if value is None:
        return None
    return float(from_fixed(value, decimals))
