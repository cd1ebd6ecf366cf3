"""增量滑动窗口指标：移动平均（MA）与总体方差。

每个新 tick 只需要：窗口起点 tick（即将滑出窗口的那个）、最新 tick（上一条指标），
以及窗口有效长度 `L = min(W, 已有 tick 数)`，O(1) 更新，不回扫窗口。

所有中间量在 256 位有符号整数范围内计算，窗口长度以定点数表示后用 `mul_div_i256` 做除法，
最后收窄回 64 位无符号范围；任何越界都抛出具名错误。

MA 更新
-------
- L == 0：ma = p_new
- 0 < L < W：ma_new = ma_old + (p_new - ma_old) / (L + 1)
- L == W：ma_new = ma_old + (p_new - p_removed) / W

方差更新（按顺序匹配）
----------------------
- L == 0：0
- L == W：var_old + (ma_new - ma_old)^2 + ((ma_new - p_new)^2 - (ma_new - p_removed)^2) / W
- L == 1：((ma_new - p_old)^2 + (ma_new - p_new)^2) / 2
- 其他：L / (L + 1) * (var_old + (ma_old - p_new)^2 / (L + 1))
"""

from __future__ import annotations

from typing import Sequence

from shared.models.models import Tick
from shared.utils.fixed_point import FIXED_POINT_ONE, U64_MAX, fits_signed, mul_div_i256
from simulation.errors import (
    FirstLastTickMovingAverageMissing,
    LastTickVarianceMissing,
    MovingAverageNegative,
    MovingAverageOverflow,
    NewTickMovingAverageMissing,
    VarianceNegative,
    VarianceOverflow,
)


def select_window_endpoints(
    old_ticks: Sequence[Tick],
    new_ticks: Sequence[Tick],
    window: int,
) -> tuple[Tick | None, Tick | None, int]:
    """在 `old_ticks + new_ticks`（逻辑拼接，不复制）上选出窗口两端。

    Returns
    -------
    (first, last, tick_len)
        tick_len = min(window, 总长度)；first 是拼接序列中下标 `总长度 - tick_len` 的 tick，
        last 是最新的 tick。空历史时两端都是 None。
    """
    if window <= 0:
        raise ValueError("window must be > 0")
    n_old = len(old_ticks)
    total = n_old + len(new_ticks)
    tick_len = min(window, total)
    if tick_len == 0:
        return None, None, 0
    first_idx = total - tick_len
    first = old_ticks[first_idx] if first_idx < n_old else new_ticks[first_idx - n_old]
    last = new_ticks[-1] if new_ticks else old_ticks[-1]
    return first, last, tick_len


def _require_first_last(first: Tick | None, last: Tick | None, tick_len: int) -> tuple[Tick, Tick]:
    if first is None or last is None or first.moving_average is None or last.moving_average is None:
        raise FirstLastTickMovingAverageMissing(tick_len)
    return first, last


def _div_by_len(value: int, size: int, error: type) -> int:
    """value / size（size 以定点数表示后走 mul_div），向零截断。"""
    fixed_size = size * FIXED_POINT_ONE
    out = mul_div_i256(value, FIXED_POINT_ONE, fixed_size)
    if out is None:
        raise error(value, fixed_size)
    return out


def _checked(value: int, size: int, error: type) -> int:
    if not fits_signed(value, 256):
        raise error(value, size * FIXED_POINT_ONE)
    return value


def make_sliding_moving_average(
    window: int,
    first: Tick | None,
    last: Tick | None,
    tick_len: int,
    new_tick: Tick,
) -> Tick:
    """计算 new_tick 的移动平均，返回带 `moving_average` 的新 Tick。"""
    if tick_len == 0:
        return new_tick.with_indicators(moving_average=new_tick.price)

    first, last = _require_first_last(first, last, tick_len)
    old_average = last.moving_average
    new_value = new_tick.price
    if tick_len < window:
        size = tick_len + 1
        delta = new_value - old_average
    else:
        size = window
        delta = new_value - first.price

    delta = _checked(delta, size, MovingAverageOverflow)
    moving_average = _checked(old_average + _div_by_len(delta, size, MovingAverageOverflow), size, MovingAverageOverflow)
    if moving_average < 0:
        raise MovingAverageNegative(moving_average)
    if moving_average > U64_MAX:
        raise MovingAverageOverflow(moving_average, size * FIXED_POINT_ONE)
    return new_tick.with_indicators(moving_average=moving_average)


def make_sliding_variance(
    window: int,
    first: Tick | None,
    last: Tick | None,
    tick_len: int,
    new_tick: Tick,
) -> Tick:
    """计算 new_tick 的总体方差（new_tick 必须已经带有 moving_average）。"""
    if tick_len == 0:
        return new_tick.with_indicators(variance=0)

    if new_tick.moving_average is None:
        raise NewTickMovingAverageMissing(tick_len)
    first, last = _require_first_last(first, last, tick_len)
    new_ma = new_tick.moving_average
    new_value = new_tick.price

    if tick_len >= window:
        if last.variance is None:
            raise LastTickVarianceMissing(tick_len)
        size = window
        removed_value = first.price
        old_ma = last.moving_average
        variance = _checked((new_ma - new_value) ** 2 - (new_ma - removed_value) ** 2, size, VarianceOverflow)
        variance = _div_by_len(variance, size, VarianceOverflow)
        variance = _checked(variance + (new_ma - old_ma) ** 2 + last.variance, size, VarianceOverflow)
    elif tick_len == 1:
        size = 2
        old_value = last.price
        variance = _checked((new_ma - old_value) ** 2 + (new_ma - new_value) ** 2, size, VarianceOverflow)
        variance = _div_by_len(variance, size, VarianceOverflow)
    else:
        if last.variance is None:
            raise LastTickVarianceMissing(tick_len)
        size = tick_len + 1
        old_ma = last.moving_average
        variance = _checked((old_ma - new_value) ** 2, size, VarianceOverflow)
        variance = _checked(_div_by_len(variance, size, VarianceOverflow) + last.variance, size, VarianceOverflow)
        scaled = mul_div_i256(variance, tick_len * FIXED_POINT_ONE, size * FIXED_POINT_ONE)
        if scaled is None:
            raise VarianceOverflow(variance, size * FIXED_POINT_ONE)
        variance = scaled

    if variance < 0:
        raise VarianceNegative(variance)
    if variance > U64_MAX:
        raise VarianceOverflow(variance, size * FIXED_POINT_ONE)
    return new_tick.with_indicators(variance=variance)


def make_indicators_from_ticks(
    window: int,
    old_ticks: Sequence[Tick],
    new_ticks: Sequence[Tick],
    new_tick: Tick,
) -> Tick:
    """为 new_tick 追加 MA 与方差。

    old_ticks 是已经定稿的历史，new_ticks 是当前 regime 窗口里刚生成的 tick；
    两端 tick 落在哪个缓冲区不影响结果。
    """
    first, last, tick_len = select_window_endpoints(old_ticks, new_ticks, window)
    tick = make_sliding_moving_average(window, first, last, tick_len, new_tick)
    return make_sliding_variance(window, first, last, tick_len, tick)


def annotate_ticks(ticks: Sequence[Tick], window: int) -> list[Tick]:
    """对一段 tick 序列从头重新计算指标（忽略输入里已有的指标值）。"""
    out: list[Tick] = []
    for tick in ticks:
        bare = Tick(price=tick.price, time=tick.time, volume=tick.volume, is_up=tick.is_up)
        out.append(make_indicators_from_ticks(window, out, (), bare))
    return out
