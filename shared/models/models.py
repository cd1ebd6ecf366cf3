"""核心数据结构：Tick/Hloc。

价格、成交量、指标都是整数定点值（隐含 6 位小数），时间是毫秒整数。
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from shared.models.errors import IndicatorAlreadySet, InvalidDuration, InvalidPrice, InvalidTime, InvalidVolume


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Tick:
    """一笔成交（逐笔）。

    `moving_average`/`variance` 由指标引擎追加，构造后只能从 None 填成具体值，
    不能再改写（见 `with_indicators`）。
    """

    price: int
    time: int
    volume: int
    is_up: bool
    moving_average: int | None = None
    variance: int | None = None

    def __post_init__(self):
        if not _is_int(self.price) or self.price <= 0:
            raise InvalidPrice(self.price)
        if not _is_int(self.volume) or self.volume <= 0:
            raise InvalidVolume(self.volume)
        if not _is_int(self.time) or self.time < 0:
            raise InvalidTime(self.time)

    def with_indicators(
        self,
        *,
        moving_average: int | None = None,
        variance: int | None = None,
    ) -> "Tick":
        """返回追加了指标的新 Tick。已存在且不同的指标值视为错误。"""
        updates: dict[str, int] = {}
        for name, value in (("moving_average", moving_average), ("variance", variance)):
            if value is None:
                continue
            current = getattr(self, name)
            if current is not None and current != value:
                raise IndicatorAlreadySet(name, current, value)
            updates[name] = value
        if not updates:
            return self
        return replace(self, **updates)


@dataclass(frozen=True)
class Hloc:
    """固定时长分桶的 K 线（open/high/low/close + 桶起点 + 成交量）。"""

    open: int
    high: int
    low: int
    close: int
    time: int
    volume: int

    def __post_init__(self):
        for px in (self.open, self.high, self.low, self.close):
            if not _is_int(px) or px <= 0:
                raise InvalidPrice(px)
        if not _is_int(self.volume) or self.volume < 0:
            raise InvalidVolume(self.volume)
        if not _is_int(self.time) or self.time < 0:
            raise InvalidTime(self.time)

    @classmethod
    def from_ticks(cls, ticks: Iterable[Tick], bucket_duration: int) -> list["Hloc"]:
        """单遍把时间有序的 Tick 流折叠成固定时长的 K 线。

        - 桶起点：`time - time % bucket_duration`
        - 新桶的 open 取上一根 K 线的 close（价格连续），第一个数据点是新 tick
        - 空输入返回空列表
        """
        if not _is_int(bucket_duration) or bucket_duration <= 0:
            raise InvalidDuration(bucket_duration)

        out: list[Hloc] = []
        bucket: int | None = None
        open_ = high = low = close = 0
        volume = 0
        for tick in ticks:
            tick_bucket = tick.time - tick.time % bucket_duration
            if bucket is None:
                bucket = tick_bucket
                open_ = high = low = close = tick.price
                volume = tick.volume
                continue
            if tick_bucket != bucket:
                out.append(cls(open_, high, low, close, bucket, volume))
                bucket = tick_bucket
                open_ = close
                high = max(open_, tick.price)
                low = min(open_, tick.price)
                close = tick.price
                volume = tick.volume
                continue
            high = max(high, tick.price)
            low = min(low, tick.price)
            close = tick.price
            volume += tick.volume

        if bucket is not None:
            out.append(cls(open_, high, low, close, bucket, volume))
        return out
