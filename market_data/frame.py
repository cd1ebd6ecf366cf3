"""pandas 视图：把 Tick/Hloc 序列转换成 DataFrame，供因子计算/画图等下游使用。"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Sequence

import pandas as pd

from shared.models.models import Hloc, Tick
from shared.utils.precision import fixed_to_float

TICK_FRAME_COLUMNS = ["ts", "time", "price", "volume", "is_up", "moving_average", "variance"]
HLOC_FRAME_COLUMNS = ["ts", "time", "open", "high", "low", "close", "volume"]

# 模拟时间从 0 毫秒开始；展示时以 UTC 纪元为零点
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def ms_to_datetime(ms: int) -> datetime:
    return EPOCH + timedelta(milliseconds=int(ms))


def ticks_to_frame(ticks: Sequence[Tick]) -> pd.DataFrame:
    """Tick 序列 -> DataFrame。

    整数列保持定点值；指标列是 object（方差可能超出 int64），缺失为 None。
    """
    if not ticks:
        return pd.DataFrame(columns=TICK_FRAME_COLUMNS)
    df = pd.DataFrame(
        {
            "time": [t.time for t in ticks],
            "price": [t.price for t in ticks],
            "volume": [t.volume for t in ticks],
            "is_up": [t.is_up for t in ticks],
            "moving_average": pd.Series([t.moving_average for t in ticks], dtype="object"),
            "variance": pd.Series([t.variance for t in ticks], dtype="object"),
        }
    )
    df.insert(0, "ts", pd.to_datetime(df["time"], unit="ms", utc=True))
    return df


def hlocs_to_frame(hlocs: Sequence[Hloc]) -> pd.DataFrame:
    if not hlocs:
        return pd.DataFrame(columns=HLOC_FRAME_COLUMNS)
    df = pd.DataFrame(
        {
            "time": [h.time for h in hlocs],
            "open": [h.open for h in hlocs],
            "high": [h.high for h in hlocs],
            "low": [h.low for h in hlocs],
            "close": [h.close for h in hlocs],
            "volume": [h.volume for h in hlocs],
        }
    )
    df.insert(0, "ts", pd.to_datetime(df["time"], unit="ms", utc=True))
    return df


def price_graph(hlocs: Sequence[Hloc]) -> list[tuple[datetime, float]]:
    """K 线 open 价折线点：`[(bar 起点时间, open 价)]`，价格换算成十进制 float。"""
    return [(ms_to_datetime(h.time), float(fixed_to_float(h.open))) for h in hlocs]
