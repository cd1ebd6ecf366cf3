"""因子（Factors）抽象协议。

约定：因子层是“纯计算”，输入 tick 帧（pandas DataFrame，见 `market_data.frame`），
输出添加列后的 DataFrame。这里的因子是按闭式定义整窗计算的参照实现，
用来校验模拟器里 O(1) 增量更新的结果。
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

import pandas as pd


class Factor(Protocol):
    """因子协议：`compute(df) -> df`。"""

    name: str
    params: Mapping[str, Any]

    def compute(self, df: pd.DataFrame) -> pd.DataFrame:
        """对输入 df 添加/更新因子列并返回 df。"""


def price_series(df: pd.DataFrame, price_col: str) -> pd.Series:
    """定点整数价格列 -> float Series（rolling 计算用）。"""
    if price_col not in df.columns:
        raise ValueError(f"Factor requires column: {price_col}")
    return df[price_col].astype("float64")
