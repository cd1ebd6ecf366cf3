"""MA 因子。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from factors.base import price_series


@dataclass(frozen=True)
class TickMAFactor:
    """按 tick 计数的简单移动平均：窗口未满时取已有 tick 的均值（min_periods=1）。"""

    window: int
    price_col: str = "price"
    out_col: str | None = None
    name: str = "ma"
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.window <= 0:
            raise ValueError("MA window must be > 0")
        object.__setattr__(
            self,
            "params",
            {
                "window": self.window,
                "price_col": self.price_col,
                "out_col": self.out_col,
            },
        )

    def compute(self, df: pd.DataFrame) -> pd.DataFrame:
        out = self.out_col or f"ma_{self.window}"
        df[out] = price_series(df, self.price_col).rolling(self.window, min_periods=1).mean()
        return df
