"""滚动总体方差因子。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from factors.base import price_series


@dataclass(frozen=True)
class TickVarianceFactor:
    """按 tick 计数的总体方差（ddof=0），窗口未满时用已有 tick。"""

    window: int
    price_col: str = "price"
    out_col: str | None = None
    name: str = "variance"
    params: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.window <= 0:
            raise ValueError("Variance window must be > 0")
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
        out = self.out_col or f"var_{self.window}"
        df[out] = price_series(df, self.price_col).rolling(self.window, min_periods=1).var(ddof=0)
        return df
