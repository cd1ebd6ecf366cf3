"""因子注册表：字符串 -> 因子实现，以及增量指标的整窗校验。"""

from __future__ import annotations

from typing import Any, Sequence

import pandas as pd

from factors.base import Factor
from factors.ma import TickMAFactor
from factors.variance import TickVarianceFactor
from market_data.frame import ticks_to_frame
from shared.models.models import Tick

_REGISTRY: dict[str, type] = {}


def register_factor(name: str, cls: type) -> None:
    _REGISTRY[name] = cls


def get_factor_cls(name: str) -> type:
    if name not in _REGISTRY:
        raise ValueError(f"Unknown factor: {name}")
    return _REGISTRY[name]


def build_factors(cfg: Any) -> list[Factor]:
    """从配置构建因子列表。

    支持形态：
    - factors: [{name: "ma", params: {...}}, ...]
    - 直接传入 list[dict]
    """
    if cfg is None:
        return []

    items = cfg
    if isinstance(cfg, dict):
        items = cfg.get("factors") or []
    if not isinstance(items, list):
        raise ValueError("factors config must be a list")

    factors: list[Factor] = []
    for item in items:
        if not isinstance(item, dict):
            raise ValueError("factor item must be a dict")
        name = str(item.get("name") or item.get("type") or "")
        params = item.get("params") or {}
        if not name:
            raise ValueError("factor item missing name")
        if not isinstance(params, dict):
            raise ValueError("factor params must be a dict")
        cls = get_factor_cls(name)
        factors.append(cls(**params))
    return factors


def apply_factors(df: pd.DataFrame, factors: list[Factor]) -> pd.DataFrame:
    for f in factors:
        df = f.compute(df)
    return df


def indicator_deviation(ticks: Sequence[Tick], window: int) -> dict[str, float]:
    """增量指标 vs 整窗重算的最大偏差（绝对值，定点单位）。

    Returns
    -------
    dict
        `max_ma_abs_diff` / `max_var_abs_diff` / `max_var_rel_diff`；没有 tick 时全为 0。
    """
    if not ticks:
        return {"max_ma_abs_diff": 0.0, "max_var_abs_diff": 0.0, "max_var_rel_diff": 0.0}

    df = ticks_to_frame(ticks)
    df = apply_factors(
        df,
        [
            TickMAFactor(window=window, out_col="ref_ma"),
            TickVarianceFactor(window=window, out_col="ref_var"),
        ],
    )
    ma = df["moving_average"].astype("float64")
    var = df["variance"].astype("float64")
    ma_diff = (ma - df["ref_ma"]).abs()
    var_diff = (var - df["ref_var"]).abs()
    scale = df["ref_var"].abs().clip(lower=1.0)
    return {
        "max_ma_abs_diff": float(ma_diff.max()),
        "max_var_abs_diff": float(var_diff.max()),
        "max_var_rel_diff": float((var_diff / scale).max()),
    }


# 默认注册
register_factor("ma", TickMAFactor)
register_factor("variance", TickVarianceFactor)
