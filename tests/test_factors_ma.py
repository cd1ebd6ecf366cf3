from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from factors.ma import TickMAFactor
from factors.registry import apply_factors, build_factors, get_factor_cls, indicator_deviation
from factors.variance import TickVarianceFactor
from market_data.frame import ticks_to_frame
from shared.models.models import Tick
from simulation.indicator import annotate_ticks


def _ticks(prices: list[int]) -> list[Tick]:
    return [Tick(price=p, time=i * 10, volume=1, is_up=True) for i, p in enumerate(prices)]


def test_ma_factor_partial_window_convention():
    df = pd.DataFrame({"price": [100, 101, 102, 103, 104]})
    out = TickMAFactor(window=3).compute(df)
    assert "ma_3" in out.columns
    assert out["ma_3"].isna().sum() == 0
    assert out["ma_3"].iloc[0] == 100
    assert abs(out["ma_3"].iloc[-1] - (102 + 103 + 104) / 3) < 1e-9


def test_variance_factor_is_population_variance():
    prices = [10, 20, 30, 40]
    out = TickVarianceFactor(window=2, out_col="v").compute(pd.DataFrame({"price": prices}))
    assert np.allclose(out["v"].to_numpy(), [0.0, 25.0, 25.0, 25.0])
    w = np.array([20, 30, 40], dtype=float)
    out3 = TickVarianceFactor(window=3).compute(pd.DataFrame({"price": prices}))
    assert abs(out3["var_3"].iloc[-1] - w.var()) < 1e-9


def test_factor_requires_column_and_positive_window():
    with pytest.raises(ValueError):
        TickMAFactor(window=0)
    with pytest.raises(ValueError):
        TickVarianceFactor(window=3).compute(pd.DataFrame({"close": [1.0]}))


def test_registry_builds_from_config():
    factors = build_factors({"factors": [{"name": "ma", "params": {"window": 4}}, {"name": "variance", "params": {"window": 4}}]})
    assert [f.name for f in factors] == ["ma", "variance"]
    assert get_factor_cls("ma") is TickMAFactor
    df = apply_factors(ticks_to_frame(_ticks([12, 24, 36, 48, 60])), factors)
    assert {"ma_4", "var_4"} <= set(df.columns)
    assert build_factors(None) == []
    with pytest.raises(ValueError):
        get_factor_cls("rsi")
    with pytest.raises(ValueError):
        build_factors([{"params": {"window": 3}}])


def test_indicator_deviation_on_grid_prices():
    prices = [1200, 1212, 1188, 1200, 1236, 1248, 1224, 1200, 1200, 1200, 1176]
    ticks = annotate_ticks(_ticks(prices), 4)
    dev = indicator_deviation(ticks, 4)
    assert dev["max_ma_abs_diff"] < 1e-6
    assert dev["max_var_abs_diff"] < 1e-6
    assert dev["max_var_rel_diff"] < 1e-6


def test_indicator_deviation_empty():
    assert indicator_deviation([], 4) == {"max_ma_abs_diff": 0.0, "max_var_abs_diff": 0.0, "max_var_rel_diff": 0.0}
