from __future__ import annotations

import random
from fractions import Fraction

import numpy as np
import pytest

from shared.models.models import Tick
from shared.utils.fixed_point import U64_MAX
from simulation.errors import (
    FirstLastTickMovingAverageMissing,
    LastTickVarianceMissing,
    MovingAverageNegative,
    MovingAverageOverflow,
    NewTickMovingAverageMissing,
    VarianceNegative,
    VarianceOverflow,
)
from simulation.indicator import (
    annotate_ticks,
    make_indicators_from_ticks,
    make_sliding_moving_average,
    make_sliding_variance,
    select_window_endpoints,
)


def _tick(price: int, *, ma: int | None = None, var: int | None = None, time: int = 0) -> Tick:
    return Tick(price=price, time=time, volume=1, is_up=True, moving_average=ma, variance=var)


def _bare(ticks: list[Tick]) -> list[Tick]:
    return [Tick(price=t.price, time=t.time, volume=t.volume, is_up=t.is_up) for t in ticks]


def _exact_reference(prices: list[int], window: int) -> tuple[list[Fraction], list[Fraction]]:
    mas: list[Fraction] = []
    variances: list[Fraction] = []
    for i in range(len(prices)):
        w = prices[max(0, i + 1 - window) : i + 1]
        mean = Fraction(sum(w), len(w))
        mas.append(mean)
        variances.append(sum((Fraction(x) - mean) ** 2 for x in w) / len(w))
    return mas, variances


# ---- moving average ----


def test_moving_average_empty_window_takes_price():
    out = make_sliding_moving_average(20, None, None, 0, _tick(10))
    assert out.moving_average == 10


def test_moving_average_filling_and_steady():
    t10 = _tick(10, ma=10)
    assert make_sliding_moving_average(20, t10, t10, 1, _tick(20)).moving_average == 15
    t20 = _tick(20, ma=15)
    # 窗口已满：滑出 10，加入 30
    assert make_sliding_moving_average(2, t10, t20, 2, _tick(30)).moving_average == 25


def test_moving_average_split_across_buffers():
    prices = [10, 20, 30, 40]
    ref = annotate_ticks([_tick(p) for p in prices], 3)
    assert [t.moving_average for t in ref] == [10, 15, 20, 30]
    out = make_indicators_from_ticks(3, ref[:2], ref[2:3], _tick(40))
    assert out.moving_average == 30
    out = make_indicators_from_ticks(3, ref[:2], (), _tick(30))
    assert out.moving_average == 20


def test_moving_average_missing_endpoint_indicator():
    with pytest.raises(FirstLastTickMovingAverageMissing) as exc:
        make_sliding_moving_average(3, _tick(10), _tick(20), 2, _tick(30))
    assert exc.value.operands == (2,)


def test_moving_average_negative():
    first = _tick(100, ma=100)
    last = _tick(1, ma=1)
    with pytest.raises(MovingAverageNegative) as exc:
        make_sliding_moving_average(1, first, last, 1, _tick(1))
    assert exc.value.operands == (-98,)


def test_moving_average_overflow():
    first = _tick(1, ma=1)
    last = _tick(U64_MAX, ma=U64_MAX)
    with pytest.raises(MovingAverageOverflow):
        make_sliding_moving_average(1, first, last, 1, _tick(U64_MAX))


# ---- variance ----


def test_variance_empty_window_is_zero():
    assert make_sliding_variance(20, None, None, 0, _tick(10, ma=10)).variance == 0


def test_variance_second_tick():
    t10 = _tick(10, ma=10, var=0)
    out = make_sliding_variance(20, t10, t10, 1, _tick(20, ma=15))
    assert out.variance == 25


def test_variance_filling_window():
    first = _tick(10, ma=10, var=0)
    last = _tick(20, ma=15, var=25)
    out = make_sliding_variance(20, first, last, 2, _tick(30, ma=20))
    # 66.67 截断
    assert out.variance == 66


def test_variance_steady_window():
    first = _tick(10, ma=10, var=0)
    last = _tick(20, ma=15, var=25)
    out = make_sliding_variance(2, first, last, 2, _tick(40, ma=30))
    assert out.variance == 100


def test_variance_missing_inputs():
    t10 = _tick(10, ma=10, var=0)
    t20 = _tick(20, ma=15, var=25)
    with pytest.raises(NewTickMovingAverageMissing) as exc:
        make_sliding_variance(3, t10, t20, 2, _tick(30))
    assert exc.value.operands == (2,)
    with pytest.raises(LastTickVarianceMissing) as exc:
        make_sliding_variance(2, t10, _tick(20, ma=15), 2, _tick(40, ma=30))
    assert exc.value.operands == (2,)
    with pytest.raises(FirstLastTickMovingAverageMissing):
        make_sliding_variance(3, _tick(10), t20, 2, _tick(30, ma=20))


def test_variance_negative_is_reported():
    first = _tick(10, ma=10, var=0)
    last = _tick(20, ma=20, var=0)
    with pytest.raises(VarianceNegative) as exc:
        make_sliding_variance(2, first, last, 2, _tick(20, ma=20))
    assert exc.value.operands == (-50,)


def test_variance_overflow():
    t1 = _tick(1, ma=1, var=0)
    with pytest.raises(VarianceOverflow):
        make_sliding_variance(2, t1, t1, 1, _tick(2**63, ma=2**62))


# ---- window endpoints ----


def test_select_window_endpoints():
    a, b, c, d = (_tick(p, time=i) for i, p in enumerate((1, 2, 3, 4)))
    assert select_window_endpoints((), (), 3) == (None, None, 0)
    assert select_window_endpoints([a, b, c], [d], 2) == (c, d, 2)
    assert select_window_endpoints([a], [b, c, d], 2) == (c, d, 2)
    assert select_window_endpoints([a, b], (), 5) == (a, b, 2)
    assert select_window_endpoints((), [a, b, c], 3) == (a, c, 3)
    with pytest.raises(ValueError):
        select_window_endpoints([a], (), 0)


# ---- whole sequences ----


def test_window_two_sequence():
    ticks = annotate_ticks([_tick(p) for p in (10, 20, 30, 40)], 2)
    assert [t.moving_average for t in ticks] == [10, 15, 25, 35]
    assert [t.variance for t in ticks] == [0, 25, 25, 25]


def test_window_three_sequence():
    ticks = annotate_ticks([_tick(p) for p in (10, 20, 30, 40, 50)], 3)
    assert [t.moving_average for t in ticks] == [10, 15, 20, 30, 40]
    assert [t.variance for t in ticks] == [0, 25, 66, 66, 66]


def test_window_one_has_zero_variance():
    ticks = annotate_ticks([_tick(p) for p in (10, 20, 30)], 1)
    assert [t.moving_average for t in ticks] == [10, 20, 30]
    assert [t.variance for t in ticks] == [0, 0, 0]


def test_annotate_ignores_existing_indicators():
    ticks = [_tick(10, ma=999, var=999), _tick(20, ma=1, var=1)]
    out = annotate_ticks(ticks, 2)
    assert [(t.moving_average, t.variance) for t in out] == [(10, 0), (15, 25)]


def test_result_independent_of_buffer_split():
    rng = random.Random(3)
    prices = [1_000 + rng.randint(-50, 50) * 12 for _ in range(30)]
    window = 4
    ref = annotate_ticks([_tick(p, time=i) for i, p in enumerate(prices)], window)
    for i in range(len(ref)):
        bare = _bare([ref[i]])[0]
        for k in range(i + 1):
            out = make_indicators_from_ticks(window, ref[:k], ref[k:i], bare)
            assert out == ref[i], (i, k)


def test_exact_on_price_grid():
    # 价格都是 lcm(1..4)=12 的倍数：每一步都是整除，增量结果与整窗重算完全一致
    rng = random.Random(11)
    price = 12_000
    prices = []
    for _ in range(200):
        price += rng.choice((-2, -1, 0, 0, 1, 2)) * 12
        prices.append(price)
    ticks = annotate_ticks([_tick(p, time=i) for i, p in enumerate(prices)], 4)
    ref_ma, ref_var = _exact_reference(prices, 4)
    assert [t.moving_average for t in ticks] == ref_ma
    assert [t.variance for t in ticks] == ref_var


def test_close_to_direct_recomputation():
    rng = random.Random(7)
    window = 6
    prices = [rng.randint(1_000_000, 2_000_000) for _ in range(40)]
    ticks = annotate_ticks([_tick(p, time=i) for i, p in enumerate(prices)], window)

    arr = np.array(prices, dtype=float)
    for i, t in enumerate(ticks):
        w = arr[max(0, i + 1 - window) : i + 1]
        assert abs(t.moving_average - w.mean()) <= len(prices)
        ref_var = w.var()
        assert abs(t.variance - ref_var) <= 1e-3 * ref_var + 1e3
