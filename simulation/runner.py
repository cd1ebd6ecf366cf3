"""模拟主循环：按 regime 窗口推进模拟时间，逐笔生成 Tick 并实时追加指标。

随机数只来自一个注入的 `random.Random`，抽取顺序固定：
- 每个窗口：窗口时长 -> regime（由策略决定是否消耗随机数）
- 每笔交易：方向 -> market_volume -> limit_volume_by_tick -> limit_volume_change_by_tick -> 下一笔间隔
因此给定种子与配置，输出逐字节一致。
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Sequence

from shared.models.models import Tick
from shared.utils.fixed_point import FIXED_POINT_ONE, mul_div_u64
from simulation.actors import ActorPower, ActorPowerState, Actors
from simulation.errors import (
    ActorLiquidityAmplifierNotPositive,
    CurrentPriceBelowIncrement,
    LimitVolumeAmplifierOverflow,
    LiquidityChangeRangeInvalid,
    MarketStateDurationRangeInvalid,
    MarketVolumeAmplifierOverflow,
    MovingAverageWindowNotPositive,
    PriceIncrementNotPositive,
    SentimentOutOfRange,
    TradeIntervalRangeInvalid,
    VolumeBaseRangeInvalid,
)
from simulation.indicator import make_indicators_from_ticks
from simulation.market_state import MarketState
from simulation.regime import MarkovRegimePolicy, RegimePolicy
from utils.logging import get_logger

DAY_MS = 24 * 60 * 60 * 1000


def _is_ascending_positive(rng: tuple[int, int]) -> bool:
    lo, hi = rng
    return 0 < lo < hi


@dataclass(frozen=True)
class RunnerConfig:
    """一次市场模拟的参数（构造即校验，非法组合直接抛错）。

    价格/成交量是定点整数；放大系数以 1_000_000 为 1.0。
    """

    price_increment: int
    duration_between_trade_range_ms: tuple[int, int]
    duration_between_market_state_range_ms: tuple[int, int]
    volume_base_range: tuple[int, int]
    liquidity_change_by_tick_range: tuple[int, int]
    actor_liquidity_amplifier_x1_000_000: int
    duration_moving_average_tick: int = 4
    greed: float = 0.0
    fear: float = 0.0

    def __post_init__(self):
        for name in (
            "duration_between_trade_range_ms",
            "duration_between_market_state_range_ms",
            "volume_base_range",
            "liquidity_change_by_tick_range",
        ):
            object.__setattr__(self, name, tuple(getattr(self, name)))

        if self.price_increment <= 0:
            raise PriceIncrementNotPositive(self.price_increment)
        if not _is_ascending_positive(self.duration_between_trade_range_ms):
            raise TradeIntervalRangeInvalid(*self.duration_between_trade_range_ms)
        if not _is_ascending_positive(self.duration_between_market_state_range_ms):
            raise MarketStateDurationRangeInvalid(*self.duration_between_market_state_range_ms)
        if not _is_ascending_positive(self.volume_base_range):
            raise VolumeBaseRangeInvalid(*self.volume_base_range)
        if not _is_ascending_positive(self.liquidity_change_by_tick_range):
            raise LiquidityChangeRangeInvalid(*self.liquidity_change_by_tick_range)
        if self.actor_liquidity_amplifier_x1_000_000 <= 0:
            raise ActorLiquidityAmplifierNotPositive(self.actor_liquidity_amplifier_x1_000_000)
        if self.duration_moving_average_tick <= 0:
            raise MovingAverageWindowNotPositive(self.duration_moving_average_tick)
        for name in ("greed", "fear"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise SentimentOutOfRange(name, value)

    @classmethod
    def default(cls) -> "RunnerConfig":
        return cls(
            price_increment=120_000,
            duration_between_trade_range_ms=(15, 30_000),
            duration_between_market_state_range_ms=(14 * DAY_MS, 90 * DAY_MS),
            volume_base_range=(1 * FIXED_POINT_ONE, 100 * FIXED_POINT_ONE),
            liquidity_change_by_tick_range=(1 * FIXED_POINT_ONE, 100 * FIXED_POINT_ONE),
            actor_liquidity_amplifier_x1_000_000=1_005_000,
            duration_moving_average_tick=4,
        )

    @property
    def buy_probability(self) -> float:
        """市价买的概率：0.5 + (greed - fear) / 2。"""
        return 0.5 + (self.greed - self.fear) / 2.0

    def is_rounding_free(self, start_price: int) -> bool:
        """increment 与起始价是否都是 lcm(1..W) 的整数倍（此时增量 MA 的每一步都是整除）。"""
        modulus = 1
        for k in range(2, self.duration_moving_average_tick + 1):
            modulus = math.lcm(modulus, k)
            if modulus > self.price_increment:
                return False
        return self.price_increment % modulus == 0 and start_price % modulus == 0


@dataclass(frozen=True)
class RegimeWindow:
    """一个 regime 窗口的上下文：时间区间 + 固定的市场状态。"""

    start_ms: int
    end_ms: int
    state: MarketState

    @property
    def actor_power(self) -> ActorPower:
        return self.state.actor_power()

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass
class RunReport:
    """最近一次 `run` 的摘要（窗口列表与 tick 数）。"""

    windows: list[RegimeWindow] = field(default_factory=list)
    tick_count: int = 0
    trade_count: int = 0


class Runner:
    """市场模拟器。

    Parameters
    ----------
    config:
        已校验的 RunnerConfig；None 时使用默认配置。
    rng:
        注入的随机源；与 seed 二选一。
    seed:
        rng 为 None 时用它创建 `random.Random(seed)`。
    regime_policy:
        regime 选择策略；默认从均衡状态出发的 Markov 策略。
    """

    def __init__(
        self,
        config: RunnerConfig | None = None,
        *,
        rng: random.Random | None = None,
        seed: int | None = None,
        regime_policy: RegimePolicy | None = None,
        logger: logging.Logger | None = None,
    ):
        self.config = config or RunnerConfig.default()
        self.rng = rng if rng is not None else random.Random(seed)
        self.regime_policy = regime_policy or MarkovRegimePolicy()
        self.logger = logger or get_logger("runner")
        self.report = RunReport()

    def run(self, current_time_ms: int, end_time_ms: int, current_price: int) -> list[Tick]:
        """从 current_time_ms 模拟到 end_time_ms，返回按时间升序的 tick。"""
        if end_time_ms < current_time_ms:
            raise ValueError(f"end_time_ms ({end_time_ms}) must be >= current_time_ms ({current_time_ms})")

        cfg = self.config
        self.report = RunReport()
        ticks: list[Tick] = []
        state: MarketState | None = None
        self.logger.info(
            "simulation start: t=%s end=%s price=%s policy=%s",
            current_time_ms,
            end_time_ms,
            current_price,
            getattr(self.regime_policy, "name", type(self.regime_policy).__name__),
        )
        if not cfg.is_rounding_free(current_price):
            # MA 的截断误差会一直留在窗口里，方差随价格漂移累计偏差
            self.logger.warning(
                "price grid is not a multiple of lcm(1..%s) (increment=%s price=%s); "
                "incremental indicators carry rounding drift",
                cfg.duration_moving_average_tick,
                cfg.price_increment,
                current_price,
            )

        while current_time_ms < end_time_ms:
            lo, hi = cfg.duration_between_market_state_range_ms
            duration_ms = min(self.rng.randint(lo, hi), end_time_ms - current_time_ms)
            state = self.regime_policy.next_state(state, self.rng)
            window = RegimeWindow(start_ms=current_time_ms, end_ms=current_time_ms + duration_ms, state=state)
            self.report.windows.append(window)

            new_ticks = self.make_ticks_for_window(window, current_price, ticks)
            self.logger.debug(
                "regime window %s..%s state=%s ticks=%s",
                window.start_ms,
                window.end_ms,
                window.state.name,
                len(new_ticks),
            )
            ticks.extend(new_ticks)

            current_time_ms += duration_ms
            if ticks:
                current_price = ticks[-1].price

        self.report.tick_count = len(ticks)
        self.logger.info(
            "simulation done: windows=%s trades=%s ticks=%s",
            len(self.report.windows),
            self.report.trade_count,
            len(ticks),
        )
        return ticks

    def make_ticks_for_window(
        self,
        window: RegimeWindow,
        current_price: int,
        old_ticks: Sequence[Tick] = (),
    ) -> list[Tick]:
        """在一个 regime 窗口内逐笔成交；每个新 tick 先算指标再追加。"""
        cfg = self.config
        new_ticks: list[Tick] = []
        actor_power = window.actor_power
        trade_time_ms = window.start_ms

        while trade_time_ms < window.end_ms:
            is_buy = self.rng.random() < cfg.buy_probability
            actors = self.make_actors(actor_power, is_buy)
            for tick in self.make_ticks_for_actors(actors, trade_time_ms, current_price, is_buy):
                new_ticks.append(
                    make_indicators_from_ticks(cfg.duration_moving_average_tick, old_ticks, new_ticks, tick)
                )
            self.report.trade_count += 1

            if new_ticks:
                current_price = new_ticks[-1].price
            lo, hi = cfg.duration_between_trade_range_ms
            trade_time_ms += self.rng.randint(lo, hi)

        return new_ticks

    def make_ticks_for_actors(
        self,
        actors: Actors,
        current_time_ms: int,
        current_price: int,
        is_buy: bool,
    ) -> list[Tick]:
        """逐价位吃单：每个价位产出一个 tick，价位被吃光后移动一个 increment 并补充挂单。"""
        increment = self.config.price_increment
        if current_price <= increment:
            raise CurrentPriceBelowIncrement(current_price, increment)

        ticks: list[Tick] = []
        market_volume_left = actors.market_volume
        limit_volume_left = actors.limit_volume_by_tick
        price = current_price

        while market_volume_left > 0 and price > increment:
            is_liquidity_consumed = market_volume_left > limit_volume_left
            volume = min(market_volume_left, limit_volume_left)
            market_volume_left -= volume

            ticks.append(Tick(price=price, time=current_time_ms, volume=volume, is_up=is_buy))
            if is_liquidity_consumed:
                price = price + increment if is_buy else price - increment
                limit_volume_left += actors.limit_volume_change_by_tick
        return ticks

    def make_actors(self, actor_power: ActorPower, is_buy: bool) -> Actors:
        """按当前方向的力量对比抽取并放大 Actors。

        - LESS：挂单量与挂单增量按放大系数放大（maker 占优）
        - EQUAL：不放大
        - GREATER：吃单量放大（taker 占优）
        """
        cfg = self.config
        power = actor_power.for_side(is_buy)
        vol_lo, vol_hi = cfg.volume_base_range
        chg_lo, chg_hi = cfg.liquidity_change_by_tick_range
        market_volume = self.rng.randint(vol_lo, vol_hi)
        limit_volume = self.rng.randint(vol_lo, vol_hi)
        limit_change = self.rng.randint(chg_lo, chg_hi)
        actors = Actors(market_volume, limit_volume, limit_change)

        amplifier = cfg.actor_liquidity_amplifier_x1_000_000
        if power is ActorPowerState.LESS:
            scaled_limit = mul_div_u64(actors.limit_volume_by_tick, amplifier, FIXED_POINT_ONE)
            if scaled_limit is None:
                raise LimitVolumeAmplifierOverflow(actors.limit_volume_by_tick, amplifier)
            scaled_change = mul_div_u64(actors.limit_volume_change_by_tick, amplifier, FIXED_POINT_ONE)
            if scaled_change is None:
                raise LimitVolumeAmplifierOverflow(actors.limit_volume_change_by_tick, amplifier)
            actors = Actors(actors.market_volume, scaled_limit, scaled_change)
        elif power is ActorPowerState.GREATER:
            scaled_market = mul_div_u64(actors.market_volume, amplifier, FIXED_POINT_ONE)
            if scaled_market is None:
                raise MarketVolumeAmplifierOverflow(actors.market_volume, amplifier)
            actors = Actors(scaled_market, actors.limit_volume_by_tick, actors.limit_volume_change_by_tick)
        return actors


def generate(
    config: RunnerConfig | None = None,
    *,
    end_time_ms: int,
    start_price: int,
    start_time_ms: int = 0,
    seed: int | None = None,
    rng: random.Random | None = None,
    regime_policy: RegimePolicy | None = None,
    logger: logging.Logger | None = None,
) -> list[Tick]:
    """单一入口：给定配置与种子，生成确定的 tick 序列。"""
    runner = Runner(config, rng=rng, seed=seed, regime_policy=regime_policy, logger=logger)
    return runner.run(start_time_ms, end_time_ms, start_price)
