"""一笔交易的参与者：吃单方（taker/market）与挂单方（maker/limit）。

- market_volume：吃单方要成交的数量
- limit_volume_by_tick：挂单方在最优价位上愿意成交的数量
- limit_volume_change_by_tick：当前价位被吃光后，下一个价位新增的挂单量
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from shared.utils.fixed_point import FIXED_POINT_ONE
from simulation.errors import (
    LimitVolumeByTickNotPositive,
    LimitVolumeChangeByTickNotPositive,
    MarketVolumeNotPositive,
)


@dataclass
class Actors:
    market_volume: int
    limit_volume_by_tick: int
    limit_volume_change_by_tick: int

    def __post_init__(self):
        if self.market_volume <= 0:
            raise MarketVolumeNotPositive(self.market_volume)
        if self.limit_volume_by_tick <= 0:
            raise LimitVolumeByTickNotPositive(self.limit_volume_by_tick)
        if self.limit_volume_change_by_tick <= 0:
            raise LimitVolumeChangeByTickNotPositive(self.limit_volume_change_by_tick)

    @classmethod
    def default(cls) -> "Actors":
        return cls(100 * FIXED_POINT_ONE, 100 * FIXED_POINT_ONE, 10 * FIXED_POINT_ONE)


class ActorPowerState(str, Enum):
    """吃单方相对挂单方的力量对比。"""

    LESS = "less"
    EQUAL = "equal"
    GREATER = "greater"


@dataclass(frozen=True)
class ActorPower:
    """两个方向各自的力量对比：市价买 vs 限价卖、市价卖 vs 限价买。"""

    market_buyer_vs_limit_seller: ActorPowerState
    market_seller_vs_limit_buyer: ActorPowerState

    def for_side(self, is_buy: bool) -> ActorPowerState:
        if is_buy:
            return self.market_buyer_vs_limit_seller
        return self.market_seller_vs_limit_buyer

    @classmethod
    def balanced(cls) -> "ActorPower":
        return cls(ActorPowerState.EQUAL, ActorPowerState.EQUAL)
