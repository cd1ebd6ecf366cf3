"""市场状态（regime）：9 种买卖力量组合、合法迁移表、到 ActorPower 的映射。

命名约定：
- MB = Market Buy volume, LS = Limit Sell volume
- MS = Market Sell volume, LB = Limit Buy volume
"""

from __future__ import annotations

from enum import Enum

from simulation.actors import ActorPower, ActorPowerState

_L = ActorPowerState.LESS
_E = ActorPowerState.EQUAL
_G = ActorPowerState.GREATER


class MarketState(str, Enum):
    # 震荡
    MB_EQUAL_LS_MS_EQUAL_LB = "mb_equal_ls_ms_equal_lb"
    MB_GREATER_LS_MS_GREATER_LB = "mb_greater_ls_ms_greater_lb"
    MB_LESS_LS_MS_LESS_LB = "mb_less_ls_ms_less_lb"
    # 看涨
    MB_GREATER_LS_MS_EQUAL_LB = "mb_greater_ls_ms_equal_lb"
    MB_GREATER_LS_MS_LESS_LB = "mb_greater_ls_ms_less_lb"
    MB_EQUAL_LS_MS_LESS_LB = "mb_equal_ls_ms_less_lb"
    # 看跌
    MB_EQUAL_LS_MS_GREATER_LB = "mb_equal_ls_ms_greater_lb"
    MB_LESS_LS_MS_GREATER_LB = "mb_less_ls_ms_greater_lb"
    MB_LESS_LS_MS_EQUAL_LB = "mb_less_ls_ms_equal_lb"

    def next_states(self) -> tuple["MarketState", ...]:
        """可迁移到的下一个状态集合（只约束合法性，不决定选择策略）。"""
        return _TRANSITIONS[self]

    def can_transition_to(self, other: "MarketState") -> bool:
        return other in _TRANSITIONS[self]

    def actor_power(self) -> ActorPower:
        return _POWER[self]

    @property
    def trend(self) -> str:
        """`range` / `bullish` / `bearish`。"""
        return _TREND[self]

    @classmethod
    def from_actor_power(cls, power: ActorPower) -> "MarketState":
        for state, p in _POWER.items():
            if p == power:
                return state
        raise ValueError(f"Unknown actor power: {power}")

    @classmethod
    def parse(cls, value: "str | MarketState") -> "MarketState":
        """按 value 或成员名（大小写不敏感）解析。"""
        if isinstance(value, MarketState):
            return value
        raw = str(value).strip()
        try:
            return cls(raw.lower())
        except ValueError:
            pass
        try:
            return cls[raw.upper()]
        except KeyError as exc:
            raise ValueError(f"Unknown market state: {value}") from exc


_S = MarketState

_POWER: dict[MarketState, ActorPower] = {
    _S.MB_EQUAL_LS_MS_EQUAL_LB: ActorPower(_E, _E),
    _S.MB_GREATER_LS_MS_GREATER_LB: ActorPower(_G, _G),
    _S.MB_LESS_LS_MS_LESS_LB: ActorPower(_L, _L),
    _S.MB_GREATER_LS_MS_EQUAL_LB: ActorPower(_G, _E),
    _S.MB_GREATER_LS_MS_LESS_LB: ActorPower(_G, _L),
    _S.MB_EQUAL_LS_MS_LESS_LB: ActorPower(_E, _L),
    _S.MB_EQUAL_LS_MS_GREATER_LB: ActorPower(_E, _G),
    _S.MB_LESS_LS_MS_GREATER_LB: ActorPower(_L, _G),
    _S.MB_LESS_LS_MS_EQUAL_LB: ActorPower(_L, _E),
}

_TRANSITIONS: dict[MarketState, tuple[MarketState, ...]] = {
    _S.MB_EQUAL_LS_MS_EQUAL_LB: (
        _S.MB_EQUAL_LS_MS_LESS_LB,
        _S.MB_EQUAL_LS_MS_GREATER_LB,
        _S.MB_GREATER_LS_MS_EQUAL_LB,
        _S.MB_LESS_LS_MS_EQUAL_LB,
    ),
    _S.MB_GREATER_LS_MS_GREATER_LB: (
        _S.MB_GREATER_LS_MS_EQUAL_LB,
        _S.MB_EQUAL_LS_MS_GREATER_LB,
    ),
    _S.MB_LESS_LS_MS_LESS_LB: (
        _S.MB_EQUAL_LS_MS_LESS_LB,
        _S.MB_LESS_LS_MS_EQUAL_LB,
    ),
    _S.MB_GREATER_LS_MS_EQUAL_LB: (
        _S.MB_GREATER_LS_MS_GREATER_LB,
        _S.MB_GREATER_LS_MS_LESS_LB,
        _S.MB_EQUAL_LS_MS_EQUAL_LB,
    ),
    _S.MB_GREATER_LS_MS_LESS_LB: (
        _S.MB_GREATER_LS_MS_EQUAL_LB,
        _S.MB_EQUAL_LS_MS_LESS_LB,
    ),
    _S.MB_EQUAL_LS_MS_LESS_LB: (
        _S.MB_GREATER_LS_MS_LESS_LB,
        _S.MB_LESS_LS_MS_LESS_LB,
        _S.MB_EQUAL_LS_MS_EQUAL_LB,
    ),
    _S.MB_EQUAL_LS_MS_GREATER_LB: (
        _S.MB_GREATER_LS_MS_GREATER_LB,
        _S.MB_LESS_LS_MS_GREATER_LB,
        _S.MB_EQUAL_LS_MS_EQUAL_LB,
    ),
    _S.MB_LESS_LS_MS_GREATER_LB: (
        _S.MB_EQUAL_LS_MS_GREATER_LB,
        _S.MB_LESS_LS_MS_EQUAL_LB,
    ),
    _S.MB_LESS_LS_MS_EQUAL_LB: (
        _S.MB_LESS_LS_MS_LESS_LB,
        _S.MB_LESS_LS_MS_GREATER_LB,
        _S.MB_EQUAL_LS_MS_EQUAL_LB,
    ),
}

_TREND: dict[MarketState, str] = {
    _S.MB_EQUAL_LS_MS_EQUAL_LB: "range",
    _S.MB_GREATER_LS_MS_GREATER_LB: "range",
    _S.MB_LESS_LS_MS_LESS_LB: "range",
    _S.MB_GREATER_LS_MS_EQUAL_LB: "bullish",
    _S.MB_GREATER_LS_MS_LESS_LB: "bullish",
    _S.MB_EQUAL_LS_MS_LESS_LB: "bullish",
    _S.MB_EQUAL_LS_MS_GREATER_LB: "bearish",
    _S.MB_LESS_LS_MS_GREATER_LB: "bearish",
    _S.MB_LESS_LS_MS_EQUAL_LB: "bearish",
}
