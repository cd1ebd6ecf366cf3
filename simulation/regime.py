"""Regime 选择策略（可插拔）：每个 regime 窗口开始时决定使用哪个 MarketState。

策略只负责“选哪个”，合法迁移由 `MarketState.next_states()` 约束。
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol

from simulation.market_state import MarketState


class RegimePolicy(Protocol):
    """`next_state(current, rng)`：current 为 None 表示第一个窗口。"""

    name: str

    def next_state(self, current: MarketState | None, rng: random.Random) -> MarketState:
        ...


@dataclass(frozen=True)
class FixedRegimePolicy:
    """整段模拟保持同一个 regime（不消耗随机数）。"""

    state: MarketState = MarketState.MB_EQUAL_LS_MS_EQUAL_LB
    name: str = "fixed"

    def next_state(self, current: MarketState | None, rng: random.Random) -> MarketState:
        return self.state


@dataclass(frozen=True)
class MarkovRegimePolicy:
    """第一个窗口用 initial，之后在 `current.next_states()` 中均匀抽取。"""

    initial: MarketState = MarketState.MB_EQUAL_LS_MS_EQUAL_LB
    name: str = "markov"

    def next_state(self, current: MarketState | None, rng: random.Random) -> MarketState:
        if current is None:
            return self.initial
        return rng.choice(current.next_states())


@dataclass(frozen=True)
class UniformRegimePolicy:
    """每个窗口在全部 9 个状态中均匀抽取（忽略迁移表）。"""

    name: str = "uniform"

    def next_state(self, current: MarketState | None, rng: random.Random) -> MarketState:
        return rng.choice(list(MarketState))


_REGISTRY: dict[str, type] = {}


def register_policy(name: str, cls: type) -> None:
    _REGISTRY[name] = cls


def build_regime_policy(name: str, initial_state: MarketState | str | None = None) -> RegimePolicy:
    """按配置名称构建策略：`fixed` / `markov` / `uniform`。"""
    if name not in _REGISTRY:
        raise ValueError(f"Unknown regime policy: {name}. Available: {', '.join(sorted(_REGISTRY))}")
    cls = _REGISTRY[name]
    if cls is UniformRegimePolicy:
        return cls()
    if initial_state is None:
        return cls()
    state = MarketState.parse(initial_state)
    if cls is FixedRegimePolicy:
        return cls(state=state)
    return cls(initial=state)


# 默认注册
register_policy("fixed", FixedRegimePolicy)
register_policy("markov", MarkovRegimePolicy)
register_policy("uniform", UniformRegimePolicy)
