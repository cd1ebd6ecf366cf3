"""市场模拟引擎（simulation）。

统一入口：`generate(config, end_time_ms=..., start_price=..., seed=...) -> list[Tick]`。

- `actors`：吃单/挂单参与者与力量对比
- `market_state`：9 种 regime 与迁移表
- `regime`：regime 选择策略
- `indicator`：增量滑动 MA/方差
- `runner`：主循环
"""

from simulation.actors import ActorPower, ActorPowerState, Actors
from simulation.market_state import MarketState
from simulation.regime import (
    FixedRegimePolicy,
    MarkovRegimePolicy,
    RegimePolicy,
    UniformRegimePolicy,
    build_regime_policy,
)
from simulation.runner import RegimeWindow, Runner, RunnerConfig, generate

__all__ = [
    "Actors",
    "ActorPower",
    "ActorPowerState",
    "MarketState",
    "RegimePolicy",
    "FixedRegimePolicy",
    "MarkovRegimePolicy",
    "UniformRegimePolicy",
    "build_regime_policy",
    "RegimeWindow",
    "Runner",
    "RunnerConfig",
    "generate",
]
