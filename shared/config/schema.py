"""配置架构定义（Pydantic Schema）。

目标：
- 让配置成为“强类型”的边界协议，启动阶段尽早失败；
- YAML 里写人类可读的十进制数值（价格、成交量、放大系数），
  由 `SimulationConfig.to_runner_config()` 统一换算成定点整数。
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shared.utils.precision import to_decimal, to_fixed
from simulation.market_state import MarketState
from simulation.regime import RegimePolicy, build_regime_policy
from simulation.runner import DAY_MS, RunnerConfig


def _floats_as_decimal(data: Any) -> Any:
    # YAML 把 0.12 读成 float；先走 repr 再转 Decimal，避免二进制误差在向下取整时丢一个最小单位
    if isinstance(data, float):
        return to_decimal(data)
    if isinstance(data, dict):
        return {k: _floats_as_decimal(v) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [_floats_as_decimal(v) for v in data]
    return data


class RunnerSchema(BaseModel):
    """市场模拟参数（十进制单位）。"""
    price_increment: Decimal = Decimal("0.12")
    trade_interval_ms: Tuple[int, int] = (15, 30_000)
    market_state_duration_ms: Tuple[int, int] = (14 * DAY_MS, 90 * DAY_MS)
    volume_base_range: Tuple[Decimal, Decimal] = (Decimal("1"), Decimal("100"))
    liquidity_change_range: Tuple[Decimal, Decimal] = (Decimal("1"), Decimal("100"))
    # 1.005 表示放大 0.5%
    actor_liquidity_amplifier: Decimal = Decimal("1.005")
    moving_average_window: int = 4
    greed: float = 0.0
    fear: float = 0.0

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _decimal_inputs(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        sentiment = {k: data[k] for k in ("greed", "fear") if k in data}
        return {**_floats_as_decimal(data), **sentiment}


class RegimeSchema(BaseModel):
    """regime 选择策略。"""
    policy: Literal["fixed", "markov", "uniform"] = "markov"
    initial_state: str = MarketState.MB_EQUAL_LS_MS_EQUAL_LB.value

    model_config = ConfigDict(extra="forbid")

    @field_validator("initial_state")
    @classmethod
    def _check_state(cls, v: str) -> str:
        return MarketState.parse(v).value


class RunSchema(BaseModel):
    """单次运行参数。"""
    start_price: Decimal = Decimal("1200")
    start_time_ms: int = Field(default=0, ge=0)
    end_time_ms: int = Field(default=DAY_MS, ge=0)
    seed: Optional[int] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _decimal_inputs(cls, data: Any) -> Any:
        return _floats_as_decimal(data)


class OutputSchema(BaseModel):
    """产物输出。"""
    ticks_path: Optional[str] = None
    hloc_path: Optional[str] = None
    hloc_bucket_ms: int = Field(default=4 * 60 * 60 * 1000, gt=0)
    log_level: str = "INFO"

    model_config = ConfigDict(extra="forbid")


class SimulationConfig(BaseModel):
    """应用总配置。"""
    runner: RunnerSchema = Field(default_factory=RunnerSchema)
    regime: RegimeSchema = Field(default_factory=RegimeSchema)
    run: RunSchema = Field(default_factory=RunSchema)
    output: OutputSchema = Field(default_factory=OutputSchema)

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    def to_runner_config(self) -> RunnerConfig:
        """换算成定点整数并做语义校验（非法组合抛出具名错误）。"""
        r = self.runner
        return RunnerConfig(
            price_increment=to_fixed(r.price_increment),
            duration_between_trade_range_ms=r.trade_interval_ms,
            duration_between_market_state_range_ms=r.market_state_duration_ms,
            volume_base_range=(to_fixed(r.volume_base_range[0]), to_fixed(r.volume_base_range[1])),
            liquidity_change_by_tick_range=(
                to_fixed(r.liquidity_change_range[0]),
                to_fixed(r.liquidity_change_range[1]),
            ),
            actor_liquidity_amplifier_x1_000_000=to_fixed(r.actor_liquidity_amplifier),
            duration_moving_average_tick=r.moving_average_window,
            greed=r.greed,
            fear=r.fear,
        )

    def build_regime_policy(self) -> RegimePolicy:
        return build_regime_policy(self.regime.policy, self.regime.initial_state)

    @property
    def start_price(self) -> int:
        return to_fixed(self.run.start_price)
