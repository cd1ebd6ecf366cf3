"""模拟引擎的具名错误（Actors / Indicator / Runner）。"""

from __future__ import annotations

from shared.models.errors import (
    ArithmeticFailure,
    PreconditionFailure,
    SimulationError,
    ValidationFailure,
)


# ---- Actors ----


class ActorsError(ValidationFailure):
    """Actors 构造错误。"""


class MarketVolumeNotPositive(ActorsError):
    template = "Market volume should be greater than zero ({0})"


class LimitVolumeByTickNotPositive(ActorsError):
    template = "Limit volume by tick should be greater than zero ({0})"


class LimitVolumeChangeByTickNotPositive(ActorsError):
    template = "Limit volume change by tick should be greater than zero ({0})"


# ---- Indicator ----


class IndicatorError(SimulationError):
    """指标计算错误。"""


class FirstLastTickMovingAverageMissing(IndicatorError, PreconditionFailure):
    template = "Window is not empty so first and last tick should carry a moving average (len={0})"


class NewTickMovingAverageMissing(IndicatorError, PreconditionFailure):
    template = "Need the moving average of the new tick to compute the variance (len={0})"


class LastTickVarianceMissing(IndicatorError, PreconditionFailure):
    template = "Need the variance of the last tick to compute the variance (len={0})"


class MovingAverageOverflow(IndicatorError, ArithmeticFailure):
    template = "Moving average muldiv by window length overflow ({0} muldiv {1})"


class VarianceOverflow(IndicatorError, ArithmeticFailure):
    template = "Variance muldiv by window length overflow ({0} muldiv {1})"


class MovingAverageNegative(IndicatorError, ArithmeticFailure):
    template = "Moving average can't be negative ({0})"


class VarianceNegative(IndicatorError, ArithmeticFailure):
    template = "Variance can't be negative ({0})"


# ---- Runner ----


class RunnerError(SimulationError):
    """Runner 配置与运行错误。"""


class RunnerConfigError(RunnerError, ValidationFailure):
    pass


class PriceIncrementNotPositive(RunnerConfigError):
    template = "Price increment should be greater than 0 ({0})"


class TradeIntervalRangeInvalid(RunnerConfigError):
    template = (
        "Duration between trade range ms should be greater than zero "
        "and first entry smaller than second ({0} => {1})"
    )


class MarketStateDurationRangeInvalid(RunnerConfigError):
    template = (
        "Duration between market state range ms should be greater than zero "
        "and first entry smaller than second ({0} => {1})"
    )


class VolumeBaseRangeInvalid(RunnerConfigError):
    template = "Volume base range should be greater than zero and first entry smaller than second ({0} => {1})"


class LiquidityChangeRangeInvalid(RunnerConfigError):
    template = (
        "Liquidity change by tick range should be greater than zero "
        "and first entry smaller than second ({0} => {1})"
    )


class ActorLiquidityAmplifierNotPositive(RunnerConfigError):
    template = "Actor liquidity amplifier should be greater than zero ({0})"


class MovingAverageWindowNotPositive(RunnerConfigError):
    template = "Moving average window (ticks) should be greater than zero ({0})"


class SentimentOutOfRange(RunnerConfigError):
    template = "Sentiment {0} should be between 0.0 and 1.0 ({1})"


class CurrentPriceBelowIncrement(RunnerError, PreconditionFailure):
    template = "Current price should be greater than price increment ({0} > {1})"


class MarketVolumeAmplifierOverflow(RunnerError, ArithmeticFailure):
    template = "Market volume muldiv by actor amplifier overflow ({0} muldiv {1})"


class LimitVolumeAmplifierOverflow(RunnerError, ArithmeticFailure):
    template = "Limit volume muldiv by actor amplifier overflow ({0} muldiv {1})"
