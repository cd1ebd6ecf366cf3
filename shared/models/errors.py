"""错误分类（所有错误都携带触发它的操作数，便于复现与诊断）。

- 构造/校验错误：`ValidationFailure`（同时是 ValueError）
- 算术错误：`ArithmeticFailure`（同时是 ArithmeticError）
- 状态前置条件错误：`PreconditionFailure`
"""

from __future__ import annotations


class SimulationError(Exception):
    """根异常。子类通过 `template` 定义消息格式。"""

    template = "Simulation error {0}"

    def __init__(self, *operands: object) -> None:
        self.operands = tuple(operands)
        super().__init__(self.template.format(*operands) if operands else type(self).__name__)

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.operands == getattr(other, "operands", None)

    def __hash__(self) -> int:
        return hash((type(self), self.operands))


class ValidationFailure(SimulationError, ValueError):
    template = "Invalid value ({0})"


class ArithmeticFailure(SimulationError, ArithmeticError):
    template = "Arithmetic failure ({0})"


class PreconditionFailure(SimulationError):
    template = "Precondition failed ({0})"


class ModelError(ValidationFailure):
    """Tick/Hloc 构造错误。"""


class InvalidPrice(ModelError):
    template = "Price should be greater than zero ({0})"


class InvalidVolume(ModelError):
    template = "Volume should be greater than zero ({0})"


class InvalidTime(ModelError):
    template = "Time should be a non-negative integer ({0})"


class InvalidDuration(ModelError):
    template = "Bucket duration should be greater than zero ({0})"


class IndicatorAlreadySet(ModelError):
    template = "Indicator {0} already set ({1} != {2})"


TickError = ModelError
HlocError = ModelError
