"""对外导出数据模型（稳定入口）。

模型定义位于 `shared/models/models.py`；上层代码统一从 `market_data.models` 导入。
"""

from shared.models.errors import HlocError, InvalidDuration, InvalidPrice, InvalidTime, InvalidVolume, TickError
from shared.models.models import Hloc, Tick

__all__ = [
    "Tick",
    "Hloc",
    "TickError",
    "HlocError",
    "InvalidPrice",
    "InvalidVolume",
    "InvalidTime",
    "InvalidDuration",
]
