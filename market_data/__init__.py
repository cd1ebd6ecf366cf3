"""行情数据模块（market_data）。

该包聚合：
- 数据模型的稳定导出入口（见 `market_data/models.py`）
- Tick -> Hloc 聚合（`aggregate`）
- CSV 读写（`loader`）与 pandas 视图（`frame`）
"""

from market_data.aggregate import aggregate
from market_data.loader import load_hlocs_from_csv, load_ticks_from_csv, write_hlocs_csv, write_ticks_csv
from market_data.models import Hloc, Tick

__all__ = [
    "Tick",
    "Hloc",
    "aggregate",
    "load_ticks_from_csv",
    "write_ticks_csv",
    "load_hlocs_from_csv",
    "write_hlocs_csv",
]
