"""Tick -> Hloc 聚合入口。"""

from __future__ import annotations

from typing import Sequence

from shared.models.models import Hloc, Tick


def aggregate(ticks: Sequence[Tick], bucket_duration_ms: int) -> list[Hloc]:
    """按固定毫秒时长把 Tick 序列分桶成 K 线。

    Raises
    ------
    InvalidDuration
        `bucket_duration_ms <= 0`。
    """
    return Hloc.from_ticks(ticks, bucket_duration_ms)
