from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterable

from shared.models.models import Hloc, Tick


def sha256_file(path: str | Path, *, chunk_size: int = 1024 * 1024) -> str:
    p = Path(path)
    h = hashlib.sha256()
    with p.open("rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()


def _opt(value: int | None) -> str:
    return "" if value is None else str(value)


def ticks_digest(ticks: Iterable[Tick]) -> str:
    """
    tick 序列的稳定指纹（逐行 `time,price,volume,is_up,ma,var` 后 sha256）：
    同种子同配置的两次运行应得到相同的值。
    """
    h = hashlib.sha256()
    for t in ticks:
        line = f"{t.time},{t.price},{t.volume},{int(t.is_up)},{_opt(t.moving_average)},{_opt(t.variance)}\n"
        h.update(line.encode("utf-8"))
    return h.hexdigest()


def hlocs_digest(hlocs: Iterable[Hloc]) -> str:
    h = hashlib.sha256()
    for b in hlocs:
        h.update(f"{b.time},{b.open},{b.high},{b.low},{b.close},{b.volume}\n".encode("utf-8"))
    return h.hexdigest()
