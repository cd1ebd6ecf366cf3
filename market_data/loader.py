"""生成结果的 CSV 读写。

列全部是整数定点值（不做浮点换算），保证写出再读回时逐字节一致。
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Iterator

from shared.models.models import Hloc, Tick

TICK_COLUMNS = ["time", "price", "volume", "is_up", "moving_average", "variance"]
HLOC_COLUMNS = ["time", "open", "high", "low", "close", "volume"]


def _opt_int(val: str | None) -> int | None:
    if val is None or val == "":
        return None
    return int(val)


def _parse_bool(val: str) -> bool:
    v = val.strip().lower()
    if v in {"1", "true", "yes"}:
        return True
    if v in {"0", "false", "no"}:
        return False
    raise ValueError(f"Invalid bool value: {val}")


def write_ticks_csv(path: str | Path, ticks: Iterable[Tick]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=TICK_COLUMNS)
        writer.writeheader()
        for t in ticks:
            writer.writerow(
                {
                    "time": t.time,
                    "price": t.price,
                    "volume": t.volume,
                    "is_up": int(t.is_up),
                    "moving_average": "" if t.moving_average is None else t.moving_average,
                    "variance": "" if t.variance is None else t.variance,
                }
            )
    return p


def load_ticks_from_csv(path: str | Path) -> Iterator[Tick]:
    """从 CSV 读取 Tick 流（构造时重新校验价格/成交量）。"""
    with Path(path).open("r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row in reader:
            yield Tick(
                price=int(row["price"]),
                time=int(row["time"]),
                volume=int(row["volume"]),
                is_up=_parse_bool(row["is_up"]),
                moving_average=_opt_int(row.get("moving_average")),
                variance=_opt_int(row.get("variance")),
            )


def write_hlocs_csv(path: str | Path, hlocs: Iterable[Hloc]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=HLOC_COLUMNS)
        writer.writeheader()
        for h in hlocs:
            writer.writerow({c: getattr(h, c) for c in HLOC_COLUMNS})
    return p


def load_hlocs_from_csv(path: str | Path) -> Iterator[Hloc]:
    with Path(path).open("r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for row in reader:
            yield Hloc(
                open=int(row["open"]),
                high=int(row["high"]),
                low=int(row["low"]),
                close=int(row["close"]),
                time=int(row["time"]),
                volume=int(row["volume"]),
            )
