from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
import pytest

from market_data import aggregate, load_hlocs_from_csv, load_ticks_from_csv, write_hlocs_csv, write_ticks_csv
from market_data.frame import hlocs_to_frame, price_graph, ticks_to_frame
from shared.models.errors import InvalidPrice
from shared.models.models import Hloc, Tick
from utils.hashing import hlocs_digest, sha256_file, ticks_digest


def _ticks() -> list[Tick]:
    return [
        Tick(price=1_200_000_000, time=0, volume=5_000_000, is_up=True, moving_average=1_200_000_000, variance=0),
        Tick(price=1_200_120_000, time=1_500, volume=2_000_000, is_up=True, moving_average=1_200_060_000, variance=3_600_000_000),
        Tick(price=1_199_880_000, time=61_000, volume=1, is_up=False),
    ]


def test_ticks_csv_round_trip(tmp_path: Path):
    ticks = _ticks()
    p = write_ticks_csv(tmp_path / "nested" / "ticks.csv", ticks)
    assert p.exists()
    assert list(load_ticks_from_csv(p)) == ticks
    assert p.read_text(encoding="utf-8").splitlines()[0] == "time,price,volume,is_up,moving_average,variance"


def test_hlocs_csv_round_trip(tmp_path: Path):
    bars = aggregate(_ticks(), 60_000)
    p = write_hlocs_csv(tmp_path / "hloc.csv", bars)
    assert list(load_hlocs_from_csv(p)) == bars


def test_loading_invalid_rows_raises(tmp_path: Path):
    p = tmp_path / "bad.csv"
    p.write_text("time,price,volume,is_up,moving_average,variance\n0,0,1,1,,\n", encoding="utf-8")
    with pytest.raises(InvalidPrice):
        list(load_ticks_from_csv(p))

    p.write_text("time,price,volume,is_up,moving_average,variance\n0,1,1,maybe,,\n", encoding="utf-8")
    with pytest.raises(ValueError):
        list(load_ticks_from_csv(p))


def test_digests_are_stable(tmp_path: Path):
    ticks = _ticks()
    assert ticks_digest(ticks) == ticks_digest(list(ticks))
    assert ticks_digest(ticks) != ticks_digest(ticks[:-1])
    bars = aggregate(ticks, 60_000)
    assert hlocs_digest(bars) == hlocs_digest(aggregate(ticks, 60_000))

    a = write_ticks_csv(tmp_path / "a.csv", ticks)
    b = write_ticks_csv(tmp_path / "b.csv", ticks)
    assert sha256_file(a) == sha256_file(b)


def test_ticks_to_frame():
    df = ticks_to_frame(_ticks())
    assert list(df.columns) == ["ts", "time", "price", "volume", "is_up", "moving_average", "variance"]
    assert str(df["ts"].dt.tz) == "UTC"
    assert df["ts"].iloc[1] == pd.Timestamp("1970-01-01 00:00:01.500", tz="UTC")
    assert df["moving_average"].iloc[2] is None
    assert df["variance"].iloc[1] == 3_600_000_000

    empty = ticks_to_frame([])
    assert empty.empty
    assert "price" in empty.columns


def test_hlocs_to_frame_and_price_graph():
    bars = [
        Hloc(open=10_000_000, high=12_000_000, low=9_000_000, close=11_000_000, time=0, volume=3),
        Hloc(open=11_000_000, high=11_000_000, low=8_000_000, close=8_000_000, time=60_000, volume=1),
    ]
    df = hlocs_to_frame(bars)
    assert df["open"].to_list() == [10_000_000, 11_000_000]
    assert df["ts"].iloc[1] == pd.Timestamp("1970-01-01 00:01:00", tz="UTC")

    assert price_graph(bars) == [
        (datetime(1970, 1, 1, tzinfo=timezone.utc), 10.0),
        (datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc), 11.0),
    ]
    assert price_graph([]) == []
