from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

import main as app_main
from market_data import load_hlocs_from_csv, load_ticks_from_csv

ROOT = Path(__file__).resolve().parents[1]


def _write_config(tmp_path: Path, **output: Any) -> Path:
    data = yaml.safe_load((ROOT / "config" / "config.yml").read_text(encoding="utf-8"))
    data["run"]["end_time_ms"] = 120_000
    data["output"] = {
        "ticks_path": str(tmp_path / "ticks.csv"),
        "hloc_path": str(tmp_path / "hloc.csv"),
        "hloc_bucket_ms": 30_000,
        "log_level": "WARNING",
        **output,
    }
    p = tmp_path / "config.yml"
    p.write_text(yaml.safe_dump(data), encoding="utf-8")
    return p


def test_parse_args_defaults_and_config_position():
    args = app_main.parse_args([])
    assert args.task == "generate"
    assert args.config == "config/config.yml"

    args = app_main.parse_args(["generate", "--config", "x.yml", "--seed", "3", "--check-indicators"])
    assert (args.task, args.config, args.seed, args.check_indicators) == ("generate", "x.yml", 3, True)

    args = app_main.parse_args(["--config", "y.yml", "--quiet", "hloc", "ticks.csv", "--bucket-ms", "1000"])
    assert (args.task, args.config, args.ticks_csv, args.bucket_ms, args.quiet) == (
        "hloc",
        "y.yml",
        "ticks.csv",
        1000,
        True,
    )


def test_main_dispatches_tasks(monkeypatch):
    calls: list[tuple[str, str]] = []

    monkeypatch.setattr(app_main, "run_generate", lambda args: calls.append(("generate", args.config)) or {"ok": 1})
    monkeypatch.setattr(app_main, "run_hloc", lambda args: calls.append(("hloc", args.config)) or {"ok": 2})
    assert app_main.main(["--config", "a.yml", "generate"]) == {"ok": 1}
    assert app_main.main(["hloc", "t.csv", "--config", "b.yml"]) == {"ok": 2}
    assert calls == [("generate", "a.yml"), ("hloc", "b.yml")]


def test_generate_writes_outputs(tmp_path: Path):
    cfg_path = _write_config(tmp_path)
    summary = app_main.main(["--config", str(cfg_path), "--quiet", "generate", "--check-indicators"])

    assert summary["seed"] == 42
    assert summary["ticks"] > 0
    assert summary["windows"] == 1
    ticks = list(load_ticks_from_csv(tmp_path / "ticks.csv"))
    assert len(ticks) == summary["ticks"]
    assert all(t.moving_average is not None and t.variance is not None for t in ticks)
    bars = list(load_hlocs_from_csv(tmp_path / "hloc.csv"))
    assert len(bars) == summary["bars"]
    assert sum(b.volume for b in bars) == sum(t.volume for t in ticks)
    assert summary["max_ma_abs_diff"] < 1.0

    again = app_main.main(["--config", str(cfg_path), "--quiet", "generate"])
    assert again["ticks_digest"] == summary["ticks_digest"]
    assert again["ticks_file_sha256"] == summary["ticks_file_sha256"]


def test_generate_overrides(tmp_path: Path):
    cfg_path = _write_config(tmp_path, hloc_path=None)
    out = tmp_path / "other" / "ticks.csv"
    summary = app_main.main(
        ["--quiet", "generate", "--config", str(cfg_path), "--seed", "7", "--end-time-ms", "30000", "--out", str(out)]
    )
    assert summary["seed"] == 7
    assert summary["ticks_path"] == str(out)
    assert "bars" not in summary
    assert all(t.time < 30_000 for t in load_ticks_from_csv(out))


def test_hloc_subcommand(tmp_path: Path):
    cfg_path = _write_config(tmp_path)
    app_main.main(["--config", str(cfg_path), "--quiet", "generate"])

    out = tmp_path / "bars_10s.csv"
    summary = app_main.main(
        ["--config", str(cfg_path), "--quiet", "hloc", str(tmp_path / "ticks.csv"), "--bucket-ms", "10000", "--out", str(out)]
    )
    assert summary["bucket_ms"] == 10_000
    bars = list(load_hlocs_from_csv(out))
    assert len(bars) == summary["bars"]
    assert all(b.time % 10_000 == 0 for b in bars)
