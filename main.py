"""ticksim 统一命令行入口。

子命令：

- `generate`：按配置跑一次市场模拟，输出 tick（以及可选的 K 线）CSV。
- `hloc`：把已有的 tick CSV 聚合成固定时长 K 线。
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.table import Table

from factors.registry import indicator_deviation
from market_data import aggregate, load_ticks_from_csv, write_hlocs_csv, write_ticks_csv
from shared.config.config_loader import load_config
from shared.utils.precision import fixed_to_float
from simulation.runner import Runner
from utils.hashing import hlocs_digest, sha256_file, ticks_digest
from utils.logging import ROOT_LOGGER, setup_logger


@dataclass
class CliArgs:
    """命令行参数结构。

    config: 配置文件路径
    task: generate / hloc
    """
    config: str
    task: str
    seed: int | None = None
    end_time_ms: int | None = None
    out: str | None = None
    check_indicators: bool = False
    ticks_csv: str | None = None
    bucket_ms: int | None = None
    quiet: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ticksim", description="tick 级市场模拟器")

    def _add_config_arg(p: argparse.ArgumentParser, *, default: Any) -> None:
        p.add_argument(
            "--config",
            default=default,
            help="配置文件路径 (默认: config/config.yml)",
        )

    # 允许 `main.py --config ... generate` 与 `main.py generate --config ...`
    _add_config_arg(parser, default="config/config.yml")
    parser.add_argument("--quiet", action="store_true", help="不打印汇总表")

    sub = parser.add_subparsers(dest="task")

    p_gen = sub.add_parser("generate", help="运行一次市场模拟")
    _add_config_arg(p_gen, default=argparse.SUPPRESS)
    p_gen.add_argument("--seed", type=int, default=None, help="覆盖配置中的随机种子")
    p_gen.add_argument("--end-time-ms", type=int, default=None, help="覆盖配置中的结束时间")
    p_gen.add_argument("--out", type=str, default=None, help="tick CSV 输出路径（覆盖 output.ticks_path）")
    p_gen.add_argument(
        "--check-indicators",
        action="store_true",
        help="用整窗重算校验增量 MA/方差",
    )

    p_hloc = sub.add_parser("hloc", help="把 tick CSV 聚合成 K 线")
    _add_config_arg(p_hloc, default=argparse.SUPPRESS)
    p_hloc.add_argument("ticks_csv", type=str, help="tick CSV 路径")
    p_hloc.add_argument("--bucket-ms", type=int, default=None, help="K 线时长（毫秒），默认取配置")
    p_hloc.add_argument("--out", type=str, default=None, help="K 线 CSV 输出路径（覆盖 output.hloc_path）")

    return parser


def parse_args(argv: list[str] | None = None) -> CliArgs:
    parser = build_parser()
    ns = parser.parse_args(argv)
    return CliArgs(
        config=str(getattr(ns, "config", "config/config.yml")),
        task=ns.task or "generate",
        seed=getattr(ns, "seed", None),
        end_time_ms=getattr(ns, "end_time_ms", None),
        out=getattr(ns, "out", None),
        check_indicators=bool(getattr(ns, "check_indicators", False)),
        ticks_csv=getattr(ns, "ticks_csv", None),
        bucket_ms=getattr(ns, "bucket_ms", None),
        quiet=bool(getattr(ns, "quiet", False)),
    )


def _print_summary(title: str, summary: dict[str, Any]) -> None:
    table = Table(title=title)
    table.add_column("key")
    table.add_column("value", justify="right")
    for k, v in summary.items():
        table.add_row(str(k), str(v))
    Console().print(table)


def run_generate(args: CliArgs) -> dict[str, Any]:
    cfg = load_config(args.config)
    logger = setup_logger(ROOT_LOGGER, cfg.output.log_level)

    runner_cfg = cfg.to_runner_config()
    seed = args.seed if args.seed is not None else cfg.run.seed
    end_time_ms = args.end_time_ms if args.end_time_ms is not None else cfg.run.end_time_ms
    runner = Runner(runner_cfg, seed=seed, regime_policy=cfg.build_regime_policy())
    ticks = runner.run(cfg.run.start_time_ms, end_time_ms, cfg.start_price)

    summary: dict[str, Any] = {
        "seed": seed,
        "windows": len(runner.report.windows),
        "trades": runner.report.trade_count,
        "ticks": len(ticks),
        "first_price": fixed_to_float(ticks[0].price) if ticks else None,
        "last_price": fixed_to_float(ticks[-1].price) if ticks else None,
        "ticks_digest": ticks_digest(ticks),
    }

    ticks_path = args.out or cfg.output.ticks_path
    if ticks_path:
        p = write_ticks_csv(ticks_path, ticks)
        summary["ticks_path"] = str(p)
        summary["ticks_file_sha256"] = sha256_file(p)
        logger.info("ticks written: %s", p)

    if cfg.output.hloc_path:
        hlocs = aggregate(ticks, cfg.output.hloc_bucket_ms)
        p = write_hlocs_csv(cfg.output.hloc_path, hlocs)
        summary["bars"] = len(hlocs)
        summary["hloc_path"] = str(p)
        logger.info("bars written: %s", p)

    if args.check_indicators:
        summary.update(indicator_deviation(ticks, runner_cfg.duration_moving_average_tick))

    if not args.quiet:
        _print_summary("simulation", summary)
    return summary


def run_hloc(args: CliArgs) -> dict[str, Any]:
    cfg = load_config(args.config)
    logger = setup_logger(ROOT_LOGGER, cfg.output.log_level)
    if not args.ticks_csv:
        raise SystemExit("hloc requires a ticks CSV path")

    bucket_ms = args.bucket_ms if args.bucket_ms is not None else cfg.output.hloc_bucket_ms
    ticks = list(load_ticks_from_csv(args.ticks_csv))
    hlocs = aggregate(ticks, bucket_ms)
    summary: dict[str, Any] = {
        "ticks": len(ticks),
        "bucket_ms": bucket_ms,
        "bars": len(hlocs),
        "hloc_digest": hlocs_digest(hlocs),
    }
    out = args.out or cfg.output.hloc_path
    if out:
        p = write_hlocs_csv(out, hlocs)
        summary["hloc_path"] = str(p)
        logger.info("bars written: %s", p)

    if not args.quiet:
        _print_summary("hloc", summary)
    return summary


def main(argv: list[str] | None = None) -> Any:
    args = parse_args(argv)
    if args.task == "generate":
        return run_generate(args)
    if args.task == "hloc":
        return run_hloc(args)
    raise SystemExit(f"Unknown task: {args.task}")


if __name__ == "__main__":
    main()
