"""
轻量日志封装。

Notes
-----
库模块只通过 `get_logger` 取命名 logger，不在 import 时安装 handler；
命令行入口调用 `setup_logger` 一次。`setup_logger` 会避免重复添加 handler。
"""

from __future__ import annotations

import logging

ROOT_LOGGER = "ticksim"


def setup_logger(name: str = ROOT_LOGGER, level: int | str = logging.INFO) -> logging.Logger:
    """
    创建或获取命名 logger，并挂上控制台 handler。

    Parameters
    ----------
    name:
        Logger 名称。
    level:
        日志级别（int 或 "DEBUG"/"INFO" 等名称），默认 INFO。

    Returns
    -------
    logging.Logger
        已配置的 logger。
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    has_stream = any(isinstance(h, logging.StreamHandler) for h in logger.handlers)
    if not has_stream:
        ch = logging.StreamHandler()
        fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s")
        ch.setFormatter(fmt)
        logger.addHandler(ch)

    return logger


def get_logger(module: str) -> logging.Logger:
    """`ticksim.<module>` 子 logger。"""
    return logging.getLogger(f"{ROOT_LOGGER}.{module}")
