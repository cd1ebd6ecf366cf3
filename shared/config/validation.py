"""原始配置的键校验。

pydantic 会拒绝多余字段，但报错里没有拼写建议；这里先对 dict 做一遍键检查，
未知键给出“did you mean”提示。
"""

from __future__ import annotations

import difflib
from typing import Any, Iterable

from pydantic import BaseModel

from shared.config.schema import OutputSchema, RegimeSchema, RunnerSchema, RunSchema, SimulationConfig

_SECTIONS: dict[str, type[BaseModel]] = {
    "runner": RunnerSchema,
    "regime": RegimeSchema,
    "run": RunSchema,
    "output": OutputSchema,
}


def _suggest_key(key: str, allowed: Iterable[str]) -> str | None:
    matches = difflib.get_close_matches(key, list(allowed), n=1, cutoff=0.75)
    return matches[0] if matches else None


def _ensure_allowed_keys(block: dict[str, Any], *, allowed: set[str], ctx: str) -> None:
    unknown = [k for k in block.keys() if k not in allowed]
    if not unknown:
        return
    parts = []
    for k in sorted(unknown):
        suggestion = _suggest_key(k, allowed)
        if suggestion:
            parts.append(f"{k} (did you mean '{suggestion}'?)")
        else:
            parts.append(k)
    raise ValueError(f"{ctx} contains unknown keys: {', '.join(parts)}")


def _expect_dict(val: Any, *, ctx: str) -> dict[str, Any]:
    if not isinstance(val, dict):
        raise ValueError(f"{ctx} must be a dict")
    return val


def validate_raw_config(cfg: Any) -> None:
    """校验顶层与各 section 的键名（值类型交给 pydantic）。"""
    root = _expect_dict(cfg, ctx="config")
    _ensure_allowed_keys(root, allowed=set(SimulationConfig.model_fields), ctx="config")
    for name, model in _SECTIONS.items():
        if name not in root or root[name] is None:
            continue
        block = _expect_dict(root[name], ctx=name)
        _ensure_allowed_keys(block, allowed=set(model.model_fields), ctx=name)
