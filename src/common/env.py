"""
どこで: `common.env`。
何を: `CHASE_*` 環境変数を型付きで読むヘルパ（未設定・空文字・不正値はすべて既定値）。
なぜ: `common.settings` の再読込ロジックを 1 行ずつの宣言に保つため。
"""

from __future__ import annotations

import logging
import os
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_BOOL_WORDS = {
    "1": True, "true": True, "t": True, "yes": True, "y": True, "on": True,
    "0": False, "false": False, "f": False, "no": False, "n": False, "off": False,
}  # fmt: skip


def _read(name: str) -> str | None:
    raw = os.environ.get(name)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def _parse(name: str, convert: Callable[[str], T], default: T) -> T:
    raw = _read(name)
    if raw is None:
        return default
    try:
        return convert(raw)
    except ValueError:
        logger.warning("ignoring %s=%r (not a valid value), using %r", name, raw, default)
        return default


def env_int(name: str, default: int | None = None, *, min_value: int | None = None) -> int | None:
    """整数。`min_value` 指定時は下限に丸める。"""
    value = _parse(name, int, default)
    if value is not None and min_value is not None:
        value = max(value, min_value)
    return value


def env_float(name: str, default: float | None = None) -> float | None:
    return _parse(name, float, default)


def _to_bool(raw: str) -> bool:
    try:
        return _BOOL_WORDS[raw.lower()]
    except KeyError:
        # "2" のような数値も真偽として扱う
        return int(raw) != 0


def env_bool(name: str, default: bool = False) -> bool:
    return bool(_parse(name, _to_bool, default))


def env_str(name: str, default: str | None = None) -> str | None:
    raw = _read(name)
    return default if raw is None else raw


__all__ = ["env_int", "env_float", "env_bool", "env_str"]
