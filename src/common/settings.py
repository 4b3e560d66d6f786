"""
どこで: `common.settings`。
何を: `CHASE_*` 環境変数のスナップショット（ワーカ数・シード・同期描画・近接カット・ログレベル）。
なぜ: 引数 > 環境変数 > 設定ファイル の解決順で、環境変数層を 1 か所から読むため。

| 変数 | 型 | 既定 |
|------|----|------|
| CHASE_WORKERS | int (>= 0, 0 はインライン) | None |
| CHASE_SEED | int | None |
| CHASE_SYNC | bool | False |
| CHASE_NEAR_CUTOFF | float | 5.5 |
| CHASE_LOG_LEVEL | str | INFO |
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_float, env_int, env_str

DEFAULT_NEAR_CUTOFF = 5.5


@dataclass
class ChaseSettings:
    WORKERS: int | None = None
    SEED: int | None = None
    SYNC: bool = False
    NEAR_CUTOFF: float = DEFAULT_NEAR_CUTOFF
    LOG_LEVEL: str = "INFO"


_current = ChaseSettings()


def reload_from_env() -> ChaseSettings:
    """環境変数を読み直し、共有スナップショットを更新して返す。"""
    _current.WORKERS = env_int("CHASE_WORKERS", None, min_value=0)
    _current.SEED = env_int("CHASE_SEED", None)
    _current.SYNC = env_bool("CHASE_SYNC", False)
    near = env_float("CHASE_NEAR_CUTOFF", DEFAULT_NEAR_CUTOFF)
    _current.NEAR_CUTOFF = DEFAULT_NEAR_CUTOFF if near is None else near
    _current.LOG_LEVEL = (env_str("CHASE_LOG_LEVEL") or "INFO").upper()
    return _current


def get() -> ChaseSettings:
    return _current


reload_from_env()


__all__ = ["ChaseSettings", "DEFAULT_NEAR_CUTOFF", "get", "reload_from_env"]
