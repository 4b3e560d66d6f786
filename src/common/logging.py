"""
どこで: `common.logging`。
何を: エントリポイント（`main.py` / `api.chase`）用のロギング初期化。
なぜ: ライブラリ側は `logging.getLogger(__name__)` だけを使い、ハンドラ構成は 1 か所に寄せるため。

方針:
- ルートロガーにハンドラが既にあれば何もしない（組込み先の設定を尊重）。
- レベル未指定時は `CHASE_LOG_LEVEL`（`common.settings`）。
- ワーカスレッドのログを追えるよう書式にスレッド名を含める。
- DEBUG でも numba のコンパイルログは WARNING に抑える。
"""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
_NOISY = ("numba", "PIL")


def resolve_level(level: int | str | None) -> int:
    if level is None:
        from . import settings

        level = settings.get().LOG_LEVEL
    if isinstance(level, int):
        return level
    found = logging.getLevelName(str(level).strip().upper())
    return found if isinstance(found, int) else logging.INFO


def setup_default_logging(level: int | str | None = None) -> bool:
    """ハンドラ未設定ならルートロガーを構成して True を返す。"""
    root = logging.getLogger()
    if root.handlers:
        return False
    resolved = resolve_level(level)
    logging.basicConfig(level=resolved, format=_FORMAT)
    if resolved <= logging.DEBUG:
        for name in _NOISY:
            logging.getLogger(name).setLevel(logging.WARNING)
    return True


__all__ = ["setup_default_logging", "resolve_level"]
