"""
どこで: `vehicles` のレジストリ層。
何を: `@behavior` デコレータによる振る舞いクラスの登録と取得/一覧。
なぜ: 振る舞いの閉じた集合（pursuer/lead）を名前で解決し、設定ファイルから選べるようにするため。
"""

from __future__ import annotations

import inspect
from typing import Any, Callable

from common.base_registry import BaseRegistry

_behavior_registry: BaseRegistry[type] = BaseRegistry("behavior")


def behavior(name: str | None = None) -> Callable[[type], type]:
    """振る舞いクラスを登録するデコレータ（`@behavior("lead")`）。

    例外:
    - TypeError: クラス以外を登録しようとした場合。
    """

    def decorator(cls: Any) -> Any:
        if not inspect.isclass(cls):
            raise TypeError(f"@behavior はクラスのみ登録可能です: got {cls!r}")
        return _behavior_registry.add(cls, name)

    return decorator


def get_behavior(name: str) -> type:
    """登録済みの振る舞いクラスを返す（未登録は KeyError）。"""
    return _behavior_registry.get(name)


def list_behaviors() -> list[str]:
    return _behavior_registry.names()


__all__ = ["behavior", "get_behavior", "list_behaviors"]
