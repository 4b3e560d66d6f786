"""
どこで: `common.base_registry`。
何を: 名前（正規化済み文字列）→ オブジェクトの対応表。`kind` はエラーメッセージ用のラベル。
なぜ: 設定ファイルに書かれた "lead" / "Pursuer" / "fast-car" などの表記揺れを 1 つのキーへ寄せるため。

キー正規化:
- 前後の空白を除き、ハイフン/空白をアンダースコアへ。
- 大文字が混じる場合はキャメル → スネーク（"FastCar" -> "fast_car"）。
"""

from __future__ import annotations

import re
from typing import Callable, Generic, Iterator, TypeVar

T = TypeVar("T")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATORS = re.compile(r"[-\s]+")


class BaseRegistry(Generic[T]):
    def __init__(self, kind: str = "entry") -> None:
        self.kind = kind
        self._entries: dict[str, T] = {}

    @staticmethod
    def normalize_key(name: str) -> str:
        if not isinstance(name, str):
            raise TypeError(f"registry key must be str, got {type(name).__name__}")
        key = _SEPARATORS.sub("_", name.strip())
        if not key:
            raise ValueError("registry key must not be empty")
        return _CAMEL_BOUNDARY.sub("_", key).lower()

    def add(self, obj: T, name: str | None = None) -> T:
        """`obj` を `name`（省略時は `obj.__name__`）で登録する。同じキーへの別オブジェクトは ValueError。"""
        key = self.normalize_key(name if name else getattr(obj, "__name__", ""))
        current = self._entries.get(key)
        if current is not None and current is not obj:
            raise ValueError(f"{self.kind} '{key}' is already registered ({current!r})")
        self._entries[key] = obj
        return obj

    def register(self, name: str | None = None) -> Callable[[T], T]:
        def decorator(obj: T) -> T:
            return self.add(obj, name)

        return decorator

    def get(self, name: str) -> T:
        try:
            return self._entries[self.normalize_key(name)]
        except KeyError:
            known = ", ".join(self.names()) or "<none>"
            raise KeyError(f"unknown {self.kind} '{name}' (known: {known})") from None

    def discard(self, name: str) -> None:
        self._entries.pop(self.normalize_key(name), None)

    def names(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and bool(name.strip()) and self.normalize_key(name) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["BaseRegistry"]
