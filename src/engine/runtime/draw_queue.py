"""
どこで: `engine.runtime` の受け渡し層。
何を: (Mesh, 変換行列) の DrawCommand をスレッド安全に積み、描画スレッドが一括で取り出す FIFO。
なぜ: 複数の Actor スレッドと 1 本の描画スレッドの唯一の接点を 1 つのロックに集約するため。

契約:
- `submit` は drain 中ならブロックし、終わってから追記する（書きかけのエントリは観測されない）。
- `drain_all` は現時点の全エントリの所有権を奪い、drain フラグを立てて処理し、
  フラグを下ろしてブロック中の生産者を起こす（処理関数が例外を投げても必ず起こす）。
- 同一 `producer` キーの未処理コマンドは 1 件まで。後着が古い方を取り除いて末尾へ入る（latest wins）。
  `producer=None` の投入は置き換えず FIFO で追記する。
- 生産者間の順序は不定（Renderer が layer と奥行きで並べ直す）。同一生産者内は FIFO。
- タイムアウトは持たない。drain は件数に比例した時間で必ず終わる。
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Hashable

import numpy as np

from engine.core.mesh import Mesh

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class DrawCommand:
    """1 回の投入ぶんの描画指示（フレーム内で一度だけ消費される）。"""

    mesh: Mesh
    transform: np.ndarray  # 4×4 モデル変換（行ベクトル規約）
    producer: Hashable | None = None
    # 描画順の粗い層（小さいほど先に描く = 奥）。背景は Actor より小さくする
    layer: int = 0
    # 変換の元になった Actor スナップショット（背景など無い場合は None）
    source: Any = None


class DrawQueue:
    """単一ロック + 単一条件変数の受け渡しキュー。"""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._entries: list[DrawCommand] = []
        self._draining = False
        self._submitted = 0
        self._replaced = 0

    # -------- producer side --------
    def submit(
        self,
        mesh: Mesh,
        transform: np.ndarray,
        *,
        producer: Hashable | None = None,
        layer: int = 0,
        source: Any = None,
    ) -> DrawCommand:
        """コマンドを投入する。drain 中は終わるまで待つ。"""
        matrix = np.array(transform, dtype=np.float64, copy=True)
        if matrix.shape != (4, 4):
            raise ValueError(f"transform must be 4x4, got {matrix.shape}")
        matrix.flags.writeable = False
        cmd = DrawCommand(
            mesh=mesh, transform=matrix, producer=producer, layer=int(layer), source=source
        )

        with self._cond:
            while self._draining:
                self._cond.wait()
            self._submitted += 1
            if producer is not None:
                stale = [i for i, e in enumerate(self._entries) if e.producer == producer]
                for i in reversed(stale):
                    del self._entries[i]
                if stale:
                    self._replaced += len(stale)
                    logger.debug("replaced stale command from producer=%s", producer)
            self._entries.append(cmd)
        return cmd

    # -------- consumer side --------
    def drain_all(
        self, process: Callable[[list[DrawCommand]], None] | None = None
    ) -> list[DrawCommand]:
        """全エントリを取り出し、drain フラグを保持したまま `process` に渡して返す。

        消費スレッド専用。`process` 実行中の `submit` は完了までブロックする。
        """
        with self._cond:
            if self._draining:
                raise RuntimeError("drain_all is not reentrant")
            self._draining = True
            entries, self._entries = self._entries, []
        try:
            if process is not None:
                process(entries)
        finally:
            with self._cond:
                self._draining = False
                self._cond.notify_all()
        return entries

    # -------- introspection --------
    @property
    def draining(self) -> bool:
        with self._cond:
            return self._draining

    def pending(self) -> int:
        with self._cond:
            return len(self._entries)

    def stats(self) -> dict[str, int]:
        """累計の投入数/置換数と未処理件数。"""
        with self._cond:
            return {
                "submitted": self._submitted,
                "replaced": self._replaced,
                "pending": len(self._entries),
            }

    def __len__(self) -> int:
        return self.pending()


__all__ = ["DrawCommand", "DrawQueue"]
