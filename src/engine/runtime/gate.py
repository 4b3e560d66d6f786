"""
どこで: `engine.runtime` の歩調合わせ。
何を: Actor ごとの `TickGate`（1 フレーム 1 ステップの許可）と、全 Actor の完了を待つ `FrameLatch`。
なぜ: スピン待ちで CPU を燃やさず、条件変数でワーカを眠らせて描画スレッドから解放するため。
"""

from __future__ import annotations

import threading


class TickGate:
    """次のステップを 1 回だけ許可するフラグ。

    - `release()` は冪等（未消費のまま再度呼んでも許可は 1 回ぶん）。
    - `wait()` は許可を消費して True、キャンセル/タイムアウトで False を返す。
    """

    def __init__(self, *, released: bool = False) -> None:
        self._cond = threading.Condition()
        self._released = released
        self._cancelled = False

    def release(self) -> None:
        with self._cond:
            self._released = True
            self._cond.notify_all()

    def cancel(self) -> None:
        with self._cond:
            self._cancelled = True
            self._cond.notify_all()

    def wait(self, timeout: float | None = None) -> bool:
        with self._cond:
            self._cond.wait_for(lambda: self._released or self._cancelled, timeout)
            if self._cancelled or not self._released:
                return False
            self._released = False
            return True

    @property
    def released(self) -> bool:
        with self._cond:
            return self._released

    @property
    def cancelled(self) -> bool:
        with self._cond:
            return self._cancelled


class FrameLatch:
    """フレームごとにリセットされるカウントダウンラッチ。"""

    def __init__(self, parties: int) -> None:
        if parties < 0:
            raise ValueError(f"parties must be >= 0, got {parties}")
        self._cond = threading.Condition()
        self._parties = parties
        self._remaining = parties
        self._generation = 0

    def reset(self, generation: int | None = None) -> None:
        """カウントを戻す。`generation` を渡すと以降はその世代の count_down だけを数える。"""
        with self._cond:
            self._remaining = self._parties
            if generation is not None:
                self._generation = generation

    def count_down(self, generation: int | None = None) -> None:
        with self._cond:
            if generation is not None and generation != self._generation:
                return
            if self._remaining > 0:
                self._remaining -= 1
            if self._remaining == 0:
                self._cond.notify_all()

    def wait(self, timeout: float | None = None) -> bool:
        """全員が完了するまで待つ。タイムアウトで False。"""
        with self._cond:
            return self._cond.wait_for(lambda: self._remaining == 0, timeout)

    @property
    def remaining(self) -> int:
        with self._cond:
            return self._remaining


__all__ = ["TickGate", "FrameLatch"]
