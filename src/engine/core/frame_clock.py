"""
どこで: `engine.core.frame_clock`。
何を: `tick(dt)` を持つ `Tickable` Protocol と、それらを登録順に 1 フレームずつ進める FrameClock。
なぜ: pyglet の `schedule_interval` とヘッドレスの for ループで同じ駆動コードを共有するため。

補足:
- `tick()` に dt を渡さない場合は前回呼び出しからの実時間を測る（初回は 0）。
- dt は `[0, max_dt]` に丸める。ウィンドウのドラッグ等で停止した直後の巨大な dt を下流へ流さない。
"""

from __future__ import annotations

import time
from typing import Callable, Iterable, Protocol


class Tickable(Protocol):
    def tick(self, dt: float) -> None: ...


class FrameClock:
    def __init__(
        self,
        tickables: Iterable[Tickable],
        *,
        max_dt: float = 0.25,
        now: Callable[[], float] = time.perf_counter,
    ) -> None:
        if max_dt <= 0.0:
            raise ValueError(f"max_dt must be > 0, got {max_dt}")
        self._targets: list[Tickable] = list(tickables)
        self._now = now
        self._stamp: float | None = None
        self.max_dt = float(max_dt)
        self.frames = 0
        self.elapsed = 0.0

    def _measure(self) -> float:
        stamp = self._now()
        dt = 0.0 if self._stamp is None else stamp - self._stamp
        self._stamp = stamp
        return dt

    def tick(self, dt: float | None = None) -> float:
        """全ターゲットを 1 フレーム進め、実際に渡した dt を返す。"""
        step = self._measure() if dt is None else float(dt)
        step = min(max(step, 0.0), self.max_dt)
        for target in self._targets:
            target.tick(step)
        self.frames += 1
        self.elapsed += step
        return step


__all__ = ["Tickable", "FrameClock"]
