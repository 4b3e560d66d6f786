"""
どこで: `engine.runtime` のワーカ実行層。
何を: 固定本数のワーカスレッドに Actor を割り当て、各ワーカは
      「担当 Actor を 1 ステップ進めて DrawQueue へ投入 → 完了通知 → TickGate 待ち」を繰り返す。
      `release_all()` は描画スレッドから全ゲートを開け、`close()` は安全に停止する。
      ワーカ内の例外は `ActorTaskError` で文脈付きに保持し、`raise_pending()` で描画スレッドへ再送出する。
なぜ: Actor ごとのスピン待ちをやめ、フレーム境界の明示的なゲート/ラッチで
      「1 フレームにつき各 Actor ちょうど 1 ステップ」を CPU を浪費せずに保つため。

注意:
- 既定ではワーカ数 = Actor 数（1 Actor 1 スレッド）。`workers=0` はインライン実行で、
  `start()`/`release_all()` の呼び出しスレッド上で同期的にステップする（決定的テスト用）。
- 描画スレッドは既定では Actor の完了を待たない。遅いワーカの投入は次フレームに回り、
  その Actor は 1 フレーム前の変換で描かれる（遅れは最大 1 フレーム）。
"""

from __future__ import annotations

import logging
import threading
from queue import Empty, Queue
from typing import Any, Protocol, Sequence

from .draw_queue import DrawQueue
from .gate import FrameLatch, TickGate

logger = logging.getLogger(__name__)


class SimActor(Protocol):
    """ワーカが駆動する Actor の最小インターフェース。"""

    name: str

    def advance(self, queue: DrawQueue) -> Any:
        """1 ステップ進めて描画コマンドを投入し、新しいスナップショットを返す。"""


class ActorTaskError(Exception):
    """Actor ステップ中の例外をラップして Actor 名/フレーム番号の文脈を付与。"""

    def __init__(self, actor: str, frame_id: int, original: BaseException) -> None:
        super().__init__(f"ActorTaskError(actor={actor}, frame_id={frame_id}): {original!r}")
        self.actor = actor
        self.frame_id = frame_id
        self.original = original


class _ActorWorker(threading.Thread):
    """担当 Actor 群を TickGate に合わせて進めるスレッド。"""

    def __init__(
        self,
        index: int,
        actors: Sequence[SimActor],
        queue: DrawQueue,
        latch: FrameLatch,
        errors: "Queue[ActorTaskError]",
        frame_ref: "list[int]",
    ) -> None:
        names = ",".join(a.name for a in actors)
        super().__init__(name=f"actor-worker-{index}[{names}]", daemon=True)
        self.actors = tuple(actors)
        self.gate = TickGate()
        self._queue = queue
        self._latch = latch
        self._errors = errors
        self._frame_ref = frame_ref
        self.steps = 0

    def run(self) -> None:
        frame = 0
        while not self.gate.cancelled:
            for actor in self.actors:
                try:
                    actor.advance(self._queue)
                except Exception as e:
                    frame_id = self._frame_ref[0]
                    logger.exception(
                        "[worker] stage=advance actor=%s frame_id=%s error=%s",
                        actor.name,
                        frame_id,
                        e,
                    )
                    self._errors.put(ActorTaskError(actor.name, frame_id, e))
                    self._latch.count_down(frame)
                    return
            self.steps += 1
            self._latch.count_down(frame)
            if not self.gate.wait():
                break
            frame = self._frame_ref[0]
        logger.debug("%s stopped after %d steps", self.name, self.steps)


class ActorWorkerPool:
    """Actor の割り当て・ゲート解放・停止・例外伝播を担当。"""

    def __init__(
        self,
        actors: Sequence[SimActor],
        queue: DrawQueue,
        *,
        workers: int | None = None,
    ) -> None:
        self._actors = tuple(actors)
        self._queue = queue
        self._errors: Queue[ActorTaskError] = Queue()
        self._frame_ref = [0]
        count = len(self._actors) if workers is None else max(0, int(workers))
        self._inline = count < 1 or not self._actors
        if self._inline:
            self._workers: list[_ActorWorker] = []
            self._latch = FrameLatch(0)
        else:
            count = min(count, len(self._actors))
            buckets: list[list[SimActor]] = [[] for _ in range(count)]
            for i, actor in enumerate(self._actors):
                buckets[i % count].append(actor)
            self._latch = FrameLatch(count)
            self._workers = [
                _ActorWorker(i, bucket, queue, self._latch, self._errors, self._frame_ref)
                for i, bucket in enumerate(buckets)
            ]
        self._started = False
        # 冪等な close() のための内部フラグ
        self._closed = False

    # --------- lifecycle ---------
    def start(self) -> None:
        """各 Actor の初回ステップを開始する（多重呼び出しは no-op）。"""
        if self._started or self._closed:
            return
        self._started = True
        if self._inline:
            self._step_inline()
            return
        for w in self._workers:
            w.start()
        logger.info("started %d actor worker(s) for %d actor(s)", len(self._workers), len(self._actors))

    def release_all(self) -> None:
        """全ゲートを開け、各 Actor に次の 1 ステップを許可する。"""
        if self._closed:
            return
        if not self._started:
            raise RuntimeError("ActorWorkerPool.release_all() called before start()")
        self._frame_ref[0] += 1
        if self._inline:
            self._step_inline()
            return
        self._latch.reset(self._frame_ref[0])
        for w in self._workers:
            w.gate.release()

    def wait_frame(self, timeout: float | None = None) -> bool:
        """現フレームの全ワーカの完了を待つ（インラインは常に True）。"""
        if self._inline:
            return True
        return self._latch.wait(timeout)

    def close(self, timeout: float = 1.0) -> None:
        """ゲートをキャンセルしてスレッドを停止する（多重呼び出しに安全）。"""
        if self._closed:
            return
        # 以降の例外で途中離脱しても、次回は no-op になるよう先にフラグを立てる
        self._closed = True
        for w in self._workers:
            w.gate.cancel()
        for w in self._workers:
            if w.is_alive():
                w.join(timeout=timeout)
            if w.is_alive():
                logger.warning("%s did not stop within %.2fs", w.name, timeout)

    # --------- errors ---------
    def raise_pending(self) -> None:
        """ワーカで捕捉した最初の例外を呼び出しスレッドで再送出する。"""
        try:
            err = self._errors.get_nowait()
        except Empty:
            return
        raise err

    # --------- introspection ---------
    @property
    def inline(self) -> bool:
        return self._inline

    @property
    def frame_id(self) -> int:
        return self._frame_ref[0]

    @property
    def worker_count(self) -> int:
        return len(self._workers)

    @property
    def closed(self) -> bool:
        return self._closed

    def _step_inline(self) -> None:
        for actor in self._actors:
            try:
                actor.advance(self._queue)
            except Exception as e:
                logger.exception("[inline] stage=advance actor=%s error=%s", actor.name, e)
                raise ActorTaskError(actor.name, self._frame_ref[0], e) from e


__all__ = ["ActorTaskError", "ActorWorkerPool", "SimActor"]
