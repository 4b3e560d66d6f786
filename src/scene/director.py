"""
どこで: `scene.director`（フレームスレッド）。
何を: カメラ・先頭車・追跡車・背景を所有し、1 フレームごとに
      時間を進め → 背景を配置/投入 → 全 Actor のゲートを開け → 画面クリアとカメラ周回 →
      描画 → 提示 を行う `Tickable`。
なぜ: フレームの順序をここ 1 箇所に固定し、Actor ワーカとの同期点を `release_all()` に限定するため。

注意:
- 既定では Actor の完了を待たずに描画する（`sync=False`）。遅い Actor は 1 フレーム前の変換で描かれる。
  `sync=True` のときは `wait_frame()` で全 Actor の投入を待ってから描く。
- ワーカで起きた例外は各フレームの最後に `ActorTaskError` として再送出される。
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Sequence

from common.types import Vec3
from engine.core.camera import Camera
from engine.render.renderer import RenderStats, SoftwareRenderer
from engine.render.surface import Surface
from engine.runtime.draw_queue import DrawQueue
from engine.runtime.worker import ActorWorkerPool
from vehicles.actor import Actor

from .backdrop import Backdrop

logger = logging.getLogger(__name__)

TIME_STEP = 0.005
ORBIT_RADIUS_X = 8.0
ORBIT_HEIGHT = 1.9
ORBIT_RADIUS_Z = 10.0
CLEAR_COLOR = (0, 127, 255)


def orbit_position(center: Vec3, time: float) -> Vec3:
    """先頭車を中心とした楕円軌道上のカメラ位置。"""
    x, y, z = center
    return (
        x + ORBIT_RADIUS_X * math.cos(time),
        y + ORBIT_HEIGHT,
        z + ORBIT_RADIUS_Z * math.sin(time),
    )


class SceneDirector:
    def __init__(
        self,
        *,
        lead: Actor,
        pursuers: Sequence[Actor],
        backdrops: Sequence[Backdrop],
        surface: Surface,
        queue: DrawQueue,
        camera: Camera,
        renderer: SoftwareRenderer,
        pool: ActorWorkerPool,
        clear_color: object = CLEAR_COLOR,
        sync: bool = False,
        sync_timeout: float | None = 1.0,
    ) -> None:
        self.lead = lead
        self.pursuers = tuple(pursuers)
        self.backdrops = tuple(backdrops)
        self.surface = surface
        self.queue = queue
        self.camera = camera
        self.renderer = renderer
        self.pool = pool
        self.clear_color = clear_color
        self.sync = bool(sync)
        self.sync_timeout = sync_timeout
        self.time = 0.0
        self.frames = 0
        self.last_stats = RenderStats()
        self._started = False
        self._closed = False

    @property
    def actors(self) -> tuple[Actor, ...]:
        return (self.lead,) + self.pursuers

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self.pool.start()
        # 初回ステップの投入を待つ。以降は遅れた Actor もレンダラが直近コマンドで描く
        if not self.pool.wait_frame(self.sync_timeout):
            logger.warning("actors did not finish their first step within %s s", self.sync_timeout)
        logger.info(
            "scene started: actors=%d backdrops=%d workers=%s",
            len(self.actors),
            len(self.backdrops),
            "inline" if self.pool.inline else self.pool.worker_count,
        )

    # Tickable
    def tick(self, dt: float) -> None:
        if self._closed:
            return
        if not self._started:
            self.start()

        self.time += TIME_STEP

        lead_position = self.lead.position
        for backdrop in self.backdrops:
            backdrop.follow(lead_position)
            backdrop.draw(self.queue)

        self.pool.release_all()

        self.surface.clear(self.clear_color)
        lead_position = self.lead.position
        self.camera.position = orbit_position(lead_position, self.time)
        self.camera.target = lead_position

        if self.sync and not self.pool.wait_frame(self.sync_timeout):
            logger.warning("frame %d: actors did not finish within %s s", self.frames, self.sync_timeout)

        self.last_stats = self.renderer.render()
        self.surface.present()
        self.frames += 1
        self.pool.raise_pending()

    def run(self, stop_event: threading.Event | None = None, max_frames: int | None = None) -> int:
        """`stop_event` がセットされるか `max_frames` に達するまでフレームを回す。描いたフレーム数を返す。"""
        drawn = 0
        while not self._closed:
            if stop_event is not None and stop_event.is_set():
                break
            if max_frames is not None and drawn >= max_frames:
                break
            self.tick(0.0)
            drawn += 1
        return drawn

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.pool.close()
        logger.info("scene closed after %d frame(s)", self.frames)

    def __enter__(self) -> "SceneDirector":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = ["CLEAR_COLOR", "SceneDirector", "TIME_STEP", "orbit_position"]
