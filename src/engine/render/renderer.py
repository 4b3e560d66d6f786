"""
どこで: `engine.render` の高レベル描画。
何を: DrawQueue を 1 フレームに 1 度 drain し、投影 → 奥行きソート → カリング → アフィンテクスチャ塗りを行う
      CPU ソフトウェアレンダラ。
なぜ: 深度バッファ無しの画家のアルゴリズムで、GPU に頼らず正しい前後関係を得るため。

パイプライン（1 フレーム）:
1) view_projection = look_at(camera) @ perspective(70°, W/H, 0, 1) @ to_pixel_space(W, H)
2) 今回投入の無い producer は前回 drain した直近コマンドで補い（遅れた Actor を消さない）、
   layer の昇順に安定ソート（背景 → Actor）。各コマンドで mvp = model @ view_projection
3) 三角形の各頂点を同次変換し X/Y のみ w で割る。w 自体は奥行きの代用値として残す
4) 三角形ごとの w 合計の降順に並べる（遠い順）
5) `dot(camera_forward, normal) < 0` かつ w 合計 > near_cutoff の面だけを塗る
6) テクスチャ付きは UV 三角形 → 画面三角形のアフィンで塗る（透視補正なし）。
   UV 三角形が退化して解けない面はスキップして数える
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Hashable, Sequence

import numpy as np

from common import settings as _settings
from engine.core import math3d
from engine.core.camera import Camera
from engine.runtime.draw_queue import DrawCommand, DrawQueue

from .surface import Surface, TexturePaint

logger = logging.getLogger(__name__)

FOV = math.radians(70.0)
NEAR = 0.0
FAR = 1.0


@dataclass(slots=True)
class RenderStats:
    """1 回の `render()` の集計。"""

    commands: int = 0
    triangles: int = 0
    drawn: int = 0
    culled: int = 0
    degenerate: int = 0
    pixels: int = 0
    # 今フレーム未投入のため前回の投入で描いた producer 数
    reused: int = 0


def depth_sort(depths: Sequence[float] | np.ndarray) -> list[int]:
    """奥行き代用値の降順に並べたインデックス列を返す。

    先頭要素をピボットにした再帰的な分割ソート。小さい側だけ再帰し、大きい側はループで処理する。
    完全に等しい値同士の順序は規定しない。
    """
    values = np.asarray(depths, dtype=np.float64).ravel().tolist()
    order = list(range(len(values)))
    _sort_range(values, order, 0, len(order) - 1)
    return order


def _sort_range(values: list[float], order: list[int], lo: int, hi: int) -> None:
    while lo < hi:
        p = _partition(values, order, lo, hi)
        if p - lo < hi - p:
            _sort_range(values, order, lo, p - 1)
            lo = p + 1
        else:
            _sort_range(values, order, p + 1, hi)
            hi = p - 1


def _partition(values: list[float], order: list[int], lo: int, hi: int) -> int:
    pivot = values[order[lo]]
    i = lo
    for j in range(lo + 1, hi + 1):
        if values[order[j]] > pivot:
            i += 1
            order[i], order[j] = order[j], order[i]
    order[lo], order[i] = order[i], order[lo]
    return i


class SoftwareRenderer:
    """DrawQueue の消費者。Surface に対して 1 フレームぶんを描く。"""

    def __init__(
        self,
        surface: Surface,
        queue: DrawQueue,
        camera: Camera,
        *,
        near_cutoff: float | None = None,
        default_fill: object = (0, 127, 255),
    ) -> None:
        self.surface = surface
        self.queue = queue
        self.camera = camera
        self.near_cutoff = float(
            _settings.get().NEAR_CUTOFF if near_cutoff is None else near_cutoff
        )
        self.default_fill = default_fill
        self.last_stats = RenderStats()
        # producer ごとの直近コマンド。遅れた Actor は前フレームの変換で描く
        self._retained: dict[Hashable, DrawCommand] = {}

    def view_projection(self) -> np.ndarray:
        cam = self.camera
        w, h = int(self.surface.width), int(self.surface.height)
        return math3d.mat4_mul(
            math3d.look_at(cam.position, cam.target, cam.up),
            math3d.perspective(FOV, w / h, NEAR, FAR),
            math3d.to_pixel_space(w, h),
        )

    def render(self) -> RenderStats:
        """キューを drain して描画する。drain 中に投入しようとした Actor は終了まで待たされる。"""
        stats = RenderStats()
        view_proj = self.view_projection()
        forward = self.camera.forward()

        def _draw(commands: list[DrawCommand]) -> None:
            frame = self._with_retained(commands)
            stats.commands = len(frame)
            stats.reused = len(frame) - len(commands)
            for cmd in sorted(frame, key=lambda c: c.layer):
                self._draw_command(cmd, view_proj, forward, stats)

        self.queue.drain_all(_draw)
        self.last_stats = stats
        if stats.degenerate:
            logger.debug("skipped %d triangle(s) with degenerate UVs", stats.degenerate)
        logger.debug(
            "render commands=%d reused=%d triangles=%d drawn=%d culled=%d",
            stats.commands,
            stats.reused,
            stats.triangles,
            stats.drawn,
            stats.culled,
        )
        return stats

    def _with_retained(self, drained: list[DrawCommand]) -> list[DrawCommand]:
        """drain 結果に、今回投入の無かった producer の直近コマンドを足す（匿名投入は保持しない）。"""
        fresh = set()
        for cmd in drained:
            if cmd.producer is not None:
                self._retained[cmd.producer] = cmd
                fresh.add(cmd.producer)
        stale = [cmd for producer, cmd in self._retained.items() if producer not in fresh]
        return drained + stale

    def project(self, cmd: DrawCommand, view_proj: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """コマンドの三角形を画面座標 (T, 3, 2) と奥行き代用値 (T,) へ変換する。"""
        mvp = cmd.transform @ view_proj
        clip = math3d.transform_points(cmd.mesh.positions, mvp)
        w = clip[..., 3]
        with np.errstate(divide="ignore", invalid="ignore"):
            screen = clip[..., :2] / w[..., None]
        return screen, w.sum(axis=1)

    def _draw_command(
        self,
        cmd: DrawCommand,
        view_proj: np.ndarray,
        forward: np.ndarray,
        stats: RenderStats,
    ) -> None:
        mesh = cmd.mesh
        count = mesh.triangle_count
        stats.triangles += count
        if count == 0:
            return
        screen, depth = self.project(cmd, view_proj)

        facing = mesh.normals @ forward < 0.0
        finite = np.isfinite(screen).all(axis=(1, 2))
        visible = np.flatnonzero(facing & finite & (depth > self.near_cutoff))
        stats.culled += count - int(visible.size)

        for k in depth_sort(depth[visible]):
            i = int(visible[k])
            tri = screen[i]
            if mesh.texture is not None:
                try:
                    affine = math3d.affine_from_triangles(mesh.uvs[i], tri)
                except math3d.SingularMatrixError:
                    stats.degenerate += 1
                    continue
                paint = TexturePaint(mesh.texture, affine)
            else:
                paint = self.default_fill
            stats.pixels += self.surface.fill_polygon(tri, paint)
            stats.drawn += 1


__all__ = ["FOV", "RenderStats", "SoftwareRenderer", "depth_sort"]
