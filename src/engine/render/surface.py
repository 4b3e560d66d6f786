"""
どこで: `engine.render.surface`。
何を: 提示面（Presentation surface）の契約 `Surface` と、その numpy 実装 `ArraySurface`。
      `clear(color)` / `fill_polygon(points, paint)` / `present()` を提供する。
なぜ: Renderer を GUI/ファイル出力から切り離し、ヘッドレスでも同じ描画経路を使うため。

座標系:
- 左上原点、Y 下向きのピクセル座標。ピクセル (x, y) は中心 (x+0.5, y+0.5) でサンプリング。

ダブルバッファ:
- 描画は back バッファへ。`present()` が back → front をロック下でコピーし、
  任意のコールバック（ウィンドウ転送/PNG 保存）へ front を渡す。
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence, Union

import numpy as np

from common.types import RGB
from engine.core.math3d import SingularMatrixError, inverse
from util.color import normalize_color

from .raster import fill_triangle_flat, fill_triangle_textured

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TexturePaint:
    """テクスチャ + アフィン（テクスチャ空間 → 画面空間、3×3 列ベクトル規約）。"""

    texture: np.ndarray
    affine: np.ndarray


Paint = Union[TexturePaint, RGB, Sequence[float], str]


class Surface(Protocol):
    """Renderer が描画先として要求する最小インターフェース。"""

    width: int
    height: int

    def clear(self, color: object) -> None: ...

    def fill_polygon(self, points: np.ndarray, paint: Paint) -> int: ...

    def present(self) -> None: ...


class ArraySurface:
    """(H, W, 3) uint8 の back/front バッファを持つ CPU サーフェス。"""

    def __init__(
        self,
        width: int,
        height: int,
        *,
        on_present: Callable[[np.ndarray], None] | None = None,
    ) -> None:
        if int(width) <= 0 or int(height) <= 0:
            raise ValueError(f"surface size must be positive, got {(width, height)}")
        self.width = int(width)
        self.height = int(height)
        self._back = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        self._front = np.zeros_like(self._back)
        self._lock = threading.Lock()
        self._on_present = on_present
        self.presented: int = 0

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def pixels(self) -> np.ndarray:
        """back バッファ（描画スレッド専用）。"""
        return self._back

    def set_present_callback(self, callback: Callable[[np.ndarray], None] | None) -> None:
        self._on_present = callback

    # -------- Surface interface --------
    def clear(self, color: object) -> None:
        self._back[:, :] = normalize_color(color)

    def fill_polygon(self, points: np.ndarray, paint: Paint) -> int:
        """凸多角形を扇状に三角形分割して塗る。塗ったピクセル数を返す。

        `paint` が `TexturePaint` の場合、アフィンの逆行列で各ピクセルのテクセルを引く。
        アフィンが特異（画面上で面積 0）なら何も塗らない。
        """
        pts = np.ascontiguousarray(points, dtype=np.float64).reshape(-1, 2)
        if pts.shape[0] < 3 or not np.all(np.isfinite(pts)):
            return 0

        if isinstance(paint, TexturePaint):
            try:
                inv = np.ascontiguousarray(inverse(paint.affine))
            except SingularMatrixError:
                logger.debug("singular paint transform; polygon skipped")
                return 0
            texture = paint.texture
            painted = 0
            for tri in self._fan(pts):
                painted += fill_triangle_textured(self._back, tri, texture, inv)
            return painted

        r, g, b = normalize_color(paint)
        painted = 0
        for tri in self._fan(pts):
            painted += fill_triangle_flat(self._back, tri, r, g, b)
        return painted

    def present(self) -> None:
        with self._lock:
            np.copyto(self._front, self._back)
            self.presented += 1
            frame = self._front
            callback = self._on_present
        if callback is not None:
            callback(frame)

    # -------- presentation side --------
    def front(self) -> np.ndarray:
        """直近に present されたフレームのコピー。"""
        with self._lock:
            return self._front.copy()

    @staticmethod
    def _fan(pts: np.ndarray):
        for i in range(1, pts.shape[0] - 1):
            yield np.ascontiguousarray(pts[[0, i, i + 1]])


__all__ = ["ArraySurface", "Surface", "TexturePaint", "Paint"]
