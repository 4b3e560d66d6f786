"""
どこで: `engine.render.raster`。
何を: 三角形 1 枚をピクセル中心サンプリングで塗る Numba カーネル（単色 / アフィンテクスチャ）。
なぜ: 毎フレーム数千枚の三角形を Python ループで塗ると遅いため、内側の二重ループだけを JIT 化する。

規約:
- `pixels` は (H, W, 3) uint8（行 0 が画面上端）。`tri` は (3, 2) のピクセル座標（float）。
- 内外判定はピクセル中心 (x+0.5, y+0.5) に対する 3 本の辺関数の符号一致（巻き順は問わない）。
- テクスチャはニアレスト参照、範囲外はタイル状に折り返す。
- 戻り値は塗ったピクセル数。
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit


@njit(cache=True)
def _bounds(tri: np.ndarray, width: int, height: int) -> tuple[int, int, int, int]:
    """画面内にクランプした外接矩形 (x0, y0, x1, y1)。空なら x1 < x0。"""
    fminx = max(min(tri[0, 0], tri[1, 0], tri[2, 0]), 0.0)
    fmaxx = min(max(tri[0, 0], tri[1, 0], tri[2, 0]), float(width - 1))
    fminy = max(min(tri[0, 1], tri[1, 1], tri[2, 1]), 0.0)
    fmaxy = min(max(tri[0, 1], tri[1, 1], tri[2, 1]), float(height - 1))
    if fmaxx < fminx or fmaxy < fminy:
        return 0, 0, -1, -1
    return (
        int(math.floor(fminx)),
        int(math.floor(fminy)),
        int(math.ceil(fmaxx)),
        int(math.ceil(fmaxy)),
    )


@njit(cache=True)
def fill_triangle_flat(pixels: np.ndarray, tri: np.ndarray, r: int, g: int, b: int) -> int:
    height, width = pixels.shape[0], pixels.shape[1]
    x0, y0 = tri[0, 0], tri[0, 1]
    x1, y1 = tri[1, 0], tri[1, 1]
    x2, y2 = tri[2, 0], tri[2, 1]
    area = (x1 - x0) * (y2 - y0) - (x2 - x0) * (y1 - y0)
    if area == 0.0:
        return 0
    bx0, by0, bx1, by1 = _bounds(tri, width, height)
    count = 0
    for py in range(by0, by1 + 1):
        cy = py + 0.5
        for px in range(bx0, bx1 + 1):
            cx = px + 0.5
            w0 = (x2 - x1) * (cy - y1) - (y2 - y1) * (cx - x1)
            w1 = (x0 - x2) * (cy - y2) - (y0 - y2) * (cx - x2)
            w2 = (x1 - x0) * (cy - y0) - (y1 - y0) * (cx - x0)
            if area > 0.0:
                inside = w0 >= 0.0 and w1 >= 0.0 and w2 >= 0.0
            else:
                inside = w0 <= 0.0 and w1 <= 0.0 and w2 <= 0.0
            if inside:
                pixels[py, px, 0] = r
                pixels[py, px, 1] = g
                pixels[py, px, 2] = b
                count += 1
    return count


@njit(cache=True)
def fill_triangle_textured(
    pixels: np.ndarray, tri: np.ndarray, texture: np.ndarray, inv: np.ndarray
) -> int:
    """`inv`（画面 → テクスチャの 3×3 アフィン）で各ピクセルのテクセルを引いて塗る。"""
    height, width = pixels.shape[0], pixels.shape[1]
    th, tw = texture.shape[0], texture.shape[1]
    x0, y0 = tri[0, 0], tri[0, 1]
    x1, y1 = tri[1, 0], tri[1, 1]
    x2, y2 = tri[2, 0], tri[2, 1]
    area = (x1 - x0) * (y2 - y0) - (x2 - x0) * (y1 - y0)
    if area == 0.0:
        return 0
    bx0, by0, bx1, by1 = _bounds(tri, width, height)
    count = 0
    for py in range(by0, by1 + 1):
        cy = py + 0.5
        for px in range(bx0, bx1 + 1):
            cx = px + 0.5
            w0 = (x2 - x1) * (cy - y1) - (y2 - y1) * (cx - x1)
            w1 = (x0 - x2) * (cy - y2) - (y0 - y2) * (cx - x2)
            w2 = (x1 - x0) * (cy - y0) - (y1 - y0) * (cx - x0)
            if area > 0.0:
                inside = w0 >= 0.0 and w1 >= 0.0 and w2 >= 0.0
            else:
                inside = w0 <= 0.0 and w1 <= 0.0 and w2 <= 0.0
            if not inside:
                continue
            u = inv[0, 0] * cx + inv[0, 1] * cy + inv[0, 2]
            v = inv[1, 0] * cx + inv[1, 1] * cy + inv[1, 2]
            tx = int(math.floor(u)) % tw
            ty = int(math.floor(v)) % th
            pixels[py, px, 0] = texture[ty, tx, 0]
            pixels[py, px, 1] = texture[ty, tx, 1]
            pixels[py, px, 2] = texture[ty, tx, 2]
            count += 1
    return count


__all__ = ["fill_triangle_flat", "fill_triangle_textured"]
