"""
どこで: `engine.core.primitives`。
何を: アセット無しでシーンを組める手続き的 Mesh（箱・地面帯・空の背景筒）とチェッカーテクスチャ。
なぜ: OBJ/画像が無い環境（テスト/デモ）でもパイプライン全体を駆動できるようにするため。

巻き順と法線:
- 法線は「見える側」を向く。Renderer は `dot(camera_forward, normal) < 0` の面だけを描く。
- 空の背景筒は内側から見るため、法線は中心軸へ向ける。
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from common.types import RGB

from .mesh import Mesh


def checker_texture(
    size: int = 64,
    cells: int = 8,
    colors: Sequence[RGB] = ((230, 230, 230), (40, 40, 40)),
) -> np.ndarray:
    """(size, size, 3) の市松模様テクスチャを返す。"""
    if size <= 0 or cells <= 0:
        raise ValueError(f"size and cells must be > 0, got size={size} cells={cells}")
    idx = (np.arange(size) * cells // size) % 2
    mask = (idx[:, None] + idx[None, :]) % 2
    palette = np.asarray(colors, dtype=np.uint8)
    return palette[mask]


def stripe_texture(
    width: int = 64,
    height: int = 64,
    stripes: int = 4,
    colors: Sequence[RGB] = ((60, 60, 60), (220, 200, 40)),
) -> np.ndarray:
    """縦縞テクスチャ（道路のセンターライン用）。"""
    cols = (np.arange(width) * stripes * 2 // width) % 2
    palette = np.asarray(colors, dtype=np.uint8)
    row = palette[cols]
    return np.repeat(row[None, :, :], height, axis=0)


def _quad(
    a: Sequence[float],
    b: Sequence[float],
    c: Sequence[float],
    d: Sequence[float],
    normal: Sequence[float],
    uv_size: tuple[float, float],
) -> list[tuple]:
    """四角形 a-b-c-d を 2 つの三角形へ分割する（UV は全面に張る）。"""
    w, h = uv_size
    uv_a, uv_b, uv_c, uv_d = (0.0, h), (w, h), (w, 0.0), (0.0, 0.0)
    return [
        ((a, b, c), (uv_a, uv_b, uv_c), normal),
        ((a, c, d), (uv_a, uv_c, uv_d), normal),
    ]


def box_mesh(
    size: Sequence[float] = (1.8, 1.2, 4.0),
    *,
    texture: np.ndarray | None = None,
    name: str = "box",
) -> Mesh:
    """底面が y=0 に接する直方体。車両の代替形状に使う。"""
    sx, sy, sz = (float(v) for v in size)
    x0, x1 = -sx / 2.0, sx / 2.0
    y0, y1 = 0.0, sy
    z0, z1 = -sz / 2.0, sz / 2.0
    uv = (float(texture.shape[1]), float(texture.shape[0])) if texture is not None else (1.0, 1.0)

    tris: list[tuple] = []
    tris += _quad((x0, y0, z1), (x1, y0, z1), (x1, y1, z1), (x0, y1, z1), (0, 0, 1), uv)
    tris += _quad((x1, y0, z0), (x0, y0, z0), (x0, y1, z0), (x1, y1, z0), (0, 0, -1), uv)
    tris += _quad((x1, y0, z1), (x1, y0, z0), (x1, y1, z0), (x1, y1, z1), (1, 0, 0), uv)
    tris += _quad((x0, y0, z0), (x0, y0, z1), (x0, y1, z1), (x0, y1, z0), (-1, 0, 0), uv)
    tris += _quad((x0, y1, z1), (x1, y1, z1), (x1, y1, z0), (x0, y1, z0), (0, 1, 0), uv)
    tris += _quad((x0, y0, z0), (x1, y0, z0), (x1, y0, z1), (x0, y0, z1), (0, -1, 0), uv)
    return Mesh.from_triangles(tris, texture=texture, name=name)


def ground_strip_mesh(
    width: float = 12.0,
    length: float = 120.0,
    segment: float = 3.0,
    *,
    height: float = 0.0,
    texture: np.ndarray | None = None,
    name: str = "ground",
) -> Mesh:
    """z ∈ [0, length] に伸びる上向きの帯。細かく分割して近接面の投影破綻を抑える。"""
    if segment <= 0.0:
        raise ValueError(f"segment must be > 0, got {segment}")
    uv = (float(texture.shape[1]), float(texture.shape[0])) if texture is not None else (1.0, 1.0)
    x0, x1 = -width / 2.0, width / 2.0
    count = max(1, int(math.ceil(length / segment)))
    tris: list[tuple] = []
    for i in range(count):
        za = i * segment
        zb = min(length, za + segment)
        tris += _quad(
            (x0, height, zb), (x1, height, zb), (x1, height, za), (x0, height, za), (0, 1, 0), uv
        )
    return Mesh.from_triangles(tris, texture=texture, name=name)


def sky_backdrop_mesh(
    radius: float = 80.0,
    height: float = 60.0,
    segments: int = 24,
    *,
    texture: np.ndarray | None = None,
    name: str = "sky",
) -> Mesh:
    """原点を囲む内向きの円筒。Actor に追従させて遠景として使う。"""
    if segments < 3:
        raise ValueError(f"segments must be >= 3, got {segments}")
    uv = (float(texture.shape[1]), float(texture.shape[0])) if texture is not None else (1.0, 1.0)
    y0, y1 = -height / 4.0, height
    tris: list[tuple] = []
    for i in range(segments):
        t0 = 2.0 * math.pi * i / segments
        t1 = 2.0 * math.pi * (i + 1) / segments
        p0 = (radius * math.cos(t0), radius * math.sin(t0))
        p1 = (radius * math.cos(t1), radius * math.sin(t1))
        mid = 0.5 * (t0 + t1)
        inward = (-math.cos(mid), 0.0, -math.sin(mid))
        tris += _quad(
            (p0[0], y0, p0[1]), (p1[0], y0, p1[1]), (p1[0], y1, p1[1]), (p0[0], y1, p0[1]),
            inward,
            uv,
        )
    return Mesh.from_triangles(tris, texture=texture, name=name)


__all__ = [
    "checker_texture",
    "stripe_texture",
    "box_mesh",
    "ground_strip_mesh",
    "sky_backdrop_mesh",
]
