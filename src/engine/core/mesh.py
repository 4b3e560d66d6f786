"""
不変 Mesh 型（描画対象の三角形集合）

本モジュールは、Renderer が扱う唯一の形状表現 `Mesh` を提供する。
一度ロードされた Mesh は参照で共有され、どのスレッドからも書き換えられない。

データモデル（不変条件）:
- `positions: float64 ndarray (T, 3, 3)` — 三角形 T 個 × 3 頂点 × XYZ（オブジェクト空間）。
- `uvs: float64 ndarray (T, 3, 2)` — 各頂点のテクスチャ座標（テクセル単位 = 正規化 UV × 画像サイズ）。
- `normals: float64 ndarray (T, 3)` — 面法線（オブジェクト空間）。背面カリングに使う。
- `texture: uint8 ndarray (H, W, 3) | None` — テクスチャ画像（行 0 が画像上端）。
- 全配列は生成時に read-only 化される（`flags.writeable == False`）。

補足:
- テクスチャ無しの Mesh でも `uvs` は保持する（Renderer は参照三角形で塗り潰す）。
- 空 Mesh は `positions.shape == (0, 3, 3)`。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np

TriangleLike = tuple[
    Sequence[Sequence[float]],  # 3 頂点 XYZ
    Sequence[Sequence[float]],  # 3 頂点 UV
    Sequence[float],  # 面法線
]


def _frozen(arr: np.ndarray) -> np.ndarray:
    out = np.array(arr, dtype=np.float64, copy=True)
    out.flags.writeable = False
    return out


@dataclass(frozen=True, eq=False)
class Mesh:
    """三角形リスト + 任意テクスチャの不変コンテナ。"""

    positions: np.ndarray
    uvs: np.ndarray
    normals: np.ndarray
    texture: np.ndarray | None = None
    name: str = field(default="mesh")

    def __post_init__(self) -> None:
        positions = np.asarray(self.positions, dtype=np.float64).reshape(-1, 3, 3)
        count = positions.shape[0]
        uvs = np.asarray(self.uvs, dtype=np.float64).reshape(-1, 3, 2)
        normals = np.asarray(self.normals, dtype=np.float64).reshape(-1, 3)
        if uvs.shape[0] != count or normals.shape[0] != count:
            raise ValueError(
                f"triangle count mismatch: positions={count} uvs={uvs.shape[0]} "
                f"normals={normals.shape[0]}"
            )
        object.__setattr__(self, "positions", _frozen(positions))
        object.__setattr__(self, "uvs", _frozen(uvs))
        object.__setattr__(self, "normals", _frozen(normals))

        if self.texture is not None:
            tex = np.asarray(self.texture)
            if tex.ndim == 2:
                tex = np.stack([tex, tex, tex], axis=-1)
            if tex.ndim != 3 or tex.shape[2] < 3 or tex.shape[0] == 0 or tex.shape[1] == 0:
                raise ValueError(f"texture must be (H, W, 3|4), got {tex.shape}")
            tex = np.ascontiguousarray(tex[:, :, :3], dtype=np.uint8)
            tex.flags.writeable = False
            object.__setattr__(self, "texture", tex)

    # ── ファクトリ ───────────────────
    @classmethod
    def from_triangles(
        cls,
        triangles: Iterable[TriangleLike],
        *,
        texture: np.ndarray | None = None,
        name: str = "mesh",
    ) -> "Mesh":
        """(頂点, UV, 法線) の反復から Mesh を組み立てる。"""
        positions: list[Sequence[Sequence[float]]] = []
        uvs: list[Sequence[Sequence[float]]] = []
        normals: list[Sequence[float]] = []
        for pos, uv, normal in triangles:
            positions.append(pos)
            uvs.append(uv)
            normals.append(normal)
        if not positions:
            return cls(
                np.zeros((0, 3, 3)), np.zeros((0, 3, 2)), np.zeros((0, 3)), texture, name
            )
        return cls(np.asarray(positions), np.asarray(uvs), np.asarray(normals), texture, name)

    # ── 参照 ───────────────────
    @property
    def triangle_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def is_textured(self) -> bool:
        return self.texture is not None

    @property
    def texture_size(self) -> tuple[int, int]:
        """(width, height)。テクスチャ無しは (1, 1)。"""
        if self.texture is None:
            return (1, 1)
        return (int(self.texture.shape[1]), int(self.texture.shape[0]))

    def __repr__(self) -> str:
        tex = "x".join(str(v) for v in self.texture_size) if self.is_textured else "none"
        return f"Mesh(name={self.name!r}, triangles={self.triangle_count}, texture={tex})"


__all__ = ["Mesh", "TriangleLike"]
