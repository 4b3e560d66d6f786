"""
どこで: `engine.core.math3d`。
何を: ベクトル/3×3・4×4 行列の純関数群（numpy 実装）。
なぜ: Renderer/Actor/Scene が同一の行列規約で変換を合成できるようにするため。

行列規約:
- 行ベクトル規約 `p' = p · M`。4×4 行列は行優先で、平行移動成分は最終行に置く。
- 合成は左から右へ適用される（`A @ B` は「A の後に B」）。
- 3×3 のアフィン行列（`affine_from_triangles`）のみ列ベクトル規約 `A · [x, y, 1]^T`。

直感図（ワールド変換の合成順）:

    world = rotate_y(yaw) @ rotate_z(roll) @ rotate_x(pitch) @ translate(position)
    mvp   = world @ look_at(...) @ perspective(...) @ to_pixel_space(...)
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

EPSILON = 1e-9


class SingularMatrixError(ValueError):
    """行列式がほぼ 0 で逆行列が定義できないことを表す。"""


# ── ベクトル ───────────────────


def as_array(v: Sequence[float] | np.ndarray) -> np.ndarray:
    return np.asarray(v, dtype=np.float64)


def dot(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    return float(np.dot(as_array(a), as_array(b)))


def cross(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> np.ndarray:
    return np.cross(as_array(a), as_array(b))


def magnitude(v: Sequence[float] | np.ndarray) -> float:
    return float(np.linalg.norm(as_array(v)))


def normalize(v: Sequence[float] | np.ndarray) -> np.ndarray:
    """単位ベクトルを返す。長さ 0 のベクトルは `ValueError`。"""
    arr = as_array(v)
    n = float(np.linalg.norm(arr))
    if n == 0.0:
        raise ValueError("cannot normalize a zero-length vector")
    return arr / n


# ── 4×4 行列 ───────────────────


def mat4_identity() -> np.ndarray:
    return np.eye(4, dtype=np.float64)


def mat4_mul(*mats: np.ndarray) -> np.ndarray:
    """行列を左から順に掛け合わせる（`mat4_mul(a, b, c) == a @ b @ c`）。"""
    out = mat4_identity()
    for m in mats:
        out = out @ m
    return out


def translate(t: Sequence[float] | np.ndarray) -> np.ndarray:
    tx, ty, tz = (float(c) for c in t)
    m = mat4_identity()
    m[3, :3] = (tx, ty, tz)
    return m


def scale(s: Sequence[float] | np.ndarray) -> np.ndarray:
    sx, sy, sz = (float(c) for c in s)
    return np.diag([sx, sy, sz, 1.0])


def rotate_x(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array(
        [
            [1.0, 0.0, 0.0, 0.0],
            [0.0, c, -s, 0.0],
            [0.0, s, c, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def rotate_y(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array(
        [
            [c, 0.0, s, 0.0],
            [0.0, 1.0, 0.0, 0.0],
            [-s, 0.0, c, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def rotate_z(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array(
        [
            [c, -s, 0.0, 0.0],
            [s, c, 0.0, 0.0],
            [0.0, 0.0, 1.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def world_transform(
    position: Sequence[float] | np.ndarray, rotation: Sequence[float] | np.ndarray
) -> np.ndarray:
    """Actor のワールド変換（yaw → roll → pitch → 配置）を返す。

    `rotation` は (pitch=X, yaw=Y, roll=Z) のオイラー角 [rad]。
    """
    rx, ry, rz = (float(c) for c in rotation)
    return rotate_y(ry) @ rotate_z(rz) @ rotate_x(rx) @ translate(position)


def look_at(
    position: Sequence[float] | np.ndarray,
    target: Sequence[float] | np.ndarray,
    up: Sequence[float] | np.ndarray,
) -> np.ndarray:
    """ビュー行列（右手系、カメラは -Z 方向を向く）。"""
    pos = as_array(position)
    axis_z = normalize(pos - as_array(target))
    axis_x = normalize(cross(up, axis_z))
    axis_y = cross(axis_z, axis_x)

    m = mat4_identity()
    m[:3, 0] = axis_x
    m[:3, 1] = axis_y
    m[:3, 2] = axis_z
    m[3, :3] = (-np.dot(axis_x, pos), -np.dot(axis_y, pos), -np.dot(axis_z, pos))
    return m


def perspective(fov: float, aspect: float, near: float, far: float) -> np.ndarray:
    """透視投影行列。w 成分にはビュー空間の -Z（奥行き）がそのまま入る。"""
    if aspect <= 0.0:
        raise ValueError(f"aspect must be > 0, got {aspect}")
    if near == far:
        raise ValueError("near and far must differ")
    m22 = 1.0 / math.tan(fov / 2.0)
    m11 = m22 / aspect
    m33 = far / (near - far)
    m43 = (near * far) / (near - far)
    return np.array(
        [
            [m11, 0.0, 0.0, 0.0],
            [0.0, m22, 0.0, 0.0],
            [0.0, 0.0, m33, -1.0],
            [0.0, 0.0, m43, 0.0],
        ]
    )


def to_pixel_space(width: int, height: int) -> np.ndarray:
    """NDC (X,Y ∈ [-1, 1]) → ピクセル空間（左上原点・Y 下向き）への変換。"""
    return scale((0.5 * width, -0.5 * height, 1.0)) @ translate((0.5 * width, 0.5 * height, 0.0))


def transform_points(points: np.ndarray, m: np.ndarray) -> np.ndarray:
    """(..., 3) の点列を w=1 で同次化して変換し、(..., 4) を返す。"""
    pts = np.asarray(points, dtype=np.float64)
    homo = np.concatenate([pts, np.ones(pts.shape[:-1] + (1,), dtype=np.float64)], axis=-1)
    return homo @ m


def inverse(m: np.ndarray, *, eps: float = EPSILON) -> np.ndarray:
    """正方行列の逆行列。|det| < eps なら `SingularMatrixError`。"""
    arr = np.asarray(m, dtype=np.float64)
    det = float(np.linalg.det(arr))
    if abs(det) < eps:
        raise SingularMatrixError(f"matrix is singular (det={det:.3e})")
    return np.linalg.inv(arr)


# ── 3×3 / 2D アフィン ───────────────────


def mat3_determinant(m: np.ndarray) -> float:
    return float(np.linalg.det(np.asarray(m, dtype=np.float64)))


def affine_from_triangles(
    src: np.ndarray, dst: np.ndarray, *, eps: float = EPSILON
) -> np.ndarray:
    """三角形 `src` を `dst` へ写す 3×3 アフィン行列を解く。

    `src`, `dst` は (3, 2)。戻り値 A は列ベクトル規約で `A @ [x, y, 1]` が写像先。
    `src` が面積 0（退化）なら `SingularMatrixError`。
    """
    s = np.asarray(src, dtype=np.float64)
    d = np.asarray(dst, dtype=np.float64)
    src_m = np.vstack([s.T, np.ones(3)])
    dst_m = np.vstack([d.T, np.ones(3)])
    return dst_m @ inverse(src_m, eps=eps)


def apply_affine(a: np.ndarray, points: np.ndarray) -> np.ndarray:
    """(N, 2) の点列へ 3×3 アフィン行列を適用する。"""
    pts = np.asarray(points, dtype=np.float64)
    return pts @ a[:2, :2].T + a[:2, 2]


__all__ = [
    "EPSILON",
    "SingularMatrixError",
    "as_array",
    "dot",
    "cross",
    "magnitude",
    "normalize",
    "mat4_identity",
    "mat4_mul",
    "translate",
    "scale",
    "rotate_x",
    "rotate_y",
    "rotate_z",
    "world_transform",
    "look_at",
    "perspective",
    "to_pixel_space",
    "transform_points",
    "inverse",
    "mat3_determinant",
    "affine_from_triangles",
    "apply_affine",
]
