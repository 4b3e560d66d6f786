"""
どこで: `engine.io.obj_loader`。
何を: Wavefront OBJ（三角形面のみ）とテクスチャ画像を読み、`Mesh` を返す。
なぜ: 読み込み失敗をプロセス終了ではなく `MeshLoadError` として呼び出し側へ返すため。

受理する OBJ レコード:
- `v x y z` / `vt u v` / `vn x y z`
- `f a/b/c a/b/c a/b/c`（1 始まり、負の相対 index も可）。面法線は第 1 頂点の法線。
- `#`, `s`, `o`, `g`, `usemtl`, `mtllib` および空行は無視する。

テクスチャ座標は画像サイズを掛けてテクセル単位へ変換する（V 軸は記述どおり）。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import numpy as np

from engine.core.mesh import Mesh

logger = logging.getLogger(__name__)

_IGNORED = {"#", "s", "o", "g", "usemtl", "mtllib", "l", "p"}


class MeshLoadError(Exception):
    """Mesh/テクスチャの読み込み失敗。原因ファイルを `path` に保持する。"""

    def __init__(self, path: str | Path, reason: str) -> None:
        super().__init__(f"failed to load '{path}': {reason}")
        self.path = str(path)
        self.reason = reason


def _resolve_index(token: str, count: int) -> int:
    i = int(token)
    idx = i - 1 if i > 0 else count + i
    if not 0 <= idx < count:
        raise IndexError(f"index {i} out of range (have {count})")
    return idx


def parse_obj(
    lines: Iterable[str],
    *,
    texture_size: tuple[int, int] = (1, 1),
    source: str = "<obj>",
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """OBJ テキスト行を (positions, uvs, normals) の配列へ変換する。

    不正な行は `MeshLoadError`（行番号付き）。
    """
    positions: list[tuple[float, float, float]] = []
    texcoords: list[tuple[float, float]] = []
    normals: list[tuple[float, float, float]] = []
    tri_pos: list[list[tuple[float, float, float]]] = []
    tri_uv: list[list[tuple[float, float]]] = []
    tri_n: list[tuple[float, float, float]] = []
    tw, th = float(texture_size[0]), float(texture_size[1])

    for lineno, raw in enumerate(lines, start=1):
        parts = raw.split()
        if not parts or parts[0].startswith("#") or parts[0] in _IGNORED:
            continue
        tag, args = parts[0], parts[1:]
        try:
            if tag == "v":
                positions.append((float(args[0]), float(args[1]), float(args[2])))
            elif tag == "vt":
                texcoords.append((float(args[0]) * tw, float(args[1]) * th))
            elif tag == "vn":
                normals.append((float(args[0]), float(args[1]), float(args[2])))
            elif tag == "f":
                if len(args) != 3:
                    raise ValueError(f"only triangular faces are supported (got {len(args)})")
                corners = [a.split("/") for a in args]
                tri_pos.append([positions[_resolve_index(c[0], len(positions))] for c in corners])
                tri_uv.append(
                    [
                        texcoords[_resolve_index(c[1], len(texcoords))]
                        if len(c) > 1 and c[1]
                        else (0.0, 0.0)
                        for c in corners
                    ]
                )
                first = corners[0]
                if len(first) < 3 or not first[2]:
                    raise ValueError("face has no normal index")
                tri_n.append(normals[_resolve_index(first[2], len(normals))])
            else:
                logger.debug("%s:%d: unknown record '%s' ignored", source, lineno, tag)
        except (ValueError, IndexError) as e:
            raise MeshLoadError(source, f"line {lineno}: {e}") from e

    if not tri_pos:
        return np.zeros((0, 3, 3)), np.zeros((0, 3, 2)), np.zeros((0, 3))
    return np.asarray(tri_pos), np.asarray(tri_uv), np.asarray(tri_n)


def load_texture(path: str | Path) -> np.ndarray:
    """画像を (H, W, 3) uint8 で読み込む。"""
    import imageio.v3 as iio

    try:
        img = np.asarray(iio.imread(Path(path)))
    except (OSError, ValueError) as e:
        raise MeshLoadError(path, str(e)) from e
    if img.ndim == 2:
        img = np.stack([img, img, img], axis=-1)
    if img.ndim != 3 or img.shape[2] < 3:
        raise MeshLoadError(path, f"unsupported image shape {img.shape}")
    if np.issubdtype(img.dtype, np.integer) and img.dtype != np.uint8:
        # 16bit 等は 8bit へ縮める
        img = (img.astype(np.float64) * 255.0 / float(np.iinfo(img.dtype).max)).astype(np.uint8)
    elif np.issubdtype(img.dtype, np.floating):
        img = (np.clip(img, 0.0, 1.0) * 255.0).astype(np.uint8)
    return np.ascontiguousarray(img[:, :, :3])


def load_mesh(obj_path: str | Path, texture_path: str | Path | None = None) -> Mesh:
    """OBJ + 任意テクスチャから不変 Mesh を生成する。

    例外:
        MeshLoadError: ファイルが存在しない/読めない/構文不正。
    """
    obj_path = Path(obj_path)
    texture = load_texture(texture_path) if texture_path is not None else None
    size = (int(texture.shape[1]), int(texture.shape[0])) if texture is not None else (1, 1)
    try:
        with obj_path.open("r", encoding="utf-8") as f:
            positions, uvs, normals = parse_obj(f, texture_size=size, source=str(obj_path))
    except OSError as e:
        raise MeshLoadError(obj_path, str(e)) from e

    mesh = Mesh(positions, uvs, normals, texture, obj_path.stem)
    logger.info("loaded %r from %s", mesh, obj_path)
    return mesh
