"""
どこで: `engine.export.image`。
何を: Surface（または (H, W, 3) 配列）を PNG として保存する imageio ラッパ。
なぜ: ヘッドレス実行でフレームを連番画像に残し、ウィンドウ無しで結果を確認できるようにするため。
"""

from __future__ import annotations

import logging
from pathlib import Path

import imageio.v3 as iio
import numpy as np

from util.utils import project_root

logger = logging.getLogger(__name__)


DEFAULT_FRAMES_DIR = Path("data") / "frames"


def frames_dir(out_dir: Path | str | None = None) -> Path:
    """出力ディレクトリを作成して返す（None はプロジェクトルート下の `data/frames/`）。"""
    out = Path(out_dir) if out_dir is not None else project_root() / DEFAULT_FRAMES_DIR
    out.mkdir(parents=True, exist_ok=True)
    return out


def frame_path(index: int, out_dir: Path | str | None = None, *, prefix: str = "frame") -> Path:
    """連番フレームの保存先（`<out_dir>/frame_00012.png`）。"""
    if index < 0:
        raise ValueError(f"frame index must be >= 0, got {index}")
    if not prefix or "/" in prefix:
        raise ValueError(f"invalid frame prefix: {prefix!r}")
    return frames_dir(out_dir) / f"{prefix}_{index:05d}.png"


def save_png(source: object, path: Path | str) -> Path:
    """PNG を保存してパスを返す。

    Parameters
    ----------
    source : ArraySurface | np.ndarray
        `front()` を持つ Surface なら直近に present されたフレームを保存する。
    path : Path | str
        出力先。親ディレクトリは必要なら作成する。
    """
    front = getattr(source, "front", None)
    pixels = np.asarray(front() if callable(front) else source)
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise ValueError(f"expected an (H, W, 3|4) image, got shape {pixels.shape}")
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    iio.imwrite(out, np.ascontiguousarray(pixels, dtype=np.uint8))
    logger.debug("saved %s", out)
    return out


__all__ = ["DEFAULT_FRAMES_DIR", "frames_dir", "frame_path", "save_png"]
