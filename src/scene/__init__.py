"""
どこで: `scene` パッケージ。
何を: 背景要素・Scene Director・設定からの組み立て。
"""

from .backdrop import Backdrop, tile_origin
from .build import build_scene, pursuer_spawn
from .director import SceneDirector, orbit_position

__all__ = [
    "Backdrop",
    "SceneDirector",
    "build_scene",
    "orbit_position",
    "pursuer_spawn",
    "tile_origin",
]
