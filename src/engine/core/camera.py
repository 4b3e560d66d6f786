"""
どこで: `engine.core.camera`。
何を: 位置/注視点/上方向を持つカメラと、そのビュー行列・前方ベクトル。
なぜ: Scene Director（書き手）と Renderer（読み手）の間の契約を型で明示するため。
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from common.types import Vec3

from . import math3d


@dataclass
class Camera:
    """フレームスレッドが所有し、1 フレームに 1 度だけ更新されるカメラ。"""

    position: Vec3 = (1.0, 1.0, 1.0)
    target: Vec3 = (0.0, 0.0, 0.0)
    up: Vec3 = (0.0, 1.0, 0.0)

    def forward(self) -> np.ndarray:
        """注視方向（target - position、非正規化）。背面判定は符号のみ使う。"""
        return math3d.as_array(self.target) - math3d.as_array(self.position)

    def view_matrix(self) -> np.ndarray:
        return math3d.look_at(self.position, self.target, self.up)


__all__ = ["Camera"]
