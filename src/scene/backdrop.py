"""
どこで: `scene.backdrop`。
何を: 静的な背景要素（空・丘・道路）。先頭車の位置に合わせて配置し直し、平行移動だけで投入する。
なぜ: 背景を無限に続いているように見せつつ、Mesh 自体は固定長のまま使い回すため。

配置モード:
- `follow`: 先頭車の位置へそのまま追従（遠景）。
- `tile`  : z を粗いタイル幅へ丸めて置く（`floor(z / tile) * tile - offset`）。継ぎ目が毎フレーム
            ずれて見えないよう、タイル境界を跨いだときだけ動かす。
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from common.types import ZERO3, Vec3, as_vec3
from engine.core import math3d
from engine.core.mesh import Mesh
from engine.runtime.draw_queue import DrawQueue

TILE_SIZE = 27.0
TILE_OFFSET = 32.0

# Actor（layer=0）より先に、空 → 丘 → 道路の順で描く
SKY_LAYER = -3
HILLS_LAYER = -2
ROAD_LAYER = -1


def tile_origin(z: float, tile: float = TILE_SIZE, offset: float = TILE_OFFSET) -> float:
    return math.floor(z / tile) * tile - offset


@dataclass
class Backdrop:
    name: str
    mesh: Mesh
    anchor: str = "tile"
    layer: int = ROAD_LAYER
    position: Vec3 = ZERO3

    def __post_init__(self) -> None:
        if self.anchor not in ("follow", "tile"):
            raise ValueError(f"anchor must be 'follow' or 'tile', got {self.anchor!r}")

    def follow(self, lead_position: Vec3) -> Vec3:
        """先頭車の位置から自分の位置を決め直して返す。"""
        x, y, z = as_vec3(lead_position)
        if self.anchor == "follow":
            self.position = (x, y, z)
        else:
            self.position = (0.0, 0.0, tile_origin(z))
        return self.position

    def draw(self, queue: DrawQueue) -> None:
        queue.submit(
            self.mesh,
            math3d.translate(self.position),
            producer=f"backdrop:{self.name}",
            layer=self.layer,
        )


__all__ = [
    "Backdrop",
    "HILLS_LAYER",
    "ROAD_LAYER",
    "SKY_LAYER",
    "TILE_OFFSET",
    "TILE_SIZE",
    "tile_origin",
]
