"""
どこで: `vehicles.state`。
何を: Actor の不変スナップショット `ActorState` と、速度積分・最高速クランプ（手順 2〜4）。
なぜ: 所有スレッドが 1 ステップごとに新しいスナップショットを参照差し替えで公開し、
      他スレッドが位置/回転/速度を書きかけの状態で観測しないようにするため。
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np

from common.types import ZERO3, Vec3, as_vec3
from engine.core import math3d


@dataclass(frozen=True, slots=True)
class ActorState:
    """1 ステップ後の Actor 状態（全フィールド不変）。

    - `rotation` は (pitch=X, yaw=Y, roll=Z) [rad]。
    - `mode`/`timer` は振る舞い固有の離散状態とタイマ。
    - `step` はこのスナップショットまでに進んだステップ数。
    """

    position: Vec3 = ZERO3
    rotation: Vec3 = ZERO3
    velocity: Vec3 = ZERO3
    acceleration: Vec3 = ZERO3
    mode: str = ""
    timer: int = 0
    step: int = 0

    def evolve(self, **changes: object) -> "ActorState":
        """フィールドを差し替えた新しいスナップショット（Vec3 は正規化する）。"""
        for key in ("position", "rotation", "velocity", "acceleration"):
            if key in changes:
                changes[key] = as_vec3(changes[key])
        return replace(self, **changes)  # type: ignore[arg-type]

    def world_transform(self) -> np.ndarray:
        return math3d.world_transform(self.position, self.rotation)


def clamp_velocity(velocity: Vec3 | np.ndarray, max_speed: float) -> np.ndarray:
    """|v|² ≥ max_speed² なら向きを保って長さ max_speed へ縮める。"""
    v = math3d.as_array(velocity)
    limit = float(max_speed)
    if float(v @ v) >= limit * limit:
        n = float(np.linalg.norm(v))
        if n > 0.0:
            return v / n * limit
    return v


def integrate(state: ActorState, max_speed: float) -> ActorState:
    """velocity += acceleration → 最高速クランプ → position += velocity。"""
    velocity = clamp_velocity(np.add(state.velocity, state.acceleration), max_speed)
    position = np.add(state.position, velocity)
    return state.evolve(position=position, velocity=velocity, step=state.step + 1)


__all__ = ["ActorState", "clamp_velocity", "integrate"]
