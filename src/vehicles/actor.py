"""
どこで: `vehicles.actor`。
何を: Mesh + 振る舞い + 最高速を束ねた Actor。`advance(queue)` は 1 ステップ進めて
      現在のワールド変換を DrawQueue へ投入する（ワーカスレッドから呼ばれる）。
なぜ: シミュレーション状態の書き手を所有スレッド 1 本に限定し、公開は不変スナップショットの
      参照差し替えだけで行うため。

1 ステップの手順:
1) behavior.step（加速度/回転/離散状態の更新）
2) velocity += acceleration
3) |velocity|² ≥ max_speed² なら長さ max_speed へ
4) position += velocity
5) world_transform(position, rotation) を producer=name で投入
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import numpy as np

from common.types import ZERO3, Vec3
from engine.core.mesh import Mesh
from engine.runtime.draw_queue import DrawQueue

from .registry import get_behavior
from .state import ActorState, integrate

logger = logging.getLogger(__name__)

# 背景（< 0）の後に描く
ACTOR_LAYER = 0


class Behavior(Protocol):
    max_speed: float

    def initial_state(self, position: Vec3 = ZERO3) -> ActorState: ...

    def step(self, state: ActorState) -> ActorState: ...


def make_behavior(kind: str, *, rng: np.random.Generator | None = None, **params: Any) -> Behavior:
    """レジストリから振る舞いを生成する。乱数を使う振る舞いにだけ `rng` を渡す。"""
    cls = get_behavior(kind)
    if getattr(cls, "uses_rng", False):
        return cls(rng, **params)
    return cls(**params)


class Actor:
    def __init__(
        self,
        name: str,
        mesh: Mesh,
        behavior: Behavior,
        *,
        position: Vec3 = ZERO3,
        max_speed: float | None = None,
        layer: int = ACTOR_LAYER,
    ) -> None:
        self.name = name
        self.mesh = mesh
        self.behavior = behavior
        self.max_speed = float(behavior.max_speed if max_speed is None else max_speed)
        self.layer = int(layer)
        self._state = behavior.initial_state(position)

    @property
    def state(self) -> ActorState:
        """最新の公開スナップショット（任意のスレッドから読んでよい）。"""
        return self._state

    @property
    def position(self) -> Vec3:
        return self._state.position

    def step(self) -> ActorState:
        """手順 1〜4 を行い、新しいスナップショットを公開して返す。"""
        prev = self._state
        nxt = integrate(self.behavior.step(prev), self.max_speed)
        if nxt.mode != prev.mode:
            logger.debug("%s: %s -> %s at step %d", self.name, prev.mode, nxt.mode, nxt.step)
        self._state = nxt
        return nxt

    def advance(self, queue: DrawQueue) -> ActorState:
        state = self.step()
        queue.submit(
            self.mesh,
            state.world_transform(),
            producer=self.name,
            layer=self.layer,
            source=state,
        )
        return state

    def __repr__(self) -> str:
        s = self._state
        return f"Actor(name={self.name!r}, mode={s.mode!r}, step={s.step}, position={s.position})"


__all__ = ["ACTOR_LAYER", "Actor", "Behavior", "make_behavior"]
