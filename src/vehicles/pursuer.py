"""
どこで: `vehicles.pursuer`。
何を: 毎ティック一定量の前進加速度を積み増すだけの追跡車の振る舞い。
"""

from __future__ import annotations

from dataclasses import dataclass

from common.types import ZERO3, Vec3, as_vec3

from .registry import behavior
from .state import ActorState


@behavior("pursuer")
@dataclass(frozen=True)
class PursuerBehavior:
    thrust: float = 0.0004
    max_speed: float = 0.29

    def initial_state(self, position: Vec3 = ZERO3) -> ActorState:
        return ActorState(position=as_vec3(position))

    def step(self, state: ActorState) -> ActorState:
        ax, ay, az = state.acceleration
        return state.evolve(acceleration=(ax, ay, az + self.thrust))


__all__ = ["PursuerBehavior"]
