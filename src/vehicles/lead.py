"""
どこで: `vehicles.lead`。
何を: 先頭車の 7 状態有限状態機械（終端状態なし）。`step(state) -> state` は手順 1 のみを行う純関数で、
      乱数は注入された `np.random.Generator` からだけ引く。
なぜ: 遷移を単体で決定的にテストでき、シード固定で再現できるようにするため。

遷移図:

    JUMPING ──▶ FALLING ──(y ≤ 0)──▶ CRUISING ◀──────────────┐
                                       │ 30 ティックごとに 7 状態から一様抽選
    SPINNING ──(yaw ≥ 2π)──────────────┤                       │
    WHEELIE_RISING ──(pitch ≥ π/4)──▶ WHEELIE_HOLDING ──(80)──▶ WHEELIE_LOWERING ──(pitch ≤ 0)─┘

補足:
- 毎ティック先に前進加速度 `thrust` を積み増す。FALLING はその後で加速度を重力値で上書きする。
- `timer` は状態に入るたびに 0 から数え直す。
"""

from __future__ import annotations

import math
from enum import Enum

import numpy as np

from common.types import ZERO3, Vec3, as_vec3

from .registry import behavior
from .state import ActorState


class LeadMode(str, Enum):
    CRUISING = "cruising"
    SPINNING = "spinning"
    JUMPING = "jumping"
    FALLING = "falling"
    WHEELIE_RISING = "wheelie_rising"
    WHEELIE_HOLDING = "wheelie_holding"
    WHEELIE_LOWERING = "wheelie_lowering"


_MODES = tuple(LeadMode)


@behavior("lead")
class LeadBehavior:
    """先頭車の振る舞い。定数はクラス属性で上書きできる。"""

    uses_rng = True

    thrust = 0.0012
    reroll_interval = 30
    spin_step = 0.1
    launch_velocity = 0.4
    gravity: Vec3 = (0.0, -0.03, -0.0015)
    wheelie_rise = 0.04
    wheelie_limit = math.pi / 4.0
    wheelie_hold = 80
    wheelie_lower = 0.08

    def __init__(
        self,
        rng: np.random.Generator | None = None,
        *,
        max_speed: float = 0.3,
        start_mode: LeadMode = LeadMode.JUMPING,
    ) -> None:
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_speed = float(max_speed)
        self.start_mode = LeadMode(start_mode)
        self._handlers = {
            LeadMode.CRUISING: self._cruising,
            LeadMode.SPINNING: self._spinning,
            LeadMode.JUMPING: self._jumping,
            LeadMode.FALLING: self._falling,
            LeadMode.WHEELIE_RISING: self._wheelie_rising,
            LeadMode.WHEELIE_HOLDING: self._wheelie_holding,
            LeadMode.WHEELIE_LOWERING: self._wheelie_lowering,
        }

    def initial_state(self, position: Vec3 = ZERO3) -> ActorState:
        return ActorState(position=as_vec3(position), mode=self.start_mode)

    def step(self, state: ActorState) -> ActorState:
        ax, ay, az = state.acceleration
        state = state.evolve(acceleration=(ax, ay, az + self.thrust))
        return self._handlers[LeadMode(state.mode)](state)

    # ---- states ----
    @staticmethod
    def _enter(state: ActorState, mode: LeadMode, **changes: object) -> ActorState:
        return state.evolve(mode=mode, timer=0, **changes)

    def _cruising(self, state: ActorState) -> ActorState:
        timer = state.timer + 1
        if timer % self.reroll_interval == 0:
            nxt = _MODES[int(self.rng.integers(len(_MODES)))]
            return self._enter(state, nxt)
        return state.evolve(timer=timer)

    def _spinning(self, state: ActorState) -> ActorState:
        pitch, yaw, roll = state.rotation
        yaw += self.spin_step
        if yaw >= 2.0 * math.pi:
            return self._enter(state, LeadMode.CRUISING, rotation=(pitch, 0.0, roll))
        return state.evolve(rotation=(pitch, yaw, roll))

    def _jumping(self, state: ActorState) -> ActorState:
        vx, _, vz = state.velocity
        return self._enter(state, LeadMode.FALLING, velocity=(vx, self.launch_velocity, vz))

    def _falling(self, state: ActorState) -> ActorState:
        gx, gy, gz = self.gravity
        x, y, z = state.position
        if y <= 0.0:
            vx, _, vz = state.velocity
            return self._enter(
                state,
                LeadMode.CRUISING,
                position=(x, 0.0, z),
                velocity=(vx, 0.0, vz),
                acceleration=(gx, 0.0, gz),
            )
        return state.evolve(acceleration=(gx, gy, gz))

    def _wheelie_rising(self, state: ActorState) -> ActorState:
        pitch, yaw, roll = state.rotation
        pitch += self.wheelie_rise
        if pitch >= self.wheelie_limit:
            return self._enter(state, LeadMode.WHEELIE_HOLDING, rotation=(pitch, yaw, roll))
        return state.evolve(rotation=(pitch, yaw, roll))

    def _wheelie_holding(self, state: ActorState) -> ActorState:
        timer = state.timer + 1
        if timer >= self.wheelie_hold:
            return self._enter(state, LeadMode.WHEELIE_LOWERING)
        return state.evolve(timer=timer)

    def _wheelie_lowering(self, state: ActorState) -> ActorState:
        pitch, yaw, roll = state.rotation
        pitch -= self.wheelie_lower
        if pitch <= 0.0:
            return self._enter(state, LeadMode.CRUISING, rotation=(0.0, yaw, roll))
        return state.evolve(rotation=(pitch, yaw, roll))


__all__ = ["LeadBehavior", "LeadMode"]
