from __future__ import annotations

import numpy as np
import pytest

from engine.core import math3d
from engine.runtime.draw_queue import DrawQueue
from vehicles import (
    ACTOR_LAYER,
    Actor,
    ActorState,
    PursuerBehavior,
    clamp_velocity,
    get_behavior,
    integrate,
    list_behaviors,
    make_behavior,
)
from vehicles.lead import LeadBehavior
from vehicles.registry import behavior
from tests._utils.meshes import triangle_mesh


def test_clamp_rescales_to_exact_max_speed() -> None:
    v = clamp_velocity((3.0, 0.0, 4.0), 0.5)
    assert np.linalg.norm(v) == pytest.approx(0.5)
    np.testing.assert_allclose(v / np.linalg.norm(v), [0.6, 0.0, 0.8])
    np.testing.assert_allclose(clamp_velocity((0.1, 0.0, 0.0), 0.5), [0.1, 0.0, 0.0])
    np.testing.assert_allclose(clamp_velocity((0.0, 0.0, 0.0), 0.0), [0.0, 0.0, 0.0])


def test_integrate_order_velocity_then_position() -> None:
    s = ActorState(position=(1.0, 0.0, 0.0), velocity=(0.1, 0.0, 0.0), acceleration=(0.0, 0.0, 0.2))
    s1 = integrate(s, max_speed=10.0)
    assert s1.velocity == pytest.approx((0.1, 0.0, 0.2))
    assert s1.position == pytest.approx((1.1, 0.0, 0.2))
    assert s1.step == 1
    # 元のスナップショットは変わらない
    assert s.position == (1.0, 0.0, 0.0)


def test_state_is_immutable_and_world_transform_matches_formula() -> None:
    s = ActorState(position=(1.0, 2.0, 3.0), rotation=(0.1, 0.2, 0.3))
    with pytest.raises(AttributeError):
        s.position = (0.0, 0.0, 0.0)  # type: ignore[misc]
    np.testing.assert_allclose(
        s.world_transform(), math3d.world_transform((1.0, 2.0, 3.0), (0.1, 0.2, 0.3))
    )


def test_pursuer_accelerates_forward_and_caps_speed() -> None:
    actor = Actor("p", triangle_mesh(), PursuerBehavior(), position=(3.0, 0.0, -10.0))
    assert actor.max_speed == 0.29
    first = actor.step()
    assert first.acceleration == pytest.approx((0.0, 0.0, 0.0004))
    for _ in range(200):
        state = actor.step()
    assert np.linalg.norm(state.velocity) == pytest.approx(0.29)
    assert state.position[0] == 3.0 and state.position[2] > -10.0


def test_advance_submits_current_world_transform() -> None:
    q = DrawQueue()
    actor = Actor("lead", triangle_mesh(), make_behavior("lead", rng=np.random.default_rng(1)))
    state = actor.advance(q)
    (cmd,) = q.drain_all()
    assert cmd.producer == "lead" and cmd.layer == ACTOR_LAYER
    assert cmd.source is state is actor.state
    np.testing.assert_allclose(cmd.transform, math3d.world_transform(state.position, state.rotation))


def test_registry_resolves_behaviors() -> None:
    assert list_behaviors() == ["lead", "pursuer"]
    assert get_behavior("Lead") is LeadBehavior
    assert isinstance(make_behavior("pursuer"), PursuerBehavior)
    assert make_behavior("lead", max_speed=0.5).max_speed == 0.5
    with pytest.raises(KeyError):
        get_behavior("tank")
    with pytest.raises(TypeError):
        behavior("not_a_class")(lambda s: s)
