from __future__ import annotations

import numpy as np
import pytest

from engine.core import math3d
from engine.runtime.draw_queue import DrawQueue
from engine.runtime.worker import ActorWorkerPool
from scene import pursuer_spawn
from vehicles import Actor, LeadBehavior, PursuerBehavior
from tests._utils.meshes import triangle_mesh


class _NeverRng:
    """抽選が呼ばれたら失敗させる（K フレーム以内は乱数に依存しないことの確認）。"""

    def integers(self, high: int) -> int:
        raise AssertionError("random source must not be used")


def _actors() -> list[Actor]:
    mesh = triangle_mesh()
    lead = Actor("lead", mesh, LeadBehavior(_NeverRng()))
    pursuers = [
        Actor(f"pursuer-{i}", mesh, PursuerBehavior(), position=pursuer_spawn(i, 2)) for i in range(2)
    ]
    return [lead, *pursuers]


def _expected_positions(frames: int) -> dict[str, np.ndarray]:
    """同じ振る舞いを単独で回して独立に期待値を作る。"""
    out = {}
    for actor in _actors():
        for _ in range(frames + 1):
            actor.step()
        out[actor.name] = np.asarray(actor.state.position)
    return out


@pytest.mark.parametrize("frames", [1, 5, 12])
def test_submitted_transforms_match_snapshots_inline(frames: int) -> None:
    queue = DrawQueue()
    actors = _actors()
    pool = ActorWorkerPool(actors, queue, workers=0)
    pool.start()
    for _ in range(frames):
        queue.drain_all()
        pool.release_all()
    commands = {c.producer: c for c in queue.drain_all()}
    pool.close()

    expected = _expected_positions(frames)
    assert set(commands) == {"lead", "pursuer-0", "pursuer-1"}
    for actor in actors:
        cmd = commands[actor.name]
        state = cmd.source
        assert state is actor.state
        np.testing.assert_allclose(
            cmd.transform, math3d.world_transform(state.position, state.rotation), atol=1e-12
        )
        np.testing.assert_allclose(state.position, expected[actor.name], atol=1e-12)
        assert state.step == frames + 1


@pytest.mark.integration
def test_submitted_transforms_match_snapshots_threaded() -> None:
    frames = 8
    queue = DrawQueue()
    actors = _actors()
    pool = ActorWorkerPool(actors, queue)
    try:
        pool.start()
        assert pool.wait_frame(2.0)
        for _ in range(frames):
            queue.drain_all()
            pool.release_all()
            assert pool.wait_frame(2.0)
        commands = {c.producer: c for c in queue.drain_all()}
    finally:
        pool.close()

    expected = _expected_positions(frames)
    for actor in actors:
        cmd = commands[actor.name]
        np.testing.assert_allclose(
            cmd.transform, math3d.world_transform(cmd.source.position, cmd.source.rotation)
        )
        np.testing.assert_allclose(cmd.source.position, expected[actor.name], atol=1e-12)
