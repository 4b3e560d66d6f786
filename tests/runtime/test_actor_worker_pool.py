from __future__ import annotations

import numpy as np
import pytest

from engine.core.mesh import Mesh
from engine.runtime.draw_queue import DrawQueue
from engine.runtime.worker import ActorTaskError, ActorWorkerPool
from tests._utils.meshes import triangle_mesh


class _CountingActor:
    def __init__(self, name: str, mesh: Mesh, fail_at: int | None = None) -> None:
        self.name = name
        self.mesh = mesh
        self.steps = 0
        self.fail_at = fail_at

    def advance(self, queue: DrawQueue) -> int:
        self.steps += 1
        if self.fail_at is not None and self.steps >= self.fail_at:
            raise RuntimeError(f"{self.name} exploded")
        m = np.eye(4)
        m[3, 2] = self.steps
        queue.submit(self.mesh, m, producer=self.name)
        return self.steps


def _actors(n: int, **kwargs) -> list[_CountingActor]:  # noqa: ANN003
    mesh = triangle_mesh()
    return [_CountingActor(f"a{i}", mesh, **kwargs) for i in range(n)]


def test_inline_pool_steps_once_per_release() -> None:
    q = DrawQueue()
    actors = _actors(3)
    pool = ActorWorkerPool(actors, q, workers=0)
    assert pool.inline and pool.worker_count == 0
    pool.start()
    assert [a.steps for a in actors] == [1, 1, 1]
    for _ in range(4):
        pool.release_all()
    assert [a.steps for a in actors] == [5, 5, 5]
    assert pool.frame_id == 4
    assert pool.wait_frame(0.0) is True
    # 生産者ごとに最新の 1 件だけが残る
    entries = q.drain_all()
    assert sorted(c.producer for c in entries) == ["a0", "a1", "a2"]
    assert all(c.transform[3, 2] == 5.0 for c in entries)


def test_release_before_start_raises() -> None:
    pool = ActorWorkerPool(_actors(1), DrawQueue(), workers=0)
    with pytest.raises(RuntimeError):
        pool.release_all()


def test_close_is_idempotent_and_stops_releases() -> None:
    actors = _actors(2)
    pool = ActorWorkerPool(actors, DrawQueue(), workers=0)
    pool.start()
    pool.close()
    pool.close()
    assert pool.closed
    pool.release_all()
    assert [a.steps for a in actors] == [1, 1]


def test_inline_error_is_wrapped_with_actor_context() -> None:
    actors = _actors(1, fail_at=3)
    pool = ActorWorkerPool(actors, DrawQueue(), workers=0)
    pool.start()
    pool.release_all()
    with pytest.raises(ActorTaskError) as ei:
        pool.release_all()
    assert ei.value.actor == "a0"
    assert ei.value.frame_id == 2
    assert isinstance(ei.value.original, RuntimeError)


def test_default_worker_count_is_one_per_actor() -> None:
    pool = ActorWorkerPool(_actors(3), DrawQueue())
    assert pool.worker_count == 3
    shared = ActorWorkerPool(_actors(5), DrawQueue(), workers=2)
    assert shared.worker_count == 2
    pool.close()
    shared.close()


@pytest.mark.integration
def test_threaded_pool_advances_each_actor_exactly_once_per_frame() -> None:
    q = DrawQueue()
    actors = _actors(3)
    pool = ActorWorkerPool(actors, q)
    try:
        pool.start()
        assert pool.wait_frame(2.0)
        for frame in range(1, 6):
            pool.release_all()
            assert pool.wait_frame(2.0)
            assert [a.steps for a in actors] == [frame + 1] * 3
            drained = q.drain_all()
            assert len(drained) == 3
    finally:
        pool.close()
    assert pool.closed


@pytest.mark.integration
def test_threaded_pool_shares_workers_between_actors() -> None:
    actors = _actors(4)
    pool = ActorWorkerPool(actors, DrawQueue(), workers=2)
    try:
        pool.start()
        assert pool.wait_frame(2.0)
        pool.release_all()
        assert pool.wait_frame(2.0)
        assert [a.steps for a in actors] == [2, 2, 2, 2]
    finally:
        pool.close()


@pytest.mark.integration
def test_threaded_error_is_reraised_on_caller() -> None:
    actors = _actors(2)
    actors[1].fail_at = 2
    pool = ActorWorkerPool(actors, DrawQueue())
    try:
        pool.start()
        assert pool.wait_frame(2.0)
        pool.raise_pending()
        pool.release_all()
        assert pool.wait_frame(2.0)
        with pytest.raises(ActorTaskError) as ei:
            pool.raise_pending()
        assert ei.value.actor == "a1"
    finally:
        pool.close()
