from __future__ import annotations

import threading

import pytest

from engine.runtime.gate import FrameLatch, TickGate


def test_tick_gate_release_is_consumed_once() -> None:
    gate = TickGate()
    gate.release()
    gate.release()
    assert gate.released
    assert gate.wait(0.1) is True
    assert gate.wait(0.01) is False


def test_tick_gate_wakes_waiting_thread() -> None:
    gate = TickGate()
    result: list[bool] = []
    t = threading.Thread(target=lambda: result.append(gate.wait(2.0)))
    t.start()
    gate.release()
    t.join(2.0)
    assert result == [True]


def test_tick_gate_cancel_returns_false() -> None:
    gate = TickGate(released=True)
    gate.cancel()
    assert gate.cancelled
    assert gate.wait(0.1) is False


def test_frame_latch_counts_down_and_resets() -> None:
    latch = FrameLatch(2)
    assert latch.wait(0.01) is False
    latch.count_down()
    latch.count_down()
    latch.count_down()
    assert latch.remaining == 0
    assert latch.wait(0.01) is True
    latch.reset()
    assert latch.remaining == 2


def test_frame_latch_ignores_stale_generation() -> None:
    latch = FrameLatch(1)
    latch.reset(generation=3)
    latch.count_down(2)
    assert latch.remaining == 1
    latch.count_down(3)
    assert latch.wait(0.01) is True


def test_frame_latch_rejects_negative_parties() -> None:
    with pytest.raises(ValueError):
        FrameLatch(-1)
