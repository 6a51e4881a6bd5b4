"""Tests for loop module."""
import pytest

from garageengine.definition import LoopConfig
from garageengine.loop import FixedTimestepLoop


def _make_loop(render=None) -> tuple[FixedTimestepLoop, list[float]]:
    steps: list[float] = []
    loop = FixedTimestepLoop(
        steps.append, LoopConfig(timestep_ms=10.0, max_frame_ms=250.0), render=render
    )
    return loop, steps


def test_not_running_does_nothing():
    loop, steps = _make_loop()
    assert loop.frame(100.0) == 0
    assert steps == []


def test_fixed_steps_and_interpolation():
    loop, steps = _make_loop()
    loop.start(0.0)
    assert loop.frame(35.0) == 3
    assert steps == [10.0, 10.0, 10.0]
    assert loop.interpolation == pytest.approx(0.5)


def test_frame_time_is_capped():
    loop, steps = _make_loop()
    loop.start(0.0)
    assert loop.frame(5000.0) == 25
    assert loop.steps == 25


def test_pause_and_resume():
    rendered = []
    loop, steps = _make_loop(render=rendered.append)
    loop.start(0.0)
    loop.pause()
    assert loop.frame(100.0) == 0
    assert rendered == [0.0]
    loop.resume(1000.0)
    assert loop.frame(1020.0) == 2
    assert loop.toggle_pause(1020.0)
    assert loop.paused


def test_advance_ignores_negative_time():
    loop, steps = _make_loop()
    loop.start(0.0)
    assert loop.advance(-50.0) == 0
    assert loop.accumulator == 0.0


def test_stop():
    loop, steps = _make_loop()
    loop.start(0.0)
    loop.stop()
    assert loop.frame(100.0) == 0
