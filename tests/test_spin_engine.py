import random

import pytest

from wheel import MAX_FRAME_DT, TAU, SpinEngine, ease_out_quint


def test_ease_out_quint_endpoints_and_shape() -> None:
    assert ease_out_quint(0.0) == 0.0
    assert ease_out_quint(1.0) == 1.0
    assert ease_out_quint(0.5) == pytest.approx(1 - 0.5 ** 5)
    # starts fast: more than half the distance in the first fifth
    assert ease_out_quint(0.2) > 0.5


def test_start_spin_target_is_at_least_ten_turns_ahead() -> None:
    rng = random.Random(7)
    for start in (0.0, 3.0, 1234.5):
        engine = SpinEngine(5000, rng=rng, initial_angle=start)
        for _ in range(200):
            session = engine.start_spin()
            assert session.start_angle == start
            assert 10 * TAU <= session.target_angle - session.start_angle < 15 * TAU
            engine.is_spinning = False


def test_advance_is_a_no_op_when_idle() -> None:
    engine = SpinEngine(5000, rng=random.Random(1), initial_angle=2.0)
    assert engine.advance(0.05) == (2.0, False)
    assert engine.elapsed_time == 0.0


def test_frame_delta_is_clamped() -> None:
    engine = SpinEngine(1000, rng=random.Random(1))
    engine.start_spin()
    angle, finished = engine.advance(10.0)
    assert engine.elapsed_time == MAX_FRAME_DT
    assert not finished
    assert engine.start_angle < angle < engine.target_angle
    engine.advance(-1.0)
    assert engine.elapsed_time == MAX_FRAME_DT


def test_spin_lands_exactly_on_target_and_finishes_once() -> None:
    engine = SpinEngine(1000, rng=random.Random(3))
    session = engine.start_spin()
    finishes = 0
    previous = engine.current_angle
    for _ in range(200):
        angle, finished = engine.advance(1 / 60)
        assert angle >= previous
        previous = angle
        finishes += finished
    assert finishes == 1
    assert engine.current_angle == session.target_angle
    assert not engine.is_spinning


def test_zero_duration_finishes_on_first_frame() -> None:
    engine = SpinEngine(0, rng=random.Random(3))
    session = engine.start_spin()
    assert engine.advance(0.0) == (session.target_angle, True)


def test_rotation_accumulates_across_spins() -> None:
    engine = SpinEngine(100, rng=random.Random(11), initial_angle=1.0)
    first = engine.start_spin()
    while engine.is_spinning:
        engine.advance(MAX_FRAME_DT)
    second = engine.start_spin()
    assert second.start_angle == first.target_angle
    assert second.target_angle > 20 * TAU
