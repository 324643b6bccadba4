import math
import random

import pytest

from wheel import (IDLE, SETTLED, SPINNING, TAU, TICK_DURATION_MS, SpinEngine, TickEmitter,
                   WheelSession, build_layout, create_session, segment_at)
from wheel_config import SegmentConfig

FRAME = 1 / 120


def _session(labels="ABCDE", duration_ms=5000, seed=5, sink=None):
    rng = random.Random(seed)
    layout = build_layout([SegmentConfig(label=label, weight=1) for label in labels])
    engine = SpinEngine(duration_ms, rng=rng, initial_angle=0.0)
    return WheelSession(layout, engine, TickEmitter(sink, rng=rng))


def _run_to_rest(wheel, dt=FRAME):
    phases = []
    while wheel.is_spinning:
        phases.append(wheel.update(dt))
    return phases


def test_idle_wheel_stays_idle() -> None:
    wheel = _session()
    assert wheel.update(FRAME) == IDLE
    assert wheel.phase == IDLE
    assert wheel.winning_label is None


def test_spin_request_is_ignored_while_spinning() -> None:
    wheel = _session()
    assert wheel.request_spin()
    wheel.update(FRAME)
    session = wheel.session
    target = wheel.engine.target_angle
    recorded = session.last_crossed_segment_index

    assert not wheel.request_spin()
    assert wheel.session is session
    assert wheel.engine.target_angle == target
    assert session.last_crossed_segment_index == recorded


def test_no_tick_on_first_frame() -> None:
    wheel = _session()
    wheel.request_spin()
    assert wheel.update(FRAME) == SPINNING
    assert wheel.ticks.count == 0
    assert wheel.session.last_crossed_segment_index is not None


def test_ticks_match_boundary_crossings() -> None:
    events = []
    wheel = _session(sink=lambda *args: events.append(args))
    wheel.request_spin()
    travel = wheel.engine.target_angle - wheel.engine.start_angle
    _run_to_rest(wheel)

    crossings = math.floor(travel / (TAU / 5))
    assert abs(wheel.ticks.count - crossings) <= 1
    assert len(events) == wheel.ticks.count
    for frequency, gain, duration in events:
        assert 550 <= frequency < 650
        assert 0.0005 <= gain < 0.0015
        assert duration == TICK_DURATION_MS


def test_winner_is_segment_under_pointer_at_target() -> None:
    wheel = _session()
    wheel.request_spin()
    phases = _run_to_rest(wheel)

    assert phases[-1] == SETTLED
    assert set(phases[:-1]) == {SPINNING}
    assert wheel.rotation == wheel.engine.target_angle
    assert wheel.winning_label == segment_at(wheel.engine.target_angle, wheel.layout).label
    assert wheel.pointer_color == segment_at(wheel.rotation, wheel.layout).color
    assert wheel.session is None
    assert wheel.update(FRAME) == IDLE


def test_new_spin_clears_previous_winner() -> None:
    wheel = _session(duration_ms=200)
    wheel.request_spin()
    _run_to_rest(wheel)
    assert wheel.winning_label is not None

    wheel.request_spin()
    assert wheel.winning_label is None
    assert wheel.session.last_crossed_segment_index is None


def test_winner_message_substitutes_label_verbatim() -> None:
    wheel = _session(labels=["{label}", "<b>"], duration_ms=100)
    assert wheel.winner_message("Winner:\n{label}") is None
    wheel.request_spin()
    _run_to_rest(wheel)
    message = wheel.winner_message("Winner:\n{label}!")
    assert message == f"Winner:\n{wheel.winning_label}!"


@pytest.mark.parametrize("seed", range(5))
def test_weights_bias_the_outcome(seed) -> None:
    configs = [SegmentConfig(label="big", weight=9), SegmentConfig(label="small", weight=1)]
    wheel = create_session(configs, duration_ms=50, rng=random.Random(seed))
    wins = {"big": 0, "small": 0}
    for _ in range(100):
        wheel.request_spin()
        _run_to_rest(wheel)
        wins[wheel.winning_label] += 1
    assert wins["big"] > wins["small"]


def test_create_session_starts_at_random_rotation() -> None:
    wheel = create_session([SegmentConfig(label="a", weight=1)], 1000, rng=random.Random(2))
    assert 0.0 <= wheel.rotation < TAU
    assert wheel.phase == IDLE
