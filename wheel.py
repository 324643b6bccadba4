# =============================================================================
# Prize Wheel Engine
# The spin/selection core of the prize wheel overlay. Nothing in here touches
# pygame, so the whole wheel can be simulated frame by frame without a display.
#
# Pieces, leaf-first:
# - Colors:        explicit hex colors, or a stable color derived from a label.
# - Layout:        the ordered, weighted segments of one wheel.
# - Spin engine:   randomized target rotation and quintic ease-out animation.
# - Hit-test:      which segment sits under the fixed pointer at a rotation.
# - Ticks:         randomized "tick" cues fired on segment-boundary crossings.
# - Wheel session: the idle -> spinning -> settled state machine tying it up.
#
# Angles are radians, 0 points right and angles grow clockwise (screen Y down).
# =============================================================================

import hashlib
import logging
import math
import random
import string
from collections import namedtuple
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

TAU = 2 * math.pi

# --- SPIN PHYSICS ---
MIN_EXTRA_TURNS = 10.0    # Minimum number of full rotations for a spin.
MAX_EXTRA_TURNS = 14.0    # Upper bound (exclusive) on full rotations.
MAX_FRAME_DT    = 0.1     # Largest time step (seconds) a single frame may advance.

# The pointer sits at the TOP of the wheel: 1.5*pi with 0=right, clockwise.
POINTER_ANGLE = 1.5 * math.pi

# --- TICK SOUND ---
TICK_PITCH_RANGE_HZ = (550.0, 650.0)
TICK_GAIN_RANGE     = (0.0005, 0.0015)
TICK_DURATION_MS    = 30

# --- DERIVED COLOR RANGES ---
HUE_RANGE        = (0.0, 360.0)
SATURATION_RANGE = (0.7, 0.9)
VALUE_RANGE      = (0.8, 0.95)

HEX_DIGITS = frozenset(string.hexdigits)

# --- WHEEL PHASES ---
IDLE     = "idle"
SPINNING = "spinning"
SETTLED  = "settled"


# ========= COLORS =========

def parse_hex_color(text):
    """
    Parses '#RRGGBB' or 'RRGGBB' (any case) into an (r, g, b) tuple.
    Anything else - wrong length, non-hex digits, not a string - gives None.
    """
    if not isinstance(text, str):
        return None
    digits = text.lstrip("#")
    if len(digits) != 6 or any(ch not in HEX_DIGITS for ch in digits):
        return None
    return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))

def hsv_to_rgb(h: float, s: float, v: float) -> Tuple[int, int, int]:
    """Six-sector HSV -> RGB. Hue in degrees; channels truncated to 0-255."""
    c = v * s
    x = c * (1 - abs((h / 60.0) % 2 - 1))
    m = v - c
    if h < 60:    r, g, b = c, x, 0.0
    elif h < 120: r, g, b = x, c, 0.0
    elif h < 180: r, g, b = 0.0, c, x
    elif h < 240: r, g, b = 0.0, x, c
    elif h < 300: r, g, b = x, 0.0, c
    else:         r, g, b = c, 0.0, x
    return (int((r + m) * 255), int((g + m) * 255), int((b + m) * 255))

def stable_hash(seed: str) -> int:
    """64-bit hash of a string that does not change between runs."""
    digest = hashlib.blake2b(seed.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big")

def derived_color(seed: str) -> Tuple[int, int, int]:
    """A bright, saturated color that is always the same for the same seed."""
    rng = random.Random(stable_hash(seed))
    hue = rng.uniform(*HUE_RANGE)
    sat = rng.uniform(*SATURATION_RANGE)
    val = rng.uniform(*VALUE_RANGE)
    return hsv_to_rgb(hue, sat, val)

def resolve_color(explicit: Optional[str], fallback_seed: str) -> Tuple[int, int, int]:
    """Uses the explicit hex color when it parses, otherwise derives one from the seed."""
    color = parse_hex_color(explicit) if explicit is not None else None
    if color is None:
        if explicit is not None:
            logger.debug("Ignoring unparsable color %r for %r", explicit, fallback_seed)
        color = derived_color(fallback_seed)
    return color

def is_bright(color) -> bool:
    """True if black text reads better than white text on this color."""
    r, g, b = color[:3]
    return (0.299 * r + 0.587 * g + 0.114 * b) > 128


# ========= LAYOUT =========

@dataclass(frozen=True)
class Segment:
    label: str
    weight: int
    color: Tuple[int, int, int]


@dataclass(frozen=True)
class WheelLayout:
    """
    The ordered segments of one wheel. Segment i occupies an arc of
    2*pi * weight / total_weight, arcs laid end to end starting at angle 0.
    A wheel whose weights are all zero is drawn and hit-tested as if every
    segment had the same weight.
    """
    segments: Tuple[Segment, ...]
    total_weight: int

    def __len__(self):
        return len(self.segments)

    def arc_width(self, segment: Segment) -> float:
        if self.total_weight <= 0:
            return TAU / len(self.segments)
        return TAU * segment.weight / self.total_weight

    def arcs(self) -> Iterator[Tuple[float, float, Segment]]:
        """Yields (start_angle, width, segment) in wheel order."""
        cursor = 0.0
        for seg in self.segments:
            width = self.arc_width(seg)
            yield cursor, width, seg
            cursor += width


def build_layout(configs) -> WheelLayout:
    """
    Builds the wheel from configured segments (anything with label, weight
    and color attributes). Input order is the order around the wheel.
    """
    segments = tuple(
        Segment(label=c.label, weight=c.weight, color=resolve_color(c.color, c.label))
        for c in configs
    )
    if not segments:
        raise ValueError("a wheel needs at least one segment")
    total_weight = sum(s.weight for s in segments)
    if total_weight == 0:
        logger.warning("All segment weights are zero; treating them as equal")
    return WheelLayout(segments=segments, total_weight=total_weight)


# ========= HIT-TEST =========

SegmentHit = namedtuple("SegmentHit", "index label color")

def normalize_angle(angle: float) -> float:
    """Maps any real angle into [0, 2*pi)."""
    result = angle % TAU
    # float rounding can land exactly on 2*pi for tiny negative inputs
    return 0.0 if result >= TAU else result

def segment_at(angle: float, layout: WheelLayout) -> SegmentHit:
    """Returns the segment under the pointer when the wheel is rotated by `angle`."""
    hit_angle = normalize_angle(POINTER_ANGLE - angle)
    for index, (start, width, seg) in enumerate(layout.arcs()):
        if start <= hit_angle < start + width:
            return SegmentHit(index, seg.label, seg.color)
    # Accumulated widths can fall a hair short of 2*pi; the gap belongs to the last segment.
    last = len(layout.segments) - 1
    seg = layout.segments[last]
    return SegmentHit(last, seg.label, seg.color)


# ========= EASING =========

def ease_out_quint(x: float) -> float:
    """Quintic easing: starts fast and decelerates smoothly to a stop."""
    return 1 - pow(1 - x, 5)


# ========= SPIN ENGINE =========

@dataclass
class SpinSession:
    """Bookkeeping for one spin, from start until it settles."""
    start_angle: float
    target_angle: float
    last_crossed_segment_index: Optional[int] = None


class SpinEngine:
    """
    Owns the wheel's rotation. The angle is never wrapped back into
    [0, 2*pi): every spin starts from wherever the last one stopped, so the
    angle keeps growing. A float has range to spare for any realistic
    session, and only the hit-test normalizes it.
    """
    def __init__(self, duration_ms: float, rng: Optional[random.Random] = None, initial_angle: float = 0.0):
        self.rng = rng if rng is not None else random.Random()
        self.duration = duration_ms / 1000.0
        self.current_angle = initial_angle
        self.start_angle = initial_angle
        self.target_angle = initial_angle
        self.elapsed_time = 0.0
        self.is_spinning = False

    def start_spin(self) -> SpinSession:
        """Picks a target at least 10 full turns ahead and starts animating towards it."""
        extra_turns = self.rng.uniform(MIN_EXTRA_TURNS, MAX_EXTRA_TURNS)
        random_offset = self.rng.uniform(0.0, TAU)
        self.start_angle = self.current_angle
        self.target_angle = self.current_angle + extra_turns * TAU + random_offset
        self.elapsed_time = 0.0
        self.is_spinning = True
        return SpinSession(self.start_angle, self.target_angle)

    def progress(self) -> float:
        if self.duration <= 0:
            return 1.0
        return min(1.0, max(0.0, self.elapsed_time / self.duration))

    def advance(self, delta_time: float) -> Tuple[float, bool]:
        """
        Moves the animation forward by one frame. Returns (current_angle, finished);
        finished is True only on the frame the spin reaches its target.
        """
        if not self.is_spinning:
            return self.current_angle, False

        # Frame-rate hitches or a lost window focus must not jump the wheel.
        self.elapsed_time += min(MAX_FRAME_DT, max(0.0, delta_time))
        t = self.progress()
        if t >= 1.0:
            self.current_angle = self.target_angle
            self.is_spinning = False
            return self.current_angle, True

        eased = ease_out_quint(t)
        self.current_angle = self.start_angle + eased * (self.target_angle - self.start_angle)
        return self.current_angle, False


# ========= TICKS =========

TickEvent = namedtuple("TickEvent", "frequency_hz gain duration_ms")

class TickEmitter:
    """
    Decides the pitch and volume of each tick and hands it to the audio sink.
    The sink is called as sink(frequency_hz, gain, duration_ms) and must
    return without waiting for playback.
    """
    def __init__(self, sink: Optional[Callable[[float, float, int], None]] = None, rng: Optional[random.Random] = None):
        self.sink = sink
        self.rng = rng if rng is not None else random.Random()
        self.count = 0

    def emit(self) -> TickEvent:
        event = TickEvent(
            frequency_hz=self.rng.uniform(*TICK_PITCH_RANGE_HZ),
            gain=self.rng.uniform(*TICK_GAIN_RANGE),
            duration_ms=TICK_DURATION_MS,
        )
        self.count += 1
        if self.sink is not None:
            self.sink(*event)
        return event


# ========= WHEEL SESSION =========

class WheelSession:
    """
    The wheel's state machine: idle -> spinning -> settled -> idle.
    Call request_spin() on user input and update(dt) once per frame;
    the renderer reads rotation, segments, pointer_color and winning_label.
    """
    def __init__(self, layout: WheelLayout, engine: SpinEngine, ticks: Optional[TickEmitter] = None):
        self.layout = layout
        self.engine = engine
        self.ticks = ticks if ticks is not None else TickEmitter()
        self.session: Optional[SpinSession] = None
        self.winning_label: Optional[str] = None

    # --- Render-facing state ---
    @property
    def rotation(self) -> float:
        return self.engine.current_angle

    @property
    def segments(self) -> Sequence[Segment]:
        return self.layout.segments

    @property
    def is_spinning(self) -> bool:
        return self.engine.is_spinning

    @property
    def phase(self) -> str:
        return SPINNING if self.engine.is_spinning else IDLE

    def current_segment(self) -> SegmentHit:
        return segment_at(self.engine.current_angle, self.layout)

    @property
    def pointer_color(self):
        """The pointer takes the color of whatever segment it points at."""
        return self.current_segment().color

    def winner_message(self, template: str) -> Optional[str]:
        if self.winning_label is None:
            return None
        return template.replace("{label}", self.winning_label)

    # --- Transitions ---
    def request_spin(self) -> bool:
        """Starts a spin unless one is already running. Returns True if it started."""
        if self.engine.is_spinning:
            return False
        logger.info("Starting spin...")
        self.winning_label = None
        self.session = self.engine.start_spin()
        return True

    def update(self, delta_time: float) -> str:
        """Advances one frame and returns the phase reached: idle, spinning or settled."""
        if not self.engine.is_spinning:
            return IDLE

        angle, finished = self.engine.advance(delta_time)
        hit = segment_at(angle, self.layout)

        # The segment a spin starts on was never crossed into, so it stays silent.
        if self.session.last_crossed_segment_index is None:
            self.session.last_crossed_segment_index = hit.index
        elif hit.index != self.session.last_crossed_segment_index:
            self.session.last_crossed_segment_index = hit.index
            self.ticks.emit()

        if finished:
            self.winning_label = hit.label
            self.session = None
            logger.info("Winner: %s", hit.label)
            return SETTLED
        return SPINNING


def create_session(configs, duration_ms: float, tick_sink=None, rng: Optional[random.Random] = None) -> WheelSession:
    """
    Wires up a complete wheel: layout from the configured segments, one
    random generator shared by the spin engine and tick emitter, and a
    random starting rotation.
    """
    rng = rng if rng is not None else random.Random()
    layout = build_layout(configs)
    engine = SpinEngine(duration_ms, rng=rng, initial_angle=rng.uniform(0.0, TAU))
    return WheelSession(layout, engine, TickEmitter(tick_sink, rng=rng))
