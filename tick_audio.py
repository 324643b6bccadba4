# =============================================================================
# Tick Audio
# Plays the wheel's short "tick" cues through the pygame mixer. Each tick is a
# freshly synthesized sine tone; playback goes to whatever mixer channel is
# free and the caller never waits for it to finish.
# =============================================================================

import logging
import math
from array import array

import pygame

logger = logging.getLogger(__name__)

# --- MIXER SETTINGS ---
MIXER_FREQUENCY = 44100
MIXER_SIZE      = -16     # Signed 16-bit samples.
MIXER_CHANNELS  = 2
MIXER_BUFFER    = 512

SAMPLE_MAX = 32767


def tone_samples(frequency_hz, gain, duration_ms, sample_rate=MIXER_FREQUENCY, channels=MIXER_CHANNELS):
    """
    Builds interleaved signed 16-bit PCM for a sine tone.
    `gain` scales full volume (1.0 = loudest) and is clamped to [0, 1].
    """
    gain = min(1.0, max(0.0, gain))
    frame_count = int(sample_rate * duration_ms / 1000)
    step = 2 * math.pi * frequency_hz / sample_rate
    samples = array("h")
    for i in range(frame_count):
        value = int(SAMPLE_MAX * gain * math.sin(step * i))
        samples.extend([value] * channels)
    return samples


def init_mixer():
    """
    Brings up the mixer. Without audio there is no wheel: failure raises
    pygame.error and is meant to stop startup.
    """
    pygame.mixer.pre_init(MIXER_FREQUENCY, MIXER_SIZE, MIXER_CHANNELS, MIXER_BUFFER)
    if not pygame.mixer.get_init():
        pygame.mixer.init()
    return pygame.mixer.get_init()


class PygameTickPlayer:
    """Tick sink for the wheel: call it with (frequency_hz, gain, duration_ms)."""
    def __init__(self):
        mixer = pygame.mixer.get_init()
        if not mixer:
            raise pygame.error("mixer not initialized")
        self.sample_rate, _, self.channels = mixer

    def __call__(self, frequency_hz, gain, duration_ms):
        samples = tone_samples(frequency_hz, gain, duration_ms, self.sample_rate, self.channels)
        try:
            channel = pygame.mixer.Sound(buffer=samples.tobytes()).play()
        except pygame.error as e:
            logger.debug("Dropped tick: %s", e)
            return
        if channel is None:
            logger.debug("Dropped tick: no free mixer channel")
