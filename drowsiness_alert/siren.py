"""
Siren Module
Generates the two-tone sweeping siren and owns the pygame audio handle

The siren sweeps exponentially from SIREN_LOW_HZ to SIREN_HIGH_HZ, holds,
sweeps back down, holds, and repeats every 2 * SIREN_HALF_PERIOD_SECONDS.
One full cycle is rendered into a buffer that holds a whole number of
waveform periods, so looping it is phase-continuous and click-free.
"""

import logging
import os

import numpy as np

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
import pygame  # noqa: E402

from drowsiness_alert.config import (  # noqa: E402
    SIREN_LOW_HZ,
    SIREN_HIGH_HZ,
    SIREN_HALF_PERIOD_SECONDS,
    SIREN_SWEEP_SECONDS,
    SIREN_VOLUME,
    SIREN_FADE_IN_MS,
    SIREN_SAMPLE_RATE,
)

logger = logging.getLogger(__name__)


def _sweep_frequency(elapsed, low, high, half_period, sweep):
    u = np.mod(np.asarray(elapsed, dtype=np.float64), 2.0 * half_period)
    rising = u < half_period
    v = np.where(rising, u, u - half_period)
    progress = np.clip(v / sweep, 0.0, 1.0)
    up = low * (high / low) ** progress
    down = high * (low / high) ** progress
    return np.where(rising, up, down)


def siren_frequency(
    elapsed,
    low=SIREN_LOW_HZ,
    high=SIREN_HIGH_HZ,
    half_period=SIREN_HALF_PERIOD_SECONDS,
    sweep=SIREN_SWEEP_SECONDS,
):
    """
    Nominal siren frequency a given time after the siren started.

    Args:
        elapsed: Seconds since the siren started
        low: Lowest frequency (Hz)
        high: Highest frequency (Hz)
        half_period: Seconds per sweep up or down
        sweep: Length of the exponential ramp inside each half period

    Returns:
        Frequency in Hz (float)
    """
    return float(_sweep_frequency(elapsed, low, high, half_period, sweep))


def build_siren_wave(
    sample_rate=SIREN_SAMPLE_RATE,
    volume=SIREN_VOLUME,
    low=SIREN_LOW_HZ,
    high=SIREN_HIGH_HZ,
    half_period=SIREN_HALF_PERIOD_SECONDS,
    sweep=SIREN_SWEEP_SECONDS,
):
    """
    Render one full siren cycle as mono 16-bit PCM.

    The frequency curve is scaled by a tiny factor so the cycle holds an
    integer number of waveform periods; the buffer starts and ends at phase 0.

    Returns:
        1-D numpy int16 array of length 2 * half_period * sample_rate
    """
    n_samples = int(round(2.0 * half_period * sample_rate))
    t = np.arange(n_samples, dtype=np.float64) / sample_rate
    freq = _sweep_frequency(t, low, high, half_period, sweep)

    cycles = freq.sum() / sample_rate
    freq *= max(1.0, round(cycles)) / cycles

    phase = 2.0 * np.pi * np.concatenate(([0.0], np.cumsum(freq[:-1]))) / sample_rate
    wave = np.sin(phase) * float(np.clip(volume, 0.0, 1.0)) * 32767
    return wave.astype(np.int16)


class SirenPlayer:
    """
    pygame mixer handle for the looping siren.

    Audio availability is decided once, here, at construction. When the mixer
    cannot be opened every method is a no-op and `available` is False.
    """

    def __init__(self, sample_rate=SIREN_SAMPLE_RATE, volume=SIREN_VOLUME):
        """
        Initialize pygame mixer and pre-render the siren.

        Args:
            sample_rate: Requested mixer sample rate
            volume: Siren amplitude (0.0 to 1.0)
        """
        self.available = False
        self.sound = None
        self.channel = None
        self._fading = []
        self._owns_mixer = False

        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init(frequency=sample_rate, size=-16, channels=1)
                self._owns_mixer = True

            mixer_rate, _size, mixer_channels = pygame.mixer.get_init()
            wave = build_siren_wave(sample_rate=mixer_rate, volume=volume)
            if mixer_channels > 1:
                wave = np.repeat(wave[:, np.newaxis], mixer_channels, axis=1)

            self.sound = pygame.sndarray.make_sound(wave)
            self.available = True
            logger.info("[ALARM] Siren ready (%d Hz, %d channel(s))", mixer_rate, mixer_channels)
        except pygame.error as e:
            logger.warning("[ALARM] Audio alerts disabled (pygame mixer not available): %s", e)

    def start(self):
        """Start looping the siren with a short fade-in on a free channel."""
        if not self.available:
            return
        self._fading = [ch for ch in self._fading if ch.get_busy()]
        try:
            self.channel = self.sound.play(loops=-1, fade_ms=SIREN_FADE_IN_MS)
        except pygame.error as e:
            logger.error("[ALARM] Siren playback failed: %s", e)
            self.channel = None
            return
        if self.channel is None:
            logger.warning("[ALARM] No free mixer channel for siren")

    def fade_out(self, duration_ms):
        """
        Ramp the amplitude down to silence over duration_ms.

        The fading channel is detached so a new start() plays alongside it
        while the fade finishes.
        """
        if self.channel is not None:
            self.channel.fadeout(int(duration_ms))
            self._fading.append(self.channel)
            self.channel = None

    def release(self):
        """Stop playback immediately, fading channels included."""
        for channel in self._fading:
            channel.stop()
        self._fading = []
        if self.channel is not None:
            self.channel.stop()
            self.channel = None

    def close(self):
        """Release the channel and shut the mixer down if we opened it."""
        self.release()
        if self._owns_mixer and pygame.mixer.get_init():
            pygame.mixer.quit()
        self._owns_mixer = False
        self.available = False
