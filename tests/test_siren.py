import numpy as np
import pygame
import pytest

from drowsiness_alert.siren import SirenPlayer, build_siren_wave, siren_frequency


@pytest.mark.parametrize(
    "elapsed, expected",
    [
        (0.0, 800.0),
        (0.5, 1600.0),
        (0.75, 1600.0),
        (1.0, 1600.0),
        (1.5, 800.0),
        (1.9, 800.0),
        (2.0, 800.0),
        (2.5, 1600.0),
    ],
)
def test_frequency_profile(elapsed, expected):
    assert siren_frequency(elapsed) == pytest.approx(expected)


def test_sweeps_are_smooth_and_bounded():
    t = np.linspace(0.0, 4.0, 4001)
    freq = np.array([siren_frequency(x) for x in t])
    assert freq.min() >= 800.0 - 1e-9
    assert freq.max() <= 1600.0 + 1e-9
    # 1 ms steps never jump by more than a few Hz
    assert np.abs(np.diff(freq)).max() < 5.0


def test_sweep_midpoint_is_geometric():
    assert siren_frequency(0.25) == pytest.approx(800.0 * 2 ** 0.5)
    assert siren_frequency(1.25) == pytest.approx(800.0 * 2 ** 0.5)


def test_wave_buffer_shape_and_level():
    wave = build_siren_wave(sample_rate=22050, volume=0.5)
    assert wave.dtype == np.int16
    assert wave.ndim == 1
    assert len(wave) == 2 * 22050
    assert np.abs(wave.astype(np.int32)).max() <= int(0.5 * 32767)


def test_wave_loops_without_a_jump():
    volume = 0.5
    wave = build_siren_wave(sample_rate=22050, volume=volume)
    assert wave[0] == 0
    # The last sample sits one low-frequency step before phase 0
    assert abs(int(wave[-1])) < 0.3 * 32767 * volume


def test_player_degrades_without_mixer(monkeypatch):
    def no_device(*args, **kwargs):
        raise pygame.error("No available audio device")

    monkeypatch.setattr(pygame.mixer, "get_init", lambda: None)
    monkeypatch.setattr(pygame.mixer, "init", no_device)

    player = SirenPlayer()
    assert player.available is False

    player.start()
    player.fade_out(500)
    player.release()
    assert player.channel is None


class RecordingChannel:
    def __init__(self):
        self.busy = True
        self.calls = []

    def get_busy(self):
        return self.busy

    def fadeout(self, ms):
        self.calls.append(("fadeout", ms))

    def stop(self):
        self.busy = False
        self.calls.append("stop")


class RecordingSound:
    def __init__(self):
        self.channels = []

    def play(self, loops=0, fade_ms=0):
        channel = RecordingChannel()
        self.channels.append(channel)
        return channel


@pytest.fixture
def offline_player(monkeypatch):
    def no_device(*args, **kwargs):
        raise pygame.error("No available audio device")

    monkeypatch.setattr(pygame.mixer, "get_init", lambda: None)
    monkeypatch.setattr(pygame.mixer, "init", no_device)
    player = SirenPlayer()
    player.available = True
    player.sound = RecordingSound()
    return player


def test_restart_during_fade_leaves_old_channel_fading(offline_player):
    offline_player.start()
    first = offline_player.channel
    offline_player.fade_out(500)
    offline_player.start()

    second = offline_player.channel
    assert second is not first
    assert first.calls == [("fadeout", 500)]
    assert second.calls == []


def test_release_stops_fading_and_current_channels(offline_player):
    offline_player.start()
    first = offline_player.channel
    offline_player.fade_out(500)
    offline_player.start()
    second = offline_player.channel

    offline_player.release()
    assert first.calls[-1] == "stop"
    assert second.calls == ["stop"]
    assert offline_player.channel is None
