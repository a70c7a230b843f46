import pytest

from drowsiness_alert.alerter import AlarmScheduler, SirenPhase
from drowsiness_alert.errors import AudioUnavailableError

from conftest import FakeSirenPlayer


def tick(alarm, clock, seconds):
    clock.advance(seconds)
    alarm.run_pending()


def test_trigger_twice_starts_one_session(alarm, player):
    alarm.trigger()
    alarm.trigger()
    assert player.calls.count("start") == 1
    assert alarm.phase is SirenPhase.RAMPING_UP
    assert alarm.is_active
    assert alarm.alert_visible


def test_silence_while_idle_is_a_no_op(alarm, player):
    alarm.silence()
    assert player.calls == []
    assert alarm.pending_steps == 0
    assert alarm.phase is SirenPhase.IDLE


def test_phase_alternates_every_half_period(alarm, clock):
    alarm.trigger()
    tick(alarm, clock, 0.75)
    assert alarm.phase is SirenPhase.RAMPING_UP
    tick(alarm, clock, 0.25)
    assert alarm.phase is SirenPhase.RAMPING_DOWN
    tick(alarm, clock, 1.0)
    assert alarm.phase is SirenPhase.RAMPING_UP


def test_late_pump_catches_up_on_flips(alarm, clock):
    alarm.trigger()
    tick(alarm, clock, 3.5)
    assert alarm.phase is SirenPhase.RAMPING_DOWN
    assert not alarm.alert_visible
    assert alarm.is_active


def test_silence_fades_then_releases(alarm, player, clock):
    alarm.trigger()
    alarm.silence()
    assert alarm.phase is SirenPhase.RELEASING
    assert not alarm.is_active
    assert not alarm.alert_visible
    assert ("fade_out", 500) in player.calls
    assert "release" not in player.calls

    tick(alarm, clock, 0.25)
    assert alarm.phase is SirenPhase.RELEASING
    tick(alarm, clock, 0.25)
    assert alarm.phase is SirenPhase.IDLE
    assert player.calls.count("release") == 1
    assert alarm.pending_steps == 0


def test_second_silence_during_fade_is_a_no_op(alarm, player, clock):
    alarm.trigger()
    alarm.silence()
    steps = alarm.pending_steps
    alarm.silence()
    assert [c for c in player.calls if c != "start"] == [("fade_out", 500)]
    assert alarm.pending_steps == steps

    tick(alarm, clock, 0.5)
    assert player.calls.count("release") == 1


def test_pending_flip_cannot_rearm_after_silence(alarm, clock):
    alarm.trigger()
    tick(alarm, clock, 0.9)
    alarm.silence()
    tick(alarm, clock, 0.2)  # past the old flip deadline
    assert alarm.phase is SirenPhase.RELEASING
    tick(alarm, clock, 5.0)
    assert alarm.phase is SirenPhase.IDLE
    assert alarm.pending_steps == 0


def test_visual_alert_clears_after_alarm_duration(alarm, clock):
    alarm.trigger()
    tick(alarm, clock, 2.5)
    assert alarm.alert_visible
    tick(alarm, clock, 0.5)
    assert not alarm.alert_visible
    assert alarm.is_active


def test_each_trigger_clears_on_its_own_timeout(alarm, clock):
    alarm.trigger()
    tick(alarm, clock, 1.0)
    alarm.trigger()
    tick(alarm, clock, 2.0)  # 3 s after the first trigger
    assert not alarm.alert_visible
    assert alarm.is_active


def test_hide_alert_drops_every_pending_clear(alarm, clock):
    alarm.trigger()
    tick(alarm, clock, 1.0)
    alarm.trigger()
    alarm.hide_alert()
    assert not alarm.alert_visible
    assert alarm.pending_steps == 1  # only the next phase flip


def test_trigger_during_release_restarts_cleanly(alarm, player, clock):
    alarm.trigger()
    alarm.silence()
    tick(alarm, clock, 0.2)
    alarm.trigger()
    assert player.calls == ["start", ("fade_out", 500), "start"]
    assert alarm.phase is SirenPhase.RAMPING_UP

    tick(alarm, clock, 0.5)  # the old release deadline
    assert alarm.is_active
    assert "release" not in player.calls


def test_test_siren_during_release_does_not_cut_the_fade(alarm, player, clock):
    alarm.trigger()
    alarm.silence()
    alarm.test_siren(2.0)
    assert player.calls == ["start", ("fade_out", 500), "start"]
    assert alarm.is_active


def test_cancel_all_stops_immediately(alarm, player, clock):
    alarm.trigger()
    tick(alarm, clock, 1.2)
    alarm.cancel_all()
    assert alarm.phase is SirenPhase.IDLE
    assert alarm.pending_steps == 0
    assert not alarm.alert_visible
    assert player.calls[-1] == "release"

    tick(alarm, clock, 10.0)
    assert player.calls.count("start") == 1


def test_cancel_all_during_fade(alarm, player, clock):
    alarm.trigger()
    alarm.silence()
    alarm.cancel_all()
    assert player.calls.count("release") == 1
    tick(alarm, clock, 1.0)
    assert player.calls.count("release") == 1


def test_test_siren_runs_for_duration(alarm, player, clock):
    alarm.test_siren(2.0)
    assert alarm.is_active
    assert not alarm.alert_visible
    tick(alarm, clock, 2.0)
    assert alarm.phase is SirenPhase.RELEASING
    tick(alarm, clock, 0.5)
    assert alarm.phase is SirenPhase.IDLE


def test_stale_test_stop_does_not_silence_new_session(alarm, clock):
    alarm.test_siren(2.0)
    alarm.cancel_all()
    alarm.trigger()
    tick(alarm, clock, 2.5)
    assert alarm.is_active


def test_current_frequency(alarm, clock):
    assert alarm.current_frequency() == 0.0
    alarm.trigger()
    assert alarm.current_frequency() == pytest.approx(800.0)
    tick(alarm, clock, 0.5)
    assert alarm.current_frequency() == pytest.approx(1600.0)
    tick(alarm, clock, 0.75)
    assert alarm.phase is SirenPhase.RAMPING_DOWN
    assert alarm.current_frequency() == pytest.approx(800.0 * 2 ** 0.5)


def test_audio_unavailable_keeps_visual_alert(clock):
    player = FakeSirenPlayer(available=False)
    alarm = AlarmScheduler(player=player, clock=clock)
    assert alarm.audio_enabled is False

    alarm.trigger()
    assert alarm.alert_visible
    assert alarm.phase is SirenPhase.IDLE
    assert "start" not in player.calls

    tick(alarm, clock, 3.0)
    assert not alarm.alert_visible


def test_require_audio_raises_at_construction(clock):
    with pytest.raises(AudioUnavailableError):
        AlarmScheduler(player=FakeSirenPlayer(available=False), clock=clock, require_audio=True)


def test_close_releases_player(alarm, player):
    alarm.trigger()
    alarm.close()
    assert player.calls[-2:] == ["release", "close"]
    assert alarm.audio_enabled is False


def test_flip_with_stale_token_is_ignored(alarm):
    alarm.trigger()
    token = alarm._generation
    alarm.silence()
    steps = alarm.pending_steps

    alarm._flip(token)
    assert alarm.phase is SirenPhase.RELEASING
    assert alarm.pending_steps == steps
