"""Tests for the game session state machine and judgment loop."""

import pytest

from kalimba_hero.analysis import DetectedPitch
from kalimba_hero.core import NoteEvent, Song
from kalimba_hero.notation import create_song_from_notation
from kalimba_hero.scoring import GameSession, GameSettings, GameState, HitAccuracy, PitchSlot

C4 = 261.6255653005986
E4 = 329.6275569128699
G4 = 391.99543598174927


def pitch(frequency, clarity=0.95, volume=0.1):
    return DetectedPitch(frequency=frequency, clarity=clarity, volume=volume, timestamp=0.0)


@pytest.fixture
def song(layout17):
    # Notes at 0 s (C4) and 2 s (G4); duration 3 + 2 s tail
    return create_song_from_notation("1 - 5", "Test", bpm=60, layout=layout17)


@pytest.fixture
def session(layout17, clock):
    return GameSession(layout=layout17, clock=clock, lead_in=3.0)


class TestPitchSlot:
    """Tests for the shared latest-pitch slot."""

    def test_last_write_wins(self):
        slot = PitchSlot()
        slot.write(pitch(100.0))
        slot.write(pitch(200.0))
        latest, version = slot.read()
        assert latest.frequency == 200.0
        assert version == 2

    def test_empty(self):
        assert PitchSlot().read() == (None, 0)


class TestSettings:
    """Tests for GameSettings."""

    def test_defaults(self):
        settings = GameSettings()
        assert settings.note_speed == 5
        assert settings.hit_window_ms == 150
        assert settings.pitch_tolerance_cents == 15
        assert settings.hardware_preset_id == "17"

    def test_lookahead(self):
        assert GameSettings(note_speed=1).lookahead == pytest.approx(4.0)
        assert GameSettings(note_speed=10).lookahead == pytest.approx(1.0)

    def test_invalid_speed(self):
        with pytest.raises(ValueError):
            GameSettings(note_speed=11)

    def test_layout_from_settings(self):
        layout = GameSettings(hardware_preset_id="8", user_tuning="D").layout()
        assert len(layout) == 8
        assert layout[4].note_name == "D4"


class TestLifecycle:
    """Tests for state transitions."""

    def test_start_enters_countdown(self, session, song):
        session.start(song)
        assert session.state is GameState.COUNTDOWN
        assert session.progress == -3.0

    def test_countdown_becomes_playing(self, session, song, clock):
        session.start(song)
        clock.advance(2.0)
        session.tick()
        assert session.state is GameState.COUNTDOWN
        assert session.progress == pytest.approx(-1.0)
        clock.advance(1.5)
        session.tick()
        assert session.state is GameState.PLAYING

    def test_finishes_at_duration(self, session, song, clock):
        session.start(song)
        clock.advance(3.0 + song.duration)
        session.tick()
        assert session.state is GameState.FINISHED
        assert session.keeper.frozen

    def test_pause_freezes_clock(self, session, song, clock):
        session.start(song)
        clock.advance(3.1)
        session.tick()
        session.pause()
        assert session.state is GameState.PAUSED
        clock.advance(60.0)
        assert session.tick() == []
        session.resume()
        assert session.state is GameState.PLAYING
        session.tick()
        assert session.progress == pytest.approx(0.1)
        assert session.score.miss == 0

    def test_reset(self, session, song, clock):
        session.start(song)
        clock.advance(10.0)
        session.tick()
        session.reset()
        assert session.state is GameState.IDLE
        assert session.song is None
        assert session.score.judged == 0

    def test_tick_when_idle(self, session):
        assert session.tick() == []

    def test_restart_has_fresh_score(self, session, song, clock):
        session.start(song)
        clock.advance(10.0)
        session.tick()
        assert session.score.miss == 2
        session.start(song)
        assert session.state is GameState.COUNTDOWN
        assert session.score.judged == 0
        assert session.hits == []


class TestJudgment:
    """Tests for judging pitch samples and sweeping misses."""

    def test_hit_in_window(self, session, song, clock):
        session.start(song)
        clock.advance(3.05)
        session.pitch_slot.write(pitch(C4))
        hits = session.tick()
        assert len(hits) == 1
        hit = hits[0]
        assert hit.accuracy is HitAccuracy.GOOD
        assert hit.time_delta == pytest.approx(50.0)
        assert hit.key_index == 8
        assert session.score.score == 75

    def test_early_hit_has_negative_delta(self, session, song, clock):
        session.start(song)
        clock.advance(2.98)
        session.pitch_slot.write(pitch(C4))
        hits = session.tick()
        assert hits[0].accuracy is HitAccuracy.PERFECT
        assert hits[0].time_delta == pytest.approx(-20.0)

    def test_wrong_pitch_is_not_judged(self, session, song, clock):
        session.start(song)
        clock.advance(3.0)
        session.pitch_slot.write(pitch(E4))
        assert session.tick() == []
        assert session.score.judged == 0

    def test_pitch_outside_tolerance(self, session, song, clock):
        session.start(song)
        clock.advance(3.0)
        session.pitch_slot.write(pitch(C4 * 2 ** (20 / 1200)))
        assert session.tick() == []

    def test_unclear_pitch_is_ignored(self, session, song, clock):
        session.start(song)
        clock.advance(3.0)
        session.pitch_slot.write(pitch(C4, clarity=0.2))
        assert session.tick() == []

    def test_same_sample_judged_once(self, session, layout17, clock):
        chords = create_song_from_notation("1 1", "Test", bpm=600, layout=layout17)
        session.start(chords)
        clock.advance(3.0)
        session.pitch_slot.write(pitch(C4))
        assert len(session.tick()) == 1
        assert session.tick() == []
        session.pitch_slot.write(pitch(C4))
        assert len(session.tick()) == 1

    def test_stale_pitch_before_start_is_ignored(self, session, song, clock):
        session.pitch_slot.write(pitch(C4))
        session.start(song)
        clock.advance(3.0)
        assert session.tick() == []

    def test_passed_notes_are_missed(self, session, song, clock):
        session.start(song)
        clock.advance(3.0 + 2.5)
        misses = session.tick()
        assert [m.accuracy for m in misses] == [HitAccuracy.MISS, HitAccuracy.MISS]
        assert session.score.combo == 0
        assert misses[0].time_delta == pytest.approx(2500.0)

    def test_every_note_judged_despite_duplicate_ids(self, session, clock):
        notes = [NoteEvent(8, 0.0, 1.0, id="x"), NoteEvent(10, 2.0, 1.0, id="x")]
        with pytest.warns(UserWarning):
            song = Song(title="t", notes=notes, bpm=60)
        session.start(song)
        clock.advance(3.0 + song.duration)
        session.tick()
        assert session.state is GameState.FINISHED
        assert session.score.judged == 2
        assert session.score.miss == 2

    def test_hit_note_not_swept(self, session, song, clock):
        session.start(song)
        clock.advance(3.0)
        session.pitch_slot.write(pitch(C4))
        session.tick()
        clock.advance(1.0)
        assert session.tick() == []
        assert session.score.perfect == 1
        assert session.score.miss == 0

    def test_full_song(self, session, song, clock):
        session.start(song)
        clock.advance(3.0)
        session.pitch_slot.write(pitch(C4))
        session.tick()
        clock.advance(2.1)
        session.pitch_slot.write(pitch(G4))
        hits = session.tick()
        assert hits[0].accuracy is HitAccuracy.OKAY
        clock.advance(10.0)
        session.tick()
        assert session.state is GameState.FINISHED
        state = session.score
        assert state.perfect == 1 and state.okay == 1
        assert state.score == 150
        assert state.accuracy == pytest.approx(75.0)

    def test_audio_latency_compensation(self, layout17, song, clock):
        settings = GameSettings(audio_latency_ms=100)
        session = GameSession(settings, layout=layout17, clock=clock, lead_in=3.0)
        session.start(song)
        clock.advance(3.1)
        session.pitch_slot.write(pitch(C4))
        hits = session.tick()
        assert hits[0].accuracy is HitAccuracy.PERFECT
        assert hits[0].time_delta == pytest.approx(0.0, abs=1e-6)

    def test_visible_notes(self, session, song, clock):
        session.start(song)
        clock.advance(3.0)
        session.tick()
        # Default lookahead is 4 - 4/3 s
        assert [n.time for n in session.visible_notes()] == [0.0, 2.0]
        assert [n.key_index for n in session.hit_zone_notes()] == [8]
