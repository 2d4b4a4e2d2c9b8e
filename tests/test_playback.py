"""Tests for the preview synthesizer and MIDI export."""

import numpy as np
import pretty_midi
import pytest
import soundfile as sf

from kalimba_hero.core import NoteEvent, Song
from kalimba_hero.notation import create_song_from_notation
from kalimba_hero.output import KALIMBA_PROGRAM, MIDIExporter
from kalimba_hero.playback import AMPLITUDE_ENVELOPE, AudioEngine, Envelope


class TestEnvelope:
    """Tests for ADSR rendering."""

    def test_length_includes_release(self):
        env = Envelope(attack=0.1, decay=0.1, sustain=0.5, release=0.2)
        assert len(env.render(0.5, 1000)) == 700

    def test_shape(self):
        env = Envelope(attack=0.1, decay=0.1, sustain=0.5, release=0.2)
        curve = env.render(0.5, 1000)
        assert curve[0] == 0.0
        assert curve.max() <= 1.0
        assert curve[300] == pytest.approx(0.5)
        assert curve[-1] < 0.01


class TestAudioEngine:
    """Tests for rendering key events."""

    def test_requires_init(self, layout17):
        engine = AudioEngine(layout17)
        with pytest.raises(RuntimeError):
            engine.render_note(8)

    def test_dispose(self, layout17):
        engine = AudioEngine(layout17).init()
        assert engine.initialized
        engine.dispose()
        assert not engine.initialized
        with pytest.raises(RuntimeError):
            engine.render_song(Song(title="t"))

    def test_render_note_length(self, layout17):
        with AudioEngine(layout17, sr=8000) as engine:
            audio = engine.render_note(8, duration=0.5)
        expected = int(round(0.5 * 8000)) + int(round(AMPLITUDE_ENVELOPE.release * 8000))
        assert len(audio) == expected
        assert audio.dtype == np.float32
        assert np.abs(audio).max() <= 0.3 + 1e-6

    def test_unknown_key(self, layout17):
        with AudioEngine(layout17) as engine:
            with pytest.raises(ValueError):
                engine.render_note(17)

    def test_chord_sums_voices(self, layout17):
        with AudioEngine(layout17, sr=8000) as engine:
            single = engine.render_note(8)
            chord = engine.render_chord([8, 8])
        assert np.allclose(chord, 2 * single)
        with AudioEngine(layout17) as engine:
            assert len(engine.render_chord([])) == 0

    def test_render_song(self, layout17):
        song = create_song_from_notation("1 3 5", "t", bpm=120, layout=layout17)
        with AudioEngine(layout17, sr=8000) as engine:
            audio = engine.render_song(song)
        assert len(audio) >= int(song.duration * 8000)
        assert np.abs(audio).max() <= 1.0
        # The first note starts at time 0
        assert np.abs(audio[:4000]).max() > 0

    def test_render_skips_missing_keys(self, layout7):
        song = Song(title="t", notes=[NoteEvent(20, 0.0, 0.5)])
        with AudioEngine(layout7, sr=8000) as engine:
            audio = engine.render_song(song)
        assert not np.any(audio)

    def test_render_to_file(self, tmp_path, layout17):
        song = create_song_from_notation("1 2", "t", bpm=120, layout=layout17)
        path = tmp_path / "out" / "preview.wav"
        with AudioEngine(layout17, sr=8000) as engine:
            engine.render_to_file(song, path)
        audio, sr = sf.read(str(path))
        assert sr == 8000
        assert len(audio) > 0


class TestMIDIExporter:
    """Tests for MIDI export."""

    def test_pitches_and_program(self, layout17):
        song = create_song_from_notation("1 (3 5)", "t", bpm=120, layout=layout17)
        midi = MIDIExporter(layout17).song_to_pretty_midi(song)
        instrument = midi.instruments[0]
        assert instrument.program == KALIMBA_PROGRAM
        assert sorted((n.start, n.pitch) for n in instrument.notes) == [
            (0.0, 60), (0.5, 64), (0.5, 67),
        ]

    def test_missing_keys_warn(self, layout7):
        song = Song(title="t", notes=[NoteEvent(3, 0.0, 0.5), NoteEvent(30, 0.5, 0.5)])
        with pytest.warns(UserWarning, match="missing"):
            midi = MIDIExporter(layout7).song_to_pretty_midi(song)
        assert len(midi.instruments[0].notes) == 1

    def test_export_file(self, tmp_path, layout17):
        song = create_song_from_notation("1 2 3", "t", bpm=100, layout=layout17)
        path = tmp_path / "midi" / "song.mid"
        MIDIExporter(layout17).export(song, path)
        loaded = pretty_midi.PrettyMIDI(str(path))
        assert [n.pitch for n in loaded.instruments[0].notes] == [60, 62, 64]
        assert loaded.instruments[0].program == KALIMBA_PROGRAM
