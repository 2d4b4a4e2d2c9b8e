"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from kalimba_hero.cli import app

runner = CliRunner()


@pytest.fixture
def tab_file(tmp_path):
    path = tmp_path / "tune.txt"
    path.write_text("1 2 3 -\n(1 5) 5", encoding="utf-8")
    return path


class TestLayoutCommands:
    """Tests for layout and presets."""

    def test_layout(self):
        result = runner.invoke(app, ["layout", "-p", "8"])
        assert result.exit_code == 0
        assert "C4" in result.stdout

    def test_unknown_preset(self):
        result = runner.invoke(app, ["layout", "-p", "99"])
        assert result.exit_code == 1
        assert "Unknown hardware preset" in result.stdout

    def test_presets(self):
        result = runner.invoke(app, ["presets"])
        assert result.exit_code == 0
        assert "34" in result.stdout


class TestCompile:
    """Tests for compile and format."""

    def test_compile(self, tab_file, tmp_path):
        output = tmp_path / "tune.json"
        result = runner.invoke(app, ["compile", str(tab_file), "-b", "120", "-o", str(output)])
        assert result.exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["title"] == "tune"
        assert data["bpm"] == 120
        assert [n["keyIndex"] for n in data["notes"]] == [8, 7, 9, 8, 10, 10]

    def test_compile_reports_skipped_tokens(self, tmp_path):
        tab = tmp_path / "bad.txt"
        tab.write_text("1 x 2", encoding="utf-8")
        result = runner.invoke(app, ["compile", str(tab)])
        assert result.exit_code == 0
        assert "Skipped 1 notation token" in result.stdout
        assert (tmp_path / "bad.json").exists()

    def test_compile_missing_file(self, tmp_path):
        result = runner.invoke(app, ["compile", str(tmp_path / "missing.txt")])
        assert result.exit_code == 1

    def test_compile_bad_time_signature(self, tab_file):
        result = runner.invoke(app, ["compile", str(tab_file), "--time-signature", "4/5"])
        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_format_round_trip(self, tab_file, tmp_path):
        output = tmp_path / "tune.json"
        runner.invoke(app, ["compile", str(tab_file), "-o", str(output)])
        result = runner.invoke(app, ["format", str(output)])
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["1 2 3 -", "(1 5) 5"]

    def test_format_builtin(self):
        result = runner.invoke(app, ["format", "mary-had-a-little-lamb"])
        assert result.exit_code == 0
        assert result.stdout.startswith("3 2 1 2")


class TestMatch:
    """Tests for the tuner-style match command."""

    def test_match(self):
        result = runner.invoke(app, ["match", "440", "30"])
        assert result.exit_code == 0
        assert "A4" in result.stdout
        assert "no match" in result.stdout


class TestDetect:
    """Tests for running a recording through the pitch detector."""

    def test_detect_tone(self, tmp_path, tone):
        import soundfile as sf

        path = tmp_path / "a4.wav"
        sf.write(str(path), tone(440.0, 1.0), 22050)
        result = runner.invoke(app, ["detect", str(path)])
        assert result.exit_code == 0
        assert "Detected Pitches" in result.stdout
        assert " 0 voiced blocks" not in result.stdout
        assert "voiced blocks" in result.stdout

    def test_detect_unsupported(self, tmp_path):
        path = tmp_path / "a4.txt"
        path.write_text("440")
        result = runner.invoke(app, ["detect", str(path)])
        assert result.exit_code == 1
        assert "Unsupported format" in result.stdout


class TestSongs:
    """Tests for the built-in songs command."""

    def test_list(self):
        result = runner.invoke(app, ["songs"])
        assert result.exit_code == 0
        assert "twinkle-twinkle" in result.stdout

    def test_export(self, tmp_path):
        result = runner.invoke(app, ["songs", "-e", str(tmp_path)])
        assert result.exit_code == 0
        assert (tmp_path / "scale-practice.json").exists()


class TestRenderAndExport:
    """Tests for render and export-midi."""

    def test_render(self, tmp_path):
        output = tmp_path / "twinkle.wav"
        result = runner.invoke(app, ["render", "twinkle-twinkle", "-o", str(output)])
        assert result.exit_code == 0
        assert output.exists()

    def test_export_midi(self, tmp_path):
        output = tmp_path / "twinkle.mid"
        result = runner.invoke(app, ["export-midi", "twinkle-twinkle", "-o", str(output)])
        assert result.exit_code == 0
        assert output.exists()

    def test_unknown_song(self, tmp_path):
        result = runner.invoke(app, ["export-midi", str(tmp_path / "nope.json")])
        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestTranscribe:
    """Tests for transcribe and import-midi."""

    def test_transcribe_missing_file(self, tmp_path):
        result = runner.invoke(app, ["transcribe", str(tmp_path / "missing.wav")])
        assert result.exit_code == 1

    def test_transcribe_silence(self, tmp_path):
        import numpy as np
        import soundfile as sf

        path = tmp_path / "silence.wav"
        sf.write(str(path), np.zeros(22050, dtype=np.float32), 22050)
        result = runner.invoke(app, ["transcribe", str(path)])
        assert result.exit_code == 1
        assert "No notes detected" in result.stdout

    def test_import_midi(self, tmp_path):
        import pretty_midi

        midi = pretty_midi.PrettyMIDI()
        melody = pretty_midi.Instrument(program=0)
        melody.notes.append(pretty_midi.Note(velocity=80, pitch=60, start=0.0, end=0.5))
        melody.notes.append(pretty_midi.Note(velocity=80, pitch=67, start=0.5, end=1.0))
        midi.instruments.append(melody)
        path = tmp_path / "melody.mid"
        midi.write(str(path))

        result = runner.invoke(app, ["import-midi", str(path)])
        assert result.exit_code == 0
        data = json.loads((tmp_path / "melody.json").read_text(encoding="utf-8"))
        assert [n["keyIndex"] for n in data["notes"]] == [8, 10]
        assert data["notation"] == "1 5"
