"""Tests for the song model, JSON files and built-in songs."""

import json
import warnings

import pytest

from kalimba_hero.core import Difficulty, NoteEvent, Song, TimeSignature
from kalimba_hero.output import export_song, import_song, load_song, load_songs, save_song, save_songs
from kalimba_hero.songbook import EXAMPLE_SONGS, example_song, example_songs


class TestTimeSignature:
    """Tests for meter parsing."""

    def test_parse_forms(self):
        assert TimeSignature.parse("3/4") == TimeSignature(3, 4)
        assert TimeSignature.parse((6, 8)) == TimeSignature(6, 8)
        assert TimeSignature.parse(None) == TimeSignature(4, 4)
        assert str(TimeSignature(7, 8)) == "7/8"

    @pytest.mark.parametrize("value", ["4", "a/4", "4/3", "0/4", "4/4/4"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            TimeSignature.parse(value)


class TestDifficulty:
    """Tests for loose difficulty normalization."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("Easy", Difficulty.EASY),
            ("HARD", Difficulty.HARD),
            (2, Difficulty.MEDIUM),
            ("4", Difficulty.EXPERT),
            (5, Difficulty.EXPERT),
            (None, Difficulty.MEDIUM),
        ],
    )
    def test_normalize(self, value, expected):
        assert Difficulty.normalize(value) is expected

    @pytest.mark.parametrize("value", ["legendary", 0, 6, 2.5, True])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            Difficulty.normalize(value)


class TestSong:
    """Tests for the Song container."""

    def test_notes_sorted_and_ids_assigned(self):
        song = Song(
            title="t",
            notes=[NoteEvent(1, 1.0, 0.5), NoteEvent(0, 0.0, 0.5)],
        )
        assert [n.time for n in song.notes] == [0.0, 1.0]
        assert all(n.id for n in song.notes)

    def test_duplicate_ids_are_reissued(self):
        notes = [NoteEvent(0, 0.0, 0.5, id="x"), NoteEvent(1, 0.5, 0.5, id="x")]
        with pytest.warns(UserWarning, match="duplicate ids"):
            song = Song(title="t", notes=notes)
        ids = [n.id for n in song.notes]
        assert ids[0] == "x"
        assert len(set(ids)) == 2

    def test_notes_are_copied(self):
        notes = [NoteEvent(0, 0.0, 0.5)]
        first = Song(title="a", notes=notes)
        second = Song(title="b", notes=notes)
        assert notes[0].id is None
        assert first.notes[0] is not notes[0]
        assert first.notes[0].id != second.notes[0].id

    def test_duration_has_tail(self):
        song = Song(title="t", notes=[NoteEvent(0, 1.0, 0.5)])
        assert song.duration == pytest.approx(3.5)

    def test_empty_song(self):
        assert Song(title="t").duration == 0.0

    def test_invalid_bpm(self):
        with pytest.raises(ValueError):
            Song(title="t", bpm=0)

    def test_invalid_note(self):
        with pytest.raises(ValueError):
            NoteEvent(0, -1.0, 0.5)
        with pytest.raises(ValueError):
            NoteEvent(0, 0.0, 0.0)

    def test_chord_groups(self):
        song = Song(
            title="t",
            notes=[NoteEvent(0, 0.0, 0.5), NoteEvent(2, 0.0, 0.5), NoteEvent(1, 0.5, 0.5)],
        )
        assert [len(g) for g in song.chord_groups()] == [2, 1]


class TestSongJson:
    """Tests for the camelCase JSON shape."""

    def test_to_dict_keys(self):
        song = Song(title="t", notes=[NoteEvent(3, 0.0, 0.6, id="n1")], author_tuning="D")
        data = song.to_dict()
        assert data["timeSignature"] == "4/4"
        assert data["notes"] == [{"keyIndex": 3, "time": 0.0, "duration": 0.6, "id": "n1"}]
        assert data["authorTuning"] == "D"
        assert "authorTineCount" not in data

    def test_round_trip(self):
        song = example_song("twinkle-twinkle")
        restored = import_song(export_song(song))
        assert restored.id == song.id
        assert restored.bpm == song.bpm
        assert restored.difficulty is Difficulty.EASY
        assert [n.signature() for n in restored.notes] == [n.signature() for n in song.notes]

    def test_missing_duration_defaults_to_step(self):
        data = {
            "id": "x",
            "title": "t",
            "bpm": 120,
            "timeSignature": "6/8",
            "notes": [{"keyIndex": 0, "time": 0}],
        }
        song = Song.from_dict(data)
        assert song.notes[0].duration == pytest.approx(0.25)

    def test_duplicate_ids_from_json(self):
        data = {
            "id": "s",
            "title": "t",
            "bpm": 60,
            "notes": [
                {"keyIndex": 8, "time": 0, "id": "n"},
                {"keyIndex": 9, "time": 1, "id": "n"},
            ],
        }
        with pytest.warns(UserWarning, match="duplicate ids"):
            song = Song.from_dict(data)
        assert len({n.id for n in song.notes}) == 2

    def test_numeric_difficulty(self):
        data = {"id": "x", "title": "t", "bpm": 100, "notes": [], "difficulty": 3}
        assert Song.from_dict(data).difficulty is Difficulty.HARD

    @pytest.mark.parametrize(
        "data",
        [
            {"title": "t", "bpm": 100, "notes": []},
            {"id": "x", "bpm": 100, "notes": []},
            {"id": "x", "title": "t", "bpm": -5, "notes": []},
            {"id": "x", "title": "t", "bpm": 100, "notes": "1 2 3"},
            {"id": "x", "title": "t", "bpm": 100, "notes": [{"time": 0}]},
            [],
        ],
    )
    def test_invalid(self, data):
        with pytest.raises(ValueError):
            Song.from_dict(data)

    def test_invalid_json_text(self):
        with pytest.raises(ValueError, match="Invalid song JSON"):
            import_song("{not json")


class TestSongFiles:
    """Tests for saving and loading song files."""

    def test_save_and_load(self, tmp_path):
        song = example_song("frere-jacques")
        path = tmp_path / "songs" / "frere.json"
        save_song(song, path)
        loaded = load_song(path)
        assert loaded.title == "Frère Jacques"
        assert len(loaded.notes) == len(song.notes)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_song(tmp_path / "nope.json")

    def test_library(self, tmp_path):
        path = tmp_path / "library.json"
        save_songs(example_songs(), path)
        songs = load_songs(path)
        assert [s.id for s in songs] == list(EXAMPLE_SONGS)

    def test_library_must_be_list(self, tmp_path):
        path = tmp_path / "library.json"
        path.write_text(json.dumps({"id": "x"}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_songs(path)


class TestSongbook:
    """Tests for the built-in songs."""

    @pytest.mark.parametrize("song_id", list(EXAMPLE_SONGS))
    def test_compiles_cleanly(self, song_id):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            song = example_song(song_id)
        assert song.notes
        assert song.id == song_id
        assert song.notation

    def test_twinkle_opening(self, layout17):
        song = example_song("twinkle-twinkle", layout17)
        assert [n.key_index for n in song.notes[:4]] == [8, 8, 10, 10]
        assert song.notes[1].time == pytest.approx(60 / 90)

    def test_unknown_song(self):
        with pytest.raises(KeyError):
            example_song("free-bird")
