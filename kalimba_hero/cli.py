"""Command-line interface for Kalimba Hero.

Provides commands for:
- layout: Show the keys of a kalimba
- compile / format: Convert between tablature text and song JSON
- match: Find the key nearest to a frequency
- detect: Show the keys heard in a recording
- songs: List or export the built-in songs
- transcribe / import-midi: Build a song from a recording or MIDI file
- render / export-midi: Hear or export a song
"""

import warnings
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core import NoNotesDetectedError, Song
from .core.constants import DEFAULT_BPM, DEFAULT_PITCH_TOLERANCE_CENTS, DEFAULT_PRESET
from .layout import HARDWARE_PRESETS, Layout, generate_layout, layout_for_preset

app = typer.Typer(
    name="kalimba-hero",
    help="Kalimba tablature compiler, pitch matcher and song tools",
    rich_markup_mode="markdown",
)
console = Console()


@contextmanager
def _cli_errors() -> Iterator[None]:
    """Print library warnings in yellow and turn errors into exit code 1."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            yield
        except (ValueError, FileNotFoundError, NoNotesDetectedError) as e:
            _print_warnings(caught)
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(1)
    _print_warnings(caught)


def _print_warnings(caught: List[warnings.WarningMessage]) -> None:
    for w in caught:
        console.print(f"[yellow]Warning: {escape(str(w.message))}[/yellow]")


def _resolve_layout(
    preset: str,
    root: Optional[str] = None,
    scale: str = "major",
    tines: Optional[int] = None,
) -> Layout:
    if tines is not None:
        return generate_layout(tines, root_note=root or "C", scale_kind=scale, calibrated=False)
    return layout_for_preset(preset, root_note=root, scale_kind=scale)


def _load_song(source: str, layout: Layout) -> Song:
    """A song from a JSON file, or a built-in song by id."""
    from .output import load_song
    from .songbook import EXAMPLE_SONGS, example_song

    if source in EXAMPLE_SONGS:
        return example_song(source, layout)
    return load_song(source)


@app.command()
def layout(
    preset: str = typer.Option(DEFAULT_PRESET, "-p", "--preset", help="Hardware preset id"),
    root: Optional[str] = typer.Option(None, "-r", "--root", help="Root note, e.g. C4 or G"),
    scale: str = typer.Option("major", "-s", "--scale", help="Scale kind"),
    tines: Optional[int] = typer.Option(
        None, "-n", "--tines", help="Generate a layout with this many tines instead of a preset"
    ),
):
    """Show the keys of a kalimba, left to right.

    **Examples:**

        kalimba-hero layout -p 21

        kalimba-hero layout -n 10 -r G4 -s pentatonic_major
    """
    with _cli_errors():
        kalimba = _resolve_layout(preset, root, scale, tines)

    table = Table(title=f"{kalimba.name} ({len(kalimba)} keys)")
    table.add_column("Index", style="cyan")
    table.add_column("Label", style="green")
    table.add_column("Note", style="yellow")
    table.add_column("Frequency", style="magenta")

    for key in kalimba:
        label = kalimba.label_for(key.index) or f"[dim]{key.display_degree}[/dim]"
        table.add_row(str(key.index), label, key.note_name, f"{key.frequency:.2f} Hz")

    console.print(table)


@app.command()
def presets():
    """List the known hardware presets."""
    table = Table(title="Hardware Presets")
    table.add_column("Id", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Tines", style="yellow")
    table.add_column("Root", style="magenta")

    for preset in HARDWARE_PRESETS.values():
        table.add_row(preset.id, preset.name, str(preset.tine_count), preset.default_root)

    console.print(table)


@app.command(name="compile")
def compile_tab(
    tab_file: Path = typer.Argument(..., help="Tablature text file"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output song JSON path"),
    title: Optional[str] = typer.Option(None, "-t", "--title", help="Song title"),
    artist: str = typer.Option("Unknown", "--artist", help="Song artist"),
    bpm: float = typer.Option(DEFAULT_BPM, "-b", "--bpm", help="Tempo (quarter notes per minute)"),
    time_signature: str = typer.Option("4/4", "--time-signature", help="Time signature"),
    difficulty: str = typer.Option("medium", "-d", "--difficulty", help="easy/medium/hard/expert or 1-5"),
    preset: str = typer.Option(DEFAULT_PRESET, "-p", "--preset", help="Hardware preset id"),
    root: Optional[str] = typer.Option(None, "-r", "--root", help="Root note"),
):
    """Compile a tablature file into song JSON.

    **Examples:**

        kalimba-hero compile twinkle.txt -b 90

        kalimba-hero compile waltz.txt --time-signature 3/4 -o waltz.json
    """
    from .notation import create_song_from_notation
    from .output import save_song

    if not tab_file.exists():
        console.print(f"[red]Error: File not found: {tab_file}[/red]")
        raise typer.Exit(1)

    if output is None:
        output = tab_file.with_suffix(".json")

    with _cli_errors():
        kalimba = _resolve_layout(preset, root)
        song = create_song_from_notation(
            tab_file.read_text(encoding="utf-8"),
            title=title or tab_file.stem,
            bpm=bpm,
            time_signature=time_signature,
            layout=kalimba,
            artist=artist,
            difficulty=difficulty,
            author_tuning=root,
        )
        save_song(song, output)

    console.print(f"  Compiled {len(song.notes)} notes, {song.duration:.2f}s")
    console.print(f"[green]Saved:[/green] {output}")


@app.command(name="format")
def format_song(
    song: str = typer.Argument(..., help="Song JSON file or built-in song id"),
    preset: str = typer.Option(DEFAULT_PRESET, "-p", "--preset", help="Hardware preset id"),
    root: Optional[str] = typer.Option(None, "-r", "--root", help="Root note"),
):
    """Print a song as tablature text."""
    from .notation import serialize

    with _cli_errors():
        kalimba = _resolve_layout(preset, root)
        loaded = _load_song(song, kalimba)
        text = serialize(loaded.notes, loaded.bpm, loaded.time_signature, kalimba)

    console.print(text, markup=False, highlight=False)


@app.command()
def match(
    frequencies: List[float] = typer.Argument(..., help="Frequencies in Hz"),
    preset: str = typer.Option(DEFAULT_PRESET, "-p", "--preset", help="Hardware preset id"),
    root: Optional[str] = typer.Option(None, "-r", "--root", help="Root note"),
    tolerance: float = typer.Option(
        DEFAULT_PITCH_TOLERANCE_CENTS, "--tolerance", help="Tolerance in cents"
    ),
):
    """Find the key nearest to each frequency, tuner style."""
    from .analysis import find_closest_key, frequency_to_note_name

    with _cli_errors():
        kalimba = _resolve_layout(preset, root)

    table = Table(title="Pitch Matches")
    table.add_column("Frequency", style="cyan")
    table.add_column("Nearest Note", style="yellow")
    table.add_column("Key", style="green")
    table.add_column("Cents", style="magenta")

    for freq in frequencies:
        result = find_closest_key(freq, kalimba, tolerance)
        nearest = frequency_to_note_name(freq) if freq > 0 else "-"
        if result is None:
            table.add_row(f"{freq:.2f} Hz", nearest, "[red]no match[/red]", "-")
        else:
            label = kalimba.label_for(result.key.index) or result.key.display_degree
            table.add_row(
                f"{freq:.2f} Hz",
                nearest,
                f"{result.key.index} ({label})",
                f"{result.cents:+.1f}",
            )

    console.print(table)


@app.command()
def detect(
    input_file: Path = typer.Argument(..., help="Recording of someone playing"),
    preset: str = typer.Option(DEFAULT_PRESET, "-p", "--preset", help="Hardware preset id"),
    root: Optional[str] = typer.Option(None, "-r", "--root", help="Root note"),
    tolerance: float = typer.Option(15.0, "--tolerance", help="Tolerance in cents"),
    block: int = typer.Option(4096, "--block", help="Samples per pitch estimate"),
):
    """Run a recording through the live pitch detector and show the keys it hears."""
    from .analysis import PitchAnalyzer, PitchMatcher
    from .input import AudioLoader

    with _cli_errors():
        kalimba = _resolve_layout(preset, root)
        loader = AudioLoader(normalize=False)
        audio, sr = loader.load(input_file)
        pitches = PitchAnalyzer(sr).stream(audio, block_size=block)

    matcher = PitchMatcher(kalimba, tolerance_cents=tolerance)
    table = Table(title=f"Detected Pitches ({loader.duration(audio):.1f}s)")
    table.add_column("Time", style="cyan")
    table.add_column("Frequency", style="yellow")
    table.add_column("Clarity")
    table.add_column("Key", style="green")
    table.add_column("Cents", style="magenta")

    for pitch in pitches:
        result = matcher.match(pitch)
        if result is None:
            key, cents = "[dim]-[/dim]", "-"
        else:
            label = kalimba.label_for(result.key.index) or result.key.display_degree
            key, cents = f"{result.key.index} ({label})", f"{result.cents:+.1f}"
        table.add_row(
            f"{pitch.timestamp:.2f}s",
            f"{pitch.frequency:.2f} Hz",
            f"{pitch.clarity:.2f}",
            key,
            cents,
        )

    console.print(table)
    console.print(f"  {len(pitches)} voiced blocks")


@app.command()
def songs(
    export: Optional[Path] = typer.Option(
        None, "-e", "--export", help="Write each built-in song as JSON into this directory"
    ),
    preset: str = typer.Option(DEFAULT_PRESET, "-p", "--preset", help="Hardware preset id"),
):
    """List the built-in songs."""
    from .output import save_song
    from .songbook import example_songs

    with _cli_errors():
        library = example_songs(_resolve_layout(preset))

    table = Table(title="Built-in Songs")
    table.add_column("Id", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Artist", style="yellow")
    table.add_column("BPM", style="magenta")
    table.add_column("Difficulty")
    table.add_column("Notes")

    for song in library:
        table.add_row(
            song.id, song.title, song.artist, f"{song.bpm:g}",
            song.difficulty.value, str(len(song.notes)),
        )
        if export is not None:
            save_song(song, export / f"{song.id}.json")

    console.print(table)
    if export is not None:
        console.print(f"[green]Exported {len(library)} songs to:[/green] {export}")


@app.command()
def transcribe(
    input_file: Path = typer.Argument(..., help="Input audio file (WAV, MP3, FLAC, OGG)"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output song JSON path"),
    title: Optional[str] = typer.Option(None, "-t", "--title", help="Song title"),
    bpm: float = typer.Option(120.0, "-b", "--bpm", help="Tempo used for quantization"),
    preset: str = typer.Option(DEFAULT_PRESET, "-p", "--preset", help="Hardware preset id"),
    root: Optional[str] = typer.Option(None, "-r", "--root", help="Root note"),
    onset_threshold: float = typer.Option(0.5, "--onset-threshold", help="0-1, higher = fewer onsets"),
    frame_threshold: float = typer.Option(0.3, "--frame-threshold", help="0-1, minimum pitch confidence"),
    min_note_frames: int = typer.Option(2, "--min-note-frames", help="Shortest note in frames"),
    transpose: int = typer.Option(0, "--transpose", help="Semitones to shift before mapping"),
):
    """Transcribe a recording into a playable song.

    **Examples:**

        kalimba-hero transcribe melody.wav -b 100

        kalimba-hero transcribe flute.mp3 --transpose -12 -o flute.json
    """
    from .output import save_song
    from .transcription import AutoTranscriber, TranscriptionSettings

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    if output is None:
        output = input_file.with_suffix(".json")

    with _cli_errors():
        settings = TranscriptionSettings(
            onset_threshold=onset_threshold,
            frame_threshold=frame_threshold,
            min_note_frames=min_note_frames,
            transpose=transpose,
        )
        transcriber = AutoTranscriber(_resolve_layout(preset, root), settings=settings, bpm=bpm)

        console.print(f"[blue]Transcribing:[/blue] {input_file}")
        notes = transcriber.transcribe_file(input_file)
        song = transcriber.to_song(notes, title or input_file.stem)
        save_song(song, output)

    console.print(f"  Detected {len(notes)} notes")
    console.print(f"[green]Saved:[/green] {output}")


@app.command(name="import-midi")
def import_midi(
    midi_file: Path = typer.Argument(..., help="Input MIDI file"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output song JSON path"),
    title: Optional[str] = typer.Option(None, "-t", "--title", help="Song title"),
    bpm: float = typer.Option(120.0, "-b", "--bpm", help="Tempo used for quantization"),
    preset: str = typer.Option(DEFAULT_PRESET, "-p", "--preset", help="Hardware preset id"),
    root: Optional[str] = typer.Option(None, "-r", "--root", help="Root note"),
    transpose: int = typer.Option(0, "--transpose", help="Semitones to shift before mapping"),
):
    """Map the notes of a MIDI file onto the kalimba."""
    from .output import save_song
    from .transcription import AutoTranscriber, TranscriptionSettings

    if output is None:
        output = midi_file.with_suffix(".json")

    with _cli_errors():
        transcriber = AutoTranscriber(
            _resolve_layout(preset, root),
            settings=TranscriptionSettings(transpose=transpose),
            bpm=bpm,
        )
        notes = transcriber.transcribe_midi(midi_file)
        song = transcriber.to_song(notes, title or midi_file.stem)
        save_song(song, output)

    console.print(f"  Mapped {len(notes)} notes")
    console.print(f"[green]Saved:[/green] {output}")


@app.command()
def render(
    song: str = typer.Argument(..., help="Song JSON file or built-in song id"),
    output: Path = typer.Option(Path("song.wav"), "-o", "--output", help="Output WAV path"),
    preset: str = typer.Option(DEFAULT_PRESET, "-p", "--preset", help="Hardware preset id"),
    root: Optional[str] = typer.Option(None, "-r", "--root", help="Root note"),
):
    """Render a song to a WAV file with the kalimba synth."""
    from .playback import AudioEngine

    with _cli_errors():
        kalimba = _resolve_layout(preset, root)
        loaded = _load_song(song, kalimba)
        with AudioEngine(kalimba) as engine:
            engine.render_to_file(loaded, output)

    console.print(f"[green]Rendered:[/green] {output}")


@app.command(name="export-midi")
def export_midi(
    song: str = typer.Argument(..., help="Song JSON file or built-in song id"),
    output: Path = typer.Option(Path("song.mid"), "-o", "--output", help="Output MIDI path"),
    preset: str = typer.Option(DEFAULT_PRESET, "-p", "--preset", help="Hardware preset id"),
    root: Optional[str] = typer.Option(None, "-r", "--root", help="Root note"),
):
    """Export a song as a MIDI file."""
    from .output import MIDIExporter

    with _cli_errors():
        kalimba = _resolve_layout(preset, root)
        loaded = _load_song(song, kalimba)
        MIDIExporter(kalimba).export(loaded, output)

    console.print(f"[green]Exported:[/green] {output}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
