import json
import sys
from pathlib import Path

import click

from .config import Config
from .exceptions import ChordshiftError
from .logger import setup_logger
from .models import SongMetadata
from .notes import all_keys, should_use_flats
from .sections import extract_chords
from .transpose import (
    MAX_SEMITONES,
    MIN_SEMITONES,
    detect_key,
    easy_mode_keys,
    transpose_chords,
    transpose_key,
    transpose_lyrics,
)
from .validation import validate_song

_SEMITONES = click.IntRange(MIN_SEMITONES, MAX_SEMITONES)


def _fail(exc: Exception) -> None:
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


def _read_text(path: str | None) -> str:
    if path is None or path == "-":
        return click.get_text_stream("stdin").read()
    return Path(path).read_text(encoding="utf-8")


@click.group()
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Logging level (default: $CHORDSHIFT_LOG_LEVEL or WARNING).")
def main(log_level: str | None) -> None:
    """Transpose chords in lyric sheets and check fetched songs.

    \b
    Chords are written in ChordPro brackets, either on a line of their own
    ("[Am] [G] [F]") or inline with the lyrics ("Love [Am]me [G]tender").
    """
    try:
        Config.validate()
    except ValueError as exc:
        _fail(exc)
    setup_logger(log_level)


# ---------------------------------------------------------------------------
# Transposition
# ---------------------------------------------------------------------------


@main.command()
@click.argument("file", required=False)
@click.option("-s", "--semitones", type=_SEMITONES, default=None,
              help="Shift by N semitones (-12..12).")
@click.option("--from-key", default=None, metavar="KEY", help="Key the song is written in.")
@click.option("--to-key", default=None, metavar="KEY", help="Key to transpose into.")
@click.option("--spelling", type=click.Choice(["auto", "sharps", "flats"]), default="auto",
              show_default=True,
              help="Accidental spelling; auto follows the target key.")
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Write to PATH instead of stdout.")
def transpose(
    file: str | None,
    semitones: int | None,
    from_key: str | None,
    to_key: str | None,
    spelling: str,
    output_path: str | None,
) -> None:
    """Transpose the bracketed chords in FILE (or stdin)."""
    if semitones is None and not (from_key and to_key):
        raise click.UsageError("Give either --semitones or both --from-key and --to-key.")

    try:
        if semitones is None:
            semitones = transpose_key(from_key, to_key)
        if spelling == "auto":
            use_flats = should_use_flats(to_key) if to_key else False
        else:
            use_flats = spelling == "flats"
        text = transpose_lyrics(_read_text(file), semitones, use_flats=use_flats)
    except (ChordshiftError, OSError) as exc:
        _fail(exc)

    if output_path:
        Path(output_path).write_text(text, encoding="utf-8")
        click.echo(f"Written to {output_path}")
        return
    click.echo(text, nl=False)


@main.command()
@click.argument("chords", nargs=-1, required=True)
@click.option("-s", "--semitones", type=_SEMITONES, required=True,
              help="Shift by N semitones (-12..12).")
@click.option("--flats", "use_flats", is_flag=True, default=False,
              help="Spell accidentals as flats.")
def chord(chords: tuple[str, ...], semitones: int, use_flats: bool) -> None:
    """Transpose individual CHORDS."""
    click.echo(" ".join(transpose_chords(list(chords), semitones, use_flats=use_flats)))


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


@main.command("detect-key")
@click.argument("chords", nargs=-1)
@click.option("-f", "--file", "path", default=None, metavar="PATH",
              help="Read chords from the brackets in a lyric file instead.")
def detect_key_command(chords: tuple[str, ...], path: str | None) -> None:
    """Guess the key from CHORDS."""
    try:
        found = extract_chords(_read_text(path)) if path else list(chords)
    except OSError as exc:
        _fail(exc)

    result = detect_key(found)
    click.echo(f"Key: {result.detected_key} (confidence: {result.confidence.value})")
    click.echo(f"Candidates: {', '.join(result.possible_keys)}")


@main.command("easy-keys")
@click.argument("key")
@click.option("--limit", default=5, show_default=True, type=click.IntRange(1, 8),
              help="Number of keys to suggest.")
def easy_keys(key: str, limit: int) -> None:
    """Suggest beginner-friendly keys close to KEY."""
    try:
        suggestions = easy_mode_keys(key, limit=limit)
    except ChordshiftError as exc:
        _fail(exc)

    for suggestion in suggestions:
        shift = transpose_key(key, suggestion.key)
        click.echo(f"{suggestion.key:<3} {shift:+d}  {suggestion.reason}")


@main.command()
def keys() -> None:
    """List all 24 key names."""
    click.echo(" ".join(all_keys()))


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@main.command()
@click.argument("lyrics_file")
@click.option("-m", "--metadata", "metadata_path", required=True, metavar="PATH",
              help="JSON file with the song metadata (id, title, artist, url, ...).")
@click.option("--expected-title", default=None, help="Title that was searched for.")
@click.option("--retry-count", default=0, show_default=True, type=click.IntRange(min=0),
              help="How many times this song has already been re-fetched.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
def validate(
    lyrics_file: str,
    metadata_path: str,
    expected_title: str | None,
    retry_count: int,
    as_json: bool,
) -> None:
    """Check LYRICS_FILE (and its metadata) before trusting it.

    Exits with status 1 when a critical error is found.
    """
    try:
        lyrics = _read_text(lyrics_file)
        record = json.loads(Path(metadata_path).read_text(encoding="utf-8"))
        metadata = SongMetadata.from_dict(record)
    except (OSError, json.JSONDecodeError) as exc:
        _fail(exc)

    result = validate_song(metadata, lyrics, expected_title=expected_title, retry_count=retry_count)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        for error in result.errors:
            click.echo(f"ERROR   [{error.severity.value}] {error.field}: {error.message}")
        for warning in result.warnings:
            click.echo(f"WARNING {warning.field}: {warning.message}")
        click.echo("Valid" if result.valid else "Invalid")

    if not result.valid:
        sys.exit(1)
