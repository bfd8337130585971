"""Chord-token parsing.

Chord text comes from scraped lyrics, so nothing in here raises: input that
does not look like a chord is carried through as a best-effort
:class:`~chordshift.models.ParsedChord` instead.

Two recognisers are provided:

  is_chord_like()  - closed suffix set (m, maj, dim, aug, sus, add, 7, maj7,
                     m7, 9, 11, 13), used to sanity-check detected chords
  is_chord_token() - root, any run of quality symbols and an optional
                     slash bass (G7sus4, Bm7b5, E7#9, Am(maj7), G/B), used
                     to find chords in bracketed lyric text
"""

import re

from .models import ChordFamily, ParsedChord

# ---------------------------------------------------------------------------
# Regexes
# ---------------------------------------------------------------------------

_PARSE_RE = re.compile(r"^([A-G][#b]?)(.*?)(?:/([A-G][#b]?))?$")

_CHORD_LIKE_RE = re.compile(
    r"^[A-G][#b]?"
    r"(?:maj7|maj|m7|m|dim|aug|sus|add|7|9|11|13)?"
    r"(?:/[A-G][#b]?)?$",
    re.IGNORECASE,
)

# Quality suffix of a chord written inside [brackets]: quality words,
# extension numbers and alteration symbols.  Words like "horus" or "ridge"
# (from [Chorus], [Bridge]) do not match.
_QUALITY_RE = re.compile(r"^(?:maj|min|dim|aug|sus|add|alt|no|[mM0-9#b+\-()°øΔ^])*$")

# Open-position chords a beginner can play without a barre.
BEGINNER_CHORDS = (
    "C", "G", "D", "A", "E",
    "Am", "Em", "Dm",
    "G7", "D7", "A7", "E7",
    "Cadd9", "Gadd9", "Dsus4", "Asus2",
)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_chord(text: str) -> ParsedChord:
    """Split *text* into root, quality and optional slash bass.

    Never fails: text that does not start with a note letter comes back as
    ``ParsedChord(root=text, quality="")``.
    """
    m = _PARSE_RE.match(text.strip())
    if not m:
        return ParsedChord(root=text, quality="")
    return ParsedChord(root=m.group(1), quality=m.group(2) or "", bass=m.group(3))


def is_chord_like(text: str) -> bool:
    """Return True if *text* is shaped like a chord.

    A permissive heuristic, not a chord dictionary lookup.
    """
    return bool(_CHORD_LIKE_RE.match(text.strip()))


def is_chord_token(text: str) -> bool:
    """Return True if *text* reads as one chord in lyric brackets.

    Unlike :func:`is_chord_like` any extension or alteration is accepted
    (``G7sus4``, ``Bm7b5``, ``Am(maj7)``), but the root must be an
    upper-case note and section labels such as ``Chorus`` are refused.
    """
    text = text.strip()
    if not text or any(c.isspace() for c in text):
        return False
    m = _PARSE_RE.match(text)
    return bool(m and _QUALITY_RE.match(m.group(2)))


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def chord_family(chord: str) -> ChordFamily:
    """Return the broad family of *chord* (major, minor, 7, sus, slash, ...)."""
    parsed = parse_chord(chord)
    if parsed.bass:
        return ChordFamily.SLASH

    quality = parsed.quality.lower()
    if "add" in quality:
        return ChordFamily.ADD
    if "dim" in quality:
        return ChordFamily.DIM
    if "aug" in quality:
        return ChordFamily.AUG
    if "sus" in quality:
        return ChordFamily.SUS
    if "maj" in quality and "7" in quality:
        return ChordFamily.MAJ7
    if quality.startswith("m") and "7" in quality:
        return ChordFamily.M7
    if "7" in quality:
        return ChordFamily.SEVENTH
    if quality.startswith("m") and not quality.startswith("maj"):
        return ChordFamily.MINOR
    return ChordFamily.MAJOR


def is_beginner_friendly(chord: str) -> bool:
    """Return True if *chord*, or its bare root, is an open beginner chord."""
    chord_lower = chord.strip().lower()
    root_lower = parse_chord(chord).root.lower()
    return any(c.lower() in (chord_lower, root_lower) for c in BEGINNER_CHORDS)
