"""Pitch classes, note spellings and the 24-key table.

Every table here is built once at import and never mutated, so callers on
any thread may share them freely.
"""

from .exceptions import InvalidNoteError
from .models import KeySignature

SHARP_NOTES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
FLAT_NOTES = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")

_SHARP_INDEX = {name: i for i, name in enumerate(SHARP_NOTES)}

# Flat spelling (lower-case) -> equivalent sharp spelling
_FLAT_TO_SHARP = {
    "db": "C#",
    "eb": "D#",
    "gb": "F#",
    "ab": "G#",
    "bb": "A#",
    "cb": "B",
    "fb": "E",
}

MAJOR_KEYS = (
    KeySignature("C", 0, flats=0, sharps=0),
    KeySignature("G", 7, flats=0, sharps=1),
    KeySignature("D", 2, flats=0, sharps=2),
    KeySignature("A", 9, flats=0, sharps=3),
    KeySignature("E", 4, flats=0, sharps=4),
    KeySignature("B", 11, flats=0, sharps=5),
    KeySignature("F#", 6, flats=1, sharps=6),
    KeySignature("Db", 1, flats=5, sharps=0),
    KeySignature("Ab", 8, flats=4, sharps=0),
    KeySignature("Eb", 3, flats=3, sharps=0),
    KeySignature("Bb", 10, flats=2, sharps=0),
    KeySignature("F", 5, flats=1, sharps=0),
)

# Relative minors share the major's accidentals, a minor third below.
MINOR_KEYS = tuple(
    KeySignature(
        f"{SHARP_NOTES[(major.index + 9) % 12]}m",
        (major.index + 9) % 12,
        flats=major.flats,
        sharps=major.sharps,
    )
    for major in MAJOR_KEYS
)

_KEYS_BY_NAME = {key.name: key for key in MAJOR_KEYS + MINOR_KEYS}
_MAJOR_BY_NAME = {key.name: key for key in MAJOR_KEYS}
_MINOR_BY_NAME = {key.name: key for key in MINOR_KEYS}


def normalize_to_sharp(note: str) -> str:
    """Return the sharp-table spelling for *note* (``"Bb"`` -> ``"A#"``).

    Unknown spellings come back with only the first letter upper-cased.
    """
    sharp = _FLAT_TO_SHARP.get(note.lower())
    if sharp:
        return sharp
    return note[:1].upper() + note[1:]


def pitch_class_of(note: str) -> int:
    """Return the pitch class (0-11) of a note spelling.

    Raises InvalidNoteError if *note* is not one of the 12 sharp spellings
    or their flat equivalents.
    """
    index = _SHARP_INDEX.get(normalize_to_sharp(note))
    if index is None:
        raise InvalidNoteError(note)
    return index


def spell(pitch_class: int, prefer_flats: bool = False) -> str:
    """Return the display spelling of *pitch_class*, reduced into 0-11."""
    notes = FLAT_NOTES if prefer_flats else SHARP_NOTES
    return notes[pitch_class % 12]


def find_key(name: str) -> KeySignature | None:
    """Return the major or minor key called *name*, or None."""
    return _KEYS_BY_NAME.get(name)


def all_keys() -> list[str]:
    """Return the 12 major key names followed by the 12 minor key names."""
    return [key.name for key in MAJOR_KEYS] + [key.name for key in MINOR_KEYS]


def relative_minor(major_key: str) -> str:
    """Return the relative minor of *major_key* (``"C"`` -> ``"Am"``).

    Names missing from the key table fall back to ``major_key + "m"``.
    """
    major = _MAJOR_BY_NAME.get(major_key)
    if major is None:
        return f"{major_key}m"
    return f"{SHARP_NOTES[(major.index + 9) % 12]}m"


def relative_major(minor_key: str) -> str:
    """Return the relative major of *minor_key* (``"Am"`` -> ``"C"``).

    Names missing from the key table fall back to dropping the ``"m"``.
    """
    minor = _MINOR_BY_NAME.get(minor_key)
    if minor is None:
        return minor_key.replace("m", "", 1)
    return SHARP_NOTES[(minor.index + 3) % 12]


def should_use_flats(key: str) -> bool:
    """Return True when chords in *key* read better with flat spellings."""
    signature = find_key(key)
    if signature is not None:
        return signature.flats > signature.sharps
    root = key[:-1] if key.endswith("m") else key
    return len(root) == 2 and root[1] == "b"
