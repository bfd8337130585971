"""Chord transposition and key detection.

Implements the semitone-shift pipeline used when a song is shown in a
different key:

  1. transpose_chord()   - one chord, root and slash bass shifted
  2. transpose_chords()  - a list of chords
  3. classify_line()     - CHORD / INLINE / PLAIN for a line of lyric text
  4. transpose_lyrics()  - every bracketed chord in lyric text, line by line

plus key helpers: detect_key(), key_distance(), shift_key() and the
beginner "easy mode" suggestions.

Chords in lyric text use ChordPro bracket notation in one of two shapes:

  chord line   - only chords on the line:    [Am] [G] [F]
  inline line  - chords inside the lyrics:   Love [Am]me [G]tender
"""

import logging
from collections.abc import Sequence
from enum import Enum, auto

from .chords import is_chord_token, parse_chord
from .exceptions import InvalidNoteError
from .models import Confidence, EasyModeKey, KeyDetection, KeySuggestion
from .notes import MAJOR_KEYS, MINOR_KEYS, pitch_class_of, should_use_flats, spell

logger = logging.getLogger(__name__)

MIN_SEMITONES = -12
MAX_SEMITONES = 12

# Key candidates reported by detect_key()
MAX_POSSIBLE_KEYS = 5

# detect_key() confidence bands, by number of chords seen
LOW_CONFIDENCE_MAX_CHORDS = 5
MEDIUM_CONFIDENCE_MAX_CHORDS = 10

BEGINNER_KEYS = ("G", "C", "D", "A", "E", "Am", "Em", "Dm")

_EASY_MODE_REASONS = {
    "G": "Open position, common chords",
    "C": "Open position, beginner friendly",
    "D": "Simple fingerings",
    "A": "Easy barre chords",
    "E": "Open position",
    "Am": "Simple minor chord",
    "Em": "Two-finger chord",
    "Dm": "Common progression chord",
}


def clamp_semitones(semitones: int) -> int:
    """Clamp *semitones* into the supported -12..12 range."""
    return max(MIN_SEMITONES, min(MAX_SEMITONES, semitones))


# ---------------------------------------------------------------------------
# Chords
# ---------------------------------------------------------------------------


def _shift_note(note: str, semitones: int, use_flats: bool) -> str:
    return spell(pitch_class_of(note) + semitones, prefer_flats=use_flats)


def transpose_chord(chord: str, semitones: int, use_flats: bool = False) -> str:
    """Transpose a single chord by *semitones*.

    The root and any slash bass move; the quality suffix is kept as written.
    A chord whose root is not a note is returned unchanged.

    Example::

        transpose_chord("C/E", -3)                  # "A/C#"
        transpose_chord("C/E", -3, use_flats=True)  # "A/Db"
    """
    if semitones == 0 or not chord.strip():
        return chord

    parsed = parse_chord(chord)
    try:
        root = _shift_note(parsed.root, semitones, use_flats)
    except InvalidNoteError:
        logger.debug("Leaving unrecognised chord %r untransposed", chord)
        return chord

    if parsed.bass:
        bass = _shift_note(parsed.bass, semitones, use_flats)
        return f"{root}{parsed.quality}/{bass}"
    return f"{root}{parsed.quality}"


def transpose_chords(
    chords: Sequence[str], semitones: int, use_flats: bool = False
) -> Sequence[str]:
    """Transpose every chord in *chords*.

    A zero shift returns *chords* itself without touching any element.
    """
    if semitones == 0:
        return chords
    return [transpose_chord(chord, semitones, use_flats) for chord in chords]


# ---------------------------------------------------------------------------
# Lyric lines
# ---------------------------------------------------------------------------


class LineType(Enum):
    CHORD = auto()  # only bracketed chords: [Am] [G] [F]
    INLINE = auto()  # chords among lyrics: Love [Am]me [G]tender
    PLAIN = auto()  # everything else, left untouched


def _split_brackets(line: str) -> list[tuple[str, bool]]:
    """Split *line* into ``(text, is_bracket)`` segments.

    Bracket segments hold the text between ``[`` and ``]`` without the
    brackets.  An unclosed ``[`` is ordinary text.  Single left-to-right
    pass, no backtracking.
    """
    segments: list[tuple[str, bool]] = []
    pos = 0
    while True:
        start = line.find("[", pos)
        if start == -1:
            break
        end = line.find("]", start + 1)
        if end == -1:
            break
        if start > pos:
            segments.append((line[pos:start], False))
        segments.append((line[start + 1 : end], True))
        pos = end + 1
    if pos < len(line):
        segments.append((line[pos:], False))
    return segments


def _is_chord_bracket(content: str) -> bool:
    return content == content.strip() and is_chord_token(content)


def _is_chord_list(content: str) -> bool:
    """True for bracket content like ``Am`` or ``C, G/B, Am7``."""
    parts = [part.strip() for part in content.split(",")]
    return all(is_chord_token(part) for part in parts)


def _classify_segments(segments: list[tuple[str, bool]]) -> LineType:
    brackets = [text for text, is_bracket in segments if is_bracket]
    if not brackets:
        return LineType.PLAIN

    only_brackets = all(not text.strip() for text, is_bracket in segments if not is_bracket)
    if only_brackets and any(_is_chord_list(b) for b in brackets):
        return LineType.CHORD

    if any(_is_chord_bracket(b) for b in brackets):
        return LineType.INLINE

    return LineType.PLAIN


def classify_line(line: str) -> LineType:
    """Classify a single line of lyric text by the chords it carries."""
    return _classify_segments(_split_brackets(line))


def _transpose_chord_list(content: str, semitones: int, use_flats: bool) -> str:
    """Transpose each comma-separated chord in *content*, keeping the spacing."""
    parts = []
    for part in content.split(","):
        name = part.strip()
        lead = part[: len(part) - len(part.lstrip())]
        trail = part[len(part.rstrip()) :]
        parts.append(f"{lead}{transpose_chord(name, semitones, use_flats)}{trail}")
    return ",".join(parts)


def _transpose_line(line: str, semitones: int, use_flats: bool) -> str:
    segments = _split_brackets(line)
    line_type = _classify_segments(segments)
    if line_type is LineType.PLAIN:
        return line

    out = []
    for text, is_bracket in segments:
        if not is_bracket:
            out.append(text)
        elif line_type is LineType.CHORD and _is_chord_list(text):
            out.append(f"[{_transpose_chord_list(text, semitones, use_flats)}]")
        elif _is_chord_bracket(text):
            out.append(f"[{transpose_chord(text, semitones, use_flats)}]")
        else:
            # Section labels and other non-chord brackets stay as written
            out.append(f"[{text}]")
    return "".join(out)


def transpose_lyrics(lyrics: str, semitones: int, use_flats: bool = False) -> str:
    """Transpose every bracketed chord in *lyrics* by *semitones*.

    Lyrics, line breaks and non-chord brackets such as ``[Chorus]`` are left
    exactly as they are.

    Example::

        transpose_lyrics("[Am] [G] [F]\\nLove [Am]me tender\\n", 2)
        # "[Bm] [A] [G]\\nLove [Bm]me tender\\n"
    """
    if semitones == 0:
        return lyrics
    return "\n".join(_transpose_line(line, semitones, use_flats) for line in lyrics.split("\n"))


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


def _key_root(key: str) -> str:
    key = key.strip()
    return key[:-1] if key.endswith("m") else key


def _confidence(chord_count: int) -> Confidence:
    if chord_count > MEDIUM_CONFIDENCE_MAX_CHORDS:
        return Confidence.HIGH
    if chord_count > LOW_CONFIDENCE_MAX_CHORDS:
        return Confidence.MEDIUM
    return Confidence.LOW


def _signals_minor(chord: str) -> bool:
    lower = chord.lower()
    return "m" in lower and "maj" not in lower


def detect_key(chords: Sequence[str]) -> KeyDetection:
    """Guess the key of a song from the chords it uses.

    Roots are ranked by how often they occur (ties keep first-seen order);
    each ranked root contributes its major key then its relative-minor key
    to the candidates.  When every chord reads as minor, the detected key
    is the minor key on the most frequent root.

    Confidence only reflects how many chords were seen: low for up to 5,
    medium for 6-10, high above 10.
    """
    if not chords:
        return KeyDetection(
            detected_key="C",
            confidence=Confidence.LOW,
            possible_keys=[key.name for key in MAJOR_KEYS],
        )

    counts: dict[str, int] = {}
    for chord in chords:
        root = parse_chord(chord).root
        counts[root] = counts.get(root, 0) + 1
    ranked_roots = sorted(counts, key=lambda root: -counts[root])

    candidates: list[str] = []
    top_index = None
    for root in ranked_roots:
        try:
            index = pitch_class_of(root)
        except InvalidNoteError:
            logger.debug("Ignoring unrecognised chord root %r in key detection", root)
            continue
        if top_index is None:
            top_index = index
        candidates.extend(key.name for key in MAJOR_KEYS if key.index == index)
        candidates.extend(key.name for key in MINOR_KEYS if key.index == index)

    possible_keys = list(dict.fromkeys(candidates))
    detected_key = possible_keys[0] if possible_keys else "C"

    has_minor = any(_signals_minor(c) for c in chords)
    has_major = any(not _signals_minor(c) for c in chords)
    if has_minor and not has_major and top_index is not None and not detected_key.endswith("m"):
        detected_key = next(key.name for key in MINOR_KEYS if key.index == top_index)

    return KeyDetection(
        detected_key=detected_key,
        confidence=_confidence(len(chords)),
        possible_keys=possible_keys[:MAX_POSSIBLE_KEYS],
    )


def key_distance(from_key: str, to_key: str) -> int:
    """Return the shortest signed semitone shift from *from_key* to *to_key*.

    The minor suffix is ignored, so ``"Am"`` and ``"A"`` sit at the same
    place.  The result is always in -6..6.

    Raises InvalidNoteError if either key's root is not a note.
    """
    distance = pitch_class_of(_key_root(to_key)) - pitch_class_of(_key_root(from_key))
    if distance > 6:
        distance -= 12
    if distance < -6:
        distance += 12
    return distance


def transpose_key(from_key: str, to_key: str) -> int:
    """Return the semitone shift that moves a song from *from_key* to *to_key*."""
    return key_distance(from_key, to_key)


def shift_key(key: str, semitones: int, use_flats: bool | None = None) -> str:
    """Return the name of the key reached by shifting *key* by *semitones*.

    ``shift_key("G", 2) == "A"``, ``shift_key("Am", 1) == "Bbm"``.  When
    *use_flats* is None the result is spelled the way the key table
    spells chords in the target key, so flat keys come back with flats.
    """
    key = key.strip()
    suffix = "m" if key.endswith("m") else ""
    index = pitch_class_of(_key_root(key)) + clamp_semitones(semitones)

    if use_flats is not None:
        return spell(index, prefer_flats=use_flats) + suffix

    table = MINOR_KEYS if suffix else MAJOR_KEYS
    target = next(k for k in table if k.index == index % 12)
    return spell(index, prefer_flats=should_use_flats(target.name)) + suffix


def suggest_easy_keys(current_key: str) -> list[KeySuggestion]:
    """Rank the beginner keys by how far they are from *current_key*.

    Sorted by absolute distance; equally distant keys keep the order of
    :data:`BEGINNER_KEYS`.
    """
    suggestions = [KeySuggestion(key, key_distance(current_key, key)) for key in BEGINNER_KEYS]
    return sorted(suggestions, key=lambda s: abs(s.distance))


def easy_mode_keys(current_key: str | None = None, limit: int = 5) -> list[EasyModeKey]:
    """Return the *limit* closest beginner keys with a reason for each."""
    suggestions = suggest_easy_keys(current_key or "C")
    return [
        EasyModeKey(
            key=s.key,
            difficulty=abs(s.distance),
            reason=_EASY_MODE_REASONS.get(s.key, "Good for beginners"),
        )
        for s in suggestions[:limit]
    ]


# ---------------------------------------------------------------------------
# Chord extraction
# ---------------------------------------------------------------------------


def find_chords(line: str) -> list[str]:
    """Return the bracketed chords on *line*, left to right.

    Comma-separated chords in one bracket on a chord-only line are returned
    individually.
    """
    segments = _split_brackets(line)
    line_type = _classify_segments(segments)
    if line_type is LineType.PLAIN:
        return []

    chords = []
    for text, is_bracket in segments:
        if not is_bracket:
            continue
        if line_type is LineType.CHORD and _is_chord_list(text):
            chords.extend(part.strip() for part in text.split(","))
        elif _is_chord_bracket(text):
            chords.append(text)
    return chords
