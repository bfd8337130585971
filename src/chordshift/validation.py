"""Validation of provider metadata and lyrics before they are shown.

Findings are returned, never raised.  Each check produces a
:class:`~chordshift.models.ValidationResult`; only a ``critical`` error makes
a result invalid, while ``major``/``minor`` errors and warnings are
informational.

Checks
------

+-----------------------------+-------------------------------------------+
| Check                       | Blocking (critical) findings              |
+=============================+===========================================+
| :func:`validate_metadata`   | missing id, blank title, blank artist     |
+-----------------------------+-------------------------------------------+
| :func:`validate_lyrics`     | blank lyrics, lyrics under the length     |
|                             | floor                                     |
+-----------------------------+-------------------------------------------+
| :func:`validate_parsed_song`| metadata findings, no sections at all     |
+-----------------------------+-------------------------------------------+

:func:`validate_song` runs metadata then lyrics and returns the union,
unless the caller's retry counter is exhausted, in which case the first
failing result is returned as-is.
"""

import ipaddress
import logging
import re
from urllib.parse import urlparse

from .chords import is_chord_like
from .config import Config
from .models import (
    ParsedSong,
    Severity,
    SongMetadata,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)
from .sections import parse_sections

logger = logging.getLogger(__name__)

# Text that shows up when a provider returned a stub instead of full lyrics.
_TRUNCATION_INDICATORS = (
    re.compile(r"See\s+https?://", re.IGNORECASE),
    re.compile(r"Full\s+lyrics\s+at", re.IGNORECASE),
    re.compile(r" Lyrics\Z", re.IGNORECASE),
    re.compile(r"Translations", re.IGNORECASE),
)

_SUBSTRING_SIMILARITY = 0.8

# Characters a URL host may not contain
_FORBIDDEN_HOST_CHARS = frozenset("#%/:<>?@[\\]^|")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _levenshtein(a: str, b: str) -> int:
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """Return a 0-1 case-insensitive similarity between two strings.

    Equal strings score 1.0 and an empty string scores 0.0.  When one string
    contains the other the score is a flat 0.8; otherwise it is one minus
    the edit distance over the longer length.
    """
    a = a.lower()
    b = b.lower()
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    if a in b or b in a:
        return _SUBSTRING_SIMILARITY
    return 1 - _levenshtein(a, b) / max(len(a), len(b))


def is_valid_url(url: str) -> bool:
    """Return True for an absolute http(s) URL with a well-formed host.

    A host with whitespace or URL delimiters in it is rejected.  So is a
    bracketed host that is not an IPv6 address, or a malformed port.
    """
    if not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url.strip())
        parsed.port
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https"):
        return False

    host = parsed.hostname
    if not host:
        return False
    if "[" in parsed.netloc or ":" in host:
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            return False
        return True
    return not any(c.isspace() or c in _FORBIDDEN_HOST_CHARS for c in host)


def _is_blank(value: object) -> bool:
    return value is None or not str(value).strip()


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def validate_metadata(metadata: SongMetadata, expected_title: str | None = None) -> ValidationResult:
    """Check required fields, the song URL and, optionally, the title.

    *expected_title* is the title the user searched for; a fetched title
    that is not similar enough only produces a warning.
    """
    result = ValidationResult()

    if not metadata.id:
        result.errors.append(ValidationError("id", "Song ID is missing", Severity.CRITICAL))
    if _is_blank(metadata.title):
        result.errors.append(
            ValidationError("title", "Song title is missing or empty", Severity.CRITICAL)
        )
    if _is_blank(metadata.artist):
        result.errors.append(
            ValidationError("artist", "Artist name is missing or empty", Severity.CRITICAL)
        )

    if expected_title and metadata.title:
        similarity = string_similarity(str(metadata.title), expected_title)
        if similarity < Config.TITLE_SIMILARITY_THRESHOLD:
            result.warnings.append(
                ValidationWarning(
                    "title",
                    f'Title mismatch: "{metadata.title}" vs "{expected_title}" '
                    f"({round(similarity * 100)}% similar)",
                )
            )

    if metadata.url and not is_valid_url(metadata.url):
        result.errors.append(ValidationError("url", "Invalid song URL", Severity.MAJOR))

    return result


def validate_lyrics(lyrics: str) -> ValidationResult:
    """Check that *lyrics* look complete.

    Blank or very short lyrics are critical.  Signs of a truncated stub and
    too few recognisable sections are warnings.
    """
    result = ValidationResult()

    if _is_blank(lyrics):
        result.errors.append(ValidationError("lyrics", "Lyrics are empty", Severity.CRITICAL))
        return result

    if len(lyrics) < Config.MIN_LYRICS_LENGTH:
        result.errors.append(
            ValidationError(
                "lyrics",
                f"Lyrics too short ({len(lyrics)} chars, minimum {Config.MIN_LYRICS_LENGTH})",
                Severity.CRITICAL,
            )
        )

    for indicator in _TRUNCATION_INDICATORS:
        if indicator.search(lyrics):
            result.warnings.append(
                ValidationWarning("lyrics", "Possible truncated lyrics detected")
            )

    sections = parse_sections(lyrics)
    if len(sections) < Config.MIN_SECTIONS:
        result.warnings.append(
            ValidationWarning(
                "lyrics",
                f"Only {len(sections)} section(s) detected, "
                f"expected at least {Config.MIN_SECTIONS}",
            )
        )

    return result


def validate_parsed_song(song: ParsedSong) -> ValidationResult:
    """Check a segmented song: its metadata, its sections and its chords."""
    result = validate_metadata(song.metadata)

    if not song.sections:
        result.errors.append(
            ValidationError("sections", "No song sections found", Severity.CRITICAL)
        )

    empty = [s for s in song.sections if _is_blank(s.content)]
    if empty:
        result.warnings.append(
            ValidationWarning("sections", f"{len(empty)} empty section(s) found")
        )

    invalid_chords = [c for c in song.detected_chords if not is_chord_like(c)]
    if invalid_chords:
        result.warnings.append(
            ValidationWarning(
                "chords",
                f"{len(invalid_chords)} invalid chord(s) detected: {', '.join(invalid_chords)}",
            )
        )

    return result


def validate_song(
    metadata: SongMetadata,
    lyrics: str,
    expected_title: str | None = None,
    retry_count: int = 0,
) -> ValidationResult:
    """Run the metadata and lyrics checks and combine their findings.

    *retry_count* is how many times the caller has already re-fetched this
    song.  Once it reaches ``Config.MAX_RETRIES``, the first failing check's
    result is returned on its own and the remaining check is skipped.
    """
    exhausted = retry_count >= Config.MAX_RETRIES

    metadata_result = validate_metadata(metadata, expected_title)
    if not metadata_result.valid and exhausted:
        logger.info("Metadata for song %r invalid after %d retries", metadata.id, retry_count)
        return metadata_result

    lyrics_result = validate_lyrics(lyrics)
    if not lyrics_result.valid and exhausted:
        logger.info("Lyrics for song %r invalid after %d retries", metadata.id, retry_count)
        return lyrics_result

    result = metadata_result.merge(lyrics_result)
    logger.info(
        "Validated song %r: valid=%s, %d error(s), %d warning(s)",
        metadata.id,
        result.valid,
        len(result.errors),
        len(result.warnings),
    )
    return result
