"""Lyric segmentation into song sections.

A section starts at every recognised header line and runs until the next
one.  Headers are matched case-insensitively, with an optional number and
trailing colon, either bare or in brackets::

    Verse 1:        Chorus        [Pre-Chorus]        [Verse 2: Artist]

Lines before the first header form an ``other`` section.  A section is kept
only if it has non-blank content.
"""

import re

from .models import ParsedSong, SectionType, SongMetadata, SongSection
from .transpose import find_chords

_SECTION_WORDS = r"intro|verse|pre-?chorus|chorus|bridge|outro"

SECTION_HEADER_RE = re.compile(
    r"^\s*(?:"
    rf"\[(?P<bracketed>{_SECTION_WORDS})(?:\s*\d+)?(?:\s*:[^\]]*)?\]"
    r"|"
    rf"(?P<bare>{_SECTION_WORDS})(?:\s*\d+)?\s*:?"
    r")\s*$",
    re.IGNORECASE,
)


def section_type_of(line: str) -> SectionType | None:
    """Return the section type announced by a header *line*, or None."""
    m = SECTION_HEADER_RE.match(line)
    if not m:
        return None
    word = (m.group("bracketed") or m.group("bare")).lower()
    if word.startswith("pre"):
        return SectionType.PRE_CHORUS
    return SectionType(word)


def parse_sections(lyrics: str) -> list[SongSection]:
    """Split *lyrics* into sections on header lines.

    Blank lines are dropped from section content.
    """
    sections: list[SongSection] = []
    current = SongSection(type=SectionType.OTHER)
    body: list[str] = []

    for line in lyrics.split("\n"):
        section_type = section_type_of(line)
        if section_type is not None:
            if body:
                current.content = "\n".join(body)
                sections.append(current)
            current = SongSection(type=section_type)
            body = []
            continue
        if line.strip():
            body.append(line)

    if body:
        current.content = "\n".join(body)
        sections.append(current)

    return sections


def extract_chords(lyrics: str) -> list[str]:
    """Return every bracketed chord in *lyrics* in order of appearance."""
    chords: list[str] = []
    for line in lyrics.split("\n"):
        chords.extend(find_chords(line))
    return chords


def parse_song(metadata: SongMetadata, lyrics: str, original_key: str | None = None) -> ParsedSong:
    """Build a :class:`~chordshift.models.ParsedSong` from provider data."""
    sections = parse_sections(lyrics)
    for section in sections:
        section.chords = extract_chords(section.content)
    return ParsedSong(
        metadata=metadata,
        sections=sections,
        detected_chords=extract_chords(lyrics),
        original_key=original_key,
    )
