from dataclasses import dataclass, field
from enum import Enum


class Severity(str, Enum):
    """How badly a validation finding blocks acceptance of fetched content."""

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SectionType(str, Enum):
    INTRO = "intro"
    VERSE = "verse"
    PRE_CHORUS = "pre-chorus"
    CHORUS = "chorus"
    BRIDGE = "bridge"
    OUTRO = "outro"
    OTHER = "other"


class ChordFamily(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    SEVENTH = "7"
    MAJ7 = "maj7"
    M7 = "m7"
    SUS = "sus"
    DIM = "dim"
    AUG = "aug"
    ADD = "add"
    SLASH = "slash"


@dataclass(frozen=True)
class KeySignature:
    """A major or minor key bound to one pitch class."""

    name: str  # e.g. "Eb", "C#m"
    index: int  # pitch class 0-11
    flats: int = 0
    sharps: int = 0

    @property
    def is_minor(self) -> bool:
        return self.name.endswith("m")


@dataclass(frozen=True)
class ParsedChord:
    """A chord split into root, quality suffix and optional slash bass.

    Example: "F#m7/C#" -> root="F#", quality="m7", bass="C#".
    Text that does not start with a note letter is kept whole in ``root``.
    """

    root: str
    quality: str = ""
    bass: str | None = None

    def __str__(self) -> str:
        if self.bass:
            return f"{self.root}{self.quality}/{self.bass}"
        return f"{self.root}{self.quality}"


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str
    severity: Severity = Severity.CRITICAL


@dataclass(frozen=True)
class ValidationWarning:
    field: str
    message: str


@dataclass
class ValidationResult:
    """Outcome of a validation step.

    ``valid`` is derived from ``errors``: only a critical error makes the
    result invalid.  Warnings never affect validity.
    """

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not any(e.severity == Severity.CRITICAL for e in self.errors)

    @property
    def critical_errors(self) -> list[ValidationError]:
        return [e for e in self.errors if e.severity == Severity.CRITICAL]

    def merge(self, *others: "ValidationResult") -> "ValidationResult":
        """Return a new result holding this result's findings followed by *others*'."""
        errors = list(self.errors)
        warnings = list(self.warnings)
        for other in others:
            errors.extend(other.errors)
            warnings.extend(other.warnings)
        return ValidationResult(errors=errors, warnings=warnings)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": [
                {"field": e.field, "message": e.message, "severity": Severity(e.severity).value}
                for e in self.errors
            ],
            "warnings": [{"field": w.field, "message": w.message} for w in self.warnings],
        }


@dataclass
class SongSection:
    """A structural part of a song (verse, chorus, bridge, etc.)."""

    type: SectionType
    content: str = ""
    chords: list[str] = field(default_factory=list)

    @property
    def is_chorus(self) -> bool:
        return self.type is SectionType.CHORUS


# Provider field name -> SongMetadata attribute
_METADATA_ALIASES = {
    "releaseDate": "release_date",
    "headerImageUrl": "header_image_url",
    "coverArtUrl": "cover_art_url",
}


def _text(value) -> str:
    return "" if value is None else str(value)


@dataclass
class SongMetadata:
    """Song metadata as handed over by the content provider.

    Nothing here is trusted: any field may be empty or malformed, which is
    what :func:`~chordshift.validation.validate_metadata` is for.
    """

    id: int | None
    title: str
    artist: str
    url: str = ""
    album: str | None = None
    release_date: str | None = None
    header_image_url: str | None = None
    cover_art_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "SongMetadata":
        """Build metadata from a provider record (camelCase or snake_case keys)."""
        values = {_METADATA_ALIASES.get(k, k): v for k, v in data.items()}
        return cls(
            id=values.get("id"),
            title=_text(values.get("title")),
            artist=_text(values.get("artist")),
            url=_text(values.get("url")),
            album=values.get("album"),
            release_date=values.get("release_date"),
            header_image_url=values.get("header_image_url"),
            cover_art_url=values.get("cover_art_url"),
        )


@dataclass
class ParsedSong:
    """Song metadata plus its lyrics split into sections."""

    metadata: SongMetadata
    sections: list[SongSection] = field(default_factory=list)
    detected_chords: list[str] = field(default_factory=list)
    original_key: str | None = None


@dataclass(frozen=True)
class KeyDetection:
    detected_key: str
    confidence: Confidence
    possible_keys: list[str]


@dataclass(frozen=True)
class KeySuggestion:
    key: str
    distance: int  # signed semitones from the current key, -6..6


@dataclass(frozen=True)
class EasyModeKey:
    key: str
    difficulty: int  # semitones away from the current key
    reason: str
