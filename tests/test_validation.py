import pytest

from chordshift.config import Config
from chordshift.models import (
    ParsedSong,
    SectionType,
    Severity,
    SongMetadata,
    SongSection,
    ValidationError,
    ValidationResult,
)
from chordshift.validation import (
    is_valid_url,
    string_similarity,
    validate_lyrics,
    validate_metadata,
    validate_parsed_song,
    validate_song,
)

LYRICS = (
    "[Verse 1]\n"
    "I pulled into Nazareth, was feelin' about half past dead\n"
    "I just need some place where I can lay my head\n"
    "[Chorus]\n"
    "Take a load off Fanny, take a load for free\n"
)


def _metadata(**overrides) -> SongMetadata:
    values = dict(
        id=42,
        title="The Weight",
        artist="The Band",
        url="https://genius.com/The-band-the-weight-lyrics",
    )
    values.update(overrides)
    return SongMetadata(**values)


# ---------------------------------------------------------------------------
# string_similarity / is_valid_url
# ---------------------------------------------------------------------------


def test_similarity_equal():
    assert string_similarity("The Weight", "the weight") == 1.0


def test_similarity_empty():
    assert string_similarity("", "abc") == 0.0
    assert string_similarity("abc", "") == 0.0


def test_similarity_substring_fast_path():
    assert string_similarity("The Weight", "The Weight (Remastered)") == 0.8


def test_similarity_edit_distance():
    assert string_similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)


def test_is_valid_url():
    assert is_valid_url("https://genius.com/song")
    assert is_valid_url("http://example.com")
    assert not is_valid_url("not a url")
    assert not is_valid_url("ftp://example.com/file")
    assert not is_valid_url("https://")


@pytest.mark.parametrize(
    "url",
    [
        "http://foo bar",
        "https://exa mple.com/x",
        "http://:80",
        "http://example.com:99999/",
        "http://example.com:port/",
        "http://[not-ipv6]/",
        "http://exa^mple.com/",
    ],
)
def test_is_valid_url_rejects_malformed_hosts(url):
    assert not is_valid_url(url)


def test_is_valid_url_accepts_ports_and_ipv6():
    assert is_valid_url("http://localhost:8080/song")
    assert is_valid_url("https://[::1]/song")
    assert is_valid_url("  https://genius.com/song  ")


def test_is_valid_url_rejects_non_strings():
    assert not is_valid_url(None)
    assert not is_valid_url(12345)


# ---------------------------------------------------------------------------
# validate_metadata
# ---------------------------------------------------------------------------


def test_metadata_valid():
    result = validate_metadata(_metadata())
    assert result.valid
    assert result.errors == []
    assert result.warnings == []


def test_metadata_missing_fields_and_bad_url():
    result = validate_metadata(SongMetadata(id=0, title="", artist="X", url="not a url"))
    assert not result.valid
    assert [e.field for e in result.critical_errors] == ["id", "title"]
    assert ValidationError("url", "Invalid song URL", Severity.MAJOR) in result.errors


def test_metadata_blank_artist():
    result = validate_metadata(_metadata(artist="   "))
    assert not result.valid
    assert result.errors[0].field == "artist"


def test_metadata_bad_url_alone_is_still_valid():
    result = validate_metadata(_metadata(url="genius.com/song"))
    assert result.valid
    assert [e.severity for e in result.errors] == [Severity.MAJOR]


def test_metadata_malformed_host_is_major():
    result = validate_metadata(_metadata(url="https://genius .com/song"))
    assert result.valid
    assert [e.field for e in result.errors] == ["url"]


def test_metadata_numeric_title_from_provider():
    metadata = SongMetadata.from_dict(
        {"id": 7, "title": 1984, "artist": "Van Halen", "url": 12345}
    )
    result = validate_metadata(metadata, expected_title="1984")
    assert result.valid
    assert result.warnings == []
    assert ValidationError("url", "Invalid song URL", Severity.MAJOR) in result.errors


def test_metadata_non_string_fields_built_directly():
    result = validate_metadata(_metadata(title=1984, url=12345), expected_title="1984")
    assert result.valid
    assert result.warnings == []
    assert [e.field for e in result.errors] == ["url"]


def test_metadata_title_mismatch_warns():
    result = validate_metadata(_metadata(), expected_title="Let It Be")
    assert result.valid
    assert len(result.warnings) == 1
    assert result.warnings[0].field == "title"
    assert "% similar" in result.warnings[0].message


def test_metadata_title_match_case_insensitive():
    assert validate_metadata(_metadata(), expected_title="the weight").warnings == []


def test_metadata_title_substring_warns():
    result = validate_metadata(_metadata(), expected_title="The Weight (Live)")
    assert "80% similar" in result.warnings[0].message


def test_metadata_threshold_from_config(monkeypatch):
    monkeypatch.setattr(Config, "TITLE_SIMILARITY_THRESHOLD", 0.5)
    assert validate_metadata(_metadata(), expected_title="The Weight (Live)").warnings == []


# ---------------------------------------------------------------------------
# validate_lyrics
# ---------------------------------------------------------------------------


def test_lyrics_empty():
    result = validate_lyrics("")
    assert not result.valid
    assert result.errors == [ValidationError("lyrics", "Lyrics are empty", Severity.CRITICAL)]
    assert result.warnings == []


def test_lyrics_blank():
    assert not validate_lyrics("  \n  ").valid


def test_lyrics_valid():
    result = validate_lyrics(LYRICS)
    assert result.valid
    assert result.warnings == []


def test_lyrics_too_short():
    result = validate_lyrics("Verse\nhi\nChorus\nho")
    assert not result.valid
    assert "too short" in result.errors[0].message
    assert result.warnings == []


def test_lyrics_min_length_from_config(monkeypatch):
    monkeypatch.setattr(Config, "MIN_LYRICS_LENGTH", 5)
    assert validate_lyrics("Verse\nhi\nChorus\nho").valid


def test_lyrics_one_warning_per_truncation_indicator():
    text = LYRICS + "See https://example.com for more\n2 Translations\n"
    result = validate_lyrics(text)
    assert result.valid
    truncated = [w for w in result.warnings if "truncated" in w.message]
    assert len(truncated) == 2


def test_lyrics_ending_with_lyrics_title():
    result = validate_lyrics(LYRICS + "The Weight Lyrics")
    assert any("truncated" in w.message for w in result.warnings)


def test_lyrics_title_line_before_trailing_newline_is_not_truncated():
    result = validate_lyrics(LYRICS + "The Weight Lyrics\n")
    assert not any("truncated" in w.message for w in result.warnings)


def test_lyrics_full_lyrics_at():
    result = validate_lyrics(LYRICS + "Full lyrics at some site\n")
    assert any("truncated" in w.message for w in result.warnings)


def test_lyrics_too_few_sections_warns():
    text = "la la la " * 20
    result = validate_lyrics(text)
    assert result.valid
    assert result.warnings[-1].message == "Only 1 section(s) detected, expected at least 2"


# ---------------------------------------------------------------------------
# validate_parsed_song
# ---------------------------------------------------------------------------


def test_parsed_song_valid():
    song = ParsedSong(
        metadata=_metadata(),
        sections=[SongSection(SectionType.VERSE, "words"), SongSection(SectionType.CHORUS, "more")],
        detected_chords=["G", "C", "D/F#"],
    )
    result = validate_parsed_song(song)
    assert result.valid
    assert result.warnings == []


def test_parsed_song_no_sections_is_critical():
    result = validate_parsed_song(ParsedSong(metadata=_metadata()))
    assert not result.valid
    assert result.errors[0].field == "sections"


def test_parsed_song_includes_metadata_findings():
    result = validate_parsed_song(
        ParsedSong(metadata=_metadata(id=None), sections=[SongSection(SectionType.VERSE, "x")])
    )
    assert not result.valid
    assert result.errors[0].field == "id"


def test_parsed_song_empty_sections_warn():
    song = ParsedSong(
        metadata=_metadata(),
        sections=[SongSection(SectionType.VERSE, "words"), SongSection(SectionType.CHORUS, "  ")],
    )
    result = validate_parsed_song(song)
    assert result.valid
    assert result.warnings[0].message == "1 empty section(s) found"


def test_parsed_song_invalid_chords_warn():
    song = ParsedSong(
        metadata=_metadata(),
        sections=[SongSection(SectionType.VERSE, "words")],
        detected_chords=["G", "Asus4", "Cm9"],
    )
    result = validate_parsed_song(song)
    assert result.valid
    assert result.warnings[0].field == "chords"
    assert result.warnings[0].message == "2 invalid chord(s) detected: Asus4, Cm9"


# ---------------------------------------------------------------------------
# validate_song
# ---------------------------------------------------------------------------


def test_song_valid():
    result = validate_song(_metadata(), LYRICS, expected_title="The Weight")
    assert result.valid
    assert result.errors == []


def test_song_combines_both_checks():
    result = validate_song(_metadata(id=None), "")
    assert not result.valid
    assert [e.field for e in result.errors] == ["id", "lyrics"]


def test_song_exhausted_retries_returns_metadata_result():
    result = validate_song(_metadata(id=None), "", retry_count=2)
    assert [e.field for e in result.errors] == ["id"]


def test_song_exhausted_retries_returns_lyrics_result():
    result = validate_song(_metadata(), "", expected_title="Let It Be", retry_count=3)
    assert [e.field for e in result.errors] == ["lyrics"]
    assert result.warnings == []


def test_song_below_retry_budget_keeps_warnings():
    result = validate_song(_metadata(), "", expected_title="Let It Be", retry_count=1)
    assert not result.valid
    assert [w.field for w in result.warnings] == ["title"]


def test_song_max_retries_from_config(monkeypatch):
    monkeypatch.setattr(Config, "MAX_RETRIES", 5)
    result = validate_song(_metadata(id=None), "", retry_count=2)
    assert [e.field for e in result.errors] == ["id", "lyrics"]


# ---------------------------------------------------------------------------
# Validity is driven by critical errors only
# ---------------------------------------------------------------------------


def test_adding_critical_error_invalidates():
    result = validate_lyrics(LYRICS)
    assert result.valid
    merged = result.merge(ValidationResult(errors=[ValidationError("x", "bad", Severity.CRITICAL)]))
    assert not merged.valid


@pytest.mark.parametrize("severity", [Severity.MAJOR, Severity.MINOR])
def test_non_critical_errors_keep_validity(severity):
    merged = validate_lyrics(LYRICS).merge(
        ValidationResult(errors=[ValidationError("x", "meh", severity)])
    )
    assert merged.valid


def test_merging_valid_result_never_revalidates():
    invalid = validate_lyrics("")
    assert not invalid.merge(validate_lyrics(LYRICS)).valid
    assert not validate_lyrics(LYRICS).merge(invalid).valid
