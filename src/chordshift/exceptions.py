class ChordshiftError(Exception):
    """Base exception for chordshift."""


class InvalidNoteError(ChordshiftError, ValueError):
    """Raised when a note spelling is not one of the 12 known pitch classes."""

    def __init__(self, note: str):
        self.note = note
        super().__init__(f"Invalid note: {note!r}")
