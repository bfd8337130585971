"""Policy constants for chordshift, overridable from the environment."""
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Config:
    """Validation thresholds and logging settings.

    The numeric defaults are the values lyrics and metadata have always been
    judged against; change them only if you also accept different
    pass/fail outcomes.
    """

    # Lyrics
    MIN_LYRICS_LENGTH = int(os.getenv("CHORDSHIFT_MIN_LYRICS_LENGTH", "100"))
    MIN_SECTIONS = int(os.getenv("CHORDSHIFT_MIN_SECTIONS", "2"))

    # Metadata
    TITLE_SIMILARITY_THRESHOLD = float(
        os.getenv("CHORDSHIFT_TITLE_SIMILARITY_THRESHOLD", "0.9")
    )

    # Caller-supplied retry counter at which validate_song stops early
    MAX_RETRIES = int(os.getenv("CHORDSHIFT_MAX_RETRIES", "2"))

    # Logging
    LOG_LEVEL = os.getenv("CHORDSHIFT_LOG_LEVEL", "WARNING").upper()

    @classmethod
    def validate(cls):
        """Check that every setting is in range.

        Raises ValueError listing each offending setting.
        """
        problems = []
        if cls.MIN_LYRICS_LENGTH < 0:
            problems.append("CHORDSHIFT_MIN_LYRICS_LENGTH must be >= 0")
        if cls.MIN_SECTIONS < 0:
            problems.append("CHORDSHIFT_MIN_SECTIONS must be >= 0")
        if not 0.0 <= cls.TITLE_SIMILARITY_THRESHOLD <= 1.0:
            problems.append("CHORDSHIFT_TITLE_SIMILARITY_THRESHOLD must be between 0 and 1")
        if cls.MAX_RETRIES < 0:
            problems.append("CHORDSHIFT_MAX_RETRIES must be >= 0")
        if cls.LOG_LEVEL not in _LOG_LEVELS:
            problems.append(f"CHORDSHIFT_LOG_LEVEL must be one of {', '.join(sorted(_LOG_LEVELS))}")

        if problems:
            raise ValueError(f"Invalid configuration: {'; '.join(problems)}")

        return True
