"""Logging configuration for chordshift."""
import logging

from .config import Config

logger = logging.getLogger("chordshift")

_console_handler: logging.Handler | None = None


def setup_logger(level: str | None = None) -> logging.Logger:
    """Attach a console handler to the package logger and return it.

    Library code only emits records; the CLI (or an embedding application)
    calls this once.  Calling it again replaces the handler rather than
    stacking a second one.
    """
    logger.setLevel(getattr(logging, (level or Config.LOG_LEVEL).upper()))

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    global _console_handler
    if _console_handler is not None:
        logger.removeHandler(_console_handler)

    _console_handler = logging.StreamHandler()
    _console_handler.setFormatter(formatter)
    logger.addHandler(_console_handler)

    return logger
