"""
Logging configuration for the apigen generation pipeline.

Usage in generator modules:
    from apigen.api.gen_logging import get_logger
    logger = get_logger(__name__)

The root logger name is "apigen.gen". The level comes from Settings.LOG_LEVEL
(APIGEN_LOG_LEVEL in the environment).
"""

import logging
import sys

_LOGGER_NAME = "apigen.gen"


def get_logger(name: str = None) -> logging.Logger:
    """
    Return a child logger under the apigen.gen hierarchy.

    Args:
        name: Module __name__, or None for the root apigen.gen logger.

    Returns:
        logging.Logger instance
    """
    if name is None or name == _LOGGER_NAME:
        return logging.getLogger(_LOGGER_NAME)
    # "apigen.api.extractors.source_extractor" -> "apigen.gen.source_extractor"
    short = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{_LOGGER_NAME}.{short}")


def configure_gen_logging(level: str = "INFO") -> None:
    """
    Configure the apigen.gen logger hierarchy.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ...). Unknown names fall
               back to INFO.
    """
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root_logger = logging.getLogger(_LOGGER_NAME)
    root_logger.setLevel(resolved)

    # Avoid duplicate handlers when called multiple times
    if root_logger.handlers:
        for handler in root_logger.handlers:
            handler.setLevel(resolved)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.setFormatter(_GenFormatter())
    root_logger.addHandler(handler)

    # Don't propagate to the root logger (keeps output clean)
    root_logger.propagate = False


class _GenFormatter(logging.Formatter):
    """Minimal formatter: just emit the message as-is (generator code already formats tags)."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()
