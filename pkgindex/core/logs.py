"""Tagged logging for SourcePkg components.

Components receive a TaggedLogger instead of reaching for a global one, so
callers (and tests) decide where messages go. Each message carries a short
tag naming the activity, e.g. "packages-index" or "package-tags-index".
"""
from __future__ import annotations

import logging
from typing import Optional


class TaggedLogger:
    """Thin wrapper over logging.Logger with tag-first methods."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("pkgindex")

    def _log(self, level: int, tag: str, message: str, cause: Optional[BaseException] = None) -> None:
        if cause is not None:
            self.logger.log(level, "%s: %s (%s)", tag, message, cause, exc_info=cause)
        else:
            self.logger.log(level, "%s: %s", tag, message)

    def debug(self, tag: str, message: str) -> None:
        self._log(logging.DEBUG, tag, message)

    def info(self, tag: str, message: str) -> None:
        self._log(logging.INFO, tag, message)

    def warning(self, tag: str, message: str) -> None:
        self._log(logging.WARNING, tag, message)

    def error(self, tag: str, message: str, cause: Optional[BaseException] = None) -> None:
        self._log(logging.ERROR, tag, message, cause)


def get_tagged_logger(name: str) -> TaggedLogger:
    """Return a TaggedLogger backed by logging.getLogger(name)."""
    return TaggedLogger(logging.getLogger(name))


def configure_logging(level: str = "INFO") -> None:
    """Configure base logging for CLI runs.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    # Reduce noisy connection logs from urllib3
    logging.getLogger("urllib3").setLevel(logging.ERROR)
    logging.getLogger("urllib3.connectionpool").setLevel(logging.ERROR)
