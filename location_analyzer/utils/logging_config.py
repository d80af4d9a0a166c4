"""
Logging configuration for the analyzer.

Records go to stderr (and optionally a file) so stdout stays free for
entity output. Verbosity applies to the location_analyzer loggers only;
the HTTP stack stays at WARNING either way.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, TextIO

PACKAGE_LOGGER = "location_analyzer"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Transport libraries log every connection at DEBUG
QUIET_LOGGERS = ("urllib3", "requests", "charset_normalizer")


def setup_logging(
    verbose: bool = False,
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure logging for a CLI run.

    Args:
        verbose: Emit DEBUG records from the analyzer (retries, throttling,
            per-location progress). Otherwise only warnings and errors.
        log_file: Optional file that receives the same records.
        stream: Stream for console records, stderr by default.

    Returns:
        The package logger.
    """
    handlers = [logging.StreamHandler(stream if stream is not None else sys.stderr)]

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=logging.WARNING,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace, e.g. for __main__ scripts."""
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
