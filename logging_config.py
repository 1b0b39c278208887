"""
Logging for drivegrab.

Every module logs through the "drivegrab" logger. Nothing is configured on
import; cli.main() and server.main() call configure_logging() once.
Extractors never log.

Retrieval lines share one shape so a single download reads as a trail:

    08:15:02 [DEBUG] drivegrab: direct-download GET https://drive.google.com/uc?...
    08:15:03 [INFO] drivegrab: direct-download rejected 200 text/html (2048 bytes): HTML page below size ceiling
"""

import logging
import sys

logger = logging.getLogger("drivegrab")

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send drivegrab logs to stderr at `level`. Safe to call repeatedly."""
    logger.setLevel(level.upper())
    if logger.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(handler)


def log_attempt(strategy: str, url: str) -> None:
    logger.debug(f"{strategy} GET {url}")


def log_verdict(strategy: str, status: int, content_type: str, byte_length: int, reason: str | None) -> None:
    """One line per validated candidate; `reason` is None when accepted."""
    summary = f"{status} {content_type or '-'} ({byte_length} bytes)"
    if reason is None:
        logger.info(f"{strategy} accepted {summary}")
    else:
        logger.info(f"{strategy} rejected {summary}: {reason}")
