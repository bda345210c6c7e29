"""Write the latest reading to a one-line text file."""

import logging
from pathlib import Path

from fxrate.errors import FileCreateError, FileWriteError
from fxrate.models import RateReading

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PATH = "exchange_rate.txt"
EXCHANGE_RATE_PREFIX = "Exchange Rate (USD): "


def format_rate_line(reading: RateReading) -> str:
    return EXCHANGE_RATE_PREFIX + reading.bid


def write_rate_file(path: str | Path, reading: RateReading) -> None:
    """Replace the content of ``path`` with the reading's line.

    The file is truncated on open, so a failed write can leave it empty.
    Errors from the final flush on close count as write errors.
    """
    try:
        f = open(path, "w", encoding="utf-8")
    except OSError as e:
        raise FileCreateError(f"{path}: {e}") from e

    try:
        with f:
            f.write(format_rate_line(reading) + "\n")
    except OSError as e:
        raise FileWriteError(f"{path}: {e}") from e
    logger.info("Wrote exchange rate %s to %s", reading.bid, path)
