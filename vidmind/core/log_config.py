import logging
import sys
from typing import IO, Optional

LOG_FORMAT = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"

# Client libraries that log full request URLs at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str, stream: Optional[IO[str]] = None) -> None:
    """One-time logging setup shared by every entry point (stderr by default)."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=stream or sys.stderr)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
