"""Logging setup for the monitor process."""

import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # Access logs from the read-out server are noise next to cycle output
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
