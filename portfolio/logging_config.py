import logging
import os

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def get_log_level() -> int:
    """Log level from LOG_LEVEL, defaulting to INFO for unknown names."""
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging() -> None:
    logging.basicConfig(level=get_log_level(), format=LOG_FORMAT)
