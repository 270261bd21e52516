import logging
import sys

from em_diary.config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL) -> logging.Logger:
    """Configure the ``em_diary`` logger once; later calls are no-ops."""
    logger = logging.getLogger("em_diary")
    if logger.handlers:
        return logger

    logger.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)

    # pymongo is chatty at DEBUG/INFO (topology, heartbeats)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    return logger
