# app/utils/logger.py

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logger(level: str = "INFO"):
    """Configure the root logger once; later calls only adjust the level."""
    level_value = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    if getattr(setup_logger, "_configured", False):
        root.setLevel(level_value)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.handlers[:] = [handler]
    root.setLevel(level_value)
    setup_logger._configured = True
