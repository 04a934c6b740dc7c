# mushi/core/logging.py
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None) -> logging.Logger:
    """
    Configure the "mushi" logger with a stream handler and, when log_dir is
    given, a rotating file handler (5 MB x 5 files).
    """
    logger = logging.getLogger("mushi")
    logger.setLevel(level.upper())

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, "mushi.log")
        handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=5)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
